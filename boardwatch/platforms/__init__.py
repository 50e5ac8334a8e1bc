"""Installed platform signatures."""

from boardwatch.platforms.database import BoardDefinition, Platform, SignatureDatabase

__all__ = ["BoardDefinition", "Platform", "SignatureDatabase"]
