"""Configuration module for boardwatch."""

from boardwatch.config.loader import get_config_path, load_config
from boardwatch.config.schema import Config

__all__ = ["Config", "load_config", "get_config_path"]
