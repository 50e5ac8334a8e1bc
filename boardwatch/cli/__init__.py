"""CLI module for boardwatch."""
