"""
boardwatch - identify boards attached to communication ports.
"""

__version__ = "0.1.0"
__logo__ = "🔌"
