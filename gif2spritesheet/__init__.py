"""Animated GIF to sprite sheet conversion."""

__version__ = "0.1.0"
