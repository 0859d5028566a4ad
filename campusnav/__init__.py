"""Indoor route finding for building navigation graphs."""

__version__ = "1.0.0"
