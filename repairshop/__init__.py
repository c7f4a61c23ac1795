"""Auto repair shop booking service."""

__version__ = "1.0.0"
