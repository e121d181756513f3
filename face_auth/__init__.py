"""Face enrollment and verification from live video landmarks."""

__version__ = "0.1.0"
