"""Session and credential core for the video platform backend."""

__version__ = "0.1.0"
