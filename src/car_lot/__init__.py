"""car-lot: vehicle listing moderation and financing service."""

__version__ = "0.1.0"
