"""Platform-aware deep link router."""

__version__ = "0.1.0"
