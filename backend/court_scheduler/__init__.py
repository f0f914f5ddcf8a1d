"""Tournament court and time scheduling engine."""

__version__ = "0.1.0"
