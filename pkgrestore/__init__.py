"""Restore a development machine's package selections from backup lists."""

__version__ = "0.1.0"
