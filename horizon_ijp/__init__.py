"""Horizon internal job marketplace."""

__version__ = "1.0.0"
