"""Rebuild text lines and tables from the geometry of rendered PDF pages."""

__version__ = "0.1.0"
