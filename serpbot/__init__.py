"""serpbot - search result extraction with short-lived result handles."""

__version__ = "0.1.0"
