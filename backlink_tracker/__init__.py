"""Backlink placement tracker: websites, resources and the backlinks between them."""

__version__ = "0.1.0"
