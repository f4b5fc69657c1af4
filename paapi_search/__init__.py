"""Translate search options into Amazon PA-API 5 SearchItems calls."""

from .version import __version__

__all__ = ["__version__"]
