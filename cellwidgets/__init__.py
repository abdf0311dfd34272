"""Interaction core of a small terminal widget toolkit."""

from cellwidgets.__version__ import __version__

__all__ = ["__version__"]
