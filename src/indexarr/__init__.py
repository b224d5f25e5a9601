"""Indexarr: declarative private-tracker indexers behind one Torznab API."""

__version__ = "0.1.0"
