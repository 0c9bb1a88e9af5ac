"""Variant evidence aggregation and candidate gene ranking."""

__version__ = "0.1.0"
