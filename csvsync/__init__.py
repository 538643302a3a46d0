"""Sync a folder tree of CSV files into one worksheet."""

__version__ = "0.1.0"
