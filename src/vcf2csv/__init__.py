"""Normalize vCard contacts into flat CSV rows."""

__version__ = "0.1.0"
