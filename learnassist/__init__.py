"""Data layer and request helpers for a classroom learning assistant."""

__version__ = "0.1.0"