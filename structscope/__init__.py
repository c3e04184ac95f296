"""Recognise data-structure concepts in camera scenes."""

__version__ = "0.1.0"
