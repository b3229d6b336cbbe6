"""Catalog generation and grading admin service."""

__version__ = "0.1.0"
