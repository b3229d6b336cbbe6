"""Catalog and grading entities."""
