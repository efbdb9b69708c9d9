"""Concept maps from hierarchical notes: graph building, static and interactive rendering."""

__version__ = "0.1.0"
