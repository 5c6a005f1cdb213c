"""Virtualized reader engine for large hierarchical text corpora."""

__version__ = "0.3.0"
