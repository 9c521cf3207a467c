"""Tabula: cancellable background loading of CSV/TSV files into an in-memory table."""

__version__ = "0.1.0"
