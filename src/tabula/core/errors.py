"""Tabula exception hierarchy.

A cancelled load is not an error: it ends without firing its completion.
"""

from __future__ import annotations


class TabulaError(Exception):
    """Base exception for all Tabula failures."""


class OpenError(TabulaError):
    """Raised when a source cannot be opened or its configuration is invalid.

    Covers missing files, directories, permission problems, unknown text
    encodings and unusable delimiters. The engine turns this into a ``False``
    return from ``start()``.
    """


class LoadInProgressError(TabulaError, RuntimeError):
    """Raised when ``start()`` is called while a load is still active.

    This is a contract violation by the caller, not a runtime condition to
    recover from.
    """
