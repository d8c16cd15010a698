"""
Exception types raised by Purchase Query.

Empty query results are never errors; these only cover precondition
violations and failures to load records.
"""

from __future__ import annotations


class PurchaseQueryError(Exception):
    """Base class for all package errors."""


class InvalidArgumentError(PurchaseQueryError, ValueError):
    """A query argument violates its precondition (e.g. a negative day count)."""


class RecordSourceError(PurchaseQueryError):
    """A record source could not produce its records."""


__all__ = ["PurchaseQueryError", "InvalidArgumentError", "RecordSourceError"]
