"""
Purchase Query - read-only queries over an in-memory collection of purchases.

This package provides a small query layer over purchase records supplied by a
pluggable record source and a clock, including:

- Sorting by purchase date or item count
- Filtering by month, current month, recent days, item count and total value
- Monetary totals and discount totals per month, in exact decimal arithmetic
- Line-item lookup by customer email

The query service holds no state of its own: every call re-reads the source.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from purchase_query.config import Settings, get_settings
from purchase_query.domain.models import Customer, LineItem, PurchaseRecord, YearMonth
from purchase_query.errors import InvalidArgumentError, PurchaseQueryError, RecordSourceError
from purchase_query.service import QueryService
from purchase_query.sources import (
    Clock,
    FixedClock,
    InMemoryRecordSource,
    JsonFileRecordSource,
    RecordSource,
    SystemClock,
)
from purchase_query.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Domain
    "Customer",
    "LineItem",
    "PurchaseRecord",
    "YearMonth",
    # Errors
    "InvalidArgumentError",
    "PurchaseQueryError",
    "RecordSourceError",
    # Query service
    "QueryService",
    # Collaborators
    "Clock",
    "FixedClock",
    "InMemoryRecordSource",
    "JsonFileRecordSource",
    "RecordSource",
    "SystemClock",
    # Logging
    "configure_logging",
    "get_logger",
]
