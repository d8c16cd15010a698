"""
Sources package for Purchase Query.

This module re-exports the collaborator interfaces and the concrete record
sources and clocks so downstream code can import from
`purchase_query.sources` directly.
"""

from purchase_query.sources.abstract import (
    AbstractClock,
    AbstractRecordSource,
    Clock,
    RecordSource,
)
from purchase_query.sources.clock import FixedClock, SystemClock, resolve_timezone
from purchase_query.sources.records import (
    InMemoryRecordSource,
    JsonFileRecordSource,
    dump_records,
)

__all__ = [
    # Abstracts
    "AbstractClock",
    "AbstractRecordSource",
    "Clock",
    "RecordSource",
    # Concrete collaborators
    "FixedClock",
    "InMemoryRecordSource",
    "JsonFileRecordSource",
    "SystemClock",
    "dump_records",
    "resolve_timezone",
]
