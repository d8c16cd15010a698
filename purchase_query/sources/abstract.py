"""
Collaborator interfaces consumed by the query service.

A RecordSource hands over the full, unordered collection of purchase records;
a Clock hands over the current zoned instant. Concrete implementations should
satisfy the Protocols (structurally) or subclass the ABC helpers.
"""

from __future__ import annotations

import abc
from datetime import datetime
from typing import Protocol, Sequence, runtime_checkable

from purchase_query.domain.models import PurchaseRecord


@runtime_checkable
class RecordSource(Protocol):
    """
    Supplier of every purchase record currently known.

    Callers must treat the returned sequence as read-only. No ordering is
    guaranteed.
    """

    def fetch_all(self) -> Sequence[PurchaseRecord]:
        """
        Return all purchase records.

        Returns
        -------
        Sequence[PurchaseRecord]
            A snapshot of the records, in no particular order.
        """
        ...


@runtime_checkable
class Clock(Protocol):
    """
    Supplier of the current point in time.
    """

    def now(self) -> datetime:
        """Return the current timezone-aware datetime."""
        ...


class AbstractRecordSource(abc.ABC):
    """
    Optional ABC helper for class-based record sources.
    """

    @abc.abstractmethod
    def fetch_all(self) -> Sequence[PurchaseRecord]:  # pragma: no cover - interface only
        """Return all purchase records."""
        raise NotImplementedError


class AbstractClock(abc.ABC):
    """
    Optional ABC helper for class-based clocks.
    """

    @abc.abstractmethod
    def now(self) -> datetime:  # pragma: no cover - interface only
        """Return the current timezone-aware datetime."""
        raise NotImplementedError


__all__ = [
    "RecordSource",
    "Clock",
    "AbstractRecordSource",
    "AbstractClock",
]
