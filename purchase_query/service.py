"""
Query service over purchase records.

Every query fetches the full collection from the injected RecordSource once,
applies a pure filter / sort / map / reduce and returns a fresh container.
Nothing is cached between calls and the fetched records are never mutated.

Usage:
    from purchase_query.domain import YearMonth
    from purchase_query.service import QueryService
    from purchase_query.sources import InMemoryRecordSource, SystemClock

    service = QueryService(InMemoryRecordSource(records), SystemClock("Europe/Warsaw"))
    service.total_for_month(YearMonth(year=2024, month=3))
"""

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Iterable, Iterator, List, Optional, Sequence, Set, Union

from purchase_query.config import Settings, get_settings
from purchase_query.domain.models import LineItem, PurchaseRecord, YearMonth
from purchase_query.errors import InvalidArgumentError
from purchase_query.sources.abstract import Clock, RecordSource
from purchase_query.sources.clock import SystemClock
from purchase_query.sources.records import JsonFileRecordSource
from purchase_query.utils.logging import get_logger

log = get_logger(__name__)

Amount = Union[Decimal, int, float, str]


def _to_decimal(value: Amount) -> Decimal:
    """Convert a threshold to Decimal; floats go through str() to avoid binary noise."""
    if isinstance(value, bool):
        raise InvalidArgumentError(f"Threshold must be a number, got {value!r}")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise InvalidArgumentError(f"Threshold must be a number, got {value!r}") from exc
    if not amount.is_finite():
        raise InvalidArgumentError(f"Threshold must be finite, got {value!r}")
    return amount


def _flatten(records: Iterable[PurchaseRecord]) -> Iterator[LineItem]:
    for record in records:
        yield from record.items


def _sum(amounts: Iterable[Decimal]) -> Decimal:
    total = Decimal("0")
    for amount in amounts:
        total += amount
    return total


class QueryService:
    """
    Read-only queries and aggregates over the records of a RecordSource.

    Parameters
    ----------
    source : RecordSource
        Supplier of all purchase records; fetched once per query.
    clock : Clock
        Supplier of "now" for current-month and recent-days queries.
    """

    def __init__(self, source: RecordSource, clock: Clock) -> None:
        self._source = source
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "QueryService":
        """Wire a JSON file source and a system clock from settings."""
        settings = settings or get_settings()
        return cls(JsonFileRecordSource(settings.data_file), SystemClock(settings.timezone))

    # -- internal helpers -------------------------------------------------

    def _fetch(self) -> Sequence[PurchaseRecord]:
        return self._source.fetch_all()

    def _now(self) -> datetime:
        now = self._clock.now()
        if now.tzinfo is None or now.utcoffset() is None:
            raise InvalidArgumentError("Clock returned a naive datetime")
        return now

    @staticmethod
    def _log(query: str, records: int, matched: int, **fields: object) -> None:
        log.debug(
            f"[QUERY] {query}",
            extra={"query": query, "records": records, "matched": matched, **fields},
        )

    @staticmethod
    def _in_month(records: Sequence[PurchaseRecord], year_month: YearMonth) -> List[PurchaseRecord]:
        return [r for r in records if year_month.contains(r.purchased_at)]

    # -- sorting ----------------------------------------------------------

    def sorted_by_date_ascending(self) -> List[PurchaseRecord]:
        """Records ordered by timestamp, earliest first; ties keep fetch order."""
        records = self._fetch()
        result = sorted(records, key=lambda r: r.purchased_at)
        self._log("sorted_by_date_ascending", len(records), len(result))
        return result

    def sorted_by_date_descending(self) -> List[PurchaseRecord]:
        """Records ordered by timestamp, latest first; ties keep fetch order."""
        records = self._fetch()
        result = sorted(records, key=lambda r: r.purchased_at, reverse=True)
        self._log("sorted_by_date_descending", len(records), len(result))
        return result

    def sorted_by_item_count_ascending(self) -> List[PurchaseRecord]:
        records = self._fetch()
        result = sorted(records, key=lambda r: r.item_count)
        self._log("sorted_by_item_count_ascending", len(records), len(result))
        return result

    def sorted_by_item_count_descending(self) -> List[PurchaseRecord]:
        records = self._fetch()
        result = sorted(records, key=lambda r: r.item_count, reverse=True)
        self._log("sorted_by_item_count_descending", len(records), len(result))
        return result

    # -- filtering --------------------------------------------------------

    def for_month(self, year_month: YearMonth) -> List[PurchaseRecord]:
        """
        Records whose calendar month equals ``year_month.month``.

        The year is deliberately not compared, so March 2023 and March 2024
        both match ``YearMonth(2024, 3)``. Use :meth:`total_for_month` and
        friends for year-exact aggregates.
        """
        records = self._fetch()
        result = [r for r in records if r.purchased_at.month == year_month.month]
        self._log("for_month", len(records), len(result))
        return result

    def for_current_month(self) -> List[PurchaseRecord]:
        """Records in the clock's current month and year."""
        current = YearMonth.of(self._now())
        records = self._fetch()
        result = self._in_month(records, current)
        self._log("for_current_month", len(records), len(result), month=str(current))
        return result

    def for_last_n_days(self, days: int) -> List[PurchaseRecord]:
        """
        Records strictly after ``now - days``.

        Raises
        ------
        InvalidArgumentError
            If `days` is negative.
        """
        if isinstance(days, bool) or not isinstance(days, int):
            raise InvalidArgumentError(f"days must be an integer, got {days!r}")
        if days < 0:
            raise InvalidArgumentError(f"days must be >= 0, got {days}")
        now = self._now()
        try:
            cutoff: Optional[datetime] = now - timedelta(days=days)
        except OverflowError:
            # Cutoff precedes datetime.min, so every record is after it.
            cutoff = None
        records = self._fetch()
        result = [r for r in records if cutoff is None or r.purchased_at > cutoff]
        self._log("for_last_n_days", len(records), len(result))
        return result

    def with_exactly_one_item(self) -> Set[PurchaseRecord]:
        records = self._fetch()
        result = {r for r in records if r.item_count == 1}
        self._log("with_exactly_one_item", len(records), len(result))
        return result

    def with_total_over(self, threshold: Amount) -> Set[PurchaseRecord]:
        """Records whose total of final prices is strictly greater than `threshold`."""
        limit = _to_decimal(threshold)
        records = self._fetch()
        result = {r for r in records if r.total > limit}
        self._log("with_total_over", len(records), len(result))
        return result

    def items_for_customer_email(self, email: str) -> List[LineItem]:
        """
        Line items bought by the customer with exactly this email.

        Matching is case-sensitive. Items come out in record fetch order, then
        in each record's own item order.
        """
        records = self._fetch()
        result = list(_flatten(r for r in records if r.customer.email == email))
        self._log("items_for_customer_email", len(records), len(result))
        return result

    # -- aggregates -------------------------------------------------------

    def products_sold_in_current_month(self) -> Set[str]:
        current = YearMonth.of(self._now())
        records = self._fetch()
        result = {item.name for item in _flatten(self._in_month(records, current))}
        self._log("products_sold_in_current_month", len(records), len(result), month=str(current))
        return result

    def total_for_month(self, year_month: YearMonth) -> Decimal:
        """Sum of final prices over all items sold in that month and year."""
        records = self._fetch()
        matched = self._in_month(records, year_month)
        total = _sum(item.final_price for item in _flatten(matched))
        self._log("total_for_month", len(records), len(matched), month=str(year_month), total=str(total))
        return total

    def discount_total_for_month(self, year_month: YearMonth) -> Decimal:
        """Sum of (regular - final) over all items sold in that month and year."""
        records = self._fetch()
        matched = self._in_month(records, year_month)
        total = _sum(item.discount for item in _flatten(matched))
        self._log(
            "discount_total_for_month", len(records), len(matched), month=str(year_month), total=str(total)
        )
        return total


__all__ = ["QueryService"]
