"""
Pytest configuration for Purchase Query.

Provides fixtures for:
- Building purchase records tersely
- The two-record March 2024 example dataset
- A clock pinned to March 2024 and a service wired to both
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Callable, Sequence, Tuple

import pytest

from purchase_query.config import Settings
from purchase_query.domain.models import Customer, LineItem, PurchaseRecord
from purchase_query.service import QueryService
from purchase_query.sources import FixedClock, InMemoryRecordSource, dump_records

MARCH_2024_NOW = datetime(2024, 3, 25, 12, 0, tzinfo=timezone.utc)

RecordFactory = Callable[..., PurchaseRecord]


def item(name: str, regular: str, final: str) -> LineItem:
    return LineItem(name=name, regular_price=Decimal(regular), final_price=Decimal(final))


def record(
    when: datetime,
    email: str,
    items: Sequence[Tuple[str, str, str]] = (),
) -> PurchaseRecord:
    return PurchaseRecord(
        purchased_at=when,
        customer=Customer(email=email),
        items=tuple(item(*i) for i in items),
    )


class CountingSource(InMemoryRecordSource):
    """In-memory source that counts fetches."""

    def __init__(self, records: Sequence[PurchaseRecord] = ()) -> None:
        super().__init__(records)
        self.fetch_calls = 0

    def fetch_all(self) -> Sequence[PurchaseRecord]:
        self.fetch_calls += 1
        return super().fetch_all()


@pytest.fixture(autouse=True)
def _restore_root_logging():
    """Drop handlers installed by configure_logging() during a test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def make_record() -> RecordFactory:
    return record


@pytest.fixture
def counting_source() -> type[CountingSource]:
    return CountingSource


@pytest.fixture
def example_records() -> list[PurchaseRecord]:
    """The worked example: one single-item and one two-item purchase in March 2024."""
    return [
        record(
            datetime(2024, 3, 5, 10, 0, tzinfo=timezone.utc),
            "a@x.com",
            [("Widget", "10.00", "8.00")],
        ),
        record(
            datetime(2024, 3, 20, 10, 0, tzinfo=timezone.utc),
            "b@x.com",
            [("Widget", "10.00", "8.00"), ("Gadget", "5.00", "5.00")],
        ),
    ]


@pytest.fixture
def march_clock() -> FixedClock:
    return FixedClock(MARCH_2024_NOW)


@pytest.fixture
def service_for(march_clock: FixedClock) -> Callable[[Sequence[PurchaseRecord]], QueryService]:
    """Build a service over the given records with the March 2024 clock."""

    def _build(records: Sequence[PurchaseRecord]) -> QueryService:
        return QueryService(InMemoryRecordSource(records), march_clock)

    return _build


@pytest.fixture
def example_service(
    example_records: list[PurchaseRecord],
    service_for: Callable[[Sequence[PurchaseRecord]], QueryService],
) -> QueryService:
    return service_for(example_records)


@pytest.fixture
def example_file(tmp_path: Path, example_records: list[PurchaseRecord]) -> Path:
    """Example records written as a JSON file."""
    path = tmp_path / "purchases.json"
    path.write_bytes(dump_records(example_records))
    return path


@pytest.fixture
def test_settings(example_file: Path) -> Settings:
    return Settings(data_file=example_file, timezone="UTC", log_level="DEBUG")
