from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from purchase_query.domain.models import YearMonth
from purchase_query.errors import InvalidArgumentError
from purchase_query.service import QueryService
from purchase_query.sources import FixedClock, InMemoryRecordSource


def _at(year, month, day, hour=12, tz=timezone.utc):
    return datetime(year, month, day, hour, tzinfo=tz)


class TestForMonth:
    def test_matches_month_of_any_year(self, service_for, make_record):
        records = [
            make_record(_at(2024, 3, 5), "a@x.com"),
            make_record(_at(2023, 3, 9), "b@x.com"),
            make_record(_at(2024, 4, 1), "c@x.com"),
        ]

        result = service_for(records).for_month(YearMonth(year=2024, month=3))

        # The year is not compared: March 2023 is included.
        assert result == records[:2]

    def test_aggregates_stay_year_exact(self, service_for, make_record):
        records = [
            make_record(_at(2024, 3, 5), "a@x.com", [("A", "10.00", "7.00")]),
            make_record(_at(2023, 3, 9), "b@x.com", [("B", "100.00", "90.00")]),
        ]
        service = service_for(records)
        march = YearMonth(year=2024, month=3)

        assert len(service.for_month(march)) == 2
        assert service.total_for_month(march) == Decimal("7.00")
        assert service.discount_total_for_month(march) == Decimal("3.00")

    def test_uses_record_local_month(self, service_for, make_record):
        plus_two = timezone(timedelta(hours=2))
        # 2024-04-01 01:00+02:00 is still March in UTC, but April locally.
        records = [make_record(datetime(2024, 4, 1, 1, 0, tzinfo=plus_two), "a@x.com")]
        service = service_for(records)

        assert service.for_month(YearMonth(year=2024, month=4)) == records
        assert service.for_month(YearMonth(year=2024, month=3)) == []

    def test_empty_result(self, example_service):
        assert example_service.for_month(YearMonth(year=2024, month=7)) == []


class TestForCurrentMonth:
    def test_requires_month_and_year(self, service_for, make_record):
        records = [
            make_record(_at(2024, 3, 1, 0), "a@x.com"),
            make_record(_at(2023, 3, 15), "b@x.com"),
            make_record(_at(2024, 2, 29), "c@x.com"),
            make_record(_at(2024, 3, 31, 23), "d@x.com"),
        ]

        result = service_for(records).for_current_month()

        assert [r.customer.email for r in result] == ["a@x.com", "d@x.com"]

    def test_follows_the_clock(self, example_records):
        service = QueryService(
            InMemoryRecordSource(example_records),
            FixedClock(_at(2024, 4, 2)),
        )
        assert service.for_current_month() == []

    def test_naive_clock_is_rejected(self, example_records):
        class NaiveClock:
            def now(self):
                return datetime(2024, 3, 25, 12, 0)

        service = QueryService(InMemoryRecordSource(example_records), NaiveClock())
        with pytest.raises(InvalidArgumentError):
            service.for_current_month()


class TestForLastNDays:
    def test_boundary_is_strict(self, service_for, make_record, march_clock):
        now = march_clock.now()
        cutoff = now - timedelta(days=7)
        records = [
            make_record(cutoff, "at-cutoff@x.com"),
            make_record(cutoff + timedelta(seconds=1), "inside@x.com"),
            make_record(cutoff - timedelta(seconds=1), "outside@x.com"),
            make_record(now, "now@x.com"),
        ]

        result = service_for(records).for_last_n_days(7)

        assert [r.customer.email for r in result] == ["inside@x.com", "now@x.com"]

    def test_zero_days_keeps_only_future_records(self, service_for, make_record, march_clock):
        now = march_clock.now()
        records = [
            make_record(now, "now@x.com"),
            make_record(now + timedelta(minutes=1), "future@x.com"),
        ]
        result = service_for(records).for_last_n_days(0)
        assert [r.customer.email for r in result] == ["future@x.com"]

    def test_crosses_year_boundary(self, make_record):
        now = _at(2024, 1, 2)
        records = [make_record(_at(2023, 12, 30), "a@x.com"), make_record(_at(2023, 12, 1), "b@x.com")]
        service = QueryService(InMemoryRecordSource(records), FixedClock(now))

        assert [r.customer.email for r in service.for_last_n_days(5)] == ["a@x.com"]

    @pytest.mark.parametrize("days", [1_000_000, 10**12])
    def test_days_beyond_calendar_keep_every_record(self, example_service, example_records, days):
        assert example_service.for_last_n_days(days) == example_records

    @pytest.mark.parametrize("days", [-1, -30])
    def test_negative_days_rejected(self, example_service, days):
        with pytest.raises(InvalidArgumentError, match="days"):
            example_service.for_last_n_days(days)

    def test_negative_days_rejected_before_fetching(self, example_records, march_clock, counting_source):
        source = counting_source(example_records)
        service = QueryService(source, march_clock)
        with pytest.raises(ValueError):
            service.for_last_n_days(-1)
        assert source.fetch_calls == 0


class TestWithExactlyOneItem:
    def test_example(self, example_service, example_records):
        assert example_service.with_exactly_one_item() == {example_records[0]}

    def test_structural_duplicates_collapse(self, service_for, make_record):
        one = make_record(_at(2024, 3, 5), "a@x.com", [("Widget", "10.00", "8.00")])
        twin = make_record(_at(2024, 3, 5), "a@x.com", [("Widget", "10.00", "8.00")])
        empty = make_record(_at(2024, 3, 6), "a@x.com")

        result = service_for([one, twin, empty]).with_exactly_one_item()

        assert one is not twin
        assert result == {one}
        assert len(result) == 1


class TestWithTotalOver:
    def test_example(self, example_service, example_records):
        # Totals are 8.00 and 13.00 in final prices.
        assert example_service.with_total_over(15) == set()
        assert example_service.with_total_over(13) == set()
        assert example_service.with_total_over(Decimal("12.99")) == {example_records[1]}
        assert example_service.with_total_over(5) == set(example_records)

    def test_exact_total_is_excluded(self, service_for, make_record):
        exact = make_record(_at(2024, 3, 5), "a@x.com", [("A", "15.00", "10.00"), ("B", "5.00", "5.00")])
        above = make_record(_at(2024, 3, 6), "b@x.com", [("A", "15.01", "15.01")])

        result = service_for([exact, above]).with_total_over(Decimal("15.00"))

        assert exact.total == Decimal("15.00")
        assert result == {above}

    @pytest.mark.parametrize("threshold", [12, "12.5", Decimal("12"), 12.5])
    def test_threshold_types(self, example_service, example_records, threshold):
        assert example_service.with_total_over(threshold) == {example_records[1]}

    def test_negative_threshold_keeps_empty_records(self, service_for, make_record):
        empty = make_record(_at(2024, 3, 6), "a@x.com")
        assert service_for([empty]).with_total_over(-1) == {empty}
        assert service_for([empty]).with_total_over(0) == set()

    @pytest.mark.parametrize("threshold", ["abc", "NaN", "Infinity", True])
    def test_invalid_threshold(self, example_service, threshold):
        with pytest.raises(InvalidArgumentError):
            example_service.with_total_over(threshold)


class TestItemsForCustomerEmail:
    def test_example(self, example_service):
        items = example_service.items_for_customer_email("a@x.com")
        assert [(i.name, i.regular_price, i.final_price) for i in items] == [
            ("Widget", Decimal("10.00"), Decimal("8.00"))
        ]

    def test_keeps_record_then_item_order(self, service_for, make_record):
        records = [
            make_record(_at(2024, 5, 1), "a@x.com", [("Late", "1", "1")]),
            make_record(_at(2024, 1, 1), "b@x.com", [("Other", "1", "1")]),
            make_record(_at(2024, 3, 1), "a@x.com", [("First", "1", "1"), ("Second", "1", "1")]),
        ]
        items = service_for(records).items_for_customer_email("a@x.com")
        assert [i.name for i in items] == ["Late", "First", "Second"]

    def test_match_is_case_sensitive(self, example_service):
        assert example_service.items_for_customer_email("A@X.COM") == []
        assert example_service.items_for_customer_email("a@x.com ") == []


def test_every_query_fetches_exactly_once(example_records, march_clock, counting_source):
    source = counting_source(example_records)
    service = QueryService(source, march_clock)
    march = YearMonth(year=2024, month=3)
    queries = [
        service.sorted_by_date_ascending,
        service.sorted_by_date_descending,
        service.sorted_by_item_count_ascending,
        service.sorted_by_item_count_descending,
        lambda: service.for_month(march),
        service.for_current_month,
        lambda: service.for_last_n_days(3),
        service.with_exactly_one_item,
        service.products_sold_in_current_month,
        lambda: service.total_for_month(march),
        lambda: service.discount_total_for_month(march),
        lambda: service.items_for_customer_email("a@x.com"),
        lambda: service.with_total_over(1),
    ]
    for query in queries:
        before = source.fetch_calls
        query()
        assert source.fetch_calls == before + 1


def test_queries_are_idempotent(example_service):
    march = YearMonth(year=2024, month=3)
    for query in (
        example_service.sorted_by_date_descending,
        example_service.with_exactly_one_item,
        example_service.products_sold_in_current_month,
        lambda: example_service.for_month(march),
        lambda: example_service.total_for_month(march),
        lambda: example_service.items_for_customer_email("b@x.com"),
    ):
        assert query() == query()


def test_source_records_are_not_mutated(example_records, march_clock):
    snapshot = list(example_records)
    source = InMemoryRecordSource(example_records)
    service = QueryService(source, march_clock)

    service.sorted_by_date_descending()
    service.sorted_by_item_count_descending()

    assert list(source.fetch_all()) == snapshot


def test_single_item_set_keeps_same_instant_in_other_zones(service_for, make_record):
    utc = make_record(datetime(2024, 3, 31, 23, 30, tzinfo=timezone.utc), "a@x.com", [("W", "1", "1")])
    local = make_record(
        datetime(2024, 4, 1, 1, 30, tzinfo=timezone(timedelta(hours=2))), "a@x.com", [("W", "1", "1")]
    )
    service = service_for([utc, local])

    assert len(service.with_exactly_one_item()) == 2
    assert len(service.with_total_over(0)) == 2
    assert service.for_month(YearMonth(year=2024, month=4)) == [local]
