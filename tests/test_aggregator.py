"""Unit tests for the monthly aggregation logic."""

from __future__ import annotations

import pytest

from models.records import DailyRecord
from services.aggregator import Aggregator, MonthlyAggregate, parse_record_date
from services.errors import DateParseError


def _record(day: object, amount: float | None, year: str | None = "2024-25") -> DailyRecord:
    """Helper to build deterministic daily records."""

    return DailyRecord(id=1, agricultural_year=year, date=day, precipitation_mm=amount)


def test_aggregate_empty_iterable_returns_empty_list() -> None:
    assert Aggregator().aggregate_by_month([]) == []


def test_aggregate_october_november_scenario() -> None:
    records = [
        _record("2024-10-15", 25.5),
        _record("2024-10-16", 18.2),
        _record("2024-11-01", 5.0),
    ]

    monthly = Aggregator().aggregate_by_month(records)

    assert [item.month_key for item in monthly] == ["2024-10", "2024-11"]
    october, november = monthly
    assert october.total == pytest.approx(43.7)
    assert october.count == 2
    assert october.average == pytest.approx(21.85)
    assert november == MonthlyAggregate(month_key="2024-11", total=5.0, count=1, average=5.0)


def test_month_keys_are_zero_padded_and_chronological() -> None:
    records = [
        _record("2024-10-03", 1.0),
        _record("2024-03-01", 2.0),
        _record("2023-12-31", 3.0),
        _record("2024-09-30", 4.0),
    ]

    monthly = Aggregator().aggregate_by_month(records)

    assert [item.month_key for item in monthly] == ["2023-12", "2024-03", "2024-09", "2024-10"]


def test_average_is_total_over_count_for_every_group() -> None:
    records = [_record(f"2024-01-{day:02d}", day * 0.7) for day in range(1, 29)]
    records += [_record("2024-02-10", 0.1), _record("2024-02-11", 0.2)]

    for item in Aggregator().aggregate_by_month(records):
        assert item.count >= 1
        assert item.average == item.total / item.count


def test_unparseable_dates_are_excluded_without_raising() -> None:
    records = [
        _record("2024-10-15", 10.0),
        _record("not-a-date", 99.0),
        _record(None, 50.0),
        _record("2024-13-01", 7.0),
        _record("2024-10-20", 5.0),
    ]

    monthly = Aggregator().aggregate_by_month(records)

    assert len(monthly) == 1
    assert monthly[0].count == 2
    assert monthly[0].total == pytest.approx(15.0)
    assert sum(item.count for item in monthly) == 2


def test_missing_precipitation_counts_as_zero() -> None:
    monthly = Aggregator().aggregate_by_month(
        [_record("2024-05-01", None), _record("2024-05-02", 4.0)]
    )

    assert monthly == [MonthlyAggregate(month_key="2024-05", total=4.0, count=2, average=2.0)]


def test_timestamps_are_grouped_by_calendar_month() -> None:
    monthly = Aggregator().aggregate_by_month(
        [_record("2024-06-30T23:00:00Z", 1.0), _record("2024-06-01T00:00:00", 2.0)]
    )

    assert [(item.month_key, item.count) for item in monthly] == [("2024-06", 2)]


def test_parse_record_date_rejects_non_strings() -> None:
    with pytest.raises(DateParseError):
        parse_record_date(20241015)
    with pytest.raises(DateParseError):
        parse_record_date("   ")


def test_agricultural_years_are_distinct_and_sorted() -> None:
    records = [
        _record("2024-10-01", 1.0, year="2024-25"),
        _record("2023-10-01", 1.0, year="2023-24"),
        _record("2024-11-01", 1.0, year="2024-25"),
        _record("2024-12-01", 1.0, year=None),
        _record("2024-12-02", 1.0, year="  "),
    ]

    assert Aggregator().agricultural_years(records) == ["2023-24", "2024-25"]
