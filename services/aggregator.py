"""Monthly aggregation of daily rainfall records."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, Iterable, List, Tuple

from models.records import DailyRecord
from services.errors import DateParseError

logger = logging.getLogger(__name__)

MonthBucket = Tuple[int, int]


@dataclass(frozen=True)
class MonthlyAggregate:
    """Precipitation summary for one calendar month of the current record set."""

    month_key: str
    total: float
    count: int
    average: float


class _MonthAccumulator:
    # Created from the first record that lands in a month, so count >= 1 always.
    __slots__ = ("total", "count")

    def __init__(self, first_amount: float) -> None:
        self.total = first_amount
        self.count = 1

    def add(self, amount: float) -> None:
        self.total += amount
        self.count += 1


def parse_record_date(value: object) -> date:
    """Read the calendar date of an ISO-8601 date or timestamp string."""
    if not isinstance(value, str) or not value.strip():
        raise DateParseError(value)
    candidate = value.strip()
    try:
        return date.fromisoformat(candidate)
    except ValueError:
        pass
    if candidate.endswith("Z"):
        candidate = candidate[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(candidate).date()
    except ValueError as exc:
        raise DateParseError(value) from exc


def format_month_key(bucket: MonthBucket) -> str:
    year, month = bucket
    return f"{year:04d}-{month:02d}"


class Aggregator:
    """Pure aggregation component that can be unit tested in isolation."""

    def aggregate_by_month(self, records: Iterable[DailyRecord]) -> List[MonthlyAggregate]:
        buckets: Dict[MonthBucket, _MonthAccumulator] = {}
        skipped = 0

        for record in records:
            try:
                day = parse_record_date(record.date)
            except DateParseError:
                skipped += 1
                logger.debug(
                    "Excluding record with unparseable date from monthly aggregates",
                    extra={"invalid_value": record.date},
                )
                continue

            amount = record.precipitation_mm or 0.0
            bucket = (day.year, day.month)
            accumulator = buckets.get(bucket)
            if accumulator is None:
                buckets[bucket] = _MonthAccumulator(amount)
            else:
                accumulator.add(amount)

        if skipped:
            logger.info(
                "Skipped %d record(s) with unparseable dates",
                skipped,
                extra={"month_count": len(buckets)},
            )

        return [
            MonthlyAggregate(
                month_key=format_month_key(bucket),
                total=accumulator.total,
                count=accumulator.count,
                average=accumulator.total / accumulator.count,
            )
            for bucket, accumulator in sorted(buckets.items())
        ]

    def agricultural_years(self, records: Iterable[DailyRecord]) -> List[str]:
        """Distinct agricultural-year labels present in ``records``, sorted."""
        years = {
            record.agricultural_year.strip()
            for record in records
            if record.agricultural_year and record.agricultural_year.strip()
        }
        return sorted(years)
