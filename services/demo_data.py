"""Fixed sample dataset shown while the rainfall API is unreachable.

These records are illustrative only; their ids have no relation to live data.
"""

from __future__ import annotations

from typing import List, Tuple

from models.records import DailyRecord, SummaryStats

DEMO_RECORDS: Tuple[DailyRecord, ...] = tuple(
    DailyRecord(id=index, agricultural_year="2024-25", date=day, precipitation_mm=amount)
    for index, (day, amount) in enumerate(
        (
            ("2024-10-15", 25.5),
            ("2024-10-16", 18.2),
            ("2024-10-17", 32.1),
            ("2024-10-18", 12.8),
            ("2024-10-19", 45.3),
        ),
        start=1,
    )
)

DEMO_STATISTICS = SummaryStats(
    agricultural_year="2024-25",
    total_precipitation=133.9,
    average_precipitation=26.8,
    min_precipitation=12.8,
    max_precipitation=45.3,
)

DEMO_AGRICULTURAL_YEARS: Tuple[str, ...] = ("2023-24", "2024-25", "2025-26")


def demo_records() -> List[DailyRecord]:
    return list(DEMO_RECORDS)
