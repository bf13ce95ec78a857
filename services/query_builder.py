"""Translate dashboard filters and pagination into a search request body."""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from models.query import FilterConfig, PageRequest

QueryPayload = Dict[str, Any]

PROBE_PAYLOAD: Tuple[Tuple[str, int], ...] = (("page", 0), ("size", 1))


def _is_unset(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def _serialize(value: Any) -> Any:
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, str):
        return value.strip()
    return value


class QueryBuilder:
    """Stateless builder for ``POST /api/rainfall/search`` bodies.

    Unset filters are left out of the payload rather than sent as ``""`` or
    ``null``: the API treats an absent field and an empty one differently.
    Keys are always emitted in the same order.
    """

    def __init__(self, max_page_size: int) -> None:
        if max_page_size < 1:
            raise ValueError("max_page_size must be at least 1.")
        self.max_page_size = max_page_size

    def clamp_size(self, size: Optional[int]) -> int:
        if size is None:
            return 1
        return max(1, min(int(size), self.max_page_size))

    def build(self, filters: FilterConfig, page: PageRequest) -> QueryPayload:
        payload: QueryPayload = {
            "page": max(0, int(page.page)),
            "size": self.clamp_size(page.size),
        }
        fields = (
            ("agriculturalYear", filters.agricultural_year),
            ("startDate", filters.start_date),
            ("endDate", filters.end_date),
            ("minPrecipitation", filters.min_precipitation),
            ("maxPrecipitation", filters.max_precipitation),
            ("sortBy", filters.sort_by),
            ("sortDir", filters.sort_dir),
        )
        for key, value in fields:
            if _is_unset(value):
                continue
            payload[key] = _serialize(value)
        return payload

    def build_probe(self) -> QueryPayload:
        return dict(PROBE_PAYLOAD)
