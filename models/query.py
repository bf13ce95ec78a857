"""Filter, sort and pagination inputs gathered by the dashboard surfaces."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional


class SortField(str, Enum):
    """Fields the search endpoint can order by (wire names)."""

    date = "date"
    precipitation_mm = "precipitationMm"
    agricultural_year = "agriculturalYear"


class SortDirection(str, Enum):
    asc = "asc"
    desc = "desc"


@dataclass(frozen=True)
class FilterConfig:
    """Active query filters.

    ``start_date <= end_date`` is checked by whichever surface collects the
    input; nothing here assumes it.
    """

    agricultural_year: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    min_precipitation: Optional[float] = None
    max_precipitation: Optional[float] = None
    sort_by: Optional[SortField] = SortField.date
    sort_dir: Optional[SortDirection] = SortDirection.asc

    @classmethod
    def defaults(cls, sort_by: str = "date", sort_dir: str = "asc") -> "FilterConfig":
        return cls(sort_by=SortField(sort_by), sort_dir=SortDirection(sort_dir))


@dataclass(frozen=True)
class PageRequest:
    page: int = 0
    size: int = 365
