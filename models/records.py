"""Wire models for the rainfall search endpoint, validated at the network boundary."""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from services.errors import MalformedResponse

logger = logging.getLogger(__name__)

DATA_FIELD = "data"
STATISTICS_FIELD = "statistics"
PAGINATION_FIELD = "page"


class _WireModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)


class DailyRecord(_WireModel):
    """One day of observed rainfall as returned by the API.

    ``date`` is kept as the raw string; parsing happens where it is consumed so
    that a single bad value cannot reject the whole page. A missing
    ``precipitationMm`` stays ``None`` here.
    """

    id: Union[int, str, None] = None
    agricultural_year: Optional[str] = Field(default=None, alias="agriculturalYear")
    date: Optional[str] = None
    precipitation_mm: Optional[float] = Field(default=None, alias="precipitationMm")

    @field_validator("id", mode="before")
    @classmethod
    def _identifier(cls, value: Any) -> Union[int, str, None]:
        if value is None or isinstance(value, str):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        return str(value)

    @field_validator("date", "agricultural_year", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        return str(value)

    @field_validator("precipitation_mm", mode="before")
    @classmethod
    def _lenient_number(cls, value: Any) -> Optional[float]:
        if value is None or isinstance(value, bool):
            return None
        try:
            return float(value)
        except (TypeError, ValueError, OverflowError):
            logger.warning(
                "Ignoring non-numeric precipitation value",
                extra={"invalid_value": value},
            )
            return None


class SummaryStats(_WireModel):
    """Server-computed statistics for the whole query, not just the current page."""

    total_precipitation: float = Field(alias="totalPrecipitation")
    average_precipitation: float = Field(alias="averagePrecipitation")
    min_precipitation: float = Field(alias="minPrecipitation")
    max_precipitation: float = Field(alias="maxPrecipitation")
    agricultural_year: Optional[str] = Field(default=None, alias="agriculturalYear")


class PageInfo(_WireModel):
    number: Optional[int] = None
    size: Optional[int] = None
    total_elements: Optional[int] = Field(default=None, alias="totalElements")
    total_pages: Optional[int] = Field(default=None, alias="totalPages")


class SearchResult(_WireModel):
    records: List[DailyRecord] = Field(default_factory=list, alias=DATA_FIELD)
    statistics: Optional[SummaryStats] = None
    page: Optional[PageInfo] = None

    @property
    def is_empty(self) -> bool:
        return not self.records


def _parse_statistics(raw: Any) -> Optional[SummaryStats]:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        logger.warning("Discarding statistics that are not an object", extra={"invalid_value": raw})
        return None
    try:
        return SummaryStats.model_validate(raw)
    except ValidationError:
        # Partial statistics are indistinguishable from stale ones; treat as absent.
        logger.warning("Discarding incomplete statistics", extra={"invalid_value": raw})
        return None


def _parse_page_info(raw: Any) -> Optional[PageInfo]:
    if not isinstance(raw, dict):
        return None
    try:
        return PageInfo.model_validate(raw)
    except ValidationError:
        logger.warning("Ignoring malformed pagination block", extra={"invalid_value": raw})
        return None


def parse_search_result(payload: Any) -> SearchResult:
    """Validate a decoded search response body.

    Raises ``MalformedResponse`` when the body is not an object or its ``data``
    collection is missing or not a list. Everything below that level is
    accepted leniently.
    """
    if not isinstance(payload, dict):
        raise MalformedResponse("Search response body is not a JSON object.")
    raw_records = payload.get(DATA_FIELD)
    if not isinstance(raw_records, list):
        raise MalformedResponse(f"Search response is missing a {DATA_FIELD!r} list.")

    records: list[DailyRecord] = []
    for position, raw in enumerate(raw_records):
        if not isinstance(raw, dict):
            logger.warning(
                "Skipping record %d that is not an object",
                position,
                extra={"invalid_value": raw},
            )
            continue
        records.append(DailyRecord.model_validate(raw))

    return SearchResult(
        records=records,
        statistics=_parse_statistics(payload.get(STATISTICS_FIELD)),
        page=_parse_page_info(payload.get(PAGINATION_FIELD)),
    )
