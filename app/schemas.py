"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import date
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from models.query import FilterConfig, SortDirection, SortField
from models.records import DailyRecord, SummaryStats
from services.connectivity import ConnectivityState
from services.dashboard import DashboardState, Severity


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SearchRequest(_CamelModel):
    """Filter form submitted by the dashboard."""

    agricultural_year: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    min_precipitation: Optional[float] = Field(default=None, ge=0)
    max_precipitation: Optional[float] = Field(default=None, ge=0)
    sort_by: SortField = SortField.date
    sort_dir: SortDirection = SortDirection.asc

    @field_validator(
        "agricultural_year",
        "start_date",
        "end_date",
        "min_precipitation",
        "max_precipitation",
        mode="before",
    )
    @classmethod
    def _blank_is_unset(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def _check_ranges(self) -> "SearchRequest":
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("startDate must not be after endDate.")
        if (
            self.min_precipitation is not None
            and self.max_precipitation is not None
            and self.min_precipitation > self.max_precipitation
        ):
            raise ValueError("minPrecipitation must not exceed maxPrecipitation.")
        return self

    def to_filters(self) -> FilterConfig:
        return FilterConfig(
            agricultural_year=self.agricultural_year,
            start_date=self.start_date,
            end_date=self.end_date,
            min_precipitation=self.min_precipitation,
            max_precipitation=self.max_precipitation,
            sort_by=self.sort_by,
            sort_dir=self.sort_dir,
        )


class PageChangeRequest(_CamelModel):
    page: int = Field(default=0, ge=0)
    size: Optional[int] = None


class MonthlyAggregateView(_CamelModel):
    month_key: str
    total: float
    count: int = Field(..., ge=1)
    average: float


class NotificationView(_CamelModel):
    message: str
    severity: Severity


class ConnectivityView(_CamelModel):
    state: ConnectivityState
    error: Optional[str] = None


class DashboardView(_CamelModel):
    """Everything the dashboard renders, in one response."""

    connectivity: ConnectivityState
    is_demo: bool = False
    filters: SearchRequest
    page: int
    size: int
    total_pages: Optional[int] = None
    has_next_page: bool = False
    record_count: int = Field(..., ge=0)
    records: List[DailyRecord] = Field(default_factory=list)
    statistics: Optional[SummaryStats] = None
    monthly: List[MonthlyAggregateView] = Field(default_factory=list)
    agricultural_years: List[str] = Field(default_factory=list)
    error: Optional[str] = None
    notification: Optional[NotificationView] = None

    @classmethod
    def from_state(cls, state: DashboardState) -> "DashboardView":
        filters = state.filters
        return cls(
            connectivity=state.connectivity,
            is_demo=state.is_demo,
            filters=SearchRequest.model_construct(
                agricultural_year=filters.agricultural_year,
                start_date=filters.start_date,
                end_date=filters.end_date,
                min_precipitation=filters.min_precipitation,
                max_precipitation=filters.max_precipitation,
                sort_by=filters.sort_by or SortField.date,
                sort_dir=filters.sort_dir or SortDirection.asc,
            ),
            page=state.page.page,
            size=state.page.size,
            total_pages=state.total_pages,
            has_next_page=state.has_next_page,
            record_count=state.record_count,
            records=list(state.records),
            statistics=state.statistics,
            monthly=[
                MonthlyAggregateView(
                    month_key=item.month_key,
                    total=item.total,
                    count=item.count,
                    average=item.average,
                )
                for item in state.monthly
            ],
            agricultural_years=list(state.agricultural_years),
            error=state.error,
            notification=(
                NotificationView(
                    message=state.notification.message,
                    severity=state.notification.severity,
                )
                if state.notification
                else None
            ),
        )
