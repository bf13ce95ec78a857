from __future__ import annotations

import json
from datetime import date, datetime

from models.query import FilterConfig, PageRequest, SortDirection, SortField
from services.query_builder import QueryBuilder


def test_unset_filters_are_omitted() -> None:
    builder = QueryBuilder(max_page_size=1000)
    filters = FilterConfig(
        agricultural_year="",
        start_date=None,
        end_date=None,
        min_precipitation=None,
        max_precipitation=None,
        sort_by=None,
        sort_dir=None,
    )

    payload = builder.build(filters, PageRequest(page=0, size=50))

    assert payload == {"page": 0, "size": 50}


def test_set_filters_are_serialized() -> None:
    builder = QueryBuilder(max_page_size=1000)
    filters = FilterConfig(
        agricultural_year=" 2024-25 ",
        start_date=date(2024, 3, 5),
        end_date=datetime(2024, 11, 30, 12, 0),
        min_precipitation=0.0,
        max_precipitation=80.5,
        sort_by=SortField.precipitation_mm,
        sort_dir=SortDirection.desc,
    )

    payload = builder.build(filters, PageRequest(page=2, size=100))

    assert payload == {
        "page": 2,
        "size": 100,
        "agriculturalYear": "2024-25",
        "startDate": "2024-03-05",
        "endDate": "2024-11-30",
        "minPrecipitation": 0.0,
        "maxPrecipitation": 80.5,
        "sortBy": "precipitationMm",
        "sortDir": "desc",
    }


def test_blank_year_is_omitted_but_zero_bounds_are_kept() -> None:
    payload = QueryBuilder(max_page_size=10).build(
        FilterConfig(agricultural_year="   ", min_precipitation=0, max_precipitation=0),
        PageRequest(page=0, size=5),
    )

    assert "agriculturalYear" not in payload
    assert payload["minPrecipitation"] == 0
    assert payload["maxPrecipitation"] == 0


def test_dates_are_four_digit_zero_padded() -> None:
    payload = QueryBuilder(max_page_size=10).build(
        FilterConfig(start_date=date(987, 1, 2)), PageRequest()
    )

    assert payload["startDate"] == "0987-01-02"


def test_size_is_clamped_into_range() -> None:
    builder = QueryBuilder(max_page_size=1000)

    assert builder.build(FilterConfig(), PageRequest(page=0, size=5000))["size"] == 1000
    assert builder.build(FilterConfig(), PageRequest(page=0, size=0))["size"] == 1
    assert builder.build(FilterConfig(), PageRequest(page=0, size=-3))["size"] == 1
    assert builder.build(FilterConfig(), PageRequest(page=-1, size=10))["page"] == 0


def test_build_is_deterministic() -> None:
    builder = QueryBuilder(max_page_size=1000)
    filters = FilterConfig(agricultural_year="2023-24", end_date=date(2024, 1, 31))

    first = json.dumps(builder.build(filters, PageRequest(page=1, size=20)))
    second = json.dumps(builder.build(filters, PageRequest(page=1, size=20)))

    assert first == second


def test_probe_payload_is_minimal() -> None:
    assert QueryBuilder(max_page_size=1000).build_probe() == {"page": 0, "size": 1}
