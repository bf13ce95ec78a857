from __future__ import annotations

import logging

import pytest

from models.records import DailyRecord, SummaryStats, parse_search_result
from services.errors import MalformedResponse

_STATS = {
    "totalPrecipitation": 133.9,
    "averagePrecipitation": 26.8,
    "minPrecipitation": 12.8,
    "maxPrecipitation": 45.3,
}


def test_parse_preserves_server_order_and_ignores_unknown_fields() -> None:
    payload = {
        "data": [
            {"id": 2, "agriculturalYear": "2024-25", "date": "2024-10-16", "precipitationMm": 18.2, "station": "x"},
            {"id": 1, "agriculturalYear": "2024-25", "date": "2024-10-15", "precipitationMm": 25.5},
        ],
        "statistics": _STATS,
        "extra": True,
    }

    result = parse_search_result(payload)

    assert [record.id for record in result.records] == [2, 1]
    assert result.records[0] == DailyRecord(
        id=2, agricultural_year="2024-25", date="2024-10-16", precipitation_mm=18.2
    )
    assert result.statistics == SummaryStats.model_validate(_STATS)


@pytest.mark.parametrize("payload", [None, [], "data", {"statistics": _STATS}, {"data": {"id": 1}}])
def test_missing_or_non_list_records_is_malformed(payload) -> None:
    with pytest.raises(MalformedResponse):
        parse_search_result(payload)


def test_absent_statistics_stay_none() -> None:
    assert parse_search_result({"data": []}).statistics is None
    assert parse_search_result({"data": [], "statistics": None}).statistics is None


def test_partial_statistics_are_treated_as_absent(caplog) -> None:
    partial = {key: value for key, value in _STATS.items() if key != "minPrecipitation"}

    with caplog.at_level(logging.WARNING, logger="models.records"):
        result = parse_search_result({"data": [{"id": 1}], "statistics": partial})

    assert result.statistics is None
    assert any("incomplete statistics" in record.getMessage() for record in caplog.records)


def test_records_are_accepted_permissively() -> None:
    result = parse_search_result(
        {
            "data": [
                {"id": "a-1", "date": "garbage"},
                {"id": 7, "date": "2024-01-01", "precipitationMm": "n/a"},
                {"id": 8, "date": "2024-01-02", "precipitationMm": "3.5"},
                {"id": 9, "date": "2024-01-03", "precipitationMm": 10**400},
                "not-an-object",
            ]
        }
    )

    assert [record.id for record in result.records] == ["a-1", 7, 8, 9]
    assert result.records[0].precipitation_mm is None
    assert result.records[0].date == "garbage"
    assert result.records[1].precipitation_mm is None
    assert result.records[2].precipitation_mm == 3.5
    assert result.records[3].precipitation_mm is None


def test_page_block_is_optional() -> None:
    result = parse_search_result(
        {"data": [], "page": {"number": 0, "size": 50, "totalElements": 120, "totalPages": 3}}
    )

    assert result.page is not None
    assert result.page.total_elements == 120
    assert result.page.total_pages == 3
    assert parse_search_result({"data": [], "page": "bogus"}).page is None
