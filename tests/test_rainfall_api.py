from __future__ import annotations

import json

import httpx
import pytest

from services.errors import HttpError, MalformedResponse, NetworkUnreachable, RequestTimedOut
from services.rainfall_api import RainfallApiClient


def _client(handler) -> RainfallApiClient:
    return RainfallApiClient(
        "http://rain.test/", timeout=10.0, transport=httpx.MockTransport(handler)
    )


def test_search_posts_payload_and_parses_result() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "data": [{"id": 1, "date": "2024-10-15", "precipitationMm": 25.5}],
                "statistics": {
                    "totalPrecipitation": 25.5,
                    "averagePrecipitation": 25.5,
                    "minPrecipitation": 25.5,
                    "maxPrecipitation": 25.5,
                },
            },
        )

    with _client(handler) as client:
        result = client.search({"page": 0, "size": 10, "sortBy": "date"})

    assert seen[0].method == "POST"
    assert seen[0].url == httpx.URL("http://rain.test/api/rainfall/search")
    assert json.loads(seen[0].content) == {"page": 0, "size": 10, "sortBy": "date"}
    assert len(result.records) == 1
    assert result.statistics is not None
    assert result.statistics.total_precipitation == 25.5


def test_error_status_raises_http_error_with_body() -> None:
    client = _client(lambda request: httpx.Response(503, text="maintenance"))

    with pytest.raises(HttpError) as excinfo:
        client.search({"page": 0, "size": 1})

    assert excinfo.value.status_code == 503
    assert excinfo.value.body == "maintenance"


def test_timeout_is_reported_distinctly() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(RequestTimedOut) as excinfo:
        _client(handler).search({"page": 0, "size": 1})

    assert excinfo.value.reason == "timeout"
    assert excinfo.value.timeout == 10.0
    assert isinstance(excinfo.value, NetworkUnreachable)


def test_connection_error_is_network_unreachable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(NetworkUnreachable) as excinfo:
        _client(handler).probe({"page": 0, "size": 1})

    assert not isinstance(excinfo.value, RequestTimedOut)
    assert excinfo.value.reason == "ConnectError"


def test_non_json_body_is_malformed() -> None:
    client = _client(lambda request: httpx.Response(200, text="<html>"))

    with pytest.raises(MalformedResponse):
        client.probe({"page": 0, "size": 1})


def test_missing_data_field_is_malformed() -> None:
    client = _client(lambda request: httpx.Response(200, json={"content": []}))

    with pytest.raises(MalformedResponse):
        client.search({"page": 0, "size": 1})


def test_ping_docs_ignores_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "GET"
        assert request.url.path == "/v3/api-docs"
        return httpx.Response(200, text="not even json")

    assert _client(handler).ping_docs() == 200
