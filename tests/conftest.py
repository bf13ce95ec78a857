from __future__ import annotations

from typing import Callable, List, Union

import pytest

from models.records import SearchResult, parse_search_result
from services.errors import RainfallApiError
from settings import Settings

Response = Union[dict, RainfallApiError, Callable[[dict], object]]


def rainfall_payload(*rows: tuple[str, float], statistics: bool = True, **extra) -> dict:
    data = [
        {"id": index, "agriculturalYear": "2024-25", "date": day, "precipitationMm": amount}
        for index, (day, amount) in enumerate(rows, start=1)
    ]
    payload: dict = {"data": data, **extra}
    if statistics and data:
        amounts = [amount for _, amount in rows]
        payload["statistics"] = {
            "totalPrecipitation": sum(amounts),
            "averagePrecipitation": sum(amounts) / len(amounts),
            "minPrecipitation": min(amounts),
            "maxPrecipitation": max(amounts),
        }
    return payload


class StubRainfallApi:
    """Scripted stand-in for ``RainfallApiClient``.

    ``probe_responses`` and ``search_responses`` are consumed in order; each is
    a decoded body, an error to raise, or a callable receiving the payload.
    """

    def __init__(
        self,
        probe_responses: List[Response] | None = None,
        search_responses: List[Response] | None = None,
    ) -> None:
        self.probe_responses = list(probe_responses or [{"data": []}])
        self.search_responses = list(search_responses or [])
        self.probe_payloads: list[dict] = []
        self.search_payloads: list[dict] = []
        self.docs_status: Union[int, RainfallApiError] = 200
        self.closed = False

    @staticmethod
    def _resolve(response: Response, payload: dict) -> object:
        if isinstance(response, RainfallApiError):
            raise response
        if callable(response):
            return response(payload)
        return response

    def probe(self, payload: dict) -> object:
        self.probe_payloads.append(payload)
        return self._resolve(self.probe_responses.pop(0), payload)

    def search(self, payload: dict) -> SearchResult:
        self.search_payloads.append(payload)
        body = self._resolve(self.search_responses.pop(0), payload)
        return parse_search_result(body)

    def ping_docs(self) -> int:
        if isinstance(self.docs_status, RainfallApiError):
            raise self.docs_status
        return self.docs_status

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        api_base_url="http://rain.test",
        request_timeout=10.0,
        default_page_size=50,
        max_page_size=1000,
        default_sort_by="date",
        default_sort_dir="asc",
        log_level="INFO",
    )
