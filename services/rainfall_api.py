"""HTTP transport for the remote rainfall records API."""

from __future__ import annotations

import logging
import time
from typing import Any, Optional

import httpx

from models.records import SearchResult, parse_search_result
from services.errors import HttpError, MalformedResponse, NetworkUnreachable, RequestTimedOut
from services.query_builder import QueryPayload

logger = logging.getLogger(__name__)

SEARCH_PATH = "/api/rainfall/search"
API_DOCS_PATH = "/v3/api-docs"

_MAX_BODY_CHARS = 500


class RainfallApiClient:
    """Minimal HTTP client for the rainfall search API.

    Every failure is raised as one of the ``services.errors`` kinds; timeouts
    are reported as ``RequestTimedOut`` rather than a generic network error.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            headers={"Accept": "*/*"},
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "RainfallApiClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def search(self, payload: QueryPayload) -> SearchResult:
        """POST a search body and return the validated result."""
        body = self._request("POST", SEARCH_PATH, json=payload)
        result = parse_search_result(body)
        logger.info(
            "Search returned %d record(s)",
            len(result.records),
            extra={
                "endpoint": SEARCH_PATH,
                "page": payload.get("page"),
                "size": payload.get("size"),
                "record_count": len(result.records),
            },
        )
        return result

    def probe(self, payload: QueryPayload) -> Any:
        """One round trip to the search endpoint; returns the decoded body unchecked."""
        return self._request("POST", SEARCH_PATH, json=payload)

    def ping_docs(self) -> int:
        """Reachability check against the API docs endpoint; the body is ignored."""
        response = self._send("GET", API_DOCS_PATH)
        return response.status_code

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        response = self._send(method, path, **kwargs)
        try:
            return response.json()
        except ValueError as exc:
            raise MalformedResponse(f"{method} {path} returned a body that is not JSON.") from exc

    def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        started = time.perf_counter()
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as exc:
            logger.warning(
                "Request timed out",
                extra={"endpoint": path, "reason": "timeout"},
            )
            raise RequestTimedOut(
                f"Request to {self.base_url}{path} timed out after {self.timeout:g} seconds",
                timeout=self.timeout,
            ) from exc
        except httpx.TransportError as exc:
            logger.warning(
                "Request failed before a response was received",
                extra={"endpoint": path, "reason": type(exc).__name__},
            )
            raise NetworkUnreachable(
                f"Unable to reach {self.base_url}{path}: {exc}",
                reason=type(exc).__name__,
            ) from exc

        elapsed_ms = int((time.perf_counter() - started) * 1000)
        if not response.is_success:
            body = response.text.strip()[:_MAX_BODY_CHARS] or None
            logger.warning(
                "Request returned an error status",
                extra={"endpoint": path, "status": response.status_code, "elapsed_ms": elapsed_ms},
            )
            raise HttpError(response.status_code, body)

        logger.debug(
            "Request completed",
            extra={"endpoint": path, "status": response.status_code, "elapsed_ms": elapsed_ms},
        )
        return response
