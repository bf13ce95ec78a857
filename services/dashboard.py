"""Dashboard view-state and the controller that drives it.

``DashboardState`` is a single immutable record. Each ``apply_*`` function is a
pure transition from (state, event) to a new state; ``DashboardController``
performs the I/O, sequences requests, and swaps in the result of a transition.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from enum import Enum
from functools import lru_cache, partial
from threading import Lock
from typing import Callable, Optional, Protocol, Tuple

from models.query import FilterConfig, PageRequest
from models.records import DailyRecord, SearchResult, SummaryStats
from services.aggregator import Aggregator, MonthlyAggregate
from services.connectivity import ConnectivityProbe, ConnectivityState, ProbeOutcome
from services.demo_data import DEMO_AGRICULTURAL_YEARS, DEMO_STATISTICS, demo_records
from services.errors import ConnectivityRequired, MalformedResponse, RainfallApiError
from services.query_builder import QueryBuilder, QueryPayload
from services.rainfall_api import RainfallApiClient
from services.reconciler import QueryTrigger, reconcile
from settings import Settings, get_settings

logger = logging.getLogger(__name__)

_aggregator = Aggregator()


class Severity(str, Enum):
    success = "success"
    info = "info"
    warning = "warning"
    error = "error"


@dataclass(frozen=True)
class Notification:
    message: str
    severity: Severity = Severity.info


@dataclass(frozen=True)
class DashboardState:
    connectivity: ConnectivityState = ConnectivityState.checking
    filters: FilterConfig = field(default_factory=FilterConfig)
    page: PageRequest = field(default_factory=PageRequest)
    records: Tuple[DailyRecord, ...] = ()
    statistics: Optional[SummaryStats] = None
    monthly: Tuple[MonthlyAggregate, ...] = ()
    agricultural_years: Tuple[str, ...] = ()
    total_pages: Optional[int] = None
    has_next_page: bool = False
    error: Optional[str] = None
    notification: Optional[Notification] = None
    is_demo: bool = False

    @property
    def record_count(self) -> int:
        return len(self.records)


def initial_state(settings: Settings) -> DashboardState:
    return DashboardState(
        filters=FilterConfig.defaults(settings.default_sort_by, settings.default_sort_dir),
        page=PageRequest(page=0, size=settings.default_page_size),
    )


def pagination_totals(result: SearchResult, page: PageRequest) -> Tuple[Optional[int], bool]:
    """Total page count and whether a further page exists.

    Only a server-supplied total is trusted. Without one the total is unknown
    and a full page is taken as a hint that another may follow.
    """
    info = result.page
    size = info.size if info and info.size else page.size
    total_pages: Optional[int] = None
    if info is not None and info.total_pages is not None:
        total_pages = max(info.total_pages, 0)
    elif info is not None and info.total_elements is not None and size > 0:
        total_pages = math.ceil(max(info.total_elements, 0) / size)

    if total_pages is not None:
        return total_pages, page.page + 1 < total_pages
    return None, len(result.records) >= page.size > 0


def _cleared(state: DashboardState) -> DashboardState:
    return replace(
        state,
        records=(),
        statistics=None,
        monthly=(),
        total_pages=None,
        has_next_page=False,
    )


def apply_probe_started(state: DashboardState) -> DashboardState:
    return replace(state, connectivity=ConnectivityState.checking, notification=None)


def apply_probe_result(state: DashboardState, outcome: ProbeOutcome) -> DashboardState:
    if outcome.reachable:
        return replace(
            state,
            connectivity=ConnectivityState.connected,
            error=None,
            notification=Notification("API connected successfully!", Severity.success),
        )
    return replace(
        _cleared(state),
        connectivity=outcome.state,
        error=f"Unable to connect to the Rainfall Data API: {outcome.error}",
        notification=Notification(
            "API connection failed. Check if the server is running.", Severity.error
        ),
    )


def apply_filters(
    state: DashboardState, filters: FilterConfig, page: Optional[PageRequest] = None
) -> DashboardState:
    if page is None:
        page = replace(state.page, page=0)
    return replace(state, filters=filters, page=page)


def apply_page_change(
    state: DashboardState, page: int, size: Optional[int] = None
) -> DashboardState:
    if size is not None and size != state.page.size:
        return replace(state, page=PageRequest(page=0, size=size))
    return replace(state, page=replace(state.page, page=max(0, page)))


def apply_clear_filters(state: DashboardState, defaults: FilterConfig) -> DashboardState:
    return replace(
        state,
        filters=defaults,
        page=replace(state.page, page=0),
        statistics=None,
        notification=Notification("Filters cleared", Severity.info),
    )


def _result_notification(
    state: DashboardState, result: SearchResult, trigger: QueryTrigger
) -> Optional[Notification]:
    if trigger is QueryTrigger.search:
        if result.is_empty:
            return Notification("No records found", Severity.info)
        return Notification(f"Found {len(result.records)} records", Severity.success)
    if trigger is QueryTrigger.clear_filters:
        return state.notification
    return None


def apply_search_result(
    state: DashboardState,
    result: SearchResult,
    trigger: QueryTrigger,
    aggregator: Aggregator = _aggregator,
) -> DashboardState:
    total_pages, has_next_page = pagination_totals(result, state.page)
    return replace(
        state,
        records=tuple(result.records),
        statistics=reconcile(state.statistics, result, trigger),
        monthly=tuple(aggregator.aggregate_by_month(result.records)),
        total_pages=total_pages,
        has_next_page=has_next_page,
        error=None,
        notification=_result_notification(state, result, trigger),
    )


def apply_fetch_failure(
    state: DashboardState, error: RainfallApiError, trigger: QueryTrigger
) -> DashboardState:
    # Connectivity is left alone; only the probe moves it.
    if trigger is QueryTrigger.search:
        message, notice = f"Error searching rainfall data: {error}", "Search failed"
    else:
        message, notice = f"Error fetching rainfall data: {error}", "Failed to fetch rainfall data"
    return replace(
        _cleared(state),
        error=message,
        notification=Notification(notice, Severity.error),
    )


def apply_agricultural_years(state: DashboardState, years: Tuple[str, ...]) -> DashboardState:
    return replace(state, agricultural_years=years)


def apply_agricultural_years_failure(state: DashboardState) -> DashboardState:
    return replace(
        state,
        notification=Notification("Failed to fetch agricultural years", Severity.warning),
    )


def demo_view(state: DashboardState, aggregator: Aggregator = _aggregator) -> DashboardState:
    """Sample-data rendering of a degraded dashboard, flagged ``is_demo``."""
    records = demo_records()
    return replace(
        state,
        records=tuple(records),
        statistics=DEMO_STATISTICS,
        monthly=tuple(aggregator.aggregate_by_month(records)),
        agricultural_years=DEMO_AGRICULTURAL_YEARS,
        total_pages=1,
        has_next_page=False,
        is_demo=True,
    )


class SearchTransport(Protocol):
    def search(self, payload: QueryPayload) -> SearchResult: ...

    def probe(self, payload: QueryPayload) -> object: ...

    def ping_docs(self) -> int: ...

    def close(self) -> None: ...


class DashboardController:
    """Owns the dashboard state and serialises updates to it.

    Every data fetch takes a sequence number. A response that is not for the
    latest issued request is dropped, so a slow earlier query can never
    overwrite a newer one.
    """

    def __init__(
        self,
        api: SearchTransport,
        settings: Settings,
        aggregator: Optional[Aggregator] = None,
    ) -> None:
        self.api = api
        self.settings = settings
        self.aggregator = aggregator or Aggregator()
        self.builder = QueryBuilder(settings.max_page_size)
        self.probe = ConnectivityProbe(api)
        self._state = initial_state(settings)
        self._lock = Lock()
        self._issued = 0

    @property
    def state(self) -> DashboardState:
        with self._lock:
            return self._state

    def view(self) -> DashboardState:
        """State to render: live data, or the demo dataset while degraded."""
        state = self.state
        if state.connectivity is ConnectivityState.degraded:
            return demo_view(state, self.aggregator)
        return state

    def close(self) -> None:
        self.api.close()

    def default_filters(self) -> FilterConfig:
        return FilterConfig.defaults(self.settings.default_sort_by, self.settings.default_sort_dir)

    def check_connectivity(self) -> DashboardState:
        """Probe the API; on success load the year choices and the first page."""
        return self._connect(self.probe.check)

    def retry_connectivity(self) -> DashboardState:
        state = self.state
        if state.connectivity is ConnectivityState.connected:
            return state
        return self._connect(self.probe.retry)

    def _connect(self, run_probe: Callable[[], ProbeOutcome]) -> DashboardState:
        self._update(apply_probe_started)
        outcome = run_probe()
        state = self._update(partial(apply_probe_result, outcome=outcome))
        if not outcome.reachable:
            return state
        self.refresh_agricultural_years()
        return self._fetch(QueryTrigger.reset)

    def search(self, filters: FilterConfig, page: Optional[PageRequest] = None) -> DashboardState:
        """Run a search; without ``page`` the current page size is kept and page 0 is fetched."""
        self._require_connected()
        if page is not None:
            page = PageRequest(page=max(0, page.page), size=self.builder.clamp_size(page.size))
        self._update(partial(apply_filters, filters=filters, page=page))
        return self._fetch(QueryTrigger.search)

    def change_page(self, page: int, size: Optional[int] = None) -> DashboardState:
        self._require_connected()
        if size is not None:
            size = self.builder.clamp_size(size)
        self._update(partial(apply_page_change, page=page, size=size))
        return self._fetch(QueryTrigger.reset)

    def reload(self) -> DashboardState:
        self._require_connected()
        return self._fetch(QueryTrigger.reset)

    def clear_filters(self) -> DashboardState:
        state = self._update(partial(apply_clear_filters, defaults=self.default_filters()))
        if state.connectivity is not ConnectivityState.connected:
            return state
        return self._fetch(QueryTrigger.clear_filters)

    def refresh_agricultural_years(self) -> DashboardState:
        self._require_connected()
        payload = self.builder.build(
            FilterConfig(sort_by=None, sort_dir=None),
            PageRequest(page=0, size=self.settings.max_page_size),
        )
        try:
            result = self.api.search(payload)
        except RainfallApiError as exc:
            logger.warning("Failed to fetch agricultural years: %s", exc)
            return self._update(apply_agricultural_years_failure)
        years = tuple(self.aggregator.agricultural_years(result.records))
        return self._update(partial(apply_agricultural_years, years=years))

    def _require_connected(self) -> None:
        connectivity = self.state.connectivity
        if connectivity is not ConnectivityState.connected:
            raise ConnectivityRequired(connectivity.value)

    def _update(self, transition: Callable[[DashboardState], DashboardState]) -> DashboardState:
        with self._lock:
            self._state = transition(self._state)
            return self._state

    def _fetch(self, trigger: QueryTrigger) -> DashboardState:
        with self._lock:
            self._issued += 1
            sequence = self._issued
            state = self._state

        payload = self.builder.build(state.filters, state.page)
        logger.info(
            "Fetching rainfall records",
            extra={
                "sequence": sequence,
                "trigger": trigger.value,
                "page": payload["page"],
                "size": payload["size"],
            },
        )
        transition: Callable[[DashboardState], DashboardState]
        try:
            result = self.api.search(payload)
        except MalformedResponse as exc:
            logger.warning(
                "Treating malformed search response as empty: %s",
                exc,
                extra={"sequence": sequence},
            )
            transition = partial(
                apply_search_result,
                result=SearchResult(),
                trigger=trigger,
                aggregator=self.aggregator,
            )
        except RainfallApiError as exc:
            logger.error(
                "Rainfall fetch failed: %s",
                exc,
                extra={"sequence": sequence, "trigger": trigger.value},
            )
            transition = partial(apply_fetch_failure, error=exc, trigger=trigger)
        else:
            transition = partial(
                apply_search_result,
                result=result,
                trigger=trigger,
                aggregator=self.aggregator,
            )
        return self._commit(sequence, transition)

    def _commit(
        self, sequence: int, transition: Callable[[DashboardState], DashboardState]
    ) -> DashboardState:
        with self._lock:
            if sequence != self._issued:
                logger.info(
                    "Discarding stale search response",
                    extra={"sequence": sequence},
                )
                return self._state
            self._state = transition(self._state)
            state = self._state
        logger.debug(
            "Dashboard state updated",
            extra={
                "sequence": sequence,
                "record_count": state.record_count,
                "month_count": len(state.monthly),
            },
        )
        return state


@lru_cache
def build_default_controller() -> DashboardController:
    """Factory that wires the controller against the configured API."""
    settings = get_settings()
    api = RainfallApiClient(settings.api_base_url, timeout=settings.request_timeout)
    return DashboardController(api=api, settings=settings)
