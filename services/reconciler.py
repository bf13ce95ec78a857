"""Decide which summary statistics the dashboard may show after a query."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from models.records import SearchResult, SummaryStats


class QueryTrigger(str, Enum):
    """What caused a search request to be issued."""

    search = "search"
    reset = "reset"
    clear_filters = "clear_filters"


def reconcile(
    previous: Optional[SummaryStats],
    result: SearchResult,
    trigger: QueryTrigger,
) -> Optional[SummaryStats]:
    """Return the statistics that belong next to ``result``.

    ``previous`` never survives a completed query; statistics describe exactly
    one result set. An empty result forces ``None``; otherwise the server's
    statistics are taken verbatim, or ``None`` when it sent none.
    """
    if result.is_empty:
        return None
    return result.statistics
