"""Reachability state machine for the rainfall API."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Protocol, Tuple

from services.errors import RainfallApiError
from services.query_builder import PROBE_PAYLOAD, QueryPayload

logger = logging.getLogger(__name__)


class ConnectivityState(str, Enum):
    checking = "checking"
    connected = "connected"
    degraded = "degraded"


class ProbeEvent(str, Enum):
    started = "started"
    succeeded = "succeeded"
    failed = "failed"
    retry = "retry"


_TRANSITIONS: Dict[Tuple[ConnectivityState, ProbeEvent], ConnectivityState] = {
    (ConnectivityState.checking, ProbeEvent.succeeded): ConnectivityState.connected,
    (ConnectivityState.checking, ProbeEvent.failed): ConnectivityState.degraded,
    (ConnectivityState.degraded, ProbeEvent.retry): ConnectivityState.checking,
}


def transition(state: ConnectivityState, event: ProbeEvent) -> ConnectivityState:
    """Next state for ``event``; pairs without a rule leave the state as is."""
    if event is ProbeEvent.started:
        return ConnectivityState.checking
    return _TRANSITIONS.get((state, event), state)


class ProbeTransport(Protocol):
    def probe(self, payload: QueryPayload) -> object: ...


@dataclass(frozen=True)
class ProbeOutcome:
    state: ConnectivityState
    error: Optional[RainfallApiError] = None

    @property
    def reachable(self) -> bool:
        return self.state is ConnectivityState.connected


class ConnectivityProbe:
    """One-shot reachability check. Retrying is always up to the caller."""

    def __init__(self, transport: ProbeTransport) -> None:
        self.transport = transport
        self.state = ConnectivityState.checking
        self.last_error: Optional[RainfallApiError] = None

    def check(self) -> ProbeOutcome:
        self.state = transition(self.state, ProbeEvent.started)
        try:
            self.transport.probe(dict(PROBE_PAYLOAD))
        except RainfallApiError as exc:
            self.last_error = exc
            self.state = transition(self.state, ProbeEvent.failed)
            logger.warning(
                "Rainfall API unreachable: %s",
                exc,
                extra={"status": self.state.value, "reason": getattr(exc, "reason", type(exc).__name__)},
            )
        else:
            self.last_error = None
            self.state = transition(self.state, ProbeEvent.succeeded)
            logger.info("Rainfall API connected", extra={"status": self.state.value})
        return ProbeOutcome(state=self.state, error=self.last_error)

    def retry(self) -> ProbeOutcome:
        """Re-enter ``checking`` from ``degraded`` and probe again."""
        self.state = transition(self.state, ProbeEvent.retry)
        return self.check()
