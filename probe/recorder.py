"""
Probe Recorder

Explicit state machine behind a single probe. Each lifecycle event is
one transition plus the field assignments that go with it.

DESIGN RULES:
- Exactly one recorder owns a RawMetrics instance
- Terminal states accept no further events
- Timestamps come only from the injected clock

Lookup window: httpcore resolves the host inside connect_tcp, so the
recorded window spans resolution plus the TCP handshake. Hosts given as
IP literals record no lookup (both fields stay 0).
"""

import ipaddress
import json
import logging
from typing import Any, Callable, Dict, FrozenSet, List, Mapping, Optional

import httpx

from probe.clock import now_micro
from probe.errors import ProbeStateError
from schemas.metrics import ProbeState, RawMetrics
from schemas.request import ProbeRequest


logger = logging.getLogger(__name__)

Clock = Callable[[], int]

POD_ID_HEADER = "x-pod-id"
SERVER_TIMING_HEADER = "server-timing"

# httpcore trace events, see the "trace" request extension
TRACE_CONNECT_STARTED = "connection.connect_tcp.started"
TRACE_CONNECT_COMPLETE = "connection.connect_tcp.complete"
TRACE_REQUEST_SENT = frozenset({
    "http11.send_request_headers.started",
    "http2.send_request_headers.started",
})

_TRANSITIONS: Dict[ProbeState, FrozenSet[ProbeState]] = {
    ProbeState.CREATED: frozenset({ProbeState.CONNECTING, ProbeState.FAILED}),
    # Transports without trace support go straight to STREAMING_BODY
    ProbeState.CONNECTING: frozenset({
        ProbeState.AWAITING_RESPONSE,
        ProbeState.STREAMING_BODY,
        ProbeState.FAILED,
    }),
    ProbeState.AWAITING_RESPONSE: frozenset({ProbeState.STREAMING_BODY, ProbeState.FAILED}),
    ProbeState.STREAMING_BODY: frozenset({ProbeState.COMPLETED, ProbeState.FAILED}),
    ProbeState.COMPLETED: frozenset(),
    ProbeState.FAILED: frozenset(),
}


def _is_ip_literal(host: str) -> bool:
    try:
        ipaddress.ip_address(host)
    except ValueError:
        return False
    return True


class ProbeRecorder:
    """
    Accumulates RawMetrics for one in-flight probe.

    Usage:
        recorder = ProbeRecorder(request)
        recorder.dispatched()
        ...  # lifecycle callbacks
        metrics = recorder.completed()
    """

    def __init__(self, request: ProbeRequest, clock: Clock = now_micro):
        self._clock = clock
        self._state = ProbeState.CREATED
        self._body: List[bytes] = []
        self._lookup_expected = not _is_ip_literal(httpx.URL(request.url).host)
        self._metrics = RawMetrics(
            iteration_number=request.iteration_number,
            thread_number=request.thread_number,
            start_time=clock(),
            request_size=request.request_size,
        )

    @property
    def state(self) -> ProbeState:
        return self._state

    @property
    def metrics(self) -> RawMetrics:
        return self._metrics

    def _advance(self, target: ProbeState) -> None:
        if target not in _TRANSITIONS[self._state]:
            raise ProbeStateError(self._state, target)
        logger.debug(f"[PROBE] {self._state.value} -> {target.value}")
        self._state = target

    def _require(self, expected: ProbeState) -> None:
        if self._state is not expected:
            raise ProbeStateError(self._state, expected)

    # ------------------------------------------------------------
    # Lifecycle events
    # ------------------------------------------------------------

    def dispatched(self) -> None:
        """The request has been handed to the transport."""
        self._advance(ProbeState.CONNECTING)

    def lookup_started(self) -> None:
        """A new connection began resolving its host."""
        self._require(ProbeState.CONNECTING)
        if self._lookup_expected and not self._metrics.domain_lookup_start:
            self._metrics.domain_lookup_start = self._clock()

    def connected(self) -> None:
        """The socket connected; the request can be sent."""
        self._require(ProbeState.CONNECTING)
        ts = self._clock()
        if self._metrics.domain_lookup_start:
            self._metrics.domain_lookup_end = ts
        self._metrics.request_start = ts
        self._advance(ProbeState.AWAITING_RESPONSE)

    def request_sent(self) -> None:
        """
        Request headers are going out.

        On a reused connection no connect event fires, so this is the
        earliest point requestStart can be taken from.
        """
        if self._state is ProbeState.CONNECTING:
            self._metrics.request_start = self._clock()
            self._advance(ProbeState.AWAITING_RESPONSE)
        else:
            self._require(ProbeState.AWAITING_RESPONSE)

    def headers_received(self, status: int, headers: Mapping[str, str]) -> None:
        """Status line and headers arrived."""
        normalized = {k.lower(): v for k, v in headers.items()}
        self._metrics.http_status = status
        self._metrics.http_headers = json.dumps(normalized)
        self._metrics.pod_instance = normalized.get(POD_ID_HEADER)
        self._metrics.profiling = normalized.get(SERVER_TIMING_HEADER)
        self._metrics.response_start = self._clock()
        self._advance(ProbeState.STREAMING_BODY)

    def chunk_received(self, chunk: bytes, wire_bytes: int) -> None:
        """
        A body chunk arrived.

        Args:
            chunk: Decoded body bytes appended to the payload buffer
            wire_bytes: Total raw bytes received so far
        """
        self._require(ProbeState.STREAMING_BODY)
        self._metrics.response_size = wire_bytes
        self._body.append(chunk)

    def completed(self, encoding: Optional[str] = None, wire_bytes: Optional[int] = None) -> RawMetrics:
        """The body stream ended. Returns the settled record."""
        self._require(ProbeState.STREAMING_BODY)
        ts = self._clock()
        m = self._metrics
        if wire_bytes is not None:
            m.response_size = wire_bytes
        m.response_end = ts
        m.end_time = ts
        m.result_payload = b"".join(self._body).decode(encoding or "utf-8", errors="replace")
        m.transfer_size = m.request_size + m.response_size
        self._body.clear()
        self._advance(ProbeState.COMPLETED)
        return m

    def failed(self, message: str) -> RawMetrics:
        """The probe terminated without a complete response."""
        self._metrics.end_time = self._clock()
        self._metrics.result_payload = {"error": message}
        self._body.clear()
        self._advance(ProbeState.FAILED)
        return self._metrics

    # ------------------------------------------------------------
    # httpx trace extension
    # ------------------------------------------------------------

    async def on_trace(self, event_name: str, info: Dict[str, Any]) -> None:
        """Map httpcore connection events onto lifecycle events."""
        if event_name == TRACE_CONNECT_STARTED:
            self.lookup_started()
        elif event_name == TRACE_CONNECT_COMPLETE:
            self.connected()
        elif event_name in TRACE_REQUEST_SENT:
            self.request_sent()
