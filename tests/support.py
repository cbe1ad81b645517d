"""Test doubles shared across the probe tests."""

from typing import AsyncIterator, Callable, Iterable, List, Optional

import httpx


class StepClock:
    """Deterministic clock: every reading advances by a fixed step (µs)."""

    def __init__(self, start: int = 1_700_000_000_000_000, step: int = 1_000):
        self.current = start
        self.step = step
        self.readings: List[int] = []

    def __call__(self) -> int:
        self.current += self.step
        self.readings.append(self.current)
        return self.current


class ChunkedStream(httpx.AsyncByteStream):
    """Response body delivered chunk by chunk, optionally failing midway."""

    def __init__(self, chunks: Iterable[bytes], fail_with: Optional[Exception] = None):
        self._chunks = list(chunks)
        self._fail_with = fail_with
        self.closed = False

    async def __aiter__(self) -> AsyncIterator[bytes]:
        for chunk in self._chunks:
            yield chunk
        if self._fail_with is not None:
            raise self._fail_with

    async def aclose(self) -> None:
        self.closed = True


class TracingMockTransport(httpx.MockTransport):
    """MockTransport that replays httpcore trace events before answering."""

    def __init__(self, handler: Callable, events: Iterable[str] = ()):
        super().__init__(handler)
        self.events = list(events)

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        trace = request.extensions.get("trace")
        if trace is not None:
            for event in self.events:
                await trace(event, {})
        return await super().handle_async_request(request)


FRESH_CONNECTION_EVENTS = [
    "connection.connect_tcp.started",
    "connection.connect_tcp.complete",
    "http11.send_request_headers.started",
    "http11.send_request_body.started",
    "http11.receive_response_headers.started",
]

REUSED_CONNECTION_EVENTS = [
    "http11.send_request_headers.started",
    "http11.receive_response_headers.started",
]




class RecordingSink:
    """ReportSink double that keeps everything it is given."""

    def __init__(self):
        self.reports = []
        self.failures = []

    def emit(self, report) -> None:
        self.reports.append(report)

    def emit_failure(self, request, error) -> None:
        self.failures.append((request, error))
