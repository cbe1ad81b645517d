"""
HTTP Prober

Executes exactly one instrumented HTTP(S) request and returns its
RawMetrics record.

DESIGN RULES:
- One request per probe: no retry, no backoff, no redirects
- Input errors are raised before any network activity
- The response stream is closed on every exit path
- One resolution point: a RawMetrics value or a ProbeError
"""

import asyncio
import logging
from typing import Any, Mapping, Optional, Union

import httpx
from pydantic import ValidationError

from probe.clock import now_micro
from probe.errors import ProbeInputError, ProbeTimeoutError, ProbeTransportError
from probe.recorder import Clock, ProbeRecorder
from schemas.metrics import RawMetrics
from schemas.request import ProbeRequest


logger = logging.getLogger(__name__)

RequestLike = Union[ProbeRequest, Mapping[str, Any]]


def coerce_request(descriptor: RequestLike) -> ProbeRequest:
    """Validate a descriptor, raising ProbeInputError on any problem."""
    if isinstance(descriptor, ProbeRequest):
        return descriptor
    try:
        return ProbeRequest.model_validate(descriptor)
    except ValidationError as e:
        messages = "; ".join(err["msg"] for err in e.errors())
        raise ProbeInputError(f"Invalid probe request: {messages}") from e


def _error_message(exc: BaseException) -> str:
    return str(exc) or exc.__class__.__name__


def _settle_failure(recorder: ProbeRecorder, message: str) -> RawMetrics:
    # Closing the stream can still fail after the body completed
    if recorder.state.is_terminal:
        return recorder.metrics
    return recorder.failed(message)


class HttpProber:
    """
    Instrumented single-request HTTP client.

    Args:
        client: Optional shared httpx.AsyncClient. When omitted a client is
            created per probe and closed afterwards; a supplied client is
            left open for its owner.
        timeout_s: Optional request timeout in seconds. None disables it.
        clock: Timestamp source, microseconds since epoch.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout_s: Optional[float] = None,
        clock: Clock = now_micro,
    ):
        self._client = client
        self._timeout = httpx.Timeout(timeout_s)
        self._clock = clock

    async def probe(self, descriptor: RequestLike) -> RawMetrics:
        """
        Perform the request and return the settled RawMetrics.

        Raises:
            ProbeInputError: invalid descriptor (no network activity)
            ProbeTimeoutError: configured timeout expired
            ProbeTransportError: DNS, connect, reset or premature close
        """
        request = coerce_request(descriptor)

        if self._client is not None:
            return await self._execute(self._client, request)

        async with httpx.AsyncClient(timeout=self._timeout, follow_redirects=False) as client:
            return await self._execute(client, request)

    async def _execute(self, client: httpx.AsyncClient, request: ProbeRequest) -> RawMetrics:
        recorder = ProbeRecorder(request, clock=self._clock)
        logger.debug(f"[PROBE] {request.method} {request.url} (iteration={request.iteration_number})")

        try:
            recorder.dispatched()
            async with client.stream(
                request.method,
                request.url,
                content=request.body.encode("utf-8") if request.body else None,
                timeout=self._timeout,
                follow_redirects=False,
                extensions={"trace": recorder.on_trace},
            ) as response:
                recorder.headers_received(response.status_code, response.headers)

                async for chunk in response.aiter_bytes():
                    recorder.chunk_received(chunk, response.num_bytes_downloaded)

                metrics = recorder.completed(response.encoding, response.num_bytes_downloaded)

        except httpx.TimeoutException as e:
            message = _error_message(e)
            logger.warning(f"[PROBE] Timeout requesting {request.url}: {message}")
            raise ProbeTimeoutError(message, metrics=_settle_failure(recorder, message)) from e
        except httpx.RequestError as e:
            message = _error_message(e)
            logger.warning(f"[PROBE] Transport error requesting {request.url}: {message}")
            raise ProbeTransportError(message, metrics=_settle_failure(recorder, message)) from e
        except asyncio.CancelledError:
            _settle_failure(recorder, "Probe cancelled")
            logger.warning(f"[PROBE] Cancelled while requesting {request.url}")
            raise

        logger.debug(
            f"[PROBE] {request.url} -> {metrics.http_status} "
            f"({metrics.transfer_size} bytes, {(metrics.end_time - metrics.start_time) / 1000:.2f}ms)"
        )
        return metrics


async def probe_request(
    url: str,
    method: str = "GET",
    body: Optional[str] = None,
    iteration_number: int = 0,
    thread_number: int = 0,
    timeout_s: Optional[float] = None,
) -> RawMetrics:
    """Convenience wrapper: probe one URL with a throwaway client."""
    descriptor = {
        "url": url,
        "method": method,
        "body": body,
        "iteration_number": iteration_number,
        "thread_number": thread_number,
    }
    return await HttpProber(timeout_s=timeout_s).probe(descriptor)
