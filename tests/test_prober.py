import asyncio
import json

import httpx
import pytest

from metrics.calculator import derive_timings
from metrics.flags import derive_status_flags
from probe.errors import ProbeInputError, ProbeTimeoutError, ProbeTransportError
from probe.prober import HttpProber, probe_request
from schemas.request import ProbeRequest, check_probe_url
from tests.support import REUSED_CONNECTION_EVENTS, ChunkedStream, StepClock


BODY_50 = b"x" * 50


def request_for(url: str = "https://api.example.com/posts/1", **kwargs) -> ProbeRequest:
    return ProbeRequest(url=url, iteration_number=1, thread_number=0, **kwargs)


@pytest.mark.asyncio
async def test_successful_probe_end_to_end(make_client, clock):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, headers={"age": "10"}, content=BODY_50)

    prober = HttpProber(client=make_client(handler), clock=clock)
    raw = await prober.probe(request_for())

    flags = derive_status_flags(raw, expected_status=200)
    assert raw.http_status == 200
    assert raw.request_size == 0
    assert raw.response_size == 50
    assert raw.transfer_size == 50 + raw.request_size
    assert raw.result_payload == "x" * 50
    assert flags.is_success is True
    assert flags.is_backend_cached is True
    assert flags.is_local_cached is False


@pytest.mark.asyncio
async def test_timestamps_follow_event_order(make_client, clock):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"ok")

    raw = await HttpProber(client=make_client(handler), clock=clock).probe(request_for())

    assert raw.domain_lookup_end >= raw.domain_lookup_start > 0
    assert raw.response_end >= raw.response_start >= raw.request_start >= raw.start_time
    assert raw.end_time == raw.response_end
    assert raw.end_time >= raw.start_time

    calc = derive_timings(raw)
    assert calc.dns_lookup_time == 1.0
    assert calc.time_to_first_byte == 1.0
    assert calc.duration == 4.0


@pytest.mark.asyncio
async def test_reused_connection_leaves_lookup_at_zero(make_client, clock):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"ok")

    client = make_client(handler, events=REUSED_CONNECTION_EVENTS)
    raw = await HttpProber(client=client, clock=clock).probe(request_for())

    assert raw.domain_lookup_start == 0
    assert raw.domain_lookup_end == 0
    assert raw.request_start >= raw.start_time


@pytest.mark.asyncio
async def test_request_body_counts_towards_transfer(make_client):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["content"] = request.content
        return httpx.Response(201, content=b'{"id": 101}')

    raw = await HttpProber(client=make_client(handler)).probe(
        request_for(method="post", body='{"title": "ñ"}')
    )

    assert seen["method"] == "POST"
    assert seen["content"] == '{"title": "ñ"}'.encode("utf-8")
    assert raw.request_size == 15
    assert raw.response_size == 11
    assert raw.transfer_size == 26
    assert raw.http_status == 201


@pytest.mark.asyncio
async def test_chunked_body_is_accumulated_and_stream_closed(make_client):
    stream = ChunkedStream([b"hello ", b"chunked ", b"world"])

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, stream=stream)

    raw = await HttpProber(client=make_client(handler)).probe(request_for())

    assert raw.result_payload == "hello chunked world"
    assert raw.response_size == 19
    assert stream.closed is True


@pytest.mark.asyncio
async def test_backend_headers_are_extracted(make_client):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            headers=[
                ("X-Pod-Id", "api-7f9c"),
                ("Server-Timing", "db;dur=12, app;dur=40"),
                ("X-Cache", "HIT"),
                ("X-Cache", "MISS"),
            ],
            content=b"{}",
        )

    raw = await HttpProber(client=make_client(handler)).probe(request_for())

    headers = json.loads(raw.http_headers)
    assert raw.pod_instance == "api-7f9c"
    assert raw.profiling == "db;dur=12, app;dur=40"
    assert headers["x-cache"] == "HIT, MISS"


@pytest.mark.asyncio
async def test_missing_backend_headers_are_none(make_client):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"{}")

    raw = await HttpProber(client=make_client(handler)).probe(request_for())

    assert raw.pod_instance is None
    assert raw.profiling is None


@pytest.mark.asyncio
async def test_error_status_is_not_a_probe_failure(make_client):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, content=b"unavailable")

    raw = await HttpProber(client=make_client(handler)).probe(request_for())

    assert raw.http_status == 503
    assert derive_status_flags(raw).is_success is False


@pytest.mark.asyncio
async def test_redirects_are_not_followed(make_client):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url)
        return httpx.Response(302, headers={"location": "https://api.example.com/elsewhere"})

    raw = await HttpProber(client=make_client(handler)).probe(request_for())

    assert raw.http_status == 302
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_dns_failure_surfaces_transport_error(make_client, clock):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("[Errno -2] Name or service not known", request=request)

    client = make_client(handler, events=["connection.connect_tcp.started"])

    with pytest.raises(ProbeTransportError) as exc_info:
        await HttpProber(client=client, clock=clock).probe(request_for("https://no-such-host.invalid/"))

    error = exc_info.value
    assert error.message
    assert "Name or service not known" in str(error)
    assert error.kind == "transport"
    assert isinstance(error.__cause__, httpx.ConnectError)
    assert error.metrics.result_payload == {"error": error.message}
    assert error.metrics.end_time >= error.metrics.start_time
    assert error.metrics.http_status == 0


@pytest.mark.asyncio
async def test_timeout_surfaces_timeout_kind(make_client):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(ProbeTimeoutError) as exc_info:
        await HttpProber(client=make_client(handler)).probe(request_for())

    assert isinstance(exc_info.value, ProbeTransportError)
    assert exc_info.value.kind == "timeout"


@pytest.mark.asyncio
async def test_premature_close_fails_the_probe(make_client):
    stream = ChunkedStream([b"partial"], fail_with=httpx.RemoteProtocolError("peer closed connection"))

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, stream=stream)

    with pytest.raises(ProbeTransportError) as exc_info:
        await HttpProber(client=make_client(handler)).probe(request_for())

    partial = exc_info.value.metrics
    assert partial.http_status == 200
    assert partial.response_size == 7
    assert partial.result_payload == {"error": "peer closed connection"}
    assert stream.closed is True


@pytest.mark.asyncio
@pytest.mark.parametrize("url", [
    "not a url",
    "/relative/path",
    "ftp://files.example.com/readme",
    "http://",
    "http://localhost:99999/",
])
async def test_input_errors_happen_before_network(make_client, url):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200)

    prober = HttpProber(client=make_client(handler))

    with pytest.raises(ProbeInputError):
        await prober.probe({"url": url, "iterationNumber": 1, "threadNumber": 0})
    assert calls == []


def test_port_range_is_checked_before_network():
    assert check_probe_url("http://localhost:65535/").port == 65535
    with pytest.raises(ValueError, match="out of range"):
        check_probe_url("http://localhost:99999/")


@pytest.mark.asyncio
async def test_cancellation_propagates(make_client):
    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(10)
        return httpx.Response(200)

    task = asyncio.create_task(HttpProber(client=make_client(handler)).probe(request_for()))
    await asyncio.sleep(0.01)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task


@pytest.mark.asyncio
async def test_supplied_client_is_left_open(make_client):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"ok")

    client = make_client(handler)
    prober = HttpProber(client=client)

    await prober.probe(request_for())
    await prober.probe(request_for())

    assert client.is_closed is False


@pytest.mark.asyncio
async def test_probe_request_validates_before_network():
    with pytest.raises(ProbeInputError):
        await probe_request("gopher://example.com/")


def test_input_error_is_a_value_error():
    assert issubclass(ProbeInputError, ValueError)


@pytest.mark.asyncio
async def test_clock_is_used_for_every_timestamp(make_client):
    step_clock = StepClock(start=0, step=1)

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"ok")

    raw = await HttpProber(client=make_client(handler), clock=step_clock).probe(request_for())

    recorded = {
        raw.start_time, raw.domain_lookup_start, raw.domain_lookup_end,
        raw.request_start, raw.response_start, raw.response_end, raw.end_time,
    }
    assert recorded <= set(step_clock.readings)
