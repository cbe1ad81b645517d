from typing import Callable, Iterable, List

import httpx
import pytest

from tests.support import FRESH_CONNECTION_EVENTS, StepClock, TracingMockTransport


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
async def make_client():
    """Build an AsyncClient around a handler, closing every client afterwards."""
    clients: List[httpx.AsyncClient] = []

    def _make(handler: Callable, events: Iterable[str] = FRESH_CONNECTION_EVENTS) -> httpx.AsyncClient:
        client = httpx.AsyncClient(transport=TracingMockTransport(handler, events))
        clients.append(client)
        return client

    yield _make

    for client in clients:
        await client.aclose()
