"""Shared pytest fixtures for all test suites."""

from collections.abc import Callable

import httpx
import pytest

from tests.helpers import SleepRecorder


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    """Sleep stub so retry tests never wait."""
    return SleepRecorder()


@pytest.fixture
def mock_client_factory() -> Callable[..., httpx.AsyncClient]:
    """Build AsyncClients backed by an httpx.MockTransport handler.

    Usage:
        client = mock_client_factory(lambda request: httpx.Response(200, json={}))
    """

    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return factory
