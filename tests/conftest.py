"""pytest global fixtures: isolate tests from the host environment."""

from __future__ import annotations

from typing import Any, Callable

import httpx
import pytest

from cdr_discovery.infrastructure.http_client import EndpointHttpClient

_ENV_VARS = (
    "NETSAPIENS_BASE_URL",
    "NETSAPIENS_ACCESS_TOKEN",
    "CDR_HTTP_TIMEOUT_SECONDS",
    "CDR_DEFAULT_LIMIT",
    "CDR_RESULTS_TTL_SECONDS",
    "CDR_RESULTS_MAX_SESSIONS",
    "CDR_PERSISTENCE_ENABLED",
    "DATABASE_PATH",
    "CDR_DEBUG_LOGGING",
)


@pytest.fixture(autouse=True)
def clean_discovery_env(monkeypatch):
    """Settings must come from the test, never from the developer's shell."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture
def make_client():
    clients: list[EndpointHttpClient] = []

    def factory(handler: Callable[[httpx.Request], Any], timeout: float = 5.0) -> EndpointHttpClient:
        client = EndpointHttpClient(timeout=timeout, transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield factory
    for client in clients:
        client.close()
