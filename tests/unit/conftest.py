"""
Pytest configuration and shared fixtures for unit tests.
"""

import json
from typing import Callable

import httpx
import pytest

from datadog_resources.client import DatadogClient
from datadog_resources.config import Settings
from datadog_resources.resources import ProviderConfiguration


class RecordingSleeper:
    """Stands in for time.sleep; records requested delays."""

    def __init__(self):
        self.delays: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)

    @property
    def count(self) -> int:
        return len(self.delays)


class FakeApi:
    """
    Routes requests to canned responses by (method, path).

    Each route holds a list of responses consumed in order; the last one
    repeats once the list is exhausted. Every request is recorded.
    """

    def __init__(self):
        self.routes: dict[tuple[str, str], list[tuple[int, object]]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, status: int = 200, body: object = None):
        self.routes.setdefault((method, path), []).append((status, body))
        return self

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def json_body(self, request: httpx.Request) -> object:
        return json.loads(request.content) if request.content else None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        if key not in self.routes:
            return httpx.Response(404, json={"errors": ["Not found"]})
        responses = self.routes[key]
        status, body = responses.pop(0) if len(responses) > 1 else responses[0]
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        api_key="test-api-key",
        app_key="test-app-key",
        api_url="https://api.datadoghq.test",
    )


@pytest.fixture
def sleeper() -> RecordingSleeper:
    return RecordingSleeper()


@pytest.fixture
def fake_api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def make_client(settings) -> Callable[[Callable], DatadogClient]:
    """Factory building a client whose requests go to a handler function."""
    clients = []

    def factory(handler) -> DatadogClient:
        client = DatadogClient(settings=settings, transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield factory

    for client in clients:
        client.close()


@pytest.fixture
def client(make_client, fake_api) -> DatadogClient:
    return make_client(fake_api)


@pytest.fixture
def provider(client, settings) -> ProviderConfiguration:
    return ProviderConfiguration(client=client, settings=settings)
