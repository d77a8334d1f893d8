"""Shared fixtures for the client tests."""

import httpx
import pytest

from scoopit_api.client import ScoopitClient
from tests.helpers import APP_KEY, APP_SECRET, USER, FakeClock, FakeServer


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def server():
    return FakeServer()


@pytest.fixture
def http_client(server):
    return httpx.AsyncClient(transport=server.transport)


@pytest.fixture
def client(http_client, clock):
    return ScoopitClient(APP_KEY, APP_SECRET, USER, http_client=http_client, clock=clock,
                         request_timeout=5)
