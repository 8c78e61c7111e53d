"""Pytest configuration and shared fixtures."""

import pytest
from rest_framework.test import APIClient

from tests.fakes import FakeTicketingApi, InMemoryBookingSessionStore


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def fake_api() -> FakeTicketingApi:
    return FakeTicketingApi()


@pytest.fixture
def session_store() -> InMemoryBookingSessionStore:
    return InMemoryBookingSessionStore()


@pytest.fixture
def patched_api(monkeypatch, fake_api) -> FakeTicketingApi:
    """Route every view's ticketing API client to the in-memory fake."""
    tokens = []

    def build(token=None):
        tokens.append(token)
        return fake_api

    monkeypatch.setattr("booking.handlers.views.build_ticketing_api", build)
    fake_api.tokens = tokens
    return fake_api
