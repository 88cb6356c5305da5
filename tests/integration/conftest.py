"""Shared fixtures for integration tests against a live backend."""

import os
from typing import AsyncGenerator

import pytest
import pytest_asyncio

from permitsy.models.backend import BackendClient

LIVE_URL_VAR = "INTEGRATION_BACKEND_URL"
LIVE_KEY_VAR = "INTEGRATION_BACKEND_ANON_KEY"


def pytest_collection_modifyitems(config, items):
    """Skip live-backend tests unless a backend is configured."""
    if os.getenv(LIVE_URL_VAR) and os.getenv(LIVE_KEY_VAR):
        return

    skip_live = pytest.mark.skip(
        reason=f"{LIVE_URL_VAR} or {LIVE_KEY_VAR} not set - skipping live backend tests"
    )
    for item in items:
        if item.get_closest_marker("integration") is not None:
            item.add_marker(skip_live)


@pytest_asyncio.fixture
async def live_backend() -> AsyncGenerator[BackendClient, None]:
    """Connected client for the configured live backend."""
    client = BackendClient(os.environ[LIVE_URL_VAR], os.environ[LIVE_KEY_VAR])
    async with client:
        yield client
