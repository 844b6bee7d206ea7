"""
Shared pytest fixtures and configuration for fmdata tests.

This module provides:
- Connection settings pointing at the in-memory fake Data API
- A transport and client wired to that fake through ``httpx.MockTransport``
- Automatic unit/integration markers by test location
"""

import sys
from pathlib import Path

import httpx
import pytest

# Ensure fmdata and the test helpers are importable without installation
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent.parent))

from fmdata.client import FileMakerClient
from fmdata.core.logging import clear_context
from fmdata.core.settings import FileMakerSettings
from fmdata.transport import DataAPITransport
from tests._support.fake_server import FakeDataAPI


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)

        if "integration" in str(test_path):
            item.add_marker(pytest.mark.integration)

        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def clean_log_context():
    """No structlog context leaks from one test into the next."""
    clear_context()
    yield
    clear_context()


# =============================================================================
# Fake Data API Fixtures
# =============================================================================


@pytest.fixture
def settings() -> FileMakerSettings:
    return FileMakerSettings(
        server="https://fms.example.com",
        database="Heroes",
        user="admin",
        password="secret",
    )


@pytest.fixture
def fake_api() -> FakeDataAPI:
    return FakeDataAPI()


@pytest.fixture
def http_client(fake_api: FakeDataAPI) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=fake_api.transport())


@pytest.fixture
def transport(settings: FileMakerSettings, http_client: httpx.AsyncClient) -> DataAPITransport:
    return DataAPITransport(settings, http_client=http_client)


@pytest.fixture
def client(settings: FileMakerSettings, transport: DataAPITransport) -> FileMakerClient:
    return FileMakerClient(settings, transport=transport)
