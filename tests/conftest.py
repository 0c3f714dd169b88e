"""Pytest configuration and fixtures."""

import os
from unittest.mock import AsyncMock, MagicMock

import pytest

# Set test environment before cobalt_hub.infra.config is imported
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("COBALT_API_BASE_URL", "http://cobalt.test")

from cobalt_hub.adapters.cobalt_client import CobaltClient


@pytest.fixture
def mock_client():
    """CobaltClient whose deliveries succeed without network access."""
    client = MagicMock(spec=CobaltClient)
    client.base_url = "http://cobalt.test"
    client.deliver_message = AsyncMock(return_value={"ok": True})
    client.deliver_state = AsyncMock(return_value={"ok": True})
    return client
