"""Shared fixtures."""

from collections.abc import Iterator
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from digitransit_mcp.data.config import DigitransitConfig


@pytest.fixture
def config() -> DigitransitConfig:
    """Create a test config."""
    return DigitransitConfig(
        DIGITRANSIT_API_KEY="test_api_key",
        DIGITRANSIT_BASE_URL="https://example.com/routing/v2/finland/gtfs/v1",
        DIGITRANSIT_TIMEOUT=5.0,
    )


@pytest.fixture
def mock_http() -> Iterator[AsyncMock]:
    """Patch httpx.AsyncClient; set ``mock_http.post`` to control responses."""
    with patch("httpx.AsyncClient") as mock_client_class:
        mock_client = AsyncMock()
        mock_client.post = AsyncMock(return_value=httpx.Response(200, json={"data": {}}))
        mock_client_class.return_value = mock_client
        mock_client.client_class = mock_client_class
        yield mock_client
