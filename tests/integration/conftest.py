"""Pytest configuration for integration tests.

This module provides integration-test-specific fixtures that replace the
model service client, so the API endpoints can be exercised end to end
against the real demo capabilities without network access.
"""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from funcall_server.llm import ModelReply


@pytest.fixture(autouse=True)
def mock_model_client():
    """Mock the model client for all integration tests.

    This fixture patches the client factory before the app starts, ensuring
    the lifespan uses our mock instead of creating a real client.
    """
    with patch("funcall_server.app.create_model_client") as mock_factory:
        mock_instance = AsyncMock()
        mock_instance.host = "http://model.test"
        mock_instance.check_connection.return_value = True
        mock_instance.decide.return_value = ModelReply(content="Hello! How can I help?")
        mock_instance.complete.return_value = "Here is what I found."

        mock_factory.return_value = mock_instance

        yield mock_instance


@pytest.fixture(autouse=True)
def offline_wttr(monkeypatch):
    """Answer wttr.in requests locally."""

    def _get(url, params=None, timeout=None):
        location = url.rsplit("/", 1)[-1]
        return httpx.Response(
            200,
            text=f"{location}: ☀️ +21°C\n",
            request=httpx.Request("GET", url),
        )

    monkeypatch.setattr(httpx, "get", _get)
