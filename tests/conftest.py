"""Pytest configuration and shared fixtures for funcall-server tests.

This module provides common fixtures used across all test modules,
including test app creation, async client setup and small helpers for
building capability and schema units on disk.
"""

import shutil
import textwrap
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from funcall_server import create_app
from funcall_server.config import FuncallServerSettings
from funcall_server.llm import ModelReply, ToolCallRequest

REPO_ROOT = Path(__file__).resolve().parents[1]


@pytest.fixture
def demo_dirs(tmp_path):
    """Copy the shipped demo functions/ and tools/ into a temporary data dir.

    Returns:
        Path: The temporary data directory.
    """
    shutil.copytree(REPO_ROOT / "functions", tmp_path / "functions")
    shutil.copytree(REPO_ROOT / "tools", tmp_path / "tools")
    return tmp_path


@pytest.fixture
def test_settings(demo_dirs):
    """Create test settings pointing at an isolated copy of the demo units.

    Returns:
        FuncallServerSettings: Settings instance configured for testing.
    """
    return FuncallServerSettings(
        host="127.0.0.1",
        port=8000,
        model_backend="openai",
        model="gpt-4o-mini",
        openai_api_key="test-key",
        check_model_on_startup=False,
        data_dir=str(demo_dirs),
        functions_dir="functions",
        tools_dir="tools",
        log_level="DEBUG",
        cors_origins=["*"],
    )


@pytest.fixture
def test_app(test_settings):
    """Create a FastAPI test application instance."""
    return create_app(settings=test_settings)


@pytest_asyncio.fixture
async def async_client(test_app):
    """Create an async HTTP client for testing FastAPI endpoints.

    Yields:
        AsyncClient: Async HTTP client for making test requests.
    """
    # Trigger the lifespan startup manually for tests
    async with test_app.router.lifespan_context(test_app):
        transport = ASGITransport(app=test_app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client


@pytest.fixture
def model_client():
    """A stand-alone mock ModelClient answering directly by default."""
    client = AsyncMock()
    client.host = "http://model.test"
    client.check_connection.return_value = True
    client.decide.return_value = ModelReply(content="Hello!")
    client.complete.return_value = "Final answer"
    return client


@pytest.fixture
def write_unit():
    """Return a helper that writes a dedented unit file into a directory."""

    def _write(directory: Path, filename: str, source: str) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / filename
        path.write_text(textwrap.dedent(source), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def make_call():
    """Return a helper building ToolCallRequest objects with predictable ids."""

    def _make(name: str, arguments: str = "{}", call_id: str | None = None) -> ToolCallRequest:
        return ToolCallRequest(id=call_id or f"call_{name}", name=name, arguments=arguments)

    return _make
