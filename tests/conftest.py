"""
Pytest configuration for netchannel tests.

This module contains fixtures and configuration for pytest.
"""

import socket
from unittest.mock import MagicMock

import anyio
import pytest


def find_free_port() -> int:
    """Return a port that nothing is listening on right now."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


async def connect_when_listening(port: int, attempts: int = 200, delay: float = 0.01):
    """Connect to a local port, retrying until a listener shows up."""
    last_error = None
    for _ in range(attempts):
        try:
            return await anyio.connect_tcp("127.0.0.1", port)
        except OSError as e:
            last_error = e
            await anyio.sleep(delay)
    raise last_error


@pytest.fixture
def free_port():
    """Fixture providing an unused local TCP port."""
    return find_free_port()


@pytest.fixture
def connect_peer():
    """Fixture providing a coroutine function that connects to a channel's listener."""
    return connect_when_listening


# Mock Telemetry
@pytest.fixture
def mock_telemetry(monkeypatch):
    """Fixture providing mock telemetry components."""
    mock_tracer = MagicMock()
    mock_span = MagicMock()
    mock_span.__enter__.return_value = mock_span
    mock_tracer.start_as_current_span.return_value = mock_span
    mock_tracer.start_span.return_value = mock_span

    mock_logger = MagicMock()

    mock_get_telemetry = MagicMock(return_value=(mock_tracer, mock_logger))
    monkeypatch.setattr("netchannel.channel.get_telemetry", mock_get_telemetry)

    return mock_tracer, mock_logger


# Anyio Backend Selection - only use asyncio
@pytest.fixture(params=["asyncio"])
def anyio_backend(request):
    """Fixture to run tests with different anyio backends."""
    return request.param
