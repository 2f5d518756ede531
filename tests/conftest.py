"""
Shared fixtures for gateway tests.
"""

from typing import List
from unittest.mock import AsyncMock

import pytest

from mcp_gateway.base import ToolParameter, text_result
from mcp_gateway.framing import Event, parse_frame
from mcp_gateway.gateway import ProtocolGateway
from mcp_gateway.registry import ToolRegistry
from mcp_gateway.sessions import END_OF_STREAM, Session


def _read_events(session: Session) -> List[Event]:
    """Pop every queued frame off a session without blocking."""
    events = []
    while not session.queue.empty():
        text = session.queue.get_nowait()
        if text is END_OF_STREAM:
            break
        events.append(parse_frame(text))
    return events


@pytest.fixture
def read_events():
    return _read_events


@pytest.fixture
def echo_handler() -> AsyncMock:
    return AsyncMock(return_value=text_result("echoed"))


@pytest.fixture
def registry(echo_handler) -> ToolRegistry:
    """Registry with a single echo tool backed by a mock handler."""
    reg = ToolRegistry()
    reg.register(
        "echo",
        "Echo a message back",
        [
            ToolParameter(
                name="message",
                type="string",
                description="Message to echo",
                min_length=1,
                max_length=50,
            ),
            ToolParameter(
                name="times",
                type="integer",
                description="Repeat count",
                required=False,
                default=1,
                minimum=1,
                maximum=5,
            ),
        ],
        echo_handler,
    )
    return reg


@pytest.fixture
def gateway(registry) -> ProtocolGateway:
    return ProtocolGateway(registry, keepalive_seconds=0)


@pytest.fixture
def channel(gateway, read_events) -> Session:
    """An open session with the handshake and client id events consumed."""
    session = gateway.open_channel()
    read_events(session)
    return session
