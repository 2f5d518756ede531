"""
Protocol Gateway

Correlates the two transport legs: a long-lived push channel per client
(opened once, identified by a session token) and short-lived invocation
requests that name that token. Every invocation ends in exactly one
terminal signal: an immediate rejection, or an acceptance followed by one
result or error event on the client's channel.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, List, Optional, Set

from .base import ExecutionError, ToolDefinition, ValidationError
from .framing import KEEPALIVE_FRAME, MCP_EVENT, Event, FramingError, frame
from .registry import ToolRegistry
from .sessions import END_OF_STREAM, Session, SessionRegistry

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2024-11-05"

# Payload "type" discriminators; every event shares the "mcp" category
HANDSHAKE = "mcp_handshake_response"
CLIENT_ID_ASSIGNED = "client_id_assigned"
TOOL_RESPONSE = "tool_response"
ERROR = "error"


@dataclass
class InvocationRequest:
    """One tool call. ``id`` is the caller's correlation id, echoed back."""
    id: str
    tool_name: str
    parameters: Any = field(default_factory=dict)
    client_id: Optional[str] = None


@dataclass
class InvocationOutcome:
    """Synchronous reply to an invocation request."""
    status_code: int
    body: Dict[str, Any]

    @property
    def accepted(self) -> bool:
        return self.status_code == 202


class ProtocolGateway:
    """
    Owns the tool and session registries for one server instance.

    Handlers run as background tasks on the event loop. Their results are
    pushed onto the session's queue, which the channel's stream drains in
    order.
    """

    def __init__(
        self,
        tools: ToolRegistry,
        sessions: Optional[SessionRegistry] = None,
        server_name: str = "MyFirst_MCPserver",
        server_version: str = "1.0.0",
        protocol_version: str = PROTOCOL_VERSION,
        keepalive_seconds: float = 15.0,
    ):
        tools.freeze()
        self.tools = tools
        self.sessions = sessions if sessions is not None else SessionRegistry()
        self.server_name = server_name
        self.server_version = server_version
        self.protocol_version = protocol_version
        self.keepalive_seconds = keepalive_seconds
        self._tasks: Set[asyncio.Task] = set()

    # ============== Handshake ==============

    def capabilities(self) -> List[Dict[str, Any]]:
        return [
            {
                "name": tool.name,
                "description": tool.description,
                "input_schema": tool.input_schema(),
            }
            for tool in self.tools.list_all()
        ]

    def handshake_payload(self) -> Dict[str, Any]:
        return {
            "type": HANDSHAKE,
            "protocol_version": self.protocol_version,
            "server": {
                "name": self.server_name,
                "version": self.server_version,
            },
            "capabilities": {
                "tools": self.capabilities(),
            },
        }

    # ============== Channel ==============

    def open_channel(self) -> Session:
        """Allocate a session and queue the handshake and client id events."""
        session = self.sessions.open()
        self.push(session, self.handshake_payload())
        self.push(session, {"type": CLIENT_ID_ASSIGNED, "client_id": session.token})
        return session

    def push(self, session: Session, payload: Dict[str, Any]) -> bool:
        """
        Frame a payload and queue it on the session.

        A payload that cannot be serialized is logged and dropped; the
        session stays open.
        """
        event = Event(id=session.next_message_id(), event=MCP_EVENT, data=payload)
        try:
            text = frame(event)
        except FramingError as e:
            logger.error(f"Dropping event for session {session.token}: {e}")
            return False

        if not session.push(text):
            logger.warning(f"Session {session.token} is closed, event {event.id} dropped")
            return False
        return True

    async def stream(self, peer: str = "unknown") -> AsyncIterator[str]:
        """
        Open a channel and yield its frames in push order until it closes.

        Nothing is registered until the first frame is requested, so a
        response that is never started leaves no session behind. Once
        opened, the session is removed however the stream ends.
        """
        session = self.open_channel()
        logger.info(f"Channel opened by {peer}: {session.token}")
        try:
            while True:
                if self.keepalive_seconds:
                    try:
                        text = await asyncio.wait_for(
                            session.queue.get(), timeout=self.keepalive_seconds
                        )
                    except asyncio.TimeoutError:
                        yield KEEPALIVE_FRAME
                        continue
                else:
                    text = await session.queue.get()

                if text is END_OF_STREAM:
                    break
                yield text
        finally:
            self.sessions.close(session.token)

    # ============== Invocation ==============

    async def invoke(self, request: InvocationRequest) -> InvocationOutcome:
        """
        Check the request and, if it passes, start the handler.

        Checks run in order and stop at the first failure: client id
        present, client id live, tool known, parameters valid.
        """
        if not request.client_id:
            return self._reject(request, 400, "missing_client_id", "client_id is required")

        session = self.sessions.get(request.client_id)
        if session is None:
            return self._reject(
                request, 400, "invalid_client_id",
                f"Unknown or closed client_id: {request.client_id}",
            )

        try:
            tool = self.tools.lookup(request.tool_name)
            if tool is None:
                return self._reject(
                    request, 400, "unknown_tool",
                    f"Tool not found: {request.tool_name}",
                    session=session,
                )

            try:
                params = tool.validate(request.parameters)
            except ValidationError as e:
                return self._reject(
                    request, 400, "invalid_parameters", e.message,
                    session=session, details=e.errors,
                )

            self._spawn(self._run_handler(request, tool, params))
        except Exception as e:
            logger.exception(f"Unexpected error accepting invocation {request.id}")
            return self._reject(request, 500, "tool_error", str(e), session=session)

        logger.info(f"Accepted invocation {request.id}: {tool.name} for {session.token}")
        return InvocationOutcome(202, {"id": request.id, "status": "processing"})

    def _error_payload(
        self,
        request: InvocationRequest,
        error_type: str,
        message: str,
        details: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        payload = {
            "type": ERROR,
            "id": request.id,
            "tool_name": request.tool_name,
            "error_type": error_type,
            "error": message,
        }
        if details:
            payload["details"] = details
        return payload

    def _reject(
        self,
        request: InvocationRequest,
        status_code: int,
        error_type: str,
        message: str,
        session: Optional[Session] = None,
        details: Optional[List[str]] = None,
    ) -> InvocationOutcome:
        logger.warning(f"Rejected invocation {request.id} ({error_type}): {message}")

        if session is not None:
            self.push(session, self._error_payload(request, error_type, message, details))

        body = {
            "id": request.id,
            "status": "error",
            "error_type": error_type,
            "error": message,
        }
        if details:
            body["details"] = details
        return InvocationOutcome(status_code, body)

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run_handler(
        self,
        request: InvocationRequest,
        tool: ToolDefinition,
        params: Dict[str, Any],
    ) -> None:
        try:
            result = await tool.handler(**params)
        except ExecutionError as e:
            logger.error(f"Execution error in {tool.name}: {e.message}")
            payload = self._error_payload(request, "tool_error", e.message)
        except Exception as e:
            logger.exception(f"Unexpected error in {tool.name}")
            payload = self._error_payload(request, "tool_error", str(e))
        else:
            payload = {
                "type": TOOL_RESPONSE,
                "id": request.id,
                "tool_name": tool.name,
                "result": result,
            }

        self._deliver(request.client_id, payload)

    def _deliver(self, token: str, payload: Dict[str, Any]) -> None:
        session = self.sessions.get(token)
        if session is None:
            logger.warning(
                f"Session {token} closed before {payload['type']} "
                f"for invocation {payload['id']}, discarding"
            )
            return
        self.push(session, payload)

    # ============== Lifecycle ==============

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for every in-flight handler to deliver."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel in-flight handlers and close every session."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info(f"Cancelled {len(tasks)} in-flight invocation(s)")

        closed = self.sessions.close_all()
        logger.info(f"Gateway shut down, closed {closed} session(s)")
