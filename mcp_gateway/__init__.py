"""
MCP Gateway

Pushes tool capabilities and results to clients over a Server-Sent Events
channel and accepts tool invocations on a separate request endpoint.
"""

from .base import ExecutionError, MCPTool, ToolDefinition, ToolParameter, ValidationError
from .gateway import InvocationOutcome, InvocationRequest, ProtocolGateway
from .registry import ToolRegistry, build_default_registry
from .sessions import Session, SessionRegistry

__all__ = [
    "ExecutionError",
    "InvocationOutcome",
    "InvocationRequest",
    "MCPTool",
    "ProtocolGateway",
    "Session",
    "SessionRegistry",
    "ToolDefinition",
    "ToolParameter",
    "ToolRegistry",
    "ValidationError",
    "build_default_registry",
]
