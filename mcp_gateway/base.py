"""
MCP Tool Base Classes

Parameter descriptors, tool definitions, and the error taxonomy shared by
the registry and the gateway. A tool's ``ToolParameter`` list is the single
source for both input validation and the capability advertisement.
"""

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

PARAMETER_TYPES = ("string", "number", "integer", "boolean")

ToolHandler = Callable[..., Awaitable[Dict[str, Any]]]


@dataclass(frozen=True)
class ToolParameter:
    """Definition of a tool parameter."""
    name: str
    type: str
    description: str
    required: bool = True
    default: Any = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None

    def __post_init__(self):
        if self.type not in PARAMETER_TYPES:
            raise ValueError(f"Unsupported parameter type for {self.name}: {self.type}")
        if self.required and self.default is not None:
            raise ValueError(f"Parameter {self.name} has a default and cannot be required")


@dataclass(frozen=True)
class ToolDefinition:
    """Complete definition of an MCP tool. Immutable once registered."""
    name: str
    description: str
    parameters: Tuple[ToolParameter, ...]
    handler: ToolHandler

    def input_schema(self) -> Dict[str, Any]:
        return input_schema(self.parameters)

    def validate(self, raw: Any) -> Dict[str, Any]:
        return validate_parameters(self.name, self.parameters, raw)


class MCPToolError(Exception):
    """
    A tool-level failure the gateway can report to the client.

    ``message`` goes out verbatim in the error event and reply; ``details``
    carries structured extras such as the list of violated constraints.
    """
    def __init__(self, message: str, tool_name: str = None, details: Dict = None):
        self.message = message
        self.tool_name = tool_name
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(MCPToolError):
    """Parameter payload rejected; reported as ``invalid_parameters``."""

    @property
    def errors(self) -> List[str]:
        return list(self.details.get("errors", []))


class ExecutionError(MCPToolError):
    """Raised by a handler after acceptance; delivered as a ``tool_error`` event."""


class DuplicateToolError(MCPToolError):
    """Two tools registered under one name. Fatal at startup."""


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_value(param: ToolParameter, value: Any) -> List[str]:
    """Return every constraint ``value`` violates for ``param``."""
    if param.type == "string":
        if not isinstance(value, str):
            return [f"{param.name}: expected string, got {type(value).__name__}"]
        problems = []
        if (
            param.min_length is not None
            and param.min_length == param.max_length
            and len(value) != param.min_length
        ):
            problems.append(f"{param.name}: must be exactly {param.min_length} characters")
        else:
            if param.min_length is not None and len(value) < param.min_length:
                problems.append(f"{param.name}: must be at least {param.min_length} characters")
            if param.max_length is not None and len(value) > param.max_length:
                problems.append(f"{param.name}: must be at most {param.max_length} characters")
        return problems

    if param.type == "boolean":
        if not isinstance(value, bool):
            return [f"{param.name}: expected boolean, got {type(value).__name__}"]
        return []

    if not _is_number(value):
        return [f"{param.name}: expected {param.type}, got {type(value).__name__}"]
    if isinstance(value, float) and not math.isfinite(value):
        return [f"{param.name}: must be a finite number, got {value}"]
    if param.type == "integer" and not (isinstance(value, int) or value.is_integer()):
        return [f"{param.name}: expected integer, got {value}"]

    problems = []
    if param.minimum is not None and value < param.minimum:
        problems.append(f"{param.name}: must be greater than or equal to {param.minimum:g}")
    if param.maximum is not None and value > param.maximum:
        problems.append(f"{param.name}: must be less than or equal to {param.maximum:g}")
    return problems


def validate_parameters(
    tool_name: str,
    parameters: Tuple[ToolParameter, ...],
    raw: Any,
) -> Dict[str, Any]:
    """
    Validate a raw parameter payload against a tool's parameters.

    Returns the validated values, with defaults filled in for absent
    optional parameters. Unknown keys are dropped. Raises ValidationError
    listing every violated constraint, not only the first one.
    """
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValidationError(
            "Invalid parameters: expected an object",
            tool_name=tool_name,
            details={"errors": ["parameters: expected object"]},
        )

    validated: Dict[str, Any] = {}
    errors: List[str] = []

    for param in parameters:
        value = raw.get(param.name)

        if value is None:
            if param.required:
                errors.append(f"{param.name}: required")
                continue
            value = param.default
            if value is None:
                continue
        else:
            problems = _check_value(param, value)
            if problems:
                errors.extend(problems)
                continue
            if param.type == "integer":
                value = int(value)

        validated[param.name] = value

    if errors:
        raise ValidationError(
            "Invalid parameters: " + "; ".join(errors),
            tool_name=tool_name,
            details={"errors": errors},
        )

    return validated


def input_schema(parameters: Tuple[ToolParameter, ...]) -> Dict[str, Any]:
    """JSON-schema-shaped description of a parameter list."""
    properties: Dict[str, Dict[str, Any]] = {}
    required: List[str] = []

    for param in parameters:
        prop: Dict[str, Any] = {
            "type": param.type,
            "description": param.description,
        }
        if param.minimum is not None:
            prop["minimum"] = param.minimum
        if param.maximum is not None:
            prop["maximum"] = param.maximum
        if param.min_length is not None:
            prop["minLength"] = param.min_length
        if param.max_length is not None:
            prop["maxLength"] = param.max_length
        if param.default is not None:
            prop["default"] = param.default

        properties[param.name] = prop

        if param.required:
            required.append(param.name)

    return {
        "type": "object",
        "properties": properties,
        "required": required,
    }


def text_result(text: str) -> Dict[str, Any]:
    """Wrap plain text in the tool result payload shape."""
    return {"content": [{"type": "text", "text": text}]}


class MCPTool(ABC):
    """
    A tool backed by one external collaborator.

    Subclasses declare their name, description and parameters for the
    handshake, and implement ``execute``, which receives validated values
    and returns the summary text the gateway pushes in a ``tool_response``.
    Collaborator outages should come back as a "no data" summary, not an
    exception.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Name clients use in invocation requests."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Shown to clients in the capability list."""
        pass

    @property
    def parameters(self) -> List[ToolParameter]:
        return []

    @abstractmethod
    async def execute(self, **kwargs) -> str:
        """
        Produce the summary text for one call. Raising ExecutionError turns
        the already-accepted invocation into a delivered ``tool_error``.
        """
        pass

    async def run(self, **kwargs) -> Dict[str, Any]:
        """Execute and wrap the summary text as a result payload."""
        return text_result(await self.execute(**kwargs))

    def to_definition(self) -> ToolDefinition:
        """Convert tool to ToolDefinition for registry."""
        return ToolDefinition(
            name=self.name,
            description=self.description,
            parameters=tuple(self.parameters),
            handler=self.run,
        )
