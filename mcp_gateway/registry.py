"""
MCP Tool Registry

Maps tool names to their definitions. Tools are registered once at
startup; the gateway freezes the registry, after which it is read-only.
"""

import logging
from typing import Dict, List, Optional, Sequence

from .base import DuplicateToolError, MCPTool, ToolDefinition, ToolHandler, ToolParameter
from .tools.weather import GetAlertsTool, GetForecastTool, NWSClient
from .tools.web_search import (
    BraveSearchClient,
    BraveWebSearchTool,
    GoogleSearchClient,
    GoogleSearchTool,
)

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Insertion-ordered collection of tool definitions."""

    def __init__(self):
        self._tools: Dict[str, ToolDefinition] = {}
        self._frozen = False

    def register(
        self,
        name: str,
        description: str,
        parameters: Sequence[ToolParameter],
        handler: ToolHandler,
    ) -> ToolDefinition:
        """
        Register a tool.

        A duplicate name is a programming error: it is logged and raises
        DuplicateToolError so startup fails.
        """
        if self._frozen:
            raise RuntimeError(f"Tool registry is frozen, cannot register {name}")

        if name in self._tools:
            logger.critical(f"Duplicate tool registration: {name}")
            raise DuplicateToolError(f"Tool already registered: {name}", tool_name=name)

        definition = ToolDefinition(
            name=name,
            description=description,
            parameters=tuple(parameters),
            handler=handler,
        )
        self._tools[name] = definition
        logger.info(f"Registered tool: {name}")
        return definition

    def register_tool(self, tool: MCPTool) -> ToolDefinition:
        definition = tool.to_definition()
        return self.register(
            definition.name,
            definition.description,
            definition.parameters,
            definition.handler,
        )

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def lookup(self, name: str) -> Optional[ToolDefinition]:
        """Returns None if tool not found."""
        return self._tools.get(name)

    def list_all(self) -> List[ToolDefinition]:
        """All tools in registration order."""
        return list(self._tools.values())

    def names(self) -> List[str]:
        return list(self._tools.keys())

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools


def build_default_registry(config) -> ToolRegistry:
    """Register the weather and web search tools, in advertisement order."""
    nws = NWSClient(
        base_url=config.weather_api_base,
        user_agent=config.weather_user_agent,
        timeout=config.http_timeout,
    )
    brave = BraveSearchClient(
        api_key=config.brave_api_key,
        base_url=config.brave_base_url,
        timeout=config.http_timeout,
    )
    google = GoogleSearchClient(
        api_key=config.google_api_key,
        cse_id=config.google_cse_id,
        timeout=config.http_timeout,
    )

    registry = ToolRegistry()
    registry.register_tool(GetAlertsTool(nws))
    registry.register_tool(GetForecastTool(nws))
    registry.register_tool(BraveWebSearchTool(brave))
    registry.register_tool(GoogleSearchTool(google))

    logger.info(f"Tool registration complete. Total tools: {len(registry)}")
    return registry
