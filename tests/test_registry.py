"""
Unit tests for the tool registry.
"""

from unittest.mock import AsyncMock

import pytest

from mcp_gateway.base import DuplicateToolError, ToolParameter
from mcp_gateway.config import GatewayConfig
from mcp_gateway.registry import ToolRegistry, build_default_registry


@pytest.fixture
def empty_registry() -> ToolRegistry:
    return ToolRegistry()


class TestRegistration:
    """Test registering and looking up tools."""

    def test_lookup(self, empty_registry):
        handler = AsyncMock()
        empty_registry.register("alpha", "First", [ToolParameter("x", "string", "X")], handler)

        tool = empty_registry.lookup("alpha")
        assert tool is not None
        assert tool.description == "First"
        assert tool.handler is handler
        assert "alpha" in empty_registry

    def test_lookup_missing(self, empty_registry):
        assert empty_registry.lookup("nope") is None

    def test_duplicate_name_fails(self, empty_registry):
        empty_registry.register("alpha", "First", [], AsyncMock())

        with pytest.raises(DuplicateToolError) as exc_info:
            empty_registry.register("alpha", "Second", [], AsyncMock())

        assert exc_info.value.tool_name == "alpha"
        assert empty_registry.lookup("alpha").description == "First"
        assert len(empty_registry) == 1

    def test_list_all_in_registration_order(self, empty_registry):
        for name in ["zeta", "alpha", "mu"]:
            empty_registry.register(name, name, [], AsyncMock())

        assert [t.name for t in empty_registry.list_all()] == ["zeta", "alpha", "mu"]
        assert empty_registry.names() == ["zeta", "alpha", "mu"]

    def test_frozen_registry_rejects_registration(self, empty_registry):
        empty_registry.freeze()

        with pytest.raises(RuntimeError):
            empty_registry.register("late", "Too late", [], AsyncMock())
        assert empty_registry.frozen


class TestDefaultRegistry:
    """Test the built-in tool set."""

    def test_default_tools(self):
        registry = build_default_registry(GatewayConfig())

        assert registry.names() == [
            "get-alerts",
            "get-forecast",
            "brave-web-search",
            "google-search",
        ]

    def test_default_required_parameters(self):
        registry = build_default_registry(GatewayConfig())
        required = {t.name: t.input_schema()["required"] for t in registry.list_all()}

        assert required == {
            "get-alerts": ["state"],
            "get-forecast": ["latitude", "longitude"],
            "brave-web-search": ["query"],
            "google-search": ["query"],
        }

    def test_search_count_bounds(self):
        registry = build_default_registry(GatewayConfig())

        brave = registry.lookup("brave-web-search").input_schema()["properties"]["count"]
        google = registry.lookup("google-search").input_schema()["properties"]["count"]

        assert (brave["minimum"], brave["maximum"], brave["default"]) == (1, 20, 10)
        assert (google["minimum"], google["maximum"], google["default"]) == (1, 10, 5)
