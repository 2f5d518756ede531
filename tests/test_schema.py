"""
Unit tests for parameter descriptors, validation and schema generation.
"""

import pytest

from mcp_gateway.base import (
    MCPTool,
    ToolParameter,
    ValidationError,
    input_schema,
    validate_parameters,
)

FORECAST_PARAMS = (
    ToolParameter("latitude", "number", "Latitude", minimum=-90, maximum=90),
    ToolParameter("longitude", "number", "Longitude", minimum=-180, maximum=180),
)

SEARCH_PARAMS = (
    ToolParameter("query", "string", "The search query"),
    ToolParameter("count", "integer", "Result count", required=False, default=10, minimum=1, maximum=20),
)


class TestValidation:
    """Test parameter validation."""

    def test_valid_payload_passes_through(self):
        result = validate_parameters("get-forecast", FORECAST_PARAMS, {"latitude": 47.6, "longitude": -122})
        assert result == {"latitude": 47.6, "longitude": -122}

    def test_default_filled_for_absent_optional(self):
        result = validate_parameters("search", SEARCH_PARAMS, {"query": "python"})
        assert result == {"query": "python", "count": 10}

    def test_null_optional_takes_default(self):
        result = validate_parameters("search", SEARCH_PARAMS, {"query": "python", "count": None})
        assert result["count"] == 10

    def test_unknown_keys_dropped(self):
        result = validate_parameters("search", SEARCH_PARAMS, {"query": "x", "extra": True})
        assert "extra" not in result

    def test_exact_length_violation(self):
        params = (ToolParameter("state", "string", "State code", min_length=2, max_length=2),)

        with pytest.raises(ValidationError) as exc_info:
            validate_parameters("get-alerts", params, {"state": "California"})

        assert exc_info.value.errors == ["state: must be exactly 2 characters"]
        assert exc_info.value.tool_name == "get-alerts"

    def test_every_violation_enumerated(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_parameters("get-forecast", FORECAST_PARAMS, {"latitude": 999, "longitude": -500})

        errors = exc_info.value.errors
        assert len(errors) == 2
        assert any(e.startswith("latitude:") for e in errors)
        assert any(e.startswith("longitude:") for e in errors)
        assert "latitude" in exc_info.value.message
        assert "longitude" in exc_info.value.message

    def test_missing_required(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_parameters("search", SEARCH_PARAMS, {})
        assert exc_info.value.errors == ["query: required"]

    def test_out_of_range_count(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_parameters("search", SEARCH_PARAMS, {"query": "x", "count": 25})
        assert exc_info.value.errors == ["count: must be less than or equal to 20"]

    def test_bool_is_not_a_number(self):
        with pytest.raises(ValidationError):
            validate_parameters("get-forecast", FORECAST_PARAMS, {"latitude": True, "longitude": 0})

    def test_integer_rejects_fraction(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_parameters("search", SEARCH_PARAMS, {"query": "x", "count": 2.5})
        assert "count: expected integer" in exc_info.value.errors[0]

    def test_integral_float_coerced_to_int(self):
        result = validate_parameters("search", SEARCH_PARAMS, {"query": "x", "count": 3.0})
        assert result["count"] == 3
        assert isinstance(result["count"], int)

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_number_rejected(self, value):
        with pytest.raises(ValidationError) as exc_info:
            validate_parameters("get-forecast", FORECAST_PARAMS, {"latitude": value, "longitude": 0})
        assert exc_info.value.errors == [f"latitude: must be a finite number, got {value}"]

    def test_non_finite_integer_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_parameters("search", SEARCH_PARAMS, {"query": "x", "count": float("inf")})
        assert exc_info.value.errors == ["count: must be a finite number, got inf"]

    def test_huge_integer_is_range_checked(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_parameters("search", SEARCH_PARAMS, {"query": "x", "count": 10 ** 400})
        assert exc_info.value.errors == ["count: must be less than or equal to 20"]

    def test_wrong_type_string(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_parameters("search", SEARCH_PARAMS, {"query": 42})
        assert exc_info.value.errors == ["query: expected string, got int"]

    def test_non_object_payload(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_parameters("search", SEARCH_PARAMS, ["query"])
        assert exc_info.value.errors == ["parameters: expected object"]


class TestDescriptor:
    """Test ToolParameter construction rules."""

    def test_required_with_default_rejected(self):
        with pytest.raises(ValueError):
            ToolParameter("count", "integer", "Count", required=True, default=5)

    def test_unknown_type_rejected(self):
        with pytest.raises(ValueError):
            ToolParameter("tags", "array", "Tags")


class TestInputSchema:
    """Test JSON-schema generation from descriptors."""

    def test_required_matches_descriptors(self):
        schema = input_schema(SEARCH_PARAMS)

        assert schema["type"] == "object"
        assert schema["required"] == ["query"]
        assert list(schema["properties"]) == ["query", "count"]

    def test_constraints_exposed(self):
        schema = input_schema(SEARCH_PARAMS)
        count = schema["properties"]["count"]

        assert count == {
            "type": "integer",
            "description": "Result count",
            "minimum": 1,
            "maximum": 20,
            "default": 10,
        }

    def test_length_constraints_exposed(self):
        params = (ToolParameter("state", "string", "State code", min_length=2, max_length=2),)
        state = input_schema(params)["properties"]["state"]
        assert state["minLength"] == 2
        assert state["maxLength"] == 2

    def test_all_optional_has_empty_required(self):
        params = (ToolParameter("flag", "boolean", "A flag", required=False, default=False),)
        assert input_schema(params)["required"] == []


class _ShoutTool(MCPTool):
    @property
    def name(self) -> str:
        return "shout"

    @property
    def description(self) -> str:
        return "Upper-case a word"

    @property
    def parameters(self):
        return [ToolParameter("word", "string", "Word to shout")]

    async def execute(self, word: str) -> str:
        return word.upper()


class TestMCPTool:
    """Test the tool base class."""

    def test_to_definition(self):
        definition = _ShoutTool().to_definition()

        assert definition.name == "shout"
        assert definition.input_schema()["required"] == ["word"]
        assert isinstance(definition.parameters, tuple)

    @pytest.mark.asyncio
    async def test_handler_wraps_text(self):
        definition = _ShoutTool().to_definition()
        result = await definition.handler(word="hi")
        assert result == {"content": [{"type": "text", "text": "HI"}]}

    def test_validation_error_carries_every_violation(self):
        error = ValidationError("Invalid parameters", tool_name="shout", details={"errors": ["a", "b"]})
        assert error.errors == ["a", "b"]
        assert error.tool_name == "shout"
        assert str(error) == "Invalid parameters"
