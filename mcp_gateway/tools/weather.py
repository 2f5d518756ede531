"""
Weather Tools

Active alerts and forecasts from the National Weather Service API
(api.weather.gov). No API key is required, only a User-Agent.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from ..base import MCPTool, ToolParameter

logger = logging.getLogger(__name__)


def _or(value: Any, fallback: str) -> Any:
    return fallback if value is None or value == "" else value


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _dict_items(value: Any) -> List[Dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


class NWSClient:
    """
    Thin client for the NWS API.

    Every request is bounded by ``timeout`` seconds. Failures of any kind
    (transport, HTTP status, malformed JSON, a body that is not an object)
    are logged and reported as None.
    """

    def __init__(
        self,
        base_url: str = "https://api.weather.gov",
        user_agent: str = "WeatherApp/1.0",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self.timeout = timeout
        self._transport = transport

    async def request(self, url: str) -> Optional[Dict[str, Any]]:
        headers = {
            "User-Agent": self.user_agent,
            "Accept": "application/geo+json",
        }
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                response = await client.get(url, headers=headers)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Error making NWS request to {url}: {e}")
            return None
        except ValueError as e:
            logger.error(f"Malformed NWS response from {url}: {e}")
            return None

        if not isinstance(data, dict):
            logger.error(f"Malformed NWS response from {url}: expected an object, got {type(data).__name__}")
            return None
        return data

    async def get_alerts(self, state: str) -> Optional[Dict[str, Any]]:
        return await self.request(f"{self.base_url}/alerts?area={state}")

    async def get_points(self, latitude: float, longitude: float) -> Optional[Dict[str, Any]]:
        return await self.request(f"{self.base_url}/points/{latitude:.4f},{longitude:.4f}")


def format_alert(feature: Dict[str, Any]) -> str:
    props = _as_dict(feature.get("properties"))
    return "\n".join([
        f"Event: {_or(props.get('event'), 'Unknown')}",
        f"Area: {_or(props.get('areaDesc'), 'Unknown')}",
        f"Severity: {_or(props.get('severity'), 'Unknown')}",
        f"Status: {_or(props.get('status'), 'Unknown')}",
        f"Headline: {_or(props.get('headline'), 'No headline')}",
        "---",
    ])


def format_period(period: Dict[str, Any]) -> str:
    return "\n".join([
        f"{_or(period.get('name'), 'Unknown')}:",
        f"Temperature: {_or(period.get('temperature'), 'Unknown')}°{_or(period.get('temperatureUnit'), 'F')}",
        f"Wind: {_or(period.get('windSpeed'), 'Unknown')} {_or(period.get('windDirection'), '')}",
        f"{_or(period.get('shortForecast'), 'No forecast available')}",
        "---",
    ])


class GetAlertsTool(MCPTool):
    """Active weather alerts for a US state."""

    def __init__(self, client: NWSClient):
        self.client = client

    @property
    def name(self) -> str:
        return "get-alerts"

    @property
    def description(self) -> str:
        return "Get weather alerts for a state"

    @property
    def parameters(self) -> List[ToolParameter]:
        return [
            ToolParameter(
                name="state",
                type="string",
                description="Two-letter state code (e.g. CA, NY)",
                min_length=2,
                max_length=2,
            )
        ]

    async def execute(self, state: str) -> str:
        state_code = state.upper()
        data = await self.client.get_alerts(state_code)

        if data is None:
            return "Failed to retrieve alerts data"

        features = _dict_items(data.get("features"))
        if not features:
            return f"No active alerts for {state_code}"

        alerts = [format_alert(feature) for feature in features]
        return f"Active alerts for {state_code}:\n\n" + "\n".join(alerts)


class GetForecastTool(MCPTool):
    """Forecast periods for a latitude/longitude."""

    def __init__(self, client: NWSClient):
        self.client = client

    @property
    def name(self) -> str:
        return "get-forecast"

    @property
    def description(self) -> str:
        return "Get weather forecast for a location"

    @property
    def parameters(self) -> List[ToolParameter]:
        return [
            ToolParameter(
                name="latitude",
                type="number",
                description="Latitude of the location",
                minimum=-90,
                maximum=90,
            ),
            ToolParameter(
                name="longitude",
                type="number",
                description="Longitude of the location",
                minimum=-180,
                maximum=180,
            ),
        ]

    async def execute(self, latitude: float, longitude: float) -> str:
        points = await self.client.get_points(latitude, longitude)
        forecast_url = _as_dict(_as_dict(points).get("properties")).get("forecast")
        if not forecast_url or not isinstance(forecast_url, str):
            return "Failed to get forecast data for this location"

        forecast = await self.client.request(forecast_url)
        periods = _dict_items(_as_dict(_as_dict(forecast).get("properties")).get("periods"))
        if not periods:
            return "No forecast data available"

        formatted = [format_period(period) for period in periods]
        return f"Forecast for {latitude}, {longitude}:\n\n" + "\n".join(formatted)
