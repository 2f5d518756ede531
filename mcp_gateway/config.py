"""
Gateway configuration, read from the environment (and a .env file if present).
"""

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

load_dotenv()

SECRET_FIELDS = ("brave_api_key", "google_api_key", "google_cse_id")


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Invalid value for {name}: {raw!r}, using {default}")
        return default


@dataclass
class GatewayConfig:
    brave_api_key: str = ""
    brave_base_url: str = "https://api.search.brave.com/res/v1"
    google_api_key: str = ""
    google_cse_id: str = ""
    weather_user_agent: str = "WeatherApp/1.0"
    weather_api_base: str = "https://api.weather.gov"

    # Upper bound on each collaborator HTTP call, in seconds
    http_timeout: float = 30.0

    server_name: str = "MyFirst_MCPserver"
    server_version: str = "1.0.0"
    protocol_version: str = "2024-11-05"

    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"
    keepalive_seconds: float = 15.0

    @classmethod
    def from_env(cls) -> "GatewayConfig":
        return cls(
            brave_api_key=os.getenv("BRAVE_API_KEY", ""),
            brave_base_url=os.getenv("BRAVE_BASE_URL", cls.brave_base_url),
            google_api_key=os.getenv("GOOGLE_API_KEY", ""),
            google_cse_id=os.getenv("GOOGLE_CSE_ID", ""),
            weather_user_agent=os.getenv("WEATHER_USER_AGENT", cls.weather_user_agent),
            weather_api_base=os.getenv("WEATHER_API_BASE", cls.weather_api_base),
            http_timeout=_float_env("HTTP_TIMEOUT", cls.http_timeout),
            server_name=os.getenv("MCP_SERVER_NAME", cls.server_name),
            server_version=os.getenv("MCP_SERVER_VERSION", cls.server_version),
            host=os.getenv("MCP_HOST", cls.host),
            port=int(os.getenv("MCP_PORT", str(cls.port))),
            log_level=os.getenv("LOG_LEVEL", cls.log_level).upper(),
            keepalive_seconds=_float_env("SSE_KEEPALIVE_SECONDS", cls.keepalive_seconds),
        )

    def missing_credentials(self) -> List[str]:
        missing = []
        if not self.brave_api_key:
            missing.append("BRAVE_API_KEY")
        if not self.google_api_key:
            missing.append("GOOGLE_API_KEY")
        if not self.google_cse_id:
            missing.append("GOOGLE_CSE_ID")
        return missing

    def masked(self) -> Dict[str, Any]:
        """Config values safe to log."""
        values = {}
        for name in (
            "brave_api_key",
            "brave_base_url",
            "google_api_key",
            "google_cse_id",
            "weather_user_agent",
            "weather_api_base",
            "http_timeout",
        ):
            value = getattr(self, name)
            if name in SECRET_FIELDS:
                value = "***" if value else "not set"
            values[name] = value
        return values
