"""
MCP Tools Package

Each tool wraps one external collaborator. Collaborators normalize their
own failures into empty results; tools turn those into readable messages.
"""

from .weather import GetAlertsTool, GetForecastTool, NWSClient
from .web_search import BraveSearchClient, BraveWebSearchTool, GoogleSearchClient, GoogleSearchTool

__all__ = [
    "NWSClient",
    "GetAlertsTool",
    "GetForecastTool",
    "BraveSearchClient",
    "BraveWebSearchTool",
    "GoogleSearchClient",
    "GoogleSearchTool",
]
