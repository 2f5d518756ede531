"""
Web Search Tools

Provides web search through two providers:
- Brave Search API (requires BRAVE_API_KEY)
- Google Custom Search JSON API (requires GOOGLE_API_KEY and GOOGLE_CSE_ID)

Provider failures never surface as tool errors; they come back as an
empty result list and the tool reports that nothing was found.
"""

import logging
from typing import Dict, List, Optional

import httpx

from ..base import MCPTool, ToolParameter

logger = logging.getLogger(__name__)

GOOGLE_SEARCH_URL = "https://www.googleapis.com/customsearch/v1"


class BraveSearchClient:
    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.search.brave.com/res/v1",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def search(self, query: str, count: int = 10) -> List[Dict[str, str]]:
        headers = {
            "Accept": "application/json",
            "X-Subscription-Token": self.api_key,
        }
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                response = await client.get(
                    f"{self.base_url}/web/search",
                    params={"q": query, "count": count},
                    headers=headers,
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Error making Brave search request: {e}")
            return []
        except ValueError as e:
            logger.error(f"Malformed Brave search response: {e}")
            return []

        if not isinstance(data, dict):
            logger.error(f"Malformed Brave search response: expected an object, got {type(data).__name__}")
            return []
        web = data.get("web")
        entries = web.get("results") if isinstance(web, dict) else None
        if not isinstance(entries, list):
            return []

        results = []
        for result in entries:
            if not isinstance(result, dict):
                continue
            results.append({
                "title": result.get("title"),
                "url": result.get("url"),
                "description": result.get("description"),
            })
        return results


class GoogleSearchClient:
    def __init__(
        self,
        api_key: str,
        cse_id: str,
        base_url: str = GOOGLE_SEARCH_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.cse_id = cse_id
        self.base_url = base_url
        self.timeout = timeout
        self._transport = transport

    async def search(self, query: str, count: int = 5) -> List[Dict[str, str]]:
        params = {
            "key": self.api_key,
            "cx": self.cse_id,
            "q": query,
            "num": count,
        }
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                response = await client.get(self.base_url, params=params)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Error making Google search request: {e}")
            return []
        except ValueError as e:
            logger.error(f"Malformed Google search response: {e}")
            return []

        if not isinstance(data, dict):
            logger.error(f"Malformed Google search response: expected an object, got {type(data).__name__}")
            return []
        items = data.get("items")
        if not isinstance(items, list):
            return []

        return [
            {
                "title": item.get("title"),
                "link": item.get("link"),
                "snippet": item.get("snippet"),
            }
            for item in items
            if isinstance(item, dict)
        ]


class BraveWebSearchTool(MCPTool):
    """Search the web using Brave Search."""

    def __init__(self, client: BraveSearchClient):
        self.client = client

    @property
    def name(self) -> str:
        return "brave-web-search"

    @property
    def description(self) -> str:
        return "Search the web using Brave Search"

    @property
    def parameters(self) -> List[ToolParameter]:
        return [
            ToolParameter(
                name="query",
                type="string",
                description="The search query",
            ),
            ToolParameter(
                name="count",
                type="integer",
                description="Number of results to return (max 20)",
                required=False,
                default=10,
                minimum=1,
                maximum=20,
            ),
        ]

    async def execute(self, query: str, count: int = 10) -> str:
        results = await self.client.search(query, count)
        if not results:
            return "No search results found"

        formatted = []
        for result in results:
            lines = [f"Title: {result['title']}", f"URL: {result['url']}"]
            if result.get("description"):
                lines.append(f"Description: {result['description']}")
            lines.append("---")
            formatted.append("\n".join(lines))

        return f'Search results for "{query}":\n\n' + "\n".join(formatted)


class GoogleSearchTool(MCPTool):
    """Search the web using Google Custom Search."""

    def __init__(self, client: GoogleSearchClient):
        self.client = client

    @property
    def name(self) -> str:
        return "google-search"

    @property
    def description(self) -> str:
        return "Search the web using Google Custom Search"

    @property
    def parameters(self) -> List[ToolParameter]:
        return [
            ToolParameter(
                name="query",
                type="string",
                description="The search query",
            ),
            ToolParameter(
                name="count",
                type="integer",
                description="Number of results to return (max 10)",
                required=False,
                default=5,
                minimum=1,
                maximum=10,
            ),
        ]

    async def execute(self, query: str, count: int = 5) -> str:
        results = await self.client.search(query, count)
        if not results:
            return "No results found from Google Search."

        formatted = [
            f"{i}. {r['title']}\n{r['link']}\n{r['snippet']}"
            for i, r in enumerate(results, start=1)
        ]
        return f'Google Search results for "{query}":\n\n' + "\n\n".join(formatted)
