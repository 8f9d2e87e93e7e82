"""Web search tools — Google Programmable Search and Brave Search.

Auth:
  google: GOOGLE_API_KEY (alias GOOGLE_SEARCH_API_KEY) and GOOGLE_CSE_ID
  brave:  BRAVE_API_KEY (alias BRAVE_SEARCH_API_KEY)

Keys arrive as constructor keyword arguments, named by primary field.
"""

from __future__ import annotations

import logging
from abc import abstractmethod

import httpx

from toolgate.tools.base import Tool, ToolParam, ToolResult

logger = logging.getLogger(__name__)

GOOGLE_API = "https://www.googleapis.com/customsearch/v1"
BRAVE_API = "https://api.search.brave.com/res/v1/web/search"

GOOGLE_KEY_FIELD = "GOOGLE_API_KEY"
GOOGLE_CSE_FIELD = "GOOGLE_CSE_ID"
BRAVE_KEY_FIELD = "BRAVE_API_KEY"


def _require(kwargs: dict, field: str) -> str:
    value = kwargs.pop(field, None)
    if not value:
        raise ValueError(f"Missing {field}")
    return value


class _SearchTool(Tool):
    status_text = "Searching the web..."
    parameters = [
        ToolParam(
            name="query",
            type="string",
            description="The search query",
            required=True,
        ),
        ToolParam(
            name="count",
            type="integer",
            description="Number of results to return (1-10, default 5)",
            required=False,
            default=5,
        ),
    ]

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None, **kwargs):
        super().__init__(**kwargs)
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport, timeout=15)

    @staticmethod
    def _format(query: str, results: list[dict]) -> ToolResult:
        if not results:
            return ToolResult.success(f"No web results found for: {query}")

        lines = [f"**Web results for:** {query}\n"]
        for i, r in enumerate(results, 1):
            lines.append(f"**{i}. {r['title']}**")
            if r["snippet"]:
                lines.append(f"   {r['snippet']}")
            lines.append(f"   {r['url']}\n")
        return ToolResult.success(
            "\n".join(lines), result_count=len(results), query=query
        )

    @abstractmethod
    async def _search(self, query: str, count: int) -> list[dict]:
        """Return ``{"title", "url", "snippet"}`` dicts, at most ``count``."""

    async def execute(self, query: str, count: int = 5, **_) -> ToolResult:
        count = min(max(count, 1), 10)
        try:
            results = await self._search(query, count)
        except httpx.HTTPStatusError as e:
            logger.error(f"{self.name} HTTP error: {e.response.status_code}")
            return ToolResult.fail(
                f"Search error: {e.response.status_code} — {e.response.text[:200]}"
            )
        except httpx.HTTPError as e:
            logger.error(f"{self.name} request failed: {e}")
            return ToolResult.fail(f"Search failed: {e}")
        return self._format(query, results)


class GoogleSearchTool(_SearchTool):
    """Search the web with Google Programmable Search."""

    name = "google"
    description = "Search Google for current events, facts and web pages."

    def __init__(self, **kwargs):
        self.api_key = _require(kwargs, GOOGLE_KEY_FIELD)
        self.cse_id = _require(kwargs, GOOGLE_CSE_FIELD)
        super().__init__(**kwargs)

    async def _search(self, query: str, count: int) -> list[dict]:
        async with self._client() as client:
            resp = await client.get(
                GOOGLE_API,
                params={"q": query, "key": self.api_key, "cx": self.cse_id, "num": count},
            )
            resp.raise_for_status()
            data = resp.json()

        return [
            {
                "title": item.get("title", "No title"),
                "url": item.get("link", ""),
                "snippet": item.get("snippet", ""),
            }
            for item in data.get("items", [])
        ]


class BraveSearchTool(_SearchTool):
    """Search the live web using Brave Search."""

    name = "brave"
    description = (
        "Search the live web for any query. Returns titles, URLs, and snippets "
        "from real-time web results."
    )

    def __init__(self, **kwargs):
        self.api_key = _require(kwargs, BRAVE_KEY_FIELD)
        super().__init__(**kwargs)

    async def _search(self, query: str, count: int) -> list[dict]:
        async with self._client() as client:
            resp = await client.get(
                BRAVE_API,
                headers={
                    "Accept": "application/json",
                    "X-Subscription-Token": self.api_key,
                },
                params={"q": query, "count": count},
            )
            resp.raise_for_status()
            data = resp.json()

        return [
            {
                "title": r.get("title", "No title"),
                "url": r.get("url", ""),
                "snippet": r.get("description", ""),
            }
            for r in data.get("web", {}).get("results", [])
        ]
