"""Web search adapter using Google Programmable Search Engine."""

import httpx

from backend.tripply.adapters.provenance import citation_for_http, http_client
from backend.tripply.models.common import ToolResult
from backend.tripply.models.tool_results import WebResult
from backend.tripply.tools.params import SearchWebParams

SEARCH_URL = "https://www.googleapis.com/customsearch/v1"


async def search_web(
    params: SearchWebParams,
    api_key: str,
    engine_id: str,
    client: httpx.AsyncClient | None = None,
) -> ToolResult[list[WebResult]]:
    """Search the web for travel information.

    Raises:
        httpx.HTTPError: On network or HTTP errors
    """
    if not api_key or not engine_id:
        return ToolResult.failure("Google Search API not configured")

    async with http_client(client) as http:
        response = await http.get(
            SEARCH_URL,
            # Google CSE caps num at 10
            params={"key": api_key, "cx": engine_id, "q": params.query, "num": params.num_results},
        )
        response.raise_for_status()
        items = response.json().get("items") or []

    results = [
        WebResult(
            title=item.get("title", ""),
            url=item["link"],
            snippet=item.get("snippet", ""),
            source=item.get("displayLink", ""),
        )
        for item in items
        if item.get("link")
    ]
    sources = [
        citation_for_http(r.title or r.url, r.url, snippet=r.snippet, confidence=0.8)
        for r in results
    ]
    return ToolResult.ok(results, sources=sources)
