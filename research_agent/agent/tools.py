"""
Agent tools: definitions and execution for tool-calling mode.

Tools: web_search (DuckDuckGo via the search adapter).
"""

import logging
from typing import Any

from research_agent.core.errors import SearchError
from research_agent.services.search_service import WebSearchAdapter

logger = logging.getLogger(__name__)

WEB_SEARCH = "web_search"


def build_tool_manifest(max_results: int) -> list[dict[str, Any]]:
    """OpenAI function-calling format: list of tool definitions."""
    return [
        {
            "type": "function",
            "function": {
                "name": WEB_SEARCH,
                "description": (
                    "Search the web for current information on a topic. Returns up to "
                    f"{max_results} results, each with a title, a short snippet, and a URL. "
                    "Call it once, then answer using the results and cite the URLs."
                ),
                "parameters": {
                    "type": "object",
                    "properties": {
                        "query": {
                            "type": "string",
                            "description": "Search query for the web (keywords or a short question)",
                        }
                    },
                    "required": ["query"],
                },
            },
        },
    ]


def _web_search_impl(query: str, search: WebSearchAdapter) -> str:
    """Run one web search and format the hits for the model."""
    q = (query or "").strip()
    if not q:
        return "Error: query is required."
    try:
        results = search.search(q)
    except SearchError as e:
        logger.warning("[tools] web_search failed: %s", e)
        return f"Web search failed: {e}"
    if not results:
        return "No results found."
    lines = [f"{i}. {r.title}\n{r.snippet}\nURL: {r.url}" for i, r in enumerate(results, 1)]
    return "\n\n".join(lines)


def execute_tool(name: str, arguments: dict[str, Any], search: WebSearchAdapter) -> str:
    """
    Execute a tool by name with the given arguments. Returns a string result for the LLM.
    """
    args = arguments or {}
    logger.info("[tools] execute_tool name=%r arguments=%r", name, args)

    if name == WEB_SEARCH:
        return _web_search_impl(str(args.get("query") or ""), search)

    return f"Unknown tool: {name}"
