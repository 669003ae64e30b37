"""
Web search adapter: run one DuckDuckGo query through ddgs and return typed results.

Responsibility: Talk to the search backend and nothing else. Results are returned
in backend order, capped at max_results; no ranking, dedup or caching here.
"""

import logging

from ddgs import DDGS
from ddgs.exceptions import DDGSException

from research_agent.core.errors import SearchError
from research_agent.schemas.search import SearchResult

logger = logging.getLogger(__name__)


class WebSearchAdapter:
    """Executes a single web search per call."""

    def __init__(self, max_results: int) -> None:
        if max_results < 1:
            raise ValueError("max_results must be >= 1")
        self.max_results = max_results

    def search(self, query: str, max_results: int | None = None) -> list[SearchResult]:
        """
        Search the web for `query`. Returns at most `max_results` results (defaults
        to the adapter's cap). May return an empty list. Raises SearchError on failure.
        """
        limit = self.max_results if max_results is None else max_results
        if limit < 1:
            raise ValueError("max_results must be >= 1")
        q = (query or "").strip()
        logger.info("[search] IN  query=%r max_results=%d", q, limit)
        try:
            with DDGS() as ddgs:
                raw = list(ddgs.text(q, max_results=limit) or [])
        except DDGSException as e:
            # ddgs reports an empty result page as an exception
            if "no results" in str(e).lower():
                logger.info("[search] OUT results=0")
                return []
            logger.warning("[search] web search failed: %s", e)
            raise SearchError(f"Web search for {q!r} failed: {e}") from e
        except Exception as e:
            logger.warning("[search] web search failed: %s", e)
            raise SearchError(f"Web search for {q!r} failed: {e}") from e
        results = [
            SearchResult(
                title=(r.get("title") or "").strip(),
                snippet=(r.get("body") or "").strip(),
                url=(r.get("href") or "").strip(),
            )
            for r in raw[:limit]
        ]
        logger.info("[search] OUT results=%d urls=%s", len(results), [r.url for r in results])
        return results
