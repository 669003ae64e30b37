"""
Agent: orchestrate preamble rendering, the bounded tool loop, and history.

Responsibility: Decide which mode runs (chat, one-shot research, quick search),
keep the conversation history, and surface failures with context. Called by the
CLI; no printing here.
"""

import logging

from research_agent.agent.graph import AgentRun, ChatClient, ToolCallingAgent
from research_agent.agent.llm import OllamaChatClient
from research_agent.agent.prompts import (
    CHAT_SYSTEM_PROMPT,
    RESEARCH_SYSTEM_PROMPT,
    enhance_chat_query,
    enhance_research_query,
    render_preamble,
)
from research_agent.agent.tools import WEB_SEARCH, build_tool_manifest, execute_tool
from research_agent.core.config import CHAT_TURN_BUDGET, Settings
from research_agent.core.errors import CompletionError, EmptyQueryError, ResearchAgentError
from research_agent.core.history import ConversationHistory, Turn
from research_agent.schemas.search import SearchResult
from research_agent.services.search_service import WebSearchAdapter

logger = logging.getLogger(__name__)


def _require_query(query: str) -> str:
    q = (query or "").strip()
    if not q:
        raise EmptyQueryError("query is required")
    return q


def format_search_results(query: str, results: list[SearchResult]) -> str:
    """Render quick-search output as a numbered Markdown list in adapter order."""
    if not results:
        return f"No results found for: {query}"
    formatted = "\n".join(
        f"{i}. **{r.title}**\n   {r.snippet}\n   URL: {r.url}\n"
        for i, r in enumerate(results, 1)
    )
    return f"## Search Results\n\n{formatted}"


class ResearchAgent:
    """Research assistant: Ollama model + web search, with in-memory chat history."""

    def __init__(
        self,
        settings: Settings,
        client: ChatClient | None = None,
        search: WebSearchAdapter | None = None,
    ) -> None:
        self.settings = settings
        self._search = search or WebSearchAdapter(settings.max_search_results)
        self._client = client or OllamaChatClient(settings)
        self._runner = ToolCallingAgent(self._client, self._execute_tool)
        self._history = ConversationHistory()
        self._last_run: AgentRun | None = None

    @property
    def history(self) -> tuple[Turn, ...]:
        """Read-only view of (query, response) turns, oldest first."""
        return self._history.turns

    @property
    def last_run(self) -> AgentRun | None:
        """Details of the most recent successful chat/research call."""
        return self._last_run

    def _execute_tool(self, name: str, arguments: dict) -> str:
        return execute_tool(name, arguments, self._search)

    def _run(self, preamble: str, message: str) -> AgentRun:
        tools = build_tool_manifest(self.settings.max_search_results)
        try:
            run = self._runner.invoke(preamble, tools, message, CHAT_TURN_BUDGET)
        except ResearchAgentError as e:
            logger.warning("[agent] run failed: %s", e)
            raise e.with_context("Agent execution failed") from e
        except Exception as e:
            logger.exception("[agent] run failed unexpectedly")
            raise CompletionError(f"Agent execution failed: {e}") from e
        if WEB_SEARCH not in run.tools_used:
            logger.warning("[agent] answered without calling %s (turns=%d)", WEB_SEARCH, run.turns)
        self._last_run = run
        return run

    def chat(self, query: str) -> str:
        """
        Answer `query` with web search, using earlier turns as context.
        On success the (query, answer) pair is appended to history; on failure
        history is left unchanged and the error is re-raised with context.
        """
        q = _require_query(query)
        logger.info("[agent:chat] IN  query=%r history_len=%d model=%s", q, len(self._history), self.settings.model)
        preamble = render_preamble(self._history, CHAT_SYSTEM_PROMPT)
        run = self._run(preamble, enhance_chat_query(q))
        self._history.append(q, run.answer)
        logger.info("[agent:chat] OUT answer_len=%d history_len=%d", len(run.answer), len(self._history))
        return run.answer

    def research(self, query: str) -> str:
        """One-shot research with the research prompt. Ignores and keeps history as is."""
        q = _require_query(query)
        logger.info("[agent:research] IN  query=%r", q)
        run = self._run(RESEARCH_SYSTEM_PROMPT, enhance_research_query(q))
        logger.info("[agent:research] OUT answer_len=%d", len(run.answer))
        return run.answer

    def quick_search(self, query: str) -> str:
        """Search only, no model. Returns the formatted result list."""
        q = _require_query(query)
        logger.info("[agent:quick_search] IN  query=%r", q)
        try:
            results = self._search.search(q)
        except ResearchAgentError as e:
            raise e.with_context("Search failed") from e
        return format_search_results(q, results)

    def clear_history(self) -> None:
        self._history.clear()
        logger.info("[agent:clear_history] history cleared")
