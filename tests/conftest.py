"""
Shared fakes: a scripted chat client and an in-memory search adapter, so no
test needs Ollama or network access.
"""

import copy
from typing import Any

import pytest

from research_agent.core.config import AGENT_MAX_TOKENS, Settings
from research_agent.schemas.search import SearchResult


class FakeChatClient:
    """Returns scripted (content, tool_calls) replies in order; exceptions are raised."""

    def __init__(self, replies: list[Any]) -> None:
        self.replies = list(replies)
        self.calls: list[dict[str, Any]] = []

    def chat_with_tools(self, messages, tools, max_tokens=AGENT_MAX_TOKENS):
        self.calls.append({"messages": copy.deepcopy(messages), "tools": tools, "max_tokens": max_tokens})
        if not self.replies:
            raise AssertionError("FakeChatClient ran out of scripted replies")
        reply = self.replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        return reply


class FakeSearch:
    """Search adapter stand-in with fixed results (or a fixed error)."""

    def __init__(self, results: list[SearchResult] | None = None, error: Exception | None = None) -> None:
        self.results = results or []
        self.error = error
        self.queries: list[str] = []

    def search(self, query: str, max_results: int | None = None) -> list[SearchResult]:
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        return list(self.results)


def search_call(query: str, call_id: str = "call_1") -> tuple[None, list[dict[str, Any]]]:
    """Scripted reply: the model asks for one web_search."""
    return None, [{"id": call_id, "name": "web_search", "arguments": {"query": query}}]


def answer(text: str) -> tuple[str, None]:
    """Scripted reply: the model answers."""
    return text, None


@pytest.fixture
def settings() -> Settings:
    return Settings(model="llama3.2", ollama_host="http://localhost:11434", max_search_results=3)


@pytest.fixture
def sample_results() -> list[SearchResult]:
    return [
        SearchResult(title="Tokio", snippet="An async runtime for Rust.", url="https://tokio.rs"),
        SearchResult(title="async-std", snippet="Async version of std.", url="https://async.rs"),
        SearchResult(title="Rust Blog", snippet="Async fn in traits.", url="https://blog.rust-lang.org"),
    ]
