"""
Agent LLM: Ollama through its OpenAI-compatible /v1 endpoint.

openai SDK errors are translated into the app's error kinds here so nothing
above this module needs to know about openai or httpx exception types.
"""

import json
import logging
from typing import Any

import httpx
import openai
from openai import OpenAI

from research_agent.core.config import AGENT_MAX_TOKENS, LLM_API_TIMEOUT, PREFLIGHT_TIMEOUT, Settings
from research_agent.core.errors import BackendUnreachableError, CompletionError, ModelUnavailableError

logger = logging.getLogger(__name__)

# Ollama ignores the key, but the SDK requires one.
OLLAMA_API_KEY = "ollama"


class OllamaChatClient:
    """Chat completions with tools against a local Ollama server."""

    def __init__(self, settings: Settings, http_client: httpx.Client | None = None) -> None:
        self.model = settings.model
        self.host = settings.ollama_host
        self._client = OpenAI(
            base_url=f"{settings.ollama_host}/v1",
            api_key=OLLAMA_API_KEY,
            http_client=http_client or httpx.Client(timeout=LLM_API_TIMEOUT),
            max_retries=0,
        )

    def chat_with_tools(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]],
        max_tokens: int = AGENT_MAX_TOKENS,
    ) -> tuple[str | None, list[dict[str, Any]] | None]:
        """
        Call Ollama chat with tools. Returns (content, tool_calls). If tool_calls is
        non-empty, caller should execute them and call again with tool results; if
        content is set and no tool_calls, that's the final answer.
        Raises BackendUnreachableError, ModelUnavailableError or CompletionError.
        """
        logger.info("[llm:chat_with_tools] IN  model=%s messages=%d tools=%d", self.model, len(messages), len(tools))
        try:
            response = self._client.chat.completions.create(
                model=self.model,
                messages=messages,
                tools=tools,
                max_tokens=max_tokens,
            )
        except openai.APITimeoutError as e:
            raise CompletionError(f"Ollama at {self.host} timed out after {LLM_API_TIMEOUT:.0f}s") from e
        except openai.APIConnectionError as e:
            cause = e.__cause__ or e
            raise BackendUnreachableError(f"Cannot reach Ollama at {self.host}: {cause}") from e
        except openai.NotFoundError as e:
            raise ModelUnavailableError(f"Model {self.model!r} not found at {self.host}: {e}") from e
        except openai.APIError as e:
            raise CompletionError(f"Ollama chat request failed: {e}") from e

        msg = response.choices[0].message if response.choices else None
        if not msg:
            raise CompletionError("Ollama returned no choices")
        content = (getattr(msg, "content", None) or "").strip() or None
        raw_tool_calls = getattr(msg, "tool_calls", None) or []
        tool_calls = []
        for tc in raw_tool_calls:
            fid = getattr(tc, "id", None) or ""
            fn = getattr(tc, "function", None)
            if not fn:
                continue
            fname = getattr(fn, "name", None) or ""
            fargs = getattr(fn, "arguments", None) or "{}"
            try:
                args = json.loads(fargs) if isinstance(fargs, str) else fargs
            except json.JSONDecodeError:
                args = {}
            if not isinstance(args, dict):
                args = {}
            tool_calls.append({"id": fid, "name": fname, "arguments": args})
        if tool_calls:
            logger.info("[llm:chat_with_tools] OUT tool_calls=%s", [t["name"] for t in tool_calls])
        if content:
            logger.info("[llm:chat_with_tools] OUT content_len=%d", len(content))
        return content, tool_calls if tool_calls else None


def _installed_names(payload: Any) -> set[str]:
    names: set[str] = set()
    if not isinstance(payload, dict):
        return names
    for m in payload.get("models") or []:
        name = (m.get("name") or m.get("model") or "").strip()
        if name:
            names.add(name)
            names.add(name.split(":", 1)[0])
    return names


def check_backend(settings: Settings, http_client: httpx.Client | None = None) -> None:
    """
    Preflight: confirm Ollama answers on /api/tags and lists the configured model.
    Raises BackendUnreachableError, ModelUnavailableError or CompletionError.
    """
    url = f"{settings.ollama_host}/api/tags"
    logger.debug("[llm:check_backend] GET %s", url)
    client = http_client or httpx.Client(timeout=PREFLIGHT_TIMEOUT)
    try:
        response = client.get(url)
    except httpx.TransportError as e:
        raise BackendUnreachableError(f"Cannot reach Ollama at {settings.ollama_host}: {e}") from e
    finally:
        if http_client is None:
            client.close()
    if not response.is_success:
        raise CompletionError(f"Ollama health check returned {response.status_code}: {response.text[:200]}")
    try:
        installed = _installed_names(response.json())
    except ValueError as e:
        raise CompletionError(f"Ollama health check returned invalid JSON: {e}") from e
    if settings.model not in installed:
        raise ModelUnavailableError(f"Model {settings.model!r} is not installed in Ollama at {settings.ollama_host}")
    logger.info("[llm:check_backend] OK model=%s host=%s", settings.model, settings.ollama_host)
