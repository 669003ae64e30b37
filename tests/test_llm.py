"""
Unit tests for the Ollama client: response parsing, error mapping, and preflight.
The openai client is replaced by a mock; preflight uses httpx.MockTransport.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import openai
import pytest

from research_agent.agent.llm import OllamaChatClient, check_backend
from research_agent.core.config import AGENT_MAX_TOKENS
from research_agent.core.errors import BackendUnreachableError, CompletionError, ModelUnavailableError

URL = "http://localhost:11434/v1/chat/completions"


def _completion(content=None, tool_calls=None):
    message = SimpleNamespace(content=content, tool_calls=tool_calls)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _tool_call(call_id, name, arguments):
    return SimpleNamespace(id=call_id, function=SimpleNamespace(name=name, arguments=arguments))


@pytest.fixture
def client(settings) -> OllamaChatClient:
    c = OllamaChatClient(settings, http_client=httpx.Client())
    c._client = MagicMock()
    return c


class TestChatWithTools:
    """Tests for OllamaChatClient.chat_with_tools()."""

    def test_points_openai_sdk_at_ollama(self, settings) -> None:
        c = OllamaChatClient(settings, http_client=httpx.Client())
        assert str(c._client.base_url).rstrip("/") == "http://localhost:11434/v1"

    def test_returns_content(self, client: OllamaChatClient) -> None:
        client._client.chat.completions.create.return_value = _completion("  The answer.  ")
        content, tool_calls = client.chat_with_tools([{"role": "user", "content": "q"}], [], max_tokens=64)
        assert content == "The answer."
        assert tool_calls is None
        kwargs = client._client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "llama3.2"
        assert kwargs["max_tokens"] == 64

    def test_default_max_tokens_comes_from_config(self, client: OllamaChatClient) -> None:
        client._client.chat.completions.create.return_value = _completion("ok")
        client.chat_with_tools([{"role": "user", "content": "q"}], [])
        assert client._client.chat.completions.create.call_args.kwargs["max_tokens"] == AGENT_MAX_TOKENS

    def test_parses_tool_calls(self, client: OllamaChatClient) -> None:
        client._client.chat.completions.create.return_value = _completion(
            None,
            [
                _tool_call("call_1", "web_search", '{"query": "rust"}'),
                _tool_call("call_2", "web_search", "not json"),
            ],
        )
        content, tool_calls = client.chat_with_tools([], [])
        assert content is None
        assert tool_calls == [
            {"id": "call_1", "name": "web_search", "arguments": {"query": "rust"}},
            {"id": "call_2", "name": "web_search", "arguments": {}},
        ]

    def test_no_choices_is_a_completion_error(self, client: OllamaChatClient) -> None:
        client._client.chat.completions.create.return_value = SimpleNamespace(choices=[])
        with pytest.raises(CompletionError):
            client.chat_with_tools([], [])

    def test_connection_error_maps_to_backend_unreachable(self, client: OllamaChatClient) -> None:
        client._client.chat.completions.create.side_effect = openai.APIConnectionError(
            request=httpx.Request("POST", URL)
        )
        with pytest.raises(BackendUnreachableError) as exc_info:
            client.chat_with_tools([], [])
        assert "Cannot reach Ollama at http://localhost:11434" in str(exc_info.value)

    def test_timeout_maps_to_completion_error(self, client: OllamaChatClient) -> None:
        client._client.chat.completions.create.side_effect = openai.APITimeoutError(
            request=httpx.Request("POST", URL)
        )
        with pytest.raises(CompletionError) as exc_info:
            client.chat_with_tools([], [])
        assert not isinstance(exc_info.value, BackendUnreachableError)

    def test_not_found_maps_to_model_unavailable(self, client: OllamaChatClient) -> None:
        response = httpx.Response(404, request=httpx.Request("POST", URL))
        client._client.chat.completions.create.side_effect = openai.NotFoundError(
            'model "llama3.2" not found, try pulling it first', response=response, body=None
        )
        with pytest.raises(ModelUnavailableError) as exc_info:
            client.chat_with_tools([], [])
        assert "llama3.2" in str(exc_info.value)

    def test_other_api_errors_map_to_completion_error(self, client: OllamaChatClient) -> None:
        response = httpx.Response(500, request=httpx.Request("POST", URL))
        client._client.chat.completions.create.side_effect = openai.InternalServerError(
            "boom", response=response, body=None
        )
        with pytest.raises(CompletionError) as exc_info:
            client.chat_with_tools([], [])
        assert type(exc_info.value) is CompletionError


class TestCheckBackend:
    """Tests for check_backend() preflight."""

    @staticmethod
    def _http(handler) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(handler))

    def test_ok_when_model_listed_with_tag(self, settings) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/tags"
            return httpx.Response(200, json={"models": [{"name": "llama3.2:latest"}]})

        check_backend(settings, http_client=self._http(handler))

    def test_missing_model(self, settings) -> None:
        http = self._http(lambda r: httpx.Response(200, json={"models": [{"name": "mistral:7b"}]}))
        with pytest.raises(ModelUnavailableError) as exc_info:
            check_backend(settings, http_client=http)
        assert "not installed" in str(exc_info.value)

    def test_unreachable(self, settings) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("[Errno 111] Connection refused", request=request)

        with pytest.raises(BackendUnreachableError) as exc_info:
            check_backend(settings, http_client=self._http(handler))
        assert "Connection refused" in str(exc_info.value)

    def test_bad_status(self, settings) -> None:
        http = self._http(lambda r: httpx.Response(503, text="loading"))
        with pytest.raises(CompletionError):
            check_backend(settings, http_client=http)

    def test_any_2xx_status_is_accepted(self, settings) -> None:
        http = self._http(lambda r: httpx.Response(203, json={"models": [{"name": "llama3.2"}]}))
        check_backend(settings, http_client=http)

    def test_invalid_json(self, settings) -> None:
        http = self._http(lambda r: httpx.Response(200, text="<html>"))
        with pytest.raises(CompletionError):
            check_backend(settings, http_client=http)
