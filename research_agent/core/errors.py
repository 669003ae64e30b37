"""
Application errors for clean CLI error handling.

Each failure kind has its own class so callers can tell them apart without
parsing messages. Hints for the user are added separately (see core.hints).
"""


class ResearchAgentError(Exception):
    """Base class for all agent failures."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def with_context(self, prefix: str) -> "ResearchAgentError":
        """Return an error of the same kind with `prefix` prepended to the message."""
        return type(self)(f"{prefix}: {self.message}")


class ConfigurationError(ResearchAgentError):
    """Raised when settings from env/CLI fail validation. Nothing is constructed after this."""


class CompletionError(ResearchAgentError):
    """Raised when the completion backend fails (network, protocol, bad response)."""


class BackendUnreachableError(CompletionError):
    """Raised when the Ollama server cannot be reached (connection refused, DNS, reset)."""


class ModelUnavailableError(CompletionError):
    """Raised when Ollama is reachable but the requested model is not installed."""


class TurnBudgetExceededError(CompletionError):
    """Raised when the model keeps calling tools after the turn budget is spent."""


class SearchError(ResearchAgentError):
    """Raised when the web search backend fails (transport or parsing)."""


class EmptyQueryError(ResearchAgentError, ValueError):
    """Raised when the caller supplies no actionable query."""
