"""
Application configuration (env, settings, constants).

Responsibility: Centralize config loading, environment variables, and app-wide
constants. Settings are validated once at startup and handed to the agent as an
immutable record, so nothing below the CLI reads the environment.
"""

import os
from urllib.parse import urlparse

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from research_agent.core.errors import ConfigurationError

load_dotenv()

# Ollama defaults (overridable via env / .env)
DEFAULT_MODEL: str = "llama3.2"
DEFAULT_OLLAMA_HOST: str = "http://localhost:11434"
DEFAULT_MAX_SEARCH_RESULTS: int = 5

# Agent loop
CHAT_TURN_BUDGET: int = 5
AGENT_MAX_TOKENS: int = 1024

# API timeouts (seconds). Local models can be slow on first load.
LLM_API_TIMEOUT: float = 300.0
PREFLIGHT_TIMEOUT: float = 5.0


class Settings(BaseModel):
    """Validated runtime configuration. Frozen after construction."""

    model_config = ConfigDict(frozen=True)

    model: str = Field(DEFAULT_MODEL, description="Ollama model name, e.g. llama3.2")
    ollama_host: str = Field(DEFAULT_OLLAMA_HOST, description="Ollama base URL")
    max_search_results: int = Field(DEFAULT_MAX_SEARCH_RESULTS, ge=1)

    @field_validator("model")
    @classmethod
    def _model_not_empty(cls, value: str) -> str:
        value = (value or "").strip()
        if not value:
            raise ValueError("model must not be empty")
        return value

    @field_validator("ollama_host")
    @classmethod
    def _host_is_base_url(cls, value: str) -> str:
        value = (value or "").strip().rstrip("/")
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"ollama_host must be an http(s) URL, got {value!r}")
        return value

    @classmethod
    def from_env(cls, model: str | None = None) -> "Settings":
        """
        Build settings from the environment (and .env). An explicit model
        override replaces OLLAMA_MODEL before validation.
        Raises ConfigurationError when any value is invalid.
        """
        raw = {
            "model": os.getenv("OLLAMA_MODEL", DEFAULT_MODEL),
            "ollama_host": os.getenv("OLLAMA_HOST", DEFAULT_OLLAMA_HOST),
            "max_search_results": os.getenv("MAX_SEARCH_RESULTS", str(DEFAULT_MAX_SEARCH_RESULTS)).strip(),
        }
        if model is not None:
            raw["model"] = model
        try:
            return cls(**raw)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise ConfigurationError(f"Invalid configuration: {problems}") from e
