"""
User-facing remediation hints for failures.

Best-effort only: rules are regular expressions searched in the rendered error
text, which depends on the wording of Ollama, openai and httpx messages. A hint
never changes the error or what the caller does with it; it only adds a "Tip:"
line. Swap the rules for structured error codes if the backend ever exposes them.
"""

import logging
import re
from typing import NamedTuple

from research_agent.core.config import DEFAULT_MODEL

logger = logging.getLogger(__name__)


class HintRule(NamedTuple):
    """If any signature (a regex, case-insensitive) is found in the error text, show `hint`."""

    signatures: tuple[str, ...]
    hint: str


# Order matters: first match wins. Ollama answers an unknown model with
# 'model "x" not found, try pulling it first'; a bare "not found" (HTTP 404 from
# a search backend or a wrong host) must not look like a missing model.
DEFAULT_HINT_RULES: tuple[HintRule, ...] = (
    HintRule(
        signatures=("connection refused", "connection error", "connecterror", "cannot reach"),
        hint="Make sure Ollama is running:\n   ollama serve",
    ),
    HintRule(
        signatures=(
            r"\bmodel\s+['\"]?[\w.:/-]+['\"]?\s+(is\s+)?not\s+(found|installed)",
            r"no such model",
            r"\bmodelunavailableerror\b",
        ),
        hint="Make sure the model is installed:\n   ollama pull {model}",
    ),
)


def _error_texts(message: str, error: BaseException | None) -> list[str]:
    """Collect the message plus the text of every chained cause/context."""
    texts = [message or ""]
    seen: set[int] = set()
    current = error
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        texts.append(f"{type(current).__name__}: {current}")
        current = current.__cause__ or current.__context__
    return texts


class ErrorClassifier:
    """Maps failure text to a remediation hint using a replaceable rule table."""

    def __init__(self, rules: tuple[HintRule, ...] = DEFAULT_HINT_RULES, model: str = DEFAULT_MODEL) -> None:
        self.rules = rules
        self.model = model

    def hint_for(self, message: str, error: BaseException | None = None) -> str | None:
        """Return the first matching hint, or None when no rule matches."""
        haystack = "\n".join(_error_texts(message, error))
        for rule in self.rules:
            if any(re.search(sig, haystack, re.IGNORECASE) for sig in rule.signatures):
                hint = rule.hint.replace("{model}", self.model)
                logger.debug("[hints:hint_for] matched signatures=%s", rule.signatures)
                return hint
        return None

    def describe(self, error: BaseException, prefix: str = "Error") -> str:
        """Render the error for the console, with a Tip line when a rule matches."""
        message = str(error)
        text = f"{prefix}: {message}"
        hint = self.hint_for(message, error)
        if hint:
            text += f"\n\nTip: {hint}"
        return text
