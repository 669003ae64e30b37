"""
Command-line entry point: single query or interactive chat.

Run from project root:

    python -m research_agent "What are the latest developments in Rust async?"
    python -m research_agent --quick "Rust web frameworks 2024"
    python -m research_agent --model qwen2.5 "Machine learning in Rust"
    python -m research_agent --interactive

Prerequisites: Ollama running (ollama serve) with the model pulled
(ollama pull llama3.2).
"""

import argparse
import logging
import sys
from typing import Callable

from research_agent.agent.llm import check_backend
from research_agent.core.config import Settings
from research_agent.core.errors import ConfigurationError, ResearchAgentError
from research_agent.core.hints import ErrorClassifier
from research_agent.services.agent_service import ResearchAgent

logger = logging.getLogger(__name__)

RULE = "=" * 60

# Prefixed so a one-word question "history" still reaches the model.
HISTORY_COMMAND = "/history"

USAGE_HINT = """Error: Please provide a query or use --interactive mode

Usage:
  ai-research-agent "Your question here"
  ai-research-agent --interactive

Run with --help for more options."""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ai-research-agent",
        description="An AI-powered research assistant that searches the web and summarizes findings.",
        epilog="The model can also be set with the OLLAMA_MODEL environment variable.",
    )
    parser.add_argument("query", nargs="?", metavar="QUERY", help="The topic to research")
    parser.add_argument("-i", "--interactive", action="store_true", help="Enter interactive REPL mode")
    parser.add_argument("-m", "--model", metavar="NAME", help="Ollama model to use (overrides OLLAMA_MODEL)")
    parser.add_argument("-q", "--quick", action="store_true", help="Quick search mode (no AI synthesis)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose/debug logging")
    return parser


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def run_single(agent: ResearchAgent, query: str, quick: bool, classifier: ErrorClassifier) -> int:
    """Answer one query and print it. Returns the process exit code."""
    try:
        if quick:
            logger.info("Running in quick search mode")
            result = agent.quick_search(query)
        else:
            logger.info("Running full research mode")
            check_backend(agent.settings)
            result = agent.chat(query)
    except ResearchAgentError as e:
        logger.error("Research failed: %s", e)
        print(f"\n{classifier.describe(e, prefix='Research failed')}", file=sys.stderr)
        return 1
    print(f"\n{RULE}\nRESEARCH RESULTS\n{RULE}\n")
    print(result)
    print(f"\n{RULE}")
    return 0


def _print_history(agent: ResearchAgent) -> None:
    turns = agent.history
    print(f"{len(turns)} turn(s) in history.")
    for i, turn in enumerate(turns, 1):
        print(f"  [{i}] {turn.query}")
    print()


def run_interactive(
    agent: ResearchAgent,
    classifier: ErrorClassifier,
    read_line: Callable[[str], str] = input,
) -> int:
    """REPL: one question per line. Errors are reported and the loop goes on."""
    print(f"\n{RULE}\nAI Research Agent - Interactive Mode\n{RULE}")
    print("Type your question and press Enter.")
    print("Commands: 'clear' to clear history, '/history' to list turns, 'quit' or 'exit' to quit.")
    print(f"{RULE}\n")

    try:
        check_backend(agent.settings)
    except ResearchAgentError as e:
        print(classifier.describe(e, prefix="Warning") + "\n", file=sys.stderr)

    while True:
        try:
            line = read_line("You: ")
        except (EOFError, KeyboardInterrupt):
            print("\nGoodbye!")
            return 0
        text = (line or "").strip()
        command = text.lower()

        if command in ("quit", "exit"):
            print("Goodbye!")
            return 0
        if command == "clear":
            agent.clear_history()
            print("Conversation history cleared.\n")
            continue
        if command == HISTORY_COMMAND:
            _print_history(agent)
            continue
        if not text:
            continue

        try:
            response = agent.chat(text)
        except ResearchAgentError as e:
            logger.error("Chat turn failed: %s", e)
            print(f"\n{classifier.describe(e)}\n", file=sys.stderr)
            continue
        print(f"\n{RULE}\nAI:\n{response}\n{RULE}\n")


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)
    logger.info("AI Research Agent starting up...")

    try:
        settings = Settings.from_env(model=args.model)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    logger.info("Configuration loaded model=%s host=%s max_results=%d", settings.model, settings.ollama_host, settings.max_search_results)

    classifier = ErrorClassifier(model=settings.model)

    if args.interactive:
        agent = ResearchAgent(settings)
        return run_interactive(agent, classifier)
    if args.query is None or not args.query.strip():
        print(USAGE_HINT, file=sys.stderr)
        return 1

    agent = ResearchAgent(settings)
    return run_single(agent, args.query, args.quick, classifier)
