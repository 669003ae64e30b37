"""
System prompts and preamble rendering.

The chat template carries a {history} placeholder that is always filled: with the
rendered turns, or with NO_HISTORY_SENTINEL when there are none.
"""

from typing import Iterable

from research_agent.core.history import Turn

HISTORY_PLACEHOLDER = "{history}"
NO_HISTORY_SENTINEL = "No previous conversation."

# Stateless one-shot research (no history).
RESEARCH_SYSTEM_PROMPT = """
You are a helpful AI research assistant. Your task is to research topics and provide summaries.

IMPORTANT INSTRUCTIONS:
1. Use the web_search tool ONCE to find relevant information
2. After getting search results, IMMEDIATELY synthesize them into a summary
3. DO NOT make multiple search requests - one search is sufficient
4. If the first search returns no results, try ONE simpler query, then summarize

When responding after a search:
- **Overview**: Brief introduction to the topic
- **Key Sources Found**: List the URLs from the search
- **Summary**: Synthesize what these sources likely cover based on their titles/domains
- **Next Steps**: Suggest what the user might explore

Always provide a response after seeing search results. Never keep searching indefinitely.
"""

# Chat mode: same rules plus the conversation so far.
CHAT_SYSTEM_PROMPT = """
You are an AI research assistant. You help users by searching the web and summarizing findings.

SEARCH RULES (CRITICAL - FOLLOW EXACTLY):
1. You have access to a web_search tool
2. Search ONCE only - do not repeat searches
3. After the search completes, you MUST provide your final answer directly
4. Stop after one search - do NOT call web_search again
5. Your response should include sources (URLs)

CONVERSATION HISTORY:
{history}

When the user asks a question:
- Search once using web_search
- After receiving results, give a complete answer with sources
- Do not ask follow-up questions or call tools again
"""


def render_history(turns: Iterable[Turn]) -> str:
    """Render turns oldest-first as [Turn n] blocks separated by a blank line."""
    blocks = [
        f"[Turn {i}]\nUser: {query}\nAI: {response}"
        for i, (query, response) in enumerate(turns, 1)
    ]
    if not blocks:
        return NO_HISTORY_SENTINEL
    return "\n\n".join(blocks)


def render_preamble(turns: Iterable[Turn], template: str = CHAT_SYSTEM_PROMPT) -> str:
    """Substitute the rendered history into the template's {history} placeholder."""
    return template.replace(HISTORY_PLACEHOLDER, render_history(turns))


def enhance_chat_query(query: str) -> str:
    return (
        "Research and answer the following question. Use the web_search tool to find "
        "current information, then provide a comprehensive summary with sources:\n\n"
        f"{query}"
    )


def enhance_research_query(query: str) -> str:
    return (
        "Research the following topic thoroughly. Use the web_search tool to find "
        "current information, then provide a comprehensive summary with sources:\n\n"
        f"{query}"
    )
