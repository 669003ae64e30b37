"""
LangGraph agent: call_model → (run_tools → call_model)* → END.

The system prompt asks the model to search once, but that is only a request.
The turn budget passed to invoke() is the hard limit on model round-trips.
"""

import json
import logging
from typing import Any, Callable, Literal, NamedTuple, Protocol, TypedDict

from langgraph.graph import END, StateGraph

from research_agent.core.config import AGENT_MAX_TOKENS
from research_agent.core.errors import TurnBudgetExceededError

logger = logging.getLogger(__name__)

NO_ANSWER = "No answer generated."


class ChatClient(Protocol):
    def chat_with_tools(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]],
        max_tokens: int = ...,
    ) -> tuple[str | None, list[dict[str, Any]] | None]: ...


class AgentRun(NamedTuple):
    """Outcome of one bounded tool loop."""

    answer: str
    tools_used: list[str]
    turns: int


class AgentState(TypedDict):
    messages: list  # OpenAI chat messages, system first
    pending_tool_calls: list  # list of {"id", "name", "arguments"}
    tools_used: list
    turns: int
    answer: str


class ToolCallingAgent:
    """Runs the model with tools until it answers or the turn budget runs out."""

    def __init__(
        self,
        client: ChatClient,
        execute_tool: Callable[[str, dict[str, Any]], str],
        max_tokens: int = AGENT_MAX_TOKENS,
    ) -> None:
        self.client = client
        self.execute_tool = execute_tool
        self.max_tokens = max_tokens

    def build_graph(self, tools: list[dict[str, Any]], turn_budget: int):
        """Build and compile the loop graph for one invocation."""

        def _call_model(state: AgentState) -> dict:
            turns = state["turns"]
            if turns >= turn_budget:
                logger.warning("[graph:call_model] turn budget exhausted turns=%d tools_used=%s", turns, state["tools_used"])
                raise TurnBudgetExceededError(
                    f"No final answer after {turn_budget} round-trips (tools called: {', '.join(state['tools_used']) or 'none'})"
                )
            logger.info("[graph:call_model] IN  turn=%d/%d messages=%d", turns + 1, turn_budget, len(state["messages"]))
            content, tool_calls = self.client.chat_with_tools(state["messages"], tools, max_tokens=self.max_tokens)
            if tool_calls and turns + 1 >= turn_budget:
                # last allowed round-trip: a tool result could never reach the model
                logger.warning("[graph:call_model] tool call on final turn %d, not executed: %s", turns + 1, [t["name"] for t in tool_calls])
                raise TurnBudgetExceededError(
                    f"No final answer after {turn_budget} round-trips (tools called: {', '.join(state['tools_used']) or 'none'})"
                )
            if tool_calls:
                assistant_msg: dict = {"role": "assistant", "content": content or ""}
                assistant_msg["tool_calls"] = [
                    {"id": tc["id"], "type": "function", "function": {"name": tc["name"], "arguments": json.dumps(tc.get("arguments") or {})}}
                    for tc in tool_calls
                ]
                return {
                    "messages": state["messages"] + [assistant_msg],
                    "pending_tool_calls": tool_calls,
                    "turns": turns + 1,
                }
            answer = (content or "").strip()
            if not answer:
                logger.warning("[graph:call_model] empty final answer")
            logger.info("[graph:call_model] OUT answer_len=%d", len(answer))
            return {"answer": answer or NO_ANSWER, "pending_tool_calls": [], "turns": turns + 1}

        def _run_tools(state: AgentState) -> dict:
            messages = list(state["messages"])
            tools_used = list(state["tools_used"])
            for tc in state["pending_tool_calls"]:
                name = tc.get("name", "")
                result = self.execute_tool(name, tc.get("arguments") or {})
                tools_used.append(name)
                logger.info("[graph:run_tools] tool=%s result_len=%d", name, len(result))
                messages.append({"role": "tool", "tool_call_id": tc.get("id", ""), "content": result})
            return {"messages": messages, "tools_used": tools_used, "pending_tool_calls": []}

        def _route_after_model(state: AgentState) -> Literal["run_tools", "__end__"]:
            return "run_tools" if state["pending_tool_calls"] else END

        graph = StateGraph(AgentState)
        graph.add_node("call_model", _call_model)
        graph.add_node("run_tools", _run_tools)
        graph.set_entry_point("call_model")
        graph.add_conditional_edges("call_model", _route_after_model)
        graph.add_edge("run_tools", "call_model")
        return graph.compile()

    def invoke(self, preamble: str, tools: list[dict[str, Any]], message: str, turn_budget: int) -> AgentRun:
        """
        Run one question through the loop. Raises TurnBudgetExceededError if the
        model is still calling tools after `turn_budget` round-trips; backend errors
        propagate unchanged.
        """
        if turn_budget < 1:
            raise ValueError("turn_budget must be >= 1")
        initial: AgentState = {
            "messages": [
                {"role": "system", "content": preamble},
                {"role": "user", "content": message},
            ],
            "pending_tool_calls": [],
            "tools_used": [],
            "turns": 0,
            "answer": "",
        }
        graph = self.build_graph(tools, turn_budget)
        # each round-trip is two supersteps (call_model, run_tools); leave headroom
        final = graph.invoke(initial, {"recursion_limit": 2 * turn_budget + 5})
        run = AgentRun(answer=final["answer"], tools_used=list(final["tools_used"]), turns=final["turns"])
        logger.info("[graph:invoke] END turns=%d tools_used=%s answer_len=%d", run.turns, run.tools_used, len(run.answer))
        return run
