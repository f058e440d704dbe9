"""LangGraph construction and node implementations.

The graph has exactly two working nodes:

- ``awaiting_model``: issue one provider call for the current request.
- ``awaiting_tool_result``: run the requested tool locally and prepare the
  follow-up request.

The router only enters ``awaiting_tool_result`` while no tool round has been
taken yet, so a turn makes at most two provider calls.
"""

from __future__ import annotations

from typing import Optional

from langgraph.graph import END, StateGraph
from langgraph.graph.state import CompiledStateGraph

from gram_core.domain.models import IMAGE, TEXT, GenerationConfig, GenerationRequest, ToolExchange
from gram_core.flows.state import GenerationState
from gram_core.infrastructure.logging.logger import logger
from gram_core.providers.base import GenerationProvider
from gram_core.providers.normalizer import FunctionCalls, decode_response
from gram_core.providers.registry import IMAGE_MODEL
from gram_core.tools.definitions import ToolCall, ToolResult
from gram_core.tools.executor import ToolExecutor

MAX_TOOL_ROUNDS = 1


def follow_up_request(request: GenerationRequest, call: ToolCall, result: ToolResult) -> GenerationRequest:
    """Second call after a tool round: image model, no tools, tool result attached."""

    return GenerationRequest(
        model=IMAGE_MODEL,
        parts=request.parts,
        config=GenerationConfig(modalities=frozenset({TEXT, IMAGE})),
        tool_exchange=ToolExchange(call=call, result=result),
    )


def model_node(
    state: GenerationState,
    provider: GenerationProvider,
    executor: Optional[ToolExecutor],
) -> GenerationState:
    request = state["request"]
    logger.info("model_node.start", extra={"extra": {"model": request.model, "round": state["tool_rounds"]}})
    raw = provider.generate(request)
    state["raw"] = raw
    state["provider_calls"] = state.get("provider_calls", 0) + 1
    state["pending_call"] = None
    state["phase"] = "done"

    shape = decode_response(raw)
    if not isinstance(shape, FunctionCalls):
        return state
    if executor is None:
        logger.warning("model_node.tool_call_without_executor", extra={"extra": {"tools": [c.name for c in shape.calls]}})
        return state
    if state["tool_rounds"] >= MAX_TOOL_ROUNDS:
        logger.warning("model_node.tool_round_limit", extra={"extra": {"tools": [c.name for c in shape.calls]}})
        return state

    if len(shape.calls) > 1:
        logger.warning("model_node.extra_tool_calls_ignored", extra={"extra": {"ignored": len(shape.calls) - 1}})
    state["pending_call"] = shape.calls[0]
    state["phase"] = "awaiting_tool_result"
    logger.info("model_node.tool_decision", extra={"extra": {"tool": shape.calls[0].name}})
    return state


def tool_node(state: GenerationState, executor: ToolExecutor) -> GenerationState:
    call = state.get("pending_call")
    if call is None or state["tool_rounds"] >= MAX_TOOL_ROUNDS:
        # guarded by the router; never loops back into the tool state
        raise RuntimeError("tool node entered without an admissible pending call")
    result = executor.execute(call)
    logger.info("tool_node.result", extra={"extra": {"tool": call.name, "size": len(result.content)}})
    state["request"] = follow_up_request(state["request"], call, result)
    state["tool_rounds"] = state["tool_rounds"] + 1
    state["pending_call"] = None
    state["phase"] = "awaiting_model"
    return state


def model_router(state: GenerationState) -> str:
    if state.get("phase") == "awaiting_tool_result" and state["tool_rounds"] < MAX_TOOL_ROUNDS:
        return "tool"
    return "end"


def build_graph(provider: GenerationProvider, executor: Optional[ToolExecutor] = None) -> CompiledStateGraph:
    graph = StateGraph(GenerationState)
    graph.add_node("awaiting_model", lambda s: model_node(s, provider, executor))
    graph.set_entry_point("awaiting_model")
    if executor is not None:
        graph.add_node("awaiting_tool_result", lambda s: tool_node(s, executor))
        graph.add_conditional_edges(
            "awaiting_model", model_router, {"tool": "awaiting_tool_result", "end": END}
        )
        graph.add_edge("awaiting_tool_result", "awaiting_model")
    else:
        graph.add_edge("awaiting_model", END)
    return graph.compile()
