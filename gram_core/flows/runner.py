"""High-level entry point for the generation graph."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from gram_core.domain.models import GenerationRequest
from gram_core.flows.graph import build_graph
from gram_core.flows.state import GenerationState
from gram_core.providers.base import GenerationProvider
from gram_core.tools.executor import ToolExecutor


@dataclass
class GenerationOutcome:
    """Raw provider output of a turn plus the request that produced it."""

    raw: Dict[str, Any]
    request: GenerationRequest
    tool_rounds: int
    provider_calls: int


def run_generation(
    provider: GenerationProvider,
    request: GenerationRequest,
    executor: Optional[ToolExecutor] = None,
) -> GenerationOutcome:
    """Run one turn through the model / tool-result state machine.

    Args:
        provider: generation client used for every call
        request: request built for this turn
        executor: tool executor; ``None`` disables the tool round
    """

    state: GenerationState = {
        "request": request,
        "raw": None,
        "phase": "awaiting_model",
        "pending_call": None,
        "tool_rounds": 0,
        "provider_calls": 0,
    }
    result = build_graph(provider, executor).invoke(state)
    return GenerationOutcome(
        raw=result.get("raw") or {},
        request=result["request"],
        tool_rounds=result.get("tool_rounds", 0),
        provider_calls=result.get("provider_calls", 0),
    )
