"""State definition for the generation graph."""

from __future__ import annotations

from typing import Any, Dict, Literal, Optional, TypedDict

from gram_core.domain.models import GenerationRequest
from gram_core.tools.definitions import ToolCall

Phase = Literal["awaiting_model", "awaiting_tool_result", "done"]


class GenerationState(TypedDict, total=False):
    """State shared across graph nodes for a single turn."""

    request: GenerationRequest
    raw: Optional[Dict[str, Any]]
    phase: Phase
    pending_call: Optional[ToolCall]
    tool_rounds: int
    provider_calls: int
