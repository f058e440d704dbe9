"""响应归一化：把 Gemini 的原始 JSON 转成可展示的 ContentPart 序列。

原始响应先被解码为唯一一种形态（按以下优先级），再统一映射：

1. Blocked: promptFeedback.blockReason，或首个候选没有内容且 finishReason 为拦截原因。
2. FunctionCalls: 首个候选中含 functionCall，或顶层 functionCalls 列表。
3. CandidateParts: 首个候选的 content.parts 非空。
4. AggregatedText: 顶层聚合 text 字段。
5. Empty: 以上都没有。
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Optional, Tuple, Union

from gram_core.domain.exceptions import EmptyResponseError, SafetyBlockedError
from gram_core.domain.models import ContentPart, GenerationResult, InlineData
from gram_core.infrastructure.logging.logger import logger
from gram_core.tools.definitions import ToolCall


ImagePolicy = Literal["first", "all"]

DEFAULT_IMAGE_MIME = "image/png"
SAFETY_REASONS = frozenset({"SAFETY", "IMAGE_SAFETY"})
BLOCKING_FINISH_REASONS = frozenset({"SAFETY", "IMAGE_SAFETY", "PROHIBITED_CONTENT", "BLOCKLIST", "SPII"})


@dataclass(frozen=True)
class Blocked:
    reason: str

    @property
    def is_safety(self) -> bool:
        return self.reason.upper() in SAFETY_REASONS


@dataclass(frozen=True)
class FunctionCalls:
    calls: Tuple[ToolCall, ...]
    # 与函数调用同时返回的可展示内容
    parts: Tuple[ContentPart, ...] = ()


@dataclass(frozen=True)
class CandidateParts:
    parts: Tuple[ContentPart, ...]


@dataclass(frozen=True)
class AggregatedText:
    text: str


@dataclass(frozen=True)
class Empty:
    pass


ResponseShape = Union[Blocked, FunctionCalls, CandidateParts, AggregatedText, Empty]


def _first_candidate(raw: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    candidates = raw.get("candidates") or []
    if candidates and isinstance(candidates[0], dict):
        return candidates[0]
    return None


def _candidate_parts(candidate: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
    if not candidate:
        return []
    content = candidate.get("content") or {}
    return [p for p in (content.get("parts") or []) if isinstance(p, dict)]


def _to_tool_call(payload: Dict[str, Any], idx: int) -> ToolCall:
    args = payload.get("args")
    return ToolCall(
        id=payload.get("id") or f"call_{idx}",
        name=payload.get("name") or "",
        arguments=args if isinstance(args, dict) else {},
    )


def _to_content_part(part: Dict[str, Any]) -> Optional[ContentPart]:
    inline = part.get("inlineData") or part.get("inline_data")
    if isinstance(inline, dict):
        mime = inline.get("mimeType") or inline.get("mime_type") or DEFAULT_IMAGE_MIME
        return ContentPart(inline_data=InlineData(data=inline.get("data") or "", mime_type=mime))
    if isinstance(part.get("text"), str):
        return ContentPart.from_text(part["text"])
    return None


def decode_response(raw: Dict[str, Any]) -> ResponseShape:
    """把原始响应解码为唯一的形态，优先级见模块说明。"""

    feedback = raw.get("promptFeedback") or {}
    if feedback.get("blockReason"):
        return Blocked(reason=str(feedback["blockReason"]))

    candidate = _first_candidate(raw)
    raw_parts = _candidate_parts(candidate)
    if candidate and not raw_parts:
        finish = str(candidate.get("finishReason") or "").upper()
        if finish in BLOCKING_FINISH_REASONS:
            return Blocked(reason=finish)

    calls: List[ToolCall] = []
    parts: List[ContentPart] = []
    for part in raw_parts:
        if isinstance(part.get("functionCall"), dict):
            calls.append(_to_tool_call(part["functionCall"], len(calls)))
            continue
        mapped = _to_content_part(part)
        if mapped is None:
            logger.warning("normalizer.unknown_part", extra={"extra": {"keys": sorted(part)}})
            continue
        parts.append(mapped)

    if calls:
        return FunctionCalls(calls=tuple(calls), parts=tuple(parts))
    if parts:
        return CandidateParts(parts=tuple(parts))

    top_calls = raw.get("functionCalls") or []
    if top_calls:
        return FunctionCalls(
            calls=tuple(_to_tool_call(c, i) for i, c in enumerate(top_calls) if isinstance(c, dict))
        )

    text = raw.get("text")
    if isinstance(text, str) and text:
        return AggregatedText(text=text)
    return Empty()


class ResponseNormalizer:
    def __init__(self, image_policy: ImagePolicy = "first"):
        if image_policy not in ("first", "all"):
            raise ValueError(f"unknown image policy: {image_policy!r}")
        self._image_policy = image_policy

    @classmethod
    def from_settings(cls, cfg) -> "ResponseNormalizer":
        return cls(image_policy=getattr(cfg, "image_policy", "first"))

    def normalize(self, raw: Dict[str, Any], model: str = "", tool_rounds: int = 0) -> GenerationResult:
        shape = decode_response(raw)

        if isinstance(shape, Blocked):
            raise SafetyBlockedError(block_reason=shape.reason, safety=shape.is_safety)

        if isinstance(shape, FunctionCalls):
            # 工具往返之后再次请求调用工具：不再循环，只保留可展示内容
            logger.warning(
                "normalizer.function_call_ignored",
                extra={"extra": {"tools": [c.name for c in shape.calls], "model": model}},
            )
            parts = shape.parts
        elif isinstance(shape, CandidateParts):
            parts = shape.parts
        elif isinstance(shape, AggregatedText):
            parts = (ContentPart.from_text(shape.text),)
        else:
            parts = ()

        if not parts:
            raise EmptyResponseError()
        return GenerationResult(
            parts=self._apply_image_policy(parts),
            model=model,
            tool_rounds=tool_rounds,
            raw=raw,
        )

    def _apply_image_policy(self, parts: Tuple[ContentPart, ...]) -> Tuple[ContentPart, ...]:
        if self._image_policy == "all":
            return parts
        kept: List[ContentPart] = []
        seen_image = False
        for part in parts:
            if part.is_image:
                if seen_image:
                    continue
                seen_image = True
            kept.append(part)
        dropped = len(parts) - len(kept)
        if dropped:
            logger.info("normalizer.extra_images_dropped", extra={"extra": {"dropped": dropped}})
        return tuple(kept)


def normalize_response(raw: Dict[str, Any], image_policy: ImagePolicy = "first") -> GenerationResult:
    return ResponseNormalizer(image_policy).normalize(raw)
