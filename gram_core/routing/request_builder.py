"""请求构造器：根据意图与本轮内容选择模型和生成配置。

规则：
- 画图意图且没有附件：图像模型，modalities={IMAGE}，不带 system instruction。
- 其它情况：对话模型，modalities={TEXT}，附带固定人设 system instruction；
  启用工具时额外附带函数声明（如 getWeather）。
"""

from typing import List, Optional, Sequence

from gram_core.domain.exceptions import InvalidRequestError
from gram_core.domain.models import (
    IMAGE,
    TEXT,
    ContentPart,
    GenerationConfig,
    GenerationRequest,
    InlineData,
)
from gram_core.prompts import load_system_prompt
from gram_core.providers.registry import CHAT_MODEL, IMAGE_MODEL
from gram_core.tools.definitions import ToolDef


def compose_parts(prompt: Optional[str], image: Optional[InlineData] = None) -> List[ContentPart]:
    """按固定顺序组装本轮内容：附件在前，文本在后。"""

    parts: List[ContentPart] = []
    if image is not None:
        parts.append(ContentPart(inline_data=image))
    if prompt:
        parts.append(ContentPart.from_text(prompt))
    return parts


class RequestBuilder:
    def __init__(
        self,
        system_instruction: Optional[str] = None,
        tool_defs: Optional[Sequence[ToolDef]] = None,
        locale: str = "bn",
    ):
        self._tool_defs = tuple(tool_defs) if tool_defs else None
        if system_instruction is None:
            agent_type = "gram-gpt-tools" if self._tool_defs else "gram-gpt"
            system_instruction = load_system_prompt(agent_type, locale)
        self._system_instruction = system_instruction

    @property
    def system_instruction(self) -> str:
        return self._system_instruction

    def build(self, parts: Sequence[ContentPart], wants_image_generation: bool) -> GenerationRequest:
        if not parts:
            raise InvalidRequestError(detail="neither prompt text nor attachment supplied")
        has_attachment = any(p.is_image for p in parts)

        if wants_image_generation and not has_attachment:
            return GenerationRequest(
                model=IMAGE_MODEL,
                parts=tuple(parts),
                config=GenerationConfig(modalities=frozenset({IMAGE})),
            )

        return GenerationRequest(
            model=CHAT_MODEL,
            parts=tuple(parts),
            config=GenerationConfig(
                modalities=frozenset({TEXT}),
                system_instruction=self._system_instruction,
                tools=self._tool_defs,
            ),
        )
