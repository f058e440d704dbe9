"""统一的对话与生成请求数据模型。

本模块定义了各组件之间共享的标准数据结构：

- InlineData / ContentPart: 一条消息的最小内容单元（文本或内联二进制数据）。
- Turn: 会话日志中的一条记录（user 或 model）。
- GenerationConfig / GenerationRequest: 发给生成式 Provider 的完整请求。
- GenerationResult: 从原始响应归一化后的结果。

Provider 适配器（如 GeminiClient）只依赖这些模型，
并负责在各自的 API JSON 和这些模型之间做转换。
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, FrozenSet, Literal, Mapping, Optional, Tuple, TYPE_CHECKING
from uuid import uuid4

from gram_core.domain.exceptions import InvalidRequestError

if TYPE_CHECKING:
    # 仅在类型检查时导入，避免运行时循环依赖
    from gram_core.tools.definitions import ToolCall, ToolDef, ToolResult


Role = Literal["user", "model"]

# 请求的输出模态
Modality = Literal["TEXT", "IMAGE"]
TEXT: Modality = "TEXT"
IMAGE: Modality = "IMAGE"
_MODALITIES = frozenset({TEXT, IMAGE})


@dataclass(frozen=True)
class InlineData:
    """Base64 编码的二进制负载及其媒体类型。"""

    data: str
    mime_type: str

    def __post_init__(self) -> None:
        if not self.mime_type:
            raise ValueError("inline data requires a media type")


@dataclass(frozen=True)
class ContentPart:
    """文本或内联数据，二者有且仅有一个。"""

    text: Optional[str] = None
    inline_data: Optional[InlineData] = None

    def __post_init__(self) -> None:
        if (self.text is None) == (self.inline_data is None):
            raise ValueError("ContentPart needs exactly one of text / inline_data")

    @classmethod
    def from_text(cls, text: str) -> "ContentPart":
        return cls(text=text)

    @classmethod
    def from_inline(cls, data: str, mime_type: str) -> "ContentPart":
        return cls(inline_data=InlineData(data=data, mime_type=mime_type))

    @property
    def is_text(self) -> bool:
        return self.text is not None

    @property
    def is_image(self) -> bool:
        return self.inline_data is not None


@dataclass(frozen=True)
class Turn:
    """会话日志中的一条记录，创建后不可修改。

    - role: "user" 或 "model"。
    - parts: 至少一个 ContentPart，顺序即展示顺序。
    - meta: 附加元数据（模型、trace_id 等），只用于日志与 UI 展示。
    """

    role: Role
    parts: Tuple[ContentPart, ...]
    id: str = field(default_factory=lambda: f"t-{uuid4().hex}")
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    meta: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.parts:
            raise ValueError("a Turn must hold at least one ContentPart")
        # 允许传入 list，统一成 tuple
        object.__setattr__(self, "parts", tuple(self.parts))
        object.__setattr__(self, "meta", MappingProxyType(dict(self.meta)))

    @property
    def text(self) -> str:
        return "".join(p.text for p in self.parts if p.text)

    @property
    def images(self) -> Tuple[InlineData, ...]:
        return tuple(p.inline_data for p in self.parts if p.inline_data is not None)


@dataclass(frozen=True)
class GenerationConfig:
    """封闭的生成配置：只识别 modalities / system_instruction / tools。"""

    modalities: FrozenSet[str] = frozenset({TEXT})
    system_instruction: Optional[str] = None
    tools: Optional[Tuple["ToolDef", ...]] = None

    def __post_init__(self) -> None:
        unknown = set(self.modalities) - _MODALITIES
        if unknown or not self.modalities:
            raise InvalidRequestError(detail=f"unsupported modalities: {sorted(unknown) or 'empty'}")

    @classmethod
    def from_dict(cls, options: Mapping[str, Any]) -> "GenerationConfig":
        """从普通字典构造配置，遇到未知字段直接拒绝。"""

        allowed = {"modalities", "system_instruction", "tools"}
        unknown = set(options) - allowed
        if unknown:
            raise InvalidRequestError(detail=f"unknown generation options: {sorted(unknown)}")
        tools = options.get("tools")
        return cls(
            modalities=frozenset(options.get("modalities") or {TEXT}),
            system_instruction=options.get("system_instruction"),
            tools=tuple(tools) if tools else None,
        )


@dataclass(frozen=True)
class ToolExchange:
    """一次工具往返：模型发起的调用以及本地执行结果。"""

    call: "ToolCall"
    result: "ToolResult"


@dataclass(frozen=True)
class GenerationRequest:
    """一次完整的生成请求，每轮新建，不做持久化。

    model 为逻辑模型名（如 "gram-chat"），由 registry 映射为真实模型名。
    """

    model: str
    parts: Tuple[ContentPart, ...]
    config: GenerationConfig = field(default_factory=GenerationConfig)
    # 仅在工具往返后的第二次调用中出现
    tool_exchange: Optional[ToolExchange] = None

    def __post_init__(self) -> None:
        if not self.parts:
            raise InvalidRequestError(detail="request has no parts")
        object.__setattr__(self, "parts", tuple(self.parts))

    @property
    def modalities(self) -> FrozenSet[str]:
        return self.config.modalities

    @property
    def system_instruction(self) -> Optional[str]:
        return self.config.system_instruction

    @property
    def tools(self) -> Optional[Tuple["ToolDef", ...]]:
        return self.config.tools


@dataclass
class GenerationResult:
    """归一化后的生成结果。

    - parts: 按原始顺序排列的可展示内容。
    - model: 实际使用的逻辑模型名。
    - tool_rounds: 本轮执行过的工具往返次数（0 或 1）。
    - raw: 最后一次原始响应 JSON，用于调试或日志记录。
    """

    parts: Tuple[ContentPart, ...]
    model: str = ""
    tool_rounds: int = 0
    raw: Optional[dict] = None
