"""工具数据结构定义。

这些 dataclass 描述了“函数调用”的 schema，既用于：
- 将可用工具声明暴露给模型（ToolDef / ToolParam）。
- 在生成流程中保存和执行模型发起的调用（ToolCall / ToolResult）。
"""

from dataclasses import dataclass
from typing import Dict, Any


@dataclass(frozen=True)
class ToolParam:
    """单个工具参数的定义。"""

    name: str
    description: str
    required: bool
    schema: Dict[str, Any]


@dataclass(frozen=True)
class ToolDef:
    """一个可供模型调用的函数声明。"""

    name: str
    description: str
    params: Dict[str, ToolParam]


@dataclass(frozen=True)
class ToolCall:
    """模型发起的一次函数调用请求。"""

    id: str
    name: str
    arguments: Dict[str, Any]


@dataclass(frozen=True)
class ToolResult:
    """工具执行结果的封装（JSON 文本形式）。"""

    call_id: str
    name: str
    content: str
