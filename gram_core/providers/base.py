"""Provider 抽象接口。

上层 GramAgent 不直接依赖具体厂商的 HTTP 细节，而是依赖此协议：

- 每个厂商实现一个 GenerationProvider（如 GeminiClient）。
- 负责：将 GenerationRequest 转成具体 API 请求，并返回原始响应 JSON。

响应的解析统一交给 normalizer，这样 Provider 只负责传输与错误分类。
"""

from typing import Any, Dict, Protocol
from gram_core.domain.models import GenerationRequest


class GenerationProvider(Protocol):
    """生成式 Provider 客户端协议。

    实现者需要提供：
    - name: Provider 名称，用于日志/统计。
    - generate(req): 执行一次非流式生成调用，返回原始响应 JSON。
    """

    name: str

    def generate(self, req: GenerationRequest) -> Dict[str, Any]:
        ...
