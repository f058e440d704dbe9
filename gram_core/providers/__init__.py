"""生成式 Provider 集成层。

该包下的模块负责：
- 定义 Provider 抽象接口 (base)。
- 维护逻辑模型与真实模型的映射 (registry)。
- 提供具体实现 (gemini_client) 与响应归一化 (normalizer)。
- 身份认证边界 (firebase_auth)。
"""

from typing import Optional

from gram_core.config.settings import settings
from gram_core.providers.base import GenerationProvider
from gram_core.providers.gemini_client import GeminiClient


def create_provider(name: Optional[str] = None, api_key: Optional[str] = None) -> GenerationProvider:
    """根据名称创建 Provider 实例，目前只有 gemini。"""

    provider_name = (name or "gemini").lower()
    if provider_name != "gemini":
        raise KeyError(f"Unknown provider: {name!r}")
    return GeminiClient(settings, api_key=api_key)


