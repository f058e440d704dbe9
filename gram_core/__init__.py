"""GramGPT 核心包。

该包提供孟加拉语乡村助手 GramGPT 的请求路由与响应归一化实现，
包括配置加载、领域模型、意图识别、请求构造、Gemini Provider 适配、
工具往返流程、会话日志与身份认证边界等能力。
"""

from gram_core.agents.gram_agent import AgentConfig, GramAgent

__all__ = ["AgentConfig", "GramAgent"]
