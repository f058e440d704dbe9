"""对外 API 服务模块。

提供简化的函数接口供渲染层调用。
"""

from typing import Optional, Dict, Any, List

from gram_core.config.settings import settings
from gram_core.agents.gram_agent import AgentConfig, GramAgent
from gram_core.api.history import build_history
from gram_core.domain.conversation import ConversationStore
from gram_core.domain.exceptions import BusinessError
from gram_core.infrastructure.logging.logger import logger
from gram_core.infrastructure.storage.memory_store import InMemoryConversationStore
from gram_core.providers import create_provider
from gram_core.routing.attachments import Attachment


_store: Optional[ConversationStore] = None
_agent: Optional[GramAgent] = None


def get_default_agent() -> GramAgent:
    """获取默认的 GramAgent 实例（单例）。"""
    global _store, _agent
    if _store is None:
        _store = InMemoryConversationStore()
    if _agent is None:
        _agent = GramAgent(
            store=_store,
            provider_client=create_provider(),
            config=AgentConfig(
                enable_tools=settings.enable_tools,
                image_policy=settings.image_policy,
            ),
        )
    return _agent


def _part_to_dict(part) -> Dict[str, Any]:
    if part.inline_data is not None:
        return {"inlineData": {"data": part.inline_data.data, "mimeType": part.inline_data.mime_type}}
    return {"text": part.text}


def run_chat(prompt: Optional[str] = None, attachment: Optional[Attachment] = None) -> Dict[str, Any]:
    """运行一轮对话。

    Args:
        prompt: 用户输入内容
        attachment: 用户选择的图片（可选）

    Returns:
        包含用户消息与模型消息的字典；失败时返回 error 字段而不是抛出
    """
    agent = get_default_agent()
    try:
        user_turn, model_turn = agent.submit(prompt=prompt, attachment=attachment)
    except BusinessError as e:
        logger.error(f"Chat failed: {e.code}", extra={"extra": {"code": e.code, **e.extra}})
        return {"ok": False, "error": {"code": e.code, "message": e.message}}
    return {
        "ok": True,
        "user_message": {
            "id": user_turn.id,
            "parts": [_part_to_dict(p) for p in user_turn.parts],
            "created_at": user_turn.created_at.isoformat(),
        },
        "model_message": {
            "id": model_turn.id,
            "parts": [_part_to_dict(p) for p in model_turn.parts],
            "created_at": model_turn.created_at.isoformat(),
            "meta": dict(model_turn.meta),
        },
    }


def get_conversation_messages() -> List[Dict[str, Any]]:
    """获取当前会话的所有消息（按时间顺序）。"""
    agent = get_default_agent()
    return [
        {
            "id": t.id,
            "role": t.role,
            "parts": [_part_to_dict(p) for p in t.parts],
            "created_at": t.created_at.isoformat(),
        }
        for t in agent.store.turns()
    ]


def list_history() -> List[Dict[str, Any]]:
    """历史页面使用的配对视图。"""
    agent = get_default_agent()
    return [
        {
            "prompt": item.prompt,
            "response_text": item.response_text,
            "has_generated_image": item.generated_image is not None,
            "has_user_image": item.user_image is not None,
        }
        for item in build_history(agent.store.turns())
    ]


def clear_conversation() -> None:
    get_default_agent().clear()
