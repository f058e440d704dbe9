"""GramGPT 对话引擎。

把一次用户输入串成单线程流水线：
附件编码 → 意图识别 → 请求构造 → 生成调用（含最多一次工具往返）→ 响应归一化 → 写入会话日志。

失败时会话日志保持不变：user Turn 只在拿到完整回答后才与 model Turn 一起提交。
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple
from uuid import uuid4
import time
import logging

from gram_core.config.settings import settings
from gram_core.domain.conversation import ConversationStore
from gram_core.domain.exceptions import BusinessError, InvalidRequestError, TurnInFlightError
from gram_core.domain.models import GenerationResult, Turn
from gram_core.flows.runner import run_generation
from gram_core.infrastructure.logging.logger import logger
from gram_core.providers.base import GenerationProvider
from gram_core.providers.normalizer import ResponseNormalizer
from gram_core.routing.attachments import Attachment, encode_attachment
from gram_core.routing.intent import IntentClassifier
from gram_core.routing.request_builder import RequestBuilder, compose_parts
from gram_core.tools.executor import ToolExecutor, default_tool_defs, default_tools


@dataclass
class AgentConfig:
    agent_type: str = "gram-gpt"
    enable_tools: bool = False
    image_policy: str = "first"
    locale: str = "bn"


class GramAgent:
    def __init__(
        self,
        store: ConversationStore,
        provider_client: GenerationProvider,
        config: Optional[AgentConfig] = None,
        classifier: Optional[IntentClassifier] = None,
        builder: Optional[RequestBuilder] = None,
        tool_executor: Optional[ToolExecutor] = None,
    ):
        self._store = store
        self._provider_client = provider_client
        self._config = config or AgentConfig(
            enable_tools=getattr(settings, "enable_tools", False),
            image_policy=getattr(settings, "image_policy", "first"),
        )
        self._classifier = classifier or IntentClassifier.from_settings(settings)
        if self._config.enable_tools and tool_executor is None:
            tool_executor = ToolExecutor(default_tools())
        self._tool_executor = tool_executor if self._config.enable_tools else None
        self._builder = builder or RequestBuilder(
            tool_defs=default_tool_defs() if self._tool_executor else None,
            locale=self._config.locale,
        )
        self._normalizer = ResponseNormalizer(self._config.image_policy)
        self._in_flight = False

    @property
    def store(self) -> ConversationStore:
        return self._store

    @property
    def busy(self) -> bool:
        return self._in_flight

    def submit(self, prompt: Optional[str] = None, attachment: Optional[Attachment] = None) -> Tuple[Turn, Turn]:
        """执行一轮对话。

        Args:
            prompt: 用户文本（可为空，但不能与附件同时为空）
            attachment: 用户选择的图片（可选）

        Returns:
            (user Turn, model Turn) 的元组，二者已按顺序写入会话日志

        Raises:
            各种 domain.exceptions 中定义的异常；失败时会话日志不变
        """
        prompt = (prompt or "").strip()
        if not prompt and attachment is None:
            raise InvalidRequestError()
        if self._in_flight:
            raise TurnInFlightError()

        start_time = time.time()
        log_ctx: Dict[str, Any] = {
            "trace_id": f"tr-{uuid4().hex}",
            "agent_type": self._config.agent_type,
        }
        self._in_flight = True
        try:
            image = encode_attachment(attachment) if attachment is not None else None
            parts = compose_parts(prompt, image)

            wants_image = self._classifier.wants_image_generation(prompt)
            request = self._builder.build(parts, wants_image)
            self._log(
                logging.INFO,
                "Built request",
                log_ctx,
                wants_image=wants_image,
                model=request.model,
                modalities=sorted(request.modalities),
                has_attachment=image is not None,
                prompt_chars=len(prompt),
                tools=len(request.tools or ()),
            )

            outcome = run_generation(self._provider_client, request, self._tool_executor)
            result: GenerationResult = self._normalizer.normalize(
                outcome.raw,
                model=outcome.request.model,
                tool_rounds=outcome.tool_rounds,
            )
            self._log(
                logging.INFO,
                "Normalized response",
                log_ctx,
                parts=len(result.parts),
                images=sum(1 for p in result.parts if p.is_image),
                tool_rounds=outcome.tool_rounds,
                provider_calls=outcome.provider_calls,
            )
        except BusinessError as e:
            self._log(logging.WARNING, "Turn failed", log_ctx, code=e.code, **e.extra)
            raise
        finally:
            self._in_flight = False

        user_turn = Turn(role="user", parts=tuple(parts), meta={"trace_id": log_ctx["trace_id"]})
        model_turn = Turn(
            role="model",
            parts=result.parts,
            meta={
                "trace_id": log_ctx["trace_id"],
                "model": result.model,
                "tool_rounds": result.tool_rounds,
            },
        )
        self._store.append(user_turn)
        self._store.append(model_turn)

        elapsed = time.time() - start_time
        self._log(
            logging.INFO,
            "Completed turn",
            log_ctx,
            elapsed_seconds=round(elapsed, 2),
            user_turn_id=user_turn.id,
            model_turn_id=model_turn.id,
        )
        return user_turn, model_turn

    def clear(self) -> None:
        """清空会话日志（不可恢复）。"""
        if self._in_flight:
            raise TurnInFlightError()
        self._store.clear()
        logger.info("Cleared conversation")

    @staticmethod
    def _log(level: int, message: str, log_ctx: Dict[str, Any], **fields: Any) -> None:
        payload = dict(log_ctx)
        payload.update(fields)
        logger.log(level, message, extra={"extra": payload})
