"""Gemini Provider 适配器。

使用 generateContent REST 端点：
- URL: {base_url}/models/{model}:generateContent
- 认证: x-goog-api-key: <api_key>

每次 generate 只发起一次网络请求，不做重试；工具往返由 flows 负责编排。
"""

import json
from typing import Any, Dict, List, Optional

import httpx

from gram_core.config.settings import settings
from gram_core.domain.exceptions import (
    GENERIC_FAILURE_MESSAGE,
    AuthenticationError,
    InvalidRequestError,
    MissingCredentialError,
    TransportError,
)
from gram_core.domain.models import IMAGE, TEXT, ContentPart, GenerationRequest, ToolExchange
from gram_core.infrastructure.logging.logger import logger
from gram_core.providers.registry import GEMINI_CONFIG, ModelConfig, get_model_config
from gram_core.tools.definitions import ToolDef


class GeminiClient:
    """Gemini Provider 客户端实现。"""

    name = "gemini"

    def __init__(self, cfg=settings, api_key: Optional[str] = None):
        self._settings = cfg
        self._api_key = api_key

    @property
    def api_key(self) -> Optional[str]:
        return self._api_key or getattr(self._settings, "gemini_api_key", None)

    def generate(self, req: GenerationRequest) -> Dict[str, Any]:
        api_key = self.api_key
        if not api_key:
            raise MissingCredentialError()
        model_cfg = self._model_config(req)
        payload = self._build_payload(req)
        base = getattr(self._settings, "gemini_base_url", None) or GEMINI_CONFIG.base_url
        logger.info(
            "gemini.generate",
            extra={"extra": {
                "model": model_cfg.provider_model,
                "parts": len(req.parts),
                "modalities": payload.get("generationConfig", {}).get("responseModalities"),
                "tools": len(req.tools or ()),
                "tool_exchange": req.tool_exchange is not None,
            }},
        )
        try:
            with httpx.Client(timeout=self._settings.http_timeout, trust_env=False) as client:
                resp = client.post(
                    self._endpoint(base, model_cfg),
                    json=payload,
                    headers={
                        "x-goog-api-key": api_key,
                        "Content-Type": "application/json",
                    },
                )
        except httpx.RequestError as e:
            raise TransportError(code="NETWORK_ERROR", detail=str(e))
        self._raise_for_status(resp)
        try:
            body = resp.json()
        except ValueError as e:
            raise TransportError(code="API_ERROR", detail=f"invalid JSON body: {e}")
        if not isinstance(body, dict):
            raise TransportError(code="API_ERROR", detail="response body is not a JSON object")
        return body

    # ---- 辅助方法 ----

    @staticmethod
    def _model_config(req: GenerationRequest) -> ModelConfig:
        """逻辑模型必须已登记，且支持请求的输出模态。"""
        try:
            model_cfg = get_model_config(req.model)
        except KeyError:
            raise InvalidRequestError(
                detail=f"unknown model: {req.model!r}", message=GENERIC_FAILURE_MESSAGE
            ) from None
        unsupported = set(req.modalities) - model_cfg.output_modalities
        if unsupported:
            raise InvalidRequestError(
                detail=f"{req.model} cannot produce {sorted(unsupported)}",
                message=GENERIC_FAILURE_MESSAGE,
            )
        return model_cfg

    @staticmethod
    def _endpoint(base: str, model_cfg: ModelConfig) -> str:
        return f"{base.rstrip('/')}/models/{model_cfg.provider_model}:generateContent"

    @staticmethod
    def _raise_for_status(resp) -> None:
        status = resp.status_code
        if status < 400:
            return
        body = resp.text or ""
        if status in (401, 403) or (status == 400 and "API_KEY_INVALID" in body):
            raise AuthenticationError(detail=body, status_code=status)
        if status == 429:
            raise TransportError(code="RATE_LIMIT", detail=body, status_code=status)
        raise TransportError(code="API_ERROR", detail=body, status_code=status)

    def _build_payload(self, req: GenerationRequest) -> dict:
        contents: List[Dict[str, Any]] = [
            {"role": "user", "parts": [self._part_to_payload(p) for p in req.parts]},
        ]
        if req.tool_exchange is not None:
            contents.extend(self._exchange_to_contents(req.tool_exchange))
        payload: Dict[str, Any] = {
            "contents": contents,
            "generationConfig": {
                "responseModalities": [m for m in (TEXT, IMAGE) if m in req.modalities],
            },
        }
        if req.system_instruction:
            payload["systemInstruction"] = {"parts": [{"text": req.system_instruction}]}
        if req.tools:
            payload["tools"] = [{"functionDeclarations": [self._serialize_tool(t) for t in req.tools]}]
        return payload

    @staticmethod
    def _part_to_payload(part: ContentPart) -> Dict[str, Any]:
        if part.inline_data is not None:
            return {"inlineData": {"mimeType": part.inline_data.mime_type, "data": part.inline_data.data}}
        return {"text": part.text or ""}

    @staticmethod
    def _exchange_to_contents(exchange: ToolExchange) -> List[Dict[str, Any]]:
        try:
            result: Any = json.loads(exchange.result.content)
        except json.JSONDecodeError:
            result = exchange.result.content
        return [
            {
                "role": "model",
                "parts": [{"functionCall": {"name": exchange.call.name, "args": exchange.call.arguments}}],
            },
            {
                "role": "user",
                "parts": [{"functionResponse": {"name": exchange.call.name, "response": {"result": result}}}],
            },
        ]

    @staticmethod
    def _serialize_tool(tool: ToolDef) -> Dict[str, Any]:
        properties: Dict[str, Any] = {}
        required: List[str] = []
        for name, param in tool.params.items():
            schema = dict(param.schema or {"type": "string"})
            schema["type"] = str(schema.get("type", "string")).upper()
            if param.description:
                schema["description"] = param.description
            properties[name] = schema
            if param.required:
                required.append(name)
        return {
            "name": tool.name,
            "description": tool.description,
            "parameters": {
                "type": "OBJECT",
                "properties": properties,
                "required": required,
            },
        }
