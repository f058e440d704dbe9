"""请求路由层。

该包下的模块负责把一次用户输入整理为生成请求：
- attachments: 附件读取与 base64 编码。
- intent: 基于关键词的画图意图识别。
- request_builder: 选择模型、输出模态、system instruction 与工具声明。
"""

from gram_core.routing.attachments import Attachment, encode_attachment
from gram_core.routing.intent import IntentClassifier, wants_image_generation
from gram_core.routing.request_builder import RequestBuilder, compose_parts

__all__ = [
    "Attachment",
    "IntentClassifier",
    "RequestBuilder",
    "compose_parts",
    "encode_attachment",
    "wants_image_generation",
]
