"""领域层模型与协议。

包含：
- models: ContentPart / Turn / GenerationRequest / GenerationResult 等模型。
- conversation: ConversationStore 协议（只追加的会话日志）。
- exceptions: 业务异常类型定义。
"""
