"""统一业务异常模型。

所有跨模块抛出的业务级错误都继承自 BusinessError，
便于在 API 层或 UI 层做统一捕获与用户提示。message 字段是直接
展示给用户的孟加拉语文本，诊断信息放在 extra 中。
"""

GENERIC_FAILURE_MESSAGE = "দুঃখিত, একটি সমস্যা হয়েছে। আবার চেষ্টা করুন।"
MISSING_KEY_MESSAGE = (
    "API কী সেট করা নেই। অনুগ্রহ করে আপনার পরিবেশের চলক (environment variable) কনফিগার করুন।"
)
EMPTY_TURN_MESSAGE = "দয়া করে আপনার প্রশ্নটি লিখুন অথবা একটি ছবি দিন।"
EMPTY_RESPONSE_MESSAGE = "কোনো উত্তর পাওয়া যায়নি।"
ENCODING_FAILURE_MESSAGE = "ছবিটি পড়া যায়নি। অনুগ্রহ করে আবার চেষ্টা করুন।"
SAFETY_BLOCK_MESSAGE = "নিরাপত্তা নীতির কারণে অনুরোধটি আটকে দেওয়া হয়েছে।"
GENERIC_BLOCK_MESSAGE = "অনুরোধটি প্রক্রিয়া করা যায়নি, এটি আটকে দেওয়া হয়েছে।"
TURN_IN_FLIGHT_MESSAGE = "আগের অনুরোধটি এখনও চলছে, অনুগ্রহ করে অপেক্ষা করুন।"


class BusinessError(Exception):
    """业务异常基类。

    Attributes:
        code: 机器可读错误码（如 "MISSING_API_KEY"）。
        message: 用户可读错误信息（孟加拉语）。
        http_status: 映射到 HTTP 时可用的状态码，默认 400。
        extra: 其他补充字段（例如 detail、block_reason 等）。
    """

    def __init__(self, code: str, message: str, http_status: int = 400, **extra):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra = extra
        super().__init__(message)


class EncodingError(BusinessError):
    """附件无法完整读取或缺少媒体类型。"""

    def __init__(self, detail: str, message: str = ENCODING_FAILURE_MESSAGE):
        super().__init__(code="ENCODING_ERROR", message=message, detail=detail)


class InvalidRequestError(BusinessError):
    """空轮次（既无文本也无附件），或生成配置中出现未知字段。"""

    def __init__(self, detail: str = "empty turn", message: str = EMPTY_TURN_MESSAGE):
        super().__init__(code="INVALID_REQUEST", message=message, detail=detail)


class MissingCredentialError(BusinessError):
    """未配置 API 密钥，调用前即报错，不发起任何网络请求。"""

    def __init__(self, detail: str = "GEMINI_API_KEY not set"):
        super().__init__(code="MISSING_API_KEY", message=MISSING_KEY_MESSAGE, detail=detail)


class AuthenticationError(BusinessError):
    """Provider 拒绝了 API 密钥。"""

    def __init__(self, detail: str, status_code: int = 401):
        super().__init__(
            code="AUTH_REJECTED",
            message=GENERIC_FAILURE_MESSAGE,
            http_status=status_code,
            detail=detail,
        )


class TransportError(BusinessError):
    """网络错误或 Provider 返回的其它失败（含限流），不做自动重试。"""

    def __init__(self, code: str, detail: str, status_code: int = 502):
        super().__init__(code=code, message=GENERIC_FAILURE_MESSAGE, http_status=status_code, detail=detail)


class SafetyBlockedError(BusinessError):
    """请求或回答被内容安全策略拦截。

    block_reason 为 "SAFETY" 等安全类原因时使用专门的提示语，
    其它拦截原因（如 OTHER、BLOCKLIST）使用通用提示语。
    """

    def __init__(self, block_reason: str, safety: bool):
        super().__init__(
            code="SAFETY_BLOCKED" if safety else "PROMPT_BLOCKED",
            message=SAFETY_BLOCK_MESSAGE if safety else GENERIC_BLOCK_MESSAGE,
            http_status=422,
            block_reason=block_reason,
        )
        self.block_reason = block_reason
        self.is_safety = safety


class EmptyResponseError(BusinessError):
    """响应中既没有候选内容也没有聚合文本。"""

    def __init__(self, detail: str = "no content returned"):
        super().__init__(code="EMPTY_RESPONSE", message=EMPTY_RESPONSE_MESSAGE, http_status=502, detail=detail)


class TurnInFlightError(BusinessError):
    """同一会话已有一轮请求在进行中。"""

    def __init__(self):
        super().__init__(code="TURN_IN_FLIGHT", message=TURN_IN_FLIGHT_MESSAGE, http_status=409)


class AccountError(BusinessError):
    """登录 / 注册失败，code 为归一化后的原因。"""
