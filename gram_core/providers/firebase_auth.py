"""Firebase 身份认证适配器（邮箱 + 密码）。

使用 Identity Toolkit REST 端点：
- 登录: {base_url}/accounts:signInWithPassword?key=<api_key>
- 注册: {base_url}/accounts:signUp?key=<api_key>

Provider 返回的错误码统一映射为 AccountError，message 为孟加拉语提示。
"""

from dataclasses import dataclass
from typing import Any, Dict

import httpx

from gram_core.config.settings import settings
from gram_core.domain.exceptions import AccountError, MissingCredentialError
from gram_core.infrastructure.logging.logger import logger


MISSING_FIELDS_MESSAGE = "অনুগ্রহ করে ইমেল এবং পাসওয়ার্ড দিন।"
INVALID_EMAIL_MESSAGE = "অনুগ্রহ করে একটি সঠিক ইমেল ঠিকানা লিখুন।"
WRONG_CREDENTIAL_MESSAGE = "ইমেল অথবা পাসওয়ার্ড ভুল হয়েছে।"
EMAIL_EXISTS_MESSAGE = "এই ইমেল ঠিকানাটি ইতিমধ্যেই ব্যবহার করা হয়েছে।"
WEAK_PASSWORD_MESSAGE = "পাসওয়ার্ডটি কমপক্ষে ৬ অক্ষরের হতে হবে।"
DEFAULT_AUTH_MESSAGE = "একটি সমস্যা হয়েছে। অনুগ্রহ করে আবার চেষ্টা করুন।"

# Provider 错误码 -> (归一化原因, 提示语)
ERROR_MAP: Dict[str, tuple] = {
    "INVALID_EMAIL": ("INVALID_EMAIL", INVALID_EMAIL_MESSAGE),
    "EMAIL_NOT_FOUND": ("WRONG_CREDENTIAL", WRONG_CREDENTIAL_MESSAGE),
    "INVALID_PASSWORD": ("WRONG_CREDENTIAL", WRONG_CREDENTIAL_MESSAGE),
    "INVALID_LOGIN_CREDENTIALS": ("WRONG_CREDENTIAL", WRONG_CREDENTIAL_MESSAGE),
    "USER_DISABLED": ("WRONG_CREDENTIAL", WRONG_CREDENTIAL_MESSAGE),
    "EMAIL_EXISTS": ("EMAIL_EXISTS", EMAIL_EXISTS_MESSAGE),
    "WEAK_PASSWORD": ("WEAK_PASSWORD", WEAK_PASSWORD_MESSAGE),
}


@dataclass(frozen=True)
class Principal:
    """登录成功后的会话主体。"""

    uid: str
    email: str
    id_token: str
    refresh_token: str = ""


def map_auth_error(provider_code: str) -> AccountError:
    """把 Provider 错误码（如 "WEAK_PASSWORD : ..."）映射为 AccountError。"""

    key = (provider_code or "").split(":", 1)[0].strip().upper()
    reason, message = ERROR_MAP.get(key, ("AUTH_FAILED", DEFAULT_AUTH_MESSAGE))
    return AccountError(code=reason, message=message, provider_code=provider_code)


class FirebaseAuthClient:
    name = "firebase"

    def __init__(self, cfg=settings):
        self._settings = cfg

    def sign_in(self, email: str, password: str) -> Principal:
        self._require_fields(email, password)
        return self._call("accounts:signInWithPassword", email, password)

    def sign_up(self, email: str, password: str) -> Principal:
        self._require_fields(email, password)
        min_len = getattr(self._settings, "min_password_length", 6)
        if len(password) < min_len:
            raise map_auth_error("WEAK_PASSWORD")
        return self._call("accounts:signUp", email, password)

    # ---- 辅助方法 ----

    @staticmethod
    def _require_fields(email: str, password: str) -> None:
        if not (email or "").strip() or not password:
            raise AccountError(code="MISSING_FIELDS", message=MISSING_FIELDS_MESSAGE)

    def _call(self, action: str, email: str, password: str) -> Principal:
        api_key = getattr(self._settings, "firebase_api_key", None)
        if not api_key:
            raise MissingCredentialError(detail="FIREBASE_API_KEY not set")
        base = getattr(self._settings, "firebase_auth_url", "https://identitytoolkit.googleapis.com/v1")
        try:
            with httpx.Client(timeout=self._settings.http_timeout, trust_env=False) as client:
                resp = client.post(
                    f"{base.rstrip('/')}/{action}",
                    params={"key": api_key},
                    json={"email": email.strip(), "password": password, "returnSecureToken": True},
                )
        except httpx.RequestError as e:
            logger.warning("auth.network_error", extra={"extra": {"action": action, "error": str(e)}})
            raise AccountError(code="AUTH_FAILED", message=DEFAULT_AUTH_MESSAGE, detail=str(e))
        data = self._json(resp)
        if resp.status_code >= 400:
            provider_code = str((data.get("error") or {}).get("message") or "")
            logger.info("auth.rejected", extra={"extra": {"action": action, "provider_code": provider_code}})
            raise map_auth_error(provider_code)
        return Principal(
            uid=data.get("localId") or "",
            email=data.get("email") or email.strip(),
            id_token=data.get("idToken") or "",
            refresh_token=data.get("refreshToken") or "",
        )

    @staticmethod
    def _json(resp) -> Dict[str, Any]:
        try:
            data = resp.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}
