"""应用上下文：主题偏好与当前登录主体。

启动时显式初始化（读取持久化偏好或系统默认），再作为参数传给渲染层，
不使用全局变量。
"""

from dataclasses import dataclass
from typing import Literal, Optional

from gram_core.infrastructure.logging.logger import logger
from gram_core.infrastructure.storage.preferences import JsonPreferenceStore
from gram_core.providers.firebase_auth import FirebaseAuthClient, Principal


Theme = Literal["light", "dark"]
THEME_KEY = "theme"
_THEMES = ("light", "dark")


@dataclass
class AppContext:
    theme: Theme = "light"
    principal: Optional[Principal] = None

    @property
    def signed_in(self) -> bool:
        return self.principal is not None

    def sign_in(self, auth: FirebaseAuthClient, email: str, password: str) -> Principal:
        self.principal = auth.sign_in(email, password)
        logger.info("context.signed_in", extra={"extra": {"uid": self.principal.uid}})
        return self.principal

    def sign_up(self, auth: FirebaseAuthClient, email: str, password: str) -> Principal:
        self.principal = auth.sign_up(email, password)
        logger.info("context.signed_up", extra={"extra": {"uid": self.principal.uid}})
        return self.principal

    def sign_out(self) -> None:
        self.principal = None


def init_context(prefs: JsonPreferenceStore, system_prefers_dark: bool = False) -> AppContext:
    """持久化的主题优先；没有时按系统偏好决定。"""

    saved = prefs.get(THEME_KEY)
    if saved in _THEMES:
        theme = saved
    else:
        theme = "dark" if system_prefers_dark else "light"
    return AppContext(theme=theme)


def toggle_theme(ctx: AppContext, prefs: JsonPreferenceStore) -> Theme:
    ctx.theme = "light" if ctx.theme == "dark" else "dark"
    prefs.set(THEME_KEY, ctx.theme)
    return ctx.theme
