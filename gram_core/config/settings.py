"""配置管理模块。

支持从环境变量、.env 以及 config.yaml 加载配置。
"""

import os
import warnings
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

import yaml
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_TRIGGER_WORDS = ["আঁকো", "ছবি", "draw", "picture"]


def _load_config_from_yaml() -> Dict[str, Any]:
    """从 config.yaml 加载配置（若存在）。"""
    candidates = []
    explicit = os.getenv("GRAM_CONFIG_FILE")
    if explicit:
        candidates.append(Path(explicit).expanduser())
    candidates.extend([
        Path.cwd() / "config.yaml",
        Path(__file__).resolve().parents[2] / "config.yaml",
    ])

    seen: set[Path] = set()
    for path in candidates:
        if path in seen:
            continue
        seen.add(path)
        try:
            if path.exists():
                data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
                if isinstance(data, dict):
                    return data
                warnings.warn(f"Config file {path} is not a mapping, ignored")
        except (OSError, yaml.YAMLError) as exc:
            warnings.warn(f"Failed to read config file {path}: {exc}")
    return {}


class GramSettings(BaseSettings):
    """配置设置（使用 Pydantic）。"""

    # ---- 生成式 API ----
    gemini_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("gemini_api_key", "api_key"),
        description="Gemini API 密钥，也可通过 API_KEY 提供",
    )
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Gemini REST API 基础URL",
    )
    http_timeout: float = Field(default=60.0, ge=1.0, description="HTTP 超时时间（秒）")

    # ---- 路由与归一化 ----
    enable_tools: bool = Field(default=False, description="是否为对话请求附加函数工具声明")
    image_policy: Literal["first", "all"] = Field(
        default="first",
        description="每轮保留的生成图片：first 只保留第一张，all 全部保留",
    )
    intent_case_sensitive: bool = Field(default=False, description="触发词匹配是否区分大小写")
    image_trigger_words: List[str] = Field(
        default_factory=lambda: list(DEFAULT_TRIGGER_WORDS),
        description="表示“画/图片”的触发词",
    )

    # ---- 身份认证 ----
    firebase_api_key: Optional[str] = Field(default=None, description="Firebase Web API 密钥")
    firebase_auth_url: str = Field(
        default="https://identitytoolkit.googleapis.com/v1",
        description="Identity Toolkit REST 基础URL",
    )
    min_password_length: int = Field(default=6, ge=1, description="注册时的最短密码长度")

    # ---- 本地存储与日志 ----
    storage_root: str = Field(default=".storage", description="存储根目录")
    log_dir: str = Field(default="logs", description="日志目录")
    log_redact_content: bool = Field(default=False, description="是否脱敏日志内容")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @staticmethod
    def _config_source() -> Dict[str, Any]:
        return _load_config_from_yaml()

    @field_validator("gemini_api_key")
    @classmethod
    def validate_api_key(cls, v: Optional[str]) -> Optional[str]:
        if v and len(v) < 10:
            raise ValueError("API key seems too short")
        return v

    @field_validator("image_trigger_words")
    @classmethod
    def validate_trigger_words(cls, v: List[str]) -> List[str]:
        words = [w for w in (s.strip() for s in v) if w]
        if not words:
            raise ValueError("at least one image trigger word is required")
        return words

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            cls._config_source,
            file_secret_settings,
        )


settings = GramSettings()
