"""Provider 与模型配置。

本模块将“逻辑模型名”与“具体厂商模型名”解耦：

- 逻辑名（logical_name）：在代码里使用的统一名称，例如 "gram-chat"。
- provider_model：厂商实际提供的模型 ID，例如 "gemini-2.5-flash"。

请求构造器只会产出这里登记的两个逻辑名，具体用哪个底层模型由这里集中配置。"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, Mapping


CHAT_MODEL = "gram-chat"
IMAGE_MODEL = "gram-image"


@dataclass(frozen=True)
class ModelConfig:
    """单个逻辑模型的配置。"""

    logical_name: str
    provider_model: str
    output_modalities: FrozenSet[str]


@dataclass(frozen=True)
class ProviderConfig:
    """某个 Provider 的整体配置。"""

    name: str
    base_url: str
    models: Dict[str, ModelConfig]


GEMINI_CONFIG = ProviderConfig(
    name="gemini",
    base_url="https://generativelanguage.googleapis.com/v1beta",
    models={
        CHAT_MODEL: ModelConfig(
            logical_name=CHAT_MODEL,
            provider_model="gemini-2.5-flash",
            output_modalities=frozenset({"TEXT"}),
        ),
        IMAGE_MODEL: ModelConfig(
            logical_name=IMAGE_MODEL,
            provider_model="gemini-2.5-flash-image",
            output_modalities=frozenset({"TEXT", "IMAGE"}),
        ),
    },
)


PROVIDER_REGISTRY: Mapping[str, ProviderConfig] = {
    "gemini": GEMINI_CONFIG,
}

KNOWN_MODELS: FrozenSet[str] = frozenset(GEMINI_CONFIG.models)


def get_provider_config(name: str) -> ProviderConfig:
    """根据名称获取 ProviderConfig，名称不区分大小写。"""

    key = name.lower()
    for k, cfg in PROVIDER_REGISTRY.items():
        if k.lower() == key:
            return cfg
    raise KeyError(f"Unknown provider: {name!r}")


def get_model_config(logical_name: str, provider: str = "gemini") -> ModelConfig:
    cfg = get_provider_config(provider)
    try:
        return cfg.models[logical_name]
    except KeyError:
        raise KeyError(f"Unknown model for {cfg.name}: {logical_name!r}") from None
