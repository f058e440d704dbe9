"""关键词意图识别：判断本轮是否为“画图”请求。

这是启发式规则而非 NLP 分类器：只要文本中出现任意触发词即判定为
画图意图，否定句（“不要画”）同样会被判为画图。
"""

from typing import Iterable, Optional, Sequence

from gram_core.config.settings import DEFAULT_TRIGGER_WORDS


class IntentClassifier:
    def __init__(self, triggers: Optional[Iterable[str]] = None, case_sensitive: bool = False):
        words = [t for t in (triggers if triggers is not None else DEFAULT_TRIGGER_WORDS) if t]
        if not words:
            raise ValueError("IntentClassifier needs at least one trigger word")
        self._case_sensitive = case_sensitive
        self._triggers: Sequence[str] = tuple(words if case_sensitive else (w.casefold() for w in words))

    @classmethod
    def from_settings(cls, cfg) -> "IntentClassifier":
        return cls(
            triggers=getattr(cfg, "image_trigger_words", None),
            case_sensitive=getattr(cfg, "intent_case_sensitive", False),
        )

    @property
    def triggers(self) -> Sequence[str]:
        return self._triggers

    def wants_image_generation(self, prompt: Optional[str]) -> bool:
        if not prompt:
            return False
        text = prompt if self._case_sensitive else prompt.casefold()
        return any(t in text for t in self._triggers)

    __call__ = wants_image_generation


def wants_image_generation(prompt: Optional[str]) -> bool:
    """使用默认触发词（不区分大小写）判断。"""

    return _default(prompt)


_default = IntentClassifier()
