from typing import Iterable, Protocol

from .models import Turn


class ConversationStore(Protocol):
    """只追加的会话日志。

    turns() 返回可重复遍历的惰性序列，按插入顺序产出 Turn。
    """

    def append(self, turn: Turn) -> None:
        ...

    def clear(self) -> None:
        ...

    def turns(self) -> Iterable[Turn]:
        ...

    def __len__(self) -> int:
        ...
