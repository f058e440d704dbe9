from typing import Iterator, List

from gram_core.domain.conversation import ConversationStore
from gram_core.domain.models import Turn


class TurnView:
    """会话日志的只读视图，每次迭代都从头开始。"""

    def __init__(self, turns: List[Turn]):
        self._turns = turns

    def __iter__(self) -> Iterator[Turn]:
        # 按下标读取，迭代期间追加的记录也能被看到
        i = 0
        while i < len(self._turns):
            yield self._turns[i]
            i += 1

    def __len__(self) -> int:
        return len(self._turns)


class InMemoryConversationStore(ConversationStore):
    """只存在于当前会话进程内的日志。

    单写者：轮次严格串行，append 不需要加锁。
    """

    def __init__(self):
        self._turns: List[Turn] = []

    def append(self, turn: Turn) -> None:
        if not turn.parts:
            raise ValueError("refusing to store a Turn without parts")
        self._turns.append(turn)

    def clear(self) -> None:
        self._turns.clear()

    def turns(self) -> TurnView:
        return TurnView(self._turns)

    def last(self) -> Turn | None:
        return self._turns[-1] if self._turns else None

    def __len__(self) -> int:
        return len(self._turns)
