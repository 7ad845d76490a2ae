"""单个频道的订阅者登记表，按优先级降序、同优先级按注册顺序排列。"""

from __future__ import annotations

from itertools import count
from typing import Dict, Iterator, List, Optional, Tuple

from intermediary.subscriber import Subscriber, coerce_priority


def _sort_key(subscriber: Subscriber) -> Tuple[float, int]:
    return (-subscriber.priority, subscriber.sequence)


class SubscriberRegistry:
    """维护 id 索引与有序列表两份视图。"""

    __slots__ = ("_by_id", "_ordered", "_sequence")

    def __init__(self) -> None:
        self._by_id: Dict[str, Subscriber] = {}
        self._ordered: List[Subscriber] = []
        self._sequence = count()

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, subscriber_id: object) -> bool:
        return subscriber_id in self._by_id

    def __iter__(self) -> Iterator[Subscriber]:
        return iter(tuple(self._ordered))

    def insert(self, subscriber: Subscriber) -> str:
        """插入订阅者并保持排序不变式，返回其 id。"""

        subscriber.sequence = next(self._sequence)
        self._by_id[subscriber.id] = subscriber
        position = len(self._ordered)
        key = _sort_key(subscriber)
        # sequence 单调递增，同优先级的新订阅者总排在最后
        for index, existing in enumerate(self._ordered):
            if _sort_key(existing) > key:
                position = index
                break
        self._ordered.insert(position, subscriber)
        return subscriber.id

    def remove(self, subscriber_id: str) -> bool:
        subscriber = self._by_id.pop(subscriber_id, None)
        if subscriber is None:
            return False
        self._ordered.remove(subscriber)
        return True

    def get(self, subscriber_id: str) -> Optional[Subscriber]:
        return self._by_id.get(subscriber_id)

    def is_live(self, subscriber: Subscriber) -> bool:
        """快照中的订阅者是否仍在登记表内（重入调用可能已将其移除）。"""

        return self._by_id.get(subscriber.id) is subscriber

    def set_priority(self, subscriber_id: str, priority: object) -> bool:
        """更新优先级并重新排序；id 不存在时返回 False。"""

        subscriber = self._by_id.get(subscriber_id)
        if subscriber is None:
            return False
        subscriber.priority = coerce_priority(priority)
        self._ordered.sort(key=_sort_key)
        return True

    def ordered_snapshot(self) -> Tuple[Subscriber, ...]:
        return tuple(self._ordered)

    def clear(self) -> None:
        self._by_id.clear()
        self._ordered.clear()


__all__ = ["SubscriberRegistry"]
