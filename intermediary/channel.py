"""命名空间树中的频道节点。"""

from __future__ import annotations

from typing import Dict, Optional, Tuple

from intermediary.registry import SubscriberRegistry


class Channel:
    """持有订阅者与子频道；对父节点仅保留非拥有引用，用于向上清理。"""

    __slots__ = ("name", "parent", "children", "subscribers")

    def __init__(self, name: str, parent: Optional["Channel"] = None) -> None:
        self.name = name
        self.parent = parent
        self.children: Dict[str, Channel] = {}
        self.subscribers = SubscriberRegistry()

    @property
    def segments(self) -> Tuple[str, ...]:
        parts = []
        node: Optional[Channel] = self
        while node is not None and node.parent is not None:
            parts.append(node.name)
            node = node.parent
        return tuple(reversed(parts))

    @property
    def is_root(self) -> bool:
        return self.parent is None

    def is_empty(self) -> bool:
        return not self.subscribers and not self.children

    def __repr__(self) -> str:
        return f"Channel({':'.join(self.segments) or '<root>'!r}, subscribers={len(self.subscribers)})"


__all__ = ["Channel"]
