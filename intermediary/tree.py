"""频道树：解析路径、按需创建节点、沿父链回收空频道。"""

from __future__ import annotations

import logging
from typing import Iterator, List, Optional, Sequence, Tuple

from intermediary.channel import Channel

LOGGER = logging.getLogger(__name__)

DEFAULT_DELIMITER = ":"


def split_path(path: object, delimiter: str = DEFAULT_DELIMITER) -> Optional[Tuple[str, ...]]:
    """把 ``root:sub1`` 拆为段元组；空路径、非字符串或含空段时返回 None。"""

    if not isinstance(path, str) or not path:
        return None
    segments = tuple(path.split(delimiter))
    if any(not segment for segment in segments):
        return None
    return segments


class ChannelTree:
    """拥有全部频道节点；隐式根节点不受“非空才存在”约束。"""

    def __init__(self, delimiter: str = DEFAULT_DELIMITER) -> None:
        if not delimiter:
            raise ValueError("delimiter must be a non-empty string")
        self.delimiter = delimiter
        self.root = Channel("")

    def split(self, path: object) -> Optional[Tuple[str, ...]]:
        return split_path(path, self.delimiter)

    def join(self, segments: Sequence[str]) -> str:
        return self.delimiter.join(segments)

    def resolve(self, segments: Sequence[str]) -> Optional[Channel]:
        """仅返回已存在的节点，从不创建。"""

        node = self.root
        for segment in segments:
            child = node.children.get(segment)
            if child is None:
                return None
            node = child
        return node if node is not self.root else None

    def resolve_or_create(self, segments: Sequence[str]) -> Channel:
        node = self.root
        for segment in segments:
            child = node.children.get(segment)
            if child is None:
                child = Channel(segment, parent=node)
                node.children[segment] = child
                if LOGGER.isEnabledFor(logging.DEBUG):
                    LOGGER.debug("Created channel %s", self.join(child.segments))
            node = child
        return node

    def ancestor_chain(self, segments: Sequence[str]) -> List[Channel]:
        """返回路径上所有已存在的频道，顺序为叶到根。

        某一前缀不存在时，更长的前缀也不可能存在，因此遇到缺失即停止向下。
        """

        chain: List[Channel] = []
        node = self.root
        for segment in segments:
            child = node.children.get(segment)
            if child is None:
                break
            chain.append(child)
            node = child
        chain.reverse()
        return chain

    def prune_if_empty(self, channel: Channel) -> None:
        """移除空频道，并向上级联直到遇到非空祖先或根。"""

        node = channel
        while node.parent is not None and node.is_empty():
            parent = node.parent
            if parent.children.get(node.name) is node:
                del parent.children[node.name]
                if LOGGER.isEnabledFor(logging.DEBUG):
                    LOGGER.debug("Pruned empty channel %s", self.join(node.segments))
            node = parent

    def walk(self) -> Iterator[Channel]:
        """深度优先遍历所有已存在的频道（不含根）。"""

        stack = list(reversed(list(self.root.children.values())))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(list(node.children.values())))

    def channel_paths(self) -> List[str]:
        return [self.join(channel.segments) for channel in self.walk()]

    def reset(self) -> None:
        """丢弃整棵树；同时清空各登记表，使进行中的分发不再命中旧订阅者。"""

        for channel in list(self.walk()):
            channel.subscribers.clear()
        self.root = Channel("")


__all__ = ["ChannelTree", "DEFAULT_DELIMITER", "split_path"]
