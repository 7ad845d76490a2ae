"""分层命名空间的发布/订阅分发器。

发布到 ``root:sub1:sub2`` 时，消息依次送达该路径及其所有已存在祖先频道上的订阅者
（叶到根）。所有预期内的失败都通过返回值表达（None / False / MISSING），不抛异常。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Tuple, Union

from intermediary.channel import Channel
from intermediary.config_models import IntermediaryConfig
from intermediary.ids import new_subscriber_id
from intermediary.subscriber import Callback, Subscriber, SubscriberOptions, SubscriberView
from intermediary.tree import ChannelTree

LOGGER = logging.getLogger(__name__)

Options = Union[SubscriberOptions, Mapping[str, object], None]


class _Missing:
    """频道存在但没有该订阅者时 ``get_subscriber`` 的返回值。"""

    __slots__ = ()

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING = _Missing()


@dataclass(slots=True)
class PublishResult:
    """一次发布的结果；只要命中过任一频道即返回（恒为真值）。"""

    path: str
    notified: List[str] = field(default_factory=list)
    channels: int = 0

    @property
    def count(self) -> int:
        return len(self.notified)


class Intermediary:
    """分发器实例，拥有自己的频道树，生命周期（含 reset）由构造方管理。"""

    def __init__(self, config: Optional[IntermediaryConfig] = None) -> None:
        self.config = config or IntermediaryConfig()
        self._tree = ChannelTree(self.config.delimiter)

    # ------------------------------------------------------------------ 注册
    def subscribe(
        self,
        path: Optional[str],
        callback: Callback,
        context: Any = None,
        options: Options = None,
    ) -> Optional[str]:
        """在 ``path`` 上注册回调，返回订阅者 id；路径无效时返回 None。"""

        segments = self._tree.split(path)
        if segments is None:
            LOGGER.debug("Rejected subscription to invalid path %r", path)
            return None
        if not callable(callback):
            raise TypeError("callback must be callable")
        opts = SubscriberOptions.coerce(options)
        priority = opts.priority if opts.priority is not None else self.config.default_priority
        channel = self._tree.resolve_or_create(segments)
        subscriber = Subscriber(
            id=new_subscriber_id(),
            path=path,
            callback=callback,
            context=context,
            priority=priority,
            remaining_calls=opts.calls,
            predicate=opts.predicate,
        )
        channel.subscribers.insert(subscriber)
        LOGGER.debug(
            "Subscribed %s to %s (priority=%s, calls=%s)", subscriber.id, path, priority, opts.calls
        )
        return subscriber.id

    def once(
        self,
        path: Optional[str],
        callback: Callback,
        context: Any = None,
        options: Options = None,
    ) -> Optional[str]:
        """同 ``subscribe``，但 ``calls`` 强制为 1。"""

        if self._tree.split(path) is None:
            LOGGER.debug("Rejected subscription to invalid path %r", path)
            return None
        if isinstance(options, Mapping):
            options = {key: value for key, value in options.items() if key != "calls"}
        opts = SubscriberOptions.coerce(options)
        forced = SubscriberOptions(calls=1, predicate=opts.predicate, priority=opts.priority)
        return self.subscribe(path, callback, context, forced)

    def unsubscribe(self, path: Optional[str], subscriber_id: Optional[str] = None) -> Optional[bool]:
        """移除订阅者；``subscriber_id`` 为 None 时清空该频道的全部订阅者。"""

        channel = self._resolve(path)
        if channel is None:
            return None
        if subscriber_id is None:
            channel.subscribers.clear()
            removed = True
        else:
            removed = channel.subscribers.remove(subscriber_id)
        if removed:
            LOGGER.debug("Unsubscribed %s from %s", subscriber_id or "all", path)
            self._tree.prune_if_empty(channel)
        return removed

    # ------------------------------------------------------------------ 查询
    def get_subscriber(
        self, path: Optional[str], subscriber_id: str
    ) -> Union[SubscriberView, _Missing, None]:
        channel = self._resolve(path)
        if channel is None:
            return None
        subscriber = channel.subscribers.get(subscriber_id)
        if subscriber is None:
            return MISSING
        return subscriber.view()

    def set_subscriber_priority(
        self, path: Optional[str], subscriber_id: str, priority: object
    ) -> Optional[bool]:
        channel = self._resolve(path)
        if channel is None:
            return None
        return channel.subscribers.set_priority(subscriber_id, priority)

    def subscribers(self, path: Optional[str]) -> Optional[Tuple[SubscriberView, ...]]:
        """按分发顺序列出频道上的订阅者，便于测试/调试。"""

        channel = self._resolve(path)
        if channel is None:
            return None
        return tuple(subscriber.view() for subscriber in channel.subscribers.ordered_snapshot())

    def channels(self) -> List[str]:
        return self._tree.channel_paths()

    # ------------------------------------------------------------------ 发布
    def publish(self, path: Optional[str], data: Any = None) -> Optional[PublishResult]:
        """向 ``path`` 及其已存在的祖先频道分发 ``data``。

        每个频道在开始处理时才取排序快照，调用前再核对订阅者是否仍在登记表中，
        这样回调内部的重入发布不会导致重复调用或调用已移除的订阅者。
        调用次数在回调执行前扣减，耗尽即移除。回调抛出的异常会向发布方传播。
        """

        segments = self._tree.split(path)
        if segments is None:
            return None
        chain = self._tree.ancestor_chain(segments)
        if not chain:
            LOGGER.debug("Publish to %s reached no channel", path)
            return None

        result = PublishResult(path=path)
        for channel in chain:
            result.channels += 1
            registry = channel.subscribers
            for subscriber in registry.ordered_snapshot():
                if not registry.is_live(subscriber):
                    continue
                if not subscriber.matches(data):
                    continue
                if subscriber.consume():
                    registry.remove(subscriber.id)
                    LOGGER.debug("Subscriber %s exhausted on %s", subscriber.id, subscriber.path)
                result.notified.append(subscriber.id)
                subscriber.invoke(data, path)
            self._tree.prune_if_empty(channel)
        LOGGER.debug(
            "Published to %s: %d subscriber(s) across %d channel(s)", path, result.count, result.channels
        )
        return result

    def reset(self) -> None:
        """丢弃全部频道与订阅者。"""

        self._tree.reset()
        LOGGER.debug("Intermediary reset")

    def _resolve(self, path: Optional[str]) -> Optional[Channel]:
        segments = self._tree.split(path)
        if segments is None:
            return None
        return self._tree.resolve(segments)


__all__ = ["Intermediary", "MISSING", "PublishResult"]
