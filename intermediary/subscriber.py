"""订阅者模型：回调、优先级、调用次数上限与谓词门控。

选项在注册时一次性校验与数值化，分发阶段只读取已规整的字段。
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Union

LOGGER = logging.getLogger(__name__)

Callback = Callable[..., Any]
Predicate = Callable[[Any], Any]
Number = Union[int, float]


def coerce_priority(value: object) -> Number:
    """把数字或数字字符串（如 ``"3"``）转换为优先级数值。"""

    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        number: Number = value
    elif isinstance(value, str):
        text = value.strip()
        try:
            number = int(text)
        except ValueError:
            try:
                number = float(text)
            except ValueError:
                raise ValueError(f"priority must be numeric, got {value!r}") from None
    else:
        raise TypeError(f"priority must be a number or numeric string, got {type(value).__name__}")
    if isinstance(number, float) and math.isnan(number):
        raise ValueError("priority must not be NaN")
    return number


def normalize_calls(value: object) -> Optional[int]:
    """调用次数上限：``None`` 表示不限；小于 1 的值按 1 处理。"""

    if value is None:
        return None
    if isinstance(value, bool):
        raise TypeError("calls must be an integer")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"calls must be a whole number, got {value!r}")
        value = int(value)
    elif isinstance(value, str):
        value = int(value.strip())
    elif not isinstance(value, int):
        raise TypeError(f"calls must be an integer, got {type(value).__name__}")
    return max(1, value)


@dataclass(slots=True)
class SubscriberOptions:
    """注册选项：调用次数、谓词与优先级。"""

    calls: Optional[int] = None
    predicate: Optional[Predicate] = None
    priority: Optional[Number] = None

    def __post_init__(self) -> None:
        self.calls = normalize_calls(self.calls)
        if self.predicate is not None and not callable(self.predicate):
            raise TypeError("predicate must be callable")
        if self.priority is not None:
            self.priority = coerce_priority(self.priority)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, object]]) -> "SubscriberOptions":
        if not data:
            return cls()
        unknown = set(data) - {"calls", "predicate", "priority"}
        if unknown:
            raise ValueError(f"unknown subscriber options: {sorted(unknown)}")
        return cls(**data)

    @classmethod
    def coerce(cls, options: Union["SubscriberOptions", Mapping[str, object], None]) -> "SubscriberOptions":
        if isinstance(options, SubscriberOptions):
            return options
        return cls.from_dict(options)


@dataclass(slots=True)
class Subscriber:
    """挂在单个频道上的订阅者。"""

    id: str
    path: str
    callback: Callback
    context: Any = None
    priority: Number = 0
    remaining_calls: Optional[int] = None
    predicate: Optional[Predicate] = None
    sequence: int = 0

    def matches(self, data: Any) -> bool:
        """谓词必须恰好返回 ``True``；抛出异常视为不匹配。"""

        if self.predicate is None:
            return True
        try:
            return self.predicate(data) is True
        except Exception as exc:
            LOGGER.warning("Predicate of subscriber %s on %s raised: %s", self.id, self.path, exc)
            return False

    def consume(self) -> bool:
        """扣减一次剩余调用，返回是否已耗尽。"""

        if self.remaining_calls is None:
            return False
        self.remaining_calls -= 1
        return self.remaining_calls <= 0

    def invoke(self, data: Any, path: str) -> None:
        if self.context is not None:
            self.callback(self.context, data, path)
        else:
            self.callback(data, path)

    def view(self) -> "SubscriberView":
        return SubscriberView(
            id=self.id,
            path=self.path,
            priority=self.priority,
            remaining_calls=self.remaining_calls,
            has_predicate=self.predicate is not None,
        )


@dataclass(frozen=True, slots=True)
class SubscriberView:
    """只读快照，供查询接口返回。"""

    id: str
    path: str
    priority: Number
    remaining_calls: Optional[int]
    has_predicate: bool


__all__ = [
    "Callback",
    "Predicate",
    "Subscriber",
    "SubscriberOptions",
    "SubscriberView",
    "coerce_priority",
    "normalize_calls",
]
