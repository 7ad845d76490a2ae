"""订阅者标识生成：规范的 8-4-4-4-12 十六进制 GUID 文本。"""

from __future__ import annotations

import re
import uuid

SUBSCRIBER_ID_PATTERN = re.compile(r"^[a-f0-9]{8}(?:-[a-f0-9]{4}){3}-[a-f0-9]{12}$", re.IGNORECASE)


def new_subscriber_id() -> str:
    """返回一个新的订阅者 ID。"""

    return str(uuid.uuid4())


def is_subscriber_id(value: object) -> bool:
    return isinstance(value, str) and SUBSCRIBER_ID_PATTERN.match(value) is not None


__all__ = ["SUBSCRIBER_ID_PATTERN", "new_subscriber_id", "is_subscriber_id"]
