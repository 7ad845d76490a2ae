"""Configuration model for the dispatcher and its entry point."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Union

from intermediary.subscriber import coerce_priority

DEFAULT_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


@dataclass
class IntermediaryConfig:
    """Dispatcher settings: path delimiter, default priority and logging."""

    delimiter: str = ":"
    default_priority: Union[int, float] = 0
    log_level: str = "INFO"
    log_format: str = DEFAULT_LOG_FORMAT

    def __post_init__(self) -> None:
        if not isinstance(self.delimiter, str) or not self.delimiter:
            raise ValueError("delimiter must be a non-empty string")
        self.default_priority = coerce_priority(self.default_priority)
        self.log_level = str(self.log_level).upper()
        if self.log_level not in _LOG_LEVELS:
            raise ValueError(f"unknown log level: {self.log_level}")

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, object]]) -> "IntermediaryConfig":
        if not data:
            return cls()
        return cls(**data)


__all__ = ["DEFAULT_LOG_FORMAT", "IntermediaryConfig"]
