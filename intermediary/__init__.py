"""Hierarchical in-process publish/subscribe dispatcher."""

from .config_loader import load_config
from .config_models import IntermediaryConfig
from .dispatcher import MISSING, Intermediary, PublishResult
from .ids import is_subscriber_id, new_subscriber_id
from .subscriber import SubscriberOptions, SubscriberView

__all__ = [
    "Intermediary",
    "IntermediaryConfig",
    "MISSING",
    "PublishResult",
    "SubscriberOptions",
    "SubscriberView",
    "is_subscriber_id",
    "load_config",
    "new_subscriber_id",
]
