import logging
import math
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from intermediary.ids import is_subscriber_id, new_subscriber_id
from intermediary.subscriber import Subscriber, SubscriberOptions, coerce_priority, normalize_calls


def test_new_ids_are_unique_guids() -> None:
    ids = {new_subscriber_id() for _ in range(50)}
    assert len(ids) == 50
    assert all(is_subscriber_id(value) for value in ids)
    assert not is_subscriber_id("fake-guid")
    assert not is_subscriber_id(None)


@pytest.mark.parametrize(
    "raw, expected",
    [(3, 3), ("3", 3), (" 7 ", 7), ("2.5", 2.5), (-1.25, -1.25), ("-4", -4)],
)
def test_coerce_priority(raw, expected) -> None:
    assert coerce_priority(raw) == expected


def test_coerce_priority_rejects_garbage() -> None:
    with pytest.raises(ValueError):
        coerce_priority("abc")
    with pytest.raises(ValueError):
        coerce_priority(math.nan)
    with pytest.raises(TypeError):
        coerce_priority(None)


@pytest.mark.parametrize("raw, expected", [(None, None), (2, 2), (-1, 1), (0, 1), ("4", 4), (3.0, 3)])
def test_normalize_calls(raw, expected) -> None:
    assert normalize_calls(raw) == expected


def test_normalize_calls_rejects_fractions() -> None:
    with pytest.raises(ValueError):
        normalize_calls(1.5)
    with pytest.raises(TypeError):
        normalize_calls(True)


def test_options_from_dict() -> None:
    options = SubscriberOptions.from_dict({"calls": -3, "priority": "5"})
    assert options.calls == 1
    assert options.priority == 5
    assert options.predicate is None
    assert SubscriberOptions.from_dict(None) == SubscriberOptions()


def test_options_validate_predicate() -> None:
    with pytest.raises(TypeError):
        SubscriberOptions(predicate="yes")


def test_predicate_exception_logged(caplog: pytest.LogCaptureFixture) -> None:
    def broken(data):
        raise ValueError("nope")

    subscriber = Subscriber(id="sub", path="root", callback=lambda data, path: None, predicate=broken)
    with caplog.at_level(logging.WARNING):
        assert subscriber.matches({"value": 1}) is False
    assert "sub" in caplog.text


def test_consume_counts_down() -> None:
    subscriber = Subscriber(id="sub", path="root", callback=lambda data, path: None, remaining_calls=2)
    assert subscriber.consume() is False
    assert subscriber.consume() is True
    unlimited = Subscriber(id="u", path="root", callback=lambda data, path: None)
    assert unlimited.consume() is False
    assert unlimited.remaining_calls is None
