import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from intermediary import Intermediary, IntermediaryConfig, load_config
from intermediary.config_loader import ENV_OVERRIDES


@pytest.fixture(autouse=True)
def _clean_env():
    for name in ENV_OVERRIDES:
        os.environ.pop(name, None)
    yield
    for name in ENV_OVERRIDES:
        os.environ.pop(name, None)


def test_load_config_from_yaml(tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        """
intermediary:
  delimiter: "/"
  default_priority: "2"
  log_level: debug
""",
        encoding="utf-8",
    )

    config = load_config(config_path=config_path)

    assert config.delimiter == "/"
    assert config.default_priority == 2
    assert config.log_level == "DEBUG"


def test_top_level_keys_accepted(tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text("delimiter: '.'\n", encoding="utf-8")
    assert load_config(config_path=config_path).delimiter == "."


def test_env_file_overrides_yaml(tmp_path: Path) -> None:
    env_path = tmp_path / ".env"
    env_path.write_text("INTERMEDIARY_LOG_LEVEL=warning\nINTERMEDIARY_DEFAULT_PRIORITY=7\n", encoding="utf-8")
    config_path = tmp_path / "config.yaml"
    config_path.write_text("intermediary:\n  log_level: info\n", encoding="utf-8")

    config = load_config(config_path=config_path, env_path=env_path)

    assert config.log_level == "WARNING"
    assert config.default_priority == 7


def test_process_env_wins_over_env_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INTERMEDIARY_DELIMITER", "|")
    env_path = tmp_path / ".env"
    env_path.write_text("INTERMEDIARY_DELIMITER=/\n", encoding="utf-8")
    config_path = tmp_path / "config.yaml"
    config_path.write_text("", encoding="utf-8")

    assert load_config(config_path=config_path, env_path=env_path).delimiter == "|"


def test_missing_explicit_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(config_path=tmp_path / "nope.yaml")


def test_defaults() -> None:
    config = IntermediaryConfig.from_dict(None)
    assert config.delimiter == ":"
    assert config.default_priority == 0
    assert config.log_level == "INFO"


@pytest.mark.parametrize("data", [{"delimiter": ""}, {"log_level": "loud"}, {"default_priority": "x"}])
def test_invalid_values_rejected(data) -> None:
    with pytest.raises(ValueError):
        IntermediaryConfig.from_dict(data)


def test_dispatcher_uses_config() -> None:
    bus = Intermediary(IntermediaryConfig(delimiter=".", default_priority=3))
    received = []
    guid = bus.subscribe("root.sub1", lambda data, path: received.append(path))
    assert bus.get_subscriber("root.sub1", guid).priority == 3
    assert bus.publish("root.sub1.leaf") is not None
    assert received == ["root.sub1.leaf"]
    assert bus.publish("root:sub1") is None
