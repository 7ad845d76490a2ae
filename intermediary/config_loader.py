"""Configuration loader for the dispatcher."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Optional

import yaml
from dotenv import load_dotenv

from intermediary.config_models import IntermediaryConfig

ENV_OVERRIDES = {
    "INTERMEDIARY_DELIMITER": "delimiter",
    "INTERMEDIARY_DEFAULT_PRIORITY": "default_priority",
    "INTERMEDIARY_LOG_LEVEL": "log_level",
}


def _section(data: object) -> Dict[str, object]:
    if not data:
        return {}
    if not isinstance(data, dict):
        raise ValueError("configuration root must be a mapping")
    section = data.get("intermediary", data)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ValueError("'intermediary' section must be a mapping")
    return dict(section)


def _apply_env(values: Dict[str, object]) -> Dict[str, object]:
    for env_name, key in ENV_OVERRIDES.items():
        raw = os.getenv(env_name)
        if raw is not None and raw != "":
            values[key] = raw
    return values


def load_config(
    config_path: Optional[Path] = None,
    env_path: Optional[Path] = None,
) -> IntermediaryConfig:
    """Load dispatcher configuration from YAML and environment variables.

    ``config_path`` defaults to ``config.yaml`` at the repository root; when that
    default file does not exist the built-in defaults are used. A ``.env`` file
    never overrides variables already present in the process environment.
    """

    base_path = Path(__file__).resolve().parents[1]
    explicit = config_path is not None
    if config_path is None:
        config_path = base_path / "config.yaml"
    if env_path is None:
        default_env = base_path / ".env"
        if default_env.exists():
            env_path = default_env

    if env_path is not None:
        load_dotenv(dotenv_path=env_path, override=False)

    config_path = Path(config_path)
    data: object = {}
    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as fp:
            data = yaml.safe_load(fp.read()) or {}
    elif explicit:
        raise FileNotFoundError(f"config file not found: {config_path}")

    return IntermediaryConfig.from_dict(_apply_env(_section(data)))


__all__ = ["ENV_OVERRIDES", "load_config"]
