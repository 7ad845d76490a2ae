from __future__ import annotations

"""Entry point replaying a YAML scenario against a fresh dispatcher."""

import argparse
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from intermediary import Intermediary, IntermediaryConfig, load_config
from intermediary.config_models import DEFAULT_LOG_FORMAT

LOGGER = logging.getLogger(__name__)

ACTIONS = ("subscribe", "once", "publish", "unsubscribe", "reprioritize", "reset")


def configure_logging(level: str = "INFO", fmt: str = DEFAULT_LOG_FORMAT) -> None:
    logging.basicConfig(level=level.upper(), format=fmt)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Replay a publish/subscribe scenario")
    parser.add_argument("script", type=Path, help="YAML scenario with a 'steps' list")
    parser.add_argument("--config", type=Path, default=None, help="Dispatcher config YAML")
    parser.add_argument("--env", type=Path, default=None, help=".env file with overrides")
    parser.add_argument("--log-level", default=None, help="Override the configured log level")
    return parser.parse_args(argv)


@dataclass
class Delivery:
    name: str
    data: Any
    path: str


@dataclass
class ScenarioReport:
    deliveries: List[Delivery] = field(default_factory=list)
    publishes: List[Dict[str, Any]] = field(default_factory=list)
    names: Dict[str, str] = field(default_factory=dict)


class ScenarioRunner:
    """Execute scenario steps; scripted subscribers are referred to by ``name``."""

    def __init__(self, dispatcher: Intermediary) -> None:
        self.dispatcher = dispatcher
        self.report = ScenarioReport()

    def run(self, steps: List[Dict[str, Any]]) -> ScenarioReport:
        for index, step in enumerate(steps):
            actions = [key for key in step if key in ACTIONS]
            if len(actions) != 1:
                raise ValueError(f"step {index} must contain exactly one of {ACTIONS}: {step}")
            action = actions[0]
            getattr(self, f"_step_{action}")(step)
        return self.report

    def _recorder(self, name: str):
        def _record(data: Any, path: str) -> None:
            LOGGER.info("%s received %r on %s", name, data, path)
            self.report.deliveries.append(Delivery(name=name, data=data, path=path))

        return _record

    def _register(self, step: Dict[str, Any], action: str) -> None:
        path = step[action]
        name = step.get("name") or f"{action}-{len(self.report.names) + 1}"
        options: Dict[str, Any] = {}
        if "priority" in step:
            options["priority"] = step["priority"]
        if "calls" in step:
            options["calls"] = step["calls"]
        if "match" in step:
            expected = step["match"]
            options["predicate"] = lambda data: data == expected
        register = self.dispatcher.once if action == "once" else self.dispatcher.subscribe
        subscriber_id = register(path, self._recorder(name), None, options)
        if subscriber_id is None:
            LOGGER.warning("Could not subscribe %s to %r", name, path)
            return
        self.report.names[name] = subscriber_id

    def _step_subscribe(self, step: Dict[str, Any]) -> None:
        self._register(step, "subscribe")

    def _step_once(self, step: Dict[str, Any]) -> None:
        self._register(step, "once")

    def _step_publish(self, step: Dict[str, Any]) -> None:
        path = step["publish"]
        result = self.dispatcher.publish(path, step.get("data"))
        outcome = {"path": path, "delivered": None if result is None else result.count}
        self.report.publishes.append(outcome)
        LOGGER.info("Publish %s -> %s", path, outcome["delivered"])

    def _step_unsubscribe(self, step: Dict[str, Any]) -> None:
        name = step.get("name")
        subscriber_id = self.report.names.get(name) if name else None
        if name and subscriber_id is None:
            raise ValueError(f"unknown subscriber name: {name}")
        removed = self.dispatcher.unsubscribe(step["unsubscribe"], subscriber_id)
        LOGGER.info("Unsubscribe %s from %s -> %s", name or "all", step["unsubscribe"], removed)

    def _step_reprioritize(self, step: Dict[str, Any]) -> None:
        name = step["name"]
        if name not in self.report.names:
            raise ValueError(f"unknown subscriber name: {name}")
        updated = self.dispatcher.set_subscriber_priority(step["reprioritize"], self.report.names[name], step["value"])
        LOGGER.info("Priority of %s set to %s -> %s", name, step["value"], updated)

    def _step_reset(self, step: Dict[str, Any]) -> None:
        self.dispatcher.reset()
        self.report.names.clear()
        LOGGER.info("Dispatcher reset")


def load_steps(script: Path) -> List[Dict[str, Any]]:
    with open(script, "r", encoding="utf-8") as fp:
        data = yaml.safe_load(fp.read()) or {}
    steps = data.get("steps") if isinstance(data, dict) else None
    if not isinstance(steps, list):
        raise ValueError(f"{script} must define a 'steps' list")
    return steps


def run_script(script: Path, config: Optional[IntermediaryConfig] = None) -> ScenarioReport:
    dispatcher = Intermediary(config)
    report = ScenarioRunner(dispatcher).run(load_steps(script))
    LOGGER.info(
        "Scenario complete: %d delivery(ies), %d publish(es)", len(report.deliveries), len(report.publishes)
    )
    return report


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    config = load_config(config_path=args.config, env_path=args.env)
    configure_logging(args.log_level or config.log_level, config.log_format)
    run_script(args.script, config)


if __name__ == "__main__":
    main()
