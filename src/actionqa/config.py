"""ActionQA configuration management."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from actionqa.models import (
    DEFAULT_MAX_TRIES,
    DEFAULT_RESOLVE_DELAY_MS,
    DEFAULT_STEP_DELAY_MS,
    DEFAULT_TEST_ID_ATTRIBUTE,
    DEFAULT_VIEWPORT,
    TestSpeed,
)


class ActionQAConfigError(Exception):
    """Raised when configuration is invalid or missing."""

    pass


@dataclass
class ActionQAConfig:
    """Configuration for an ActionQA engine."""

    # Target
    base_url: str = ""

    # Paths
    project_dir: Path = field(default_factory=lambda: Path(".actionqa"))

    # Timing
    step_delay_ms: int = DEFAULT_STEP_DELAY_MS
    resolve_delay_ms: int = DEFAULT_RESOLVE_DELAY_MS
    max_tries: int = DEFAULT_MAX_TRIES

    # Behavior
    test_id_attribute: str = DEFAULT_TEST_ID_ATTRIBUTE
    headless: bool = True
    viewport: tuple[int, int] = DEFAULT_VIEWPORT
    debug: bool = False

    @classmethod
    def from_file(cls, config_path: Path) -> ActionQAConfig:
        """Load config from a YAML file."""
        if not config_path.exists():
            raise ActionQAConfigError(
                f"Config file not found: {config_path}\n\n"
                "To fix: create .actionqa/config.yaml or pass --config"
            )
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ActionQAConfigError(f"Config file must be a YAML mapping: {config_path}")
        return cls._from_dict(data, config_path.parent)

    @classmethod
    def _from_dict(cls, data: dict[str, Any], project_dir: Path) -> ActionQAConfig:
        """Create config from a dictionary."""
        config = cls()
        config.project_dir = project_dir

        if "base_url" in data:
            config.base_url = str(data["base_url"])
        if "speed" in data:
            config.step_delay_ms = speed_to_delay(data["speed"])
        if "step_delay_ms" in data:
            config.step_delay_ms = int(data["step_delay_ms"])
        if "resolve_delay_ms" in data:
            config.resolve_delay_ms = int(data["resolve_delay_ms"])
        if "max_tries" in data:
            config.max_tries = int(data["max_tries"])
        if "test_id_attribute" in data:
            config.test_id_attribute = str(data["test_id_attribute"])
        if "headless" in data:
            config.headless = bool(data["headless"])
        if "debug" in data:
            config.debug = bool(data["debug"])
        if "viewport" in data:
            vp = data["viewport"]
            if isinstance(vp, dict):
                config.viewport = (vp.get("width", 1280), vp.get("height", 720))

        config.validate()
        return config

    def validate(self) -> None:
        """Reject values the engine cannot run with."""
        if self.step_delay_ms < 0:
            raise ActionQAConfigError(f"step_delay_ms must be >= 0, got: {self.step_delay_ms}")
        if self.resolve_delay_ms < 0:
            raise ActionQAConfigError(f"resolve_delay_ms must be >= 0, got: {self.resolve_delay_ms}")
        if self.max_tries < 1:
            raise ActionQAConfigError(f"max_tries must be >= 1, got: {self.max_tries}")
        if not self.test_id_attribute:
            raise ActionQAConfigError("test_id_attribute must not be empty")


def speed_to_delay(speed: Any) -> int:
    """Map a speed preset name (slow, normal, fast) to a step delay in ms."""
    try:
        return int(TestSpeed[str(speed).strip().upper()])
    except KeyError:
        choices = ", ".join(s.name.lower() for s in TestSpeed)
        raise ActionQAConfigError(f"Unknown speed: {speed!r}\n\nExpected one of: {choices}") from None
