"""Suite file loading for the CLI.

A suite is a Python file exposing ``install(automation)``, which declares
elements, tasks and tests on the automation it is given::

    def install(qa):
        ok = qa.element("ok-button", "button")
        qa.test("click-ok", lambda: qa.click(ok))
"""

from __future__ import annotations

import importlib.util
import logging
from pathlib import Path

from actionqa.config import ActionQAConfig, ActionQAConfigError
from actionqa.dsl import Automation

logger = logging.getLogger("actionqa.cli.suite")


class SuiteLoadError(Exception):
    """Raised when a suite file cannot be imported or has no installer."""

    pass


def load_suite(path: Path, automation: Automation) -> Automation:
    """Import the suite at *path* and run its ``install`` function."""
    if not path.is_file():
        raise SuiteLoadError(f"Suite file not found: {path}")

    spec = importlib.util.spec_from_file_location(f"actionqa_suite_{path.stem}", path)
    if spec is None or spec.loader is None:
        raise SuiteLoadError(f"Not a Python module: {path}")
    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        raise SuiteLoadError(f"Failed to import suite {path}: {exc}") from exc

    installer = getattr(module, "install", None)
    if not callable(installer):
        raise SuiteLoadError(
            f"Suite {path} has no install(automation) function\n\n"
            "To fix: define `def install(qa): ...` that registers the suite's tests"
        )
    logger.info("Installing suite %s", path)
    return automation.setup([installer])


def resolve_config(config_path: Path | None) -> ActionQAConfig:
    """Load *config_path*, else ``.actionqa/config.yaml`` searched upward from cwd, else defaults."""
    if config_path is not None:
        return ActionQAConfig.from_file(config_path)

    current = Path.cwd()
    for base in [current, *current.parents]:
        candidate = base / ".actionqa" / "config.yaml"
        if candidate.is_file():
            return ActionQAConfig.from_file(candidate)
    return ActionQAConfig()


__all__ = ["ActionQAConfigError", "SuiteLoadError", "load_suite", "resolve_config"]
