"""Live console output for CLI runs, driven by engine events."""

from __future__ import annotations

import dataclasses
import time
from typing import Any

from rich.console import Console

from actionqa.engine.events import EventBus
from actionqa.models import EventName

_FINISHED = ("success", "error")


@dataclasses.dataclass
class TestResult:
    """Outcome of one test as seen on the event bus."""

    __test__ = False  # keep pytest from collecting this class

    id: str
    passed: bool = False
    error: str = ""
    steps_passed: int = 0
    steps_failed: int = 0
    duration_seconds: float = 0.0
    saved_values: dict[str, str] = dataclasses.field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)


class ConsoleReporter:
    """Prints one line per finished step and collects per-test results."""

    def __init__(self, console: Console) -> None:
        self._console = console
        self._current: TestResult | None = None
        self._started_at = 0.0
        self.results: list[TestResult] = []

    def subscribe(self, bus: EventBus) -> None:
        bus.on(EventName.TEST_STARTED, self._on_test_started)
        bus.on(EventName.ACTION_UPDATE, self._on_action_update)
        bus.on(EventName.SAVE_VALUE, self._on_save_value)
        bus.on(EventName.TEST_PASSED, self._on_test_passed)
        bus.on(EventName.TEST_FAILED, self._on_test_failed)
        bus.on(EventName.TEST_END, self._on_test_end)

    # -- Handlers ------------------------------------------------------------

    def _on_test_started(self, payload: dict[str, Any]) -> None:
        self._current = TestResult(id=payload["id"])
        self._started_at = time.monotonic()
        self._console.print(f"\n[bold cyan]{payload['id']}[/bold cyan]")

    def _on_action_update(self, payload: dict[str, Any]) -> None:
        action = payload["action"]
        # Composite progress is implied by its children
        if action["type"] == "Action" or action["status"] not in _FINISHED:
            return
        if self._current is None:
            return
        if action["status"] == "success":
            self._current.steps_passed += 1
            self._console.print(f"  [bold green]✓[/bold green] {action['description']}")
        else:
            self._current.steps_failed += 1
            self._console.print(f"  [bold red]✗[/bold red] {action['description']}")
            error = action["error"]
            error_short = error if len(error) <= 120 else error[:117] + "..."
            self._console.print(f"    [dim red]{error_short}[/dim red]")

    def _on_save_value(self, payload: dict[str, Any]) -> None:
        if self._current is not None:
            self._current.saved_values[payload["memorySlotName"]] = payload["value"]

    def _on_test_passed(self, payload: dict[str, Any]) -> None:
        if self._current is not None:
            self._current.passed = True

    def _on_test_failed(self, payload: dict[str, Any]) -> None:
        if self._current is not None:
            self._current.passed = False
            self._current.error = payload.get("error", "")

    def _on_test_end(self, payload: dict[str, Any]) -> None:
        if self._current is None:
            return
        self._current.duration_seconds = time.monotonic() - self._started_at
        self.results.append(self._current)
        self._current = None
