"""Named tests and reusable tasks.

A *test* is compiled once when registered, so a host UI can show its step tree
before anything runs, and is run by id.  A *task* is a reusable steps function:
called at top level it compiles and runs a fresh composite; called from inside
another task's or test's steps function it becomes a nested step instead.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable, Coroutine
from typing import Any

from actionqa.engine.actions import CompositeAction
from actionqa.engine.context import ExecutionContext
from actionqa.engine.errors import ActionQAError, ConcurrentRunRejectedError, UnknownTestError
from actionqa.models import EventName

logger = logging.getLogger("actionqa.engine.registry")


@dataclasses.dataclass
class RegisteredTest:
    """A test registered under an id, with its compiled root action."""

    id: str
    action: CompositeAction


class TaskHandle:
    """Callable returned by :meth:`TestRegistry.task`."""

    def __init__(self, context: ExecutionContext, task_id: str, steps_fn: Callable[..., Any]) -> None:
        self._context = context
        self.id = task_id
        self.steps_fn = steps_fn

    def __call__(self, params: Any = None) -> CompositeAction | Coroutine[Any, Any, CompositeAction]:
        """Nest into the composite being compiled, or return a coroutine that runs the task.

        Inside a steps function the call returns the nested action right away.
        At top level it returns a coroutine; await it to run the task.

        Raises:
            ConcurrentRunRejectedError: Called at top level while a run is in progress.
        """
        action = CompositeAction(self.id, self.steps_fn, params)
        compiler = self._context.compiler
        if compiler.is_compiling:
            compiler.add(action)
            compiler.compile(action)
            return action
        if self._context.runner.running:
            raise ConcurrentRunRejectedError(f"Not able to run task '{self.id}' while another test is running.")
        return self._run(action)

    async def _run(self, action: CompositeAction) -> CompositeAction:
        self._context.compiler.init(action)
        try:
            await self._context.runner.start(action)
        except ActionQAError as exc:
            logger.error("Error running task %s. %s", self.id, exc)
        return action

    def __repr__(self) -> str:
        return f"TaskHandle({self.id!r})"


class TestRegistry:
    """Maps test ids to compiled, runnable root actions."""

    __test__ = False  # keep pytest from collecting this class

    def __init__(self, context: ExecutionContext) -> None:
        self._context = context
        self._tests: dict[str, RegisteredTest] = {}

    @property
    def tests(self) -> list[RegisteredTest]:
        return list(self._tests.values())

    def __contains__(self, test_id: str) -> bool:
        return test_id in self._tests

    def get(self, test_id: str) -> RegisteredTest:
        try:
            return self._tests[test_id]
        except KeyError:
            raise UnknownTestError(f"Test with id {test_id} not found.") from None

    def task(self, task_id: str, steps_fn: Callable[..., Any]) -> TaskHandle:
        return TaskHandle(self._context, task_id, steps_fn)

    def test(self, test_id: str, steps_fn: Callable[..., Any]) -> RegisteredTest:
        """Compile *steps_fn* into a root action and register it under *test_id*."""
        action = CompositeAction(test_id, steps_fn)
        self._context.compiler.init(action)
        if test_id in self._tests:
            logger.warning("Test %s registered twice; keeping the latest definition", test_id)
        registered = RegisteredTest(id=test_id, action=action)
        self._tests[test_id] = registered
        self._context.bus.dispatch(EventName.REGISTER_TEST, {"id": test_id, "action": action.to_json()})
        return registered

    async def run_test(self, test_id: str) -> bool:
        """Run a registered test, publishing its pass/fail lifecycle.

        Returns True when the test passed.

        Raises:
            UnknownTestError: No test is registered under *test_id*.
            ConcurrentRunRejectedError: Another run is in progress.
        """
        registered = self.get(test_id)
        runner = self._context.runner
        if runner.running:
            raise ConcurrentRunRejectedError("Not able to run test while other test is running.")

        bus = self._context.bus
        action = registered.action
        # Recompile so a re-run starts from fresh step instances
        self._context.compiler.init(action)
        bus.dispatch(EventName.TEST_STARTED, {"id": test_id, "action": action.to_json()})
        try:
            await runner.start(action)
        except ActionQAError as exc:
            logger.error("Test %s failed: %s", test_id, exc)
            bus.dispatch(EventName.TEST_FAILED, {"id": test_id, "error": str(exc)})
            return False
        else:
            bus.dispatch(EventName.TEST_PASSED, {"id": test_id})
            return True
        finally:
            bus.dispatch(EventName.TEST_END, {"id": test_id})
