"""ActionQA DSL — the surface test authors write against.

An :class:`Automation` bundles one execution context (event bus, compiler,
runner, element provider) with the DSL verbs that build actions in it::

    qa = Automation(provider)
    ok_button = qa.element("ok-button", "button")

    qa.test("click-ok", lambda: qa.click(ok_button))
    passed = await qa.run_test("click-ok")

Verbs such as :meth:`Automation.click` only record an action into the task or
test currently being compiled; nothing touches the page until the test runs.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

from actionqa.config import ActionQAConfig
from actionqa.engine.actions import (
    Action,
    AssertContainsTextAction,
    AssertExistsAction,
    AssertNotExistsAction,
    AssertTextIsAction,
    AssertValueIsAction,
    ClickAction,
    PressDownKeyAction,
    PressEscKeyAction,
    PressTabKeyAction,
    SaveValueAction,
    SelectAction,
    TypeAction,
    TypePasswordAction,
    WaitAction,
    WaitUntilElementRemovedAction,
)
from actionqa.engine.context import ExecutionContext
from actionqa.engine.elements import QueryLocator, UIElementRef
from actionqa.engine.events import EventBus, EventHandler
from actionqa.engine.protocols import ElementProvider, Filter, PostProcess
from actionqa.engine.registry import RegisteredTest, TaskHandle, TestRegistry
from actionqa.engine.runner import Runner
from actionqa.models import EventName


class _Target:
    """``verb(value).in_(ref)`` builder."""

    def __init__(self, add: Callable[[Action], None], build: Callable[[UIElementRef], Action]) -> None:
        self._add = add
        self._build = build

    def in_(self, ui_element: UIElementRef) -> None:
        self._add(self._build(ui_element))


class _SaveTarget:
    def __init__(self, add: Callable[[Action], None], ui_element: UIElementRef) -> None:
        self._add = add
        self._ui_element = ui_element

    def in_(self, memory_slot_name: str) -> None:
        self._add(SaveValueAction(self._ui_element, memory_slot_name))


class _Assertions:
    """Assertions available on ``assert_that(ref)``."""

    def __init__(self, add: Callable[[Action], None], ui_element: UIElementRef) -> None:
        self._add = add
        self._ui_element = ui_element

    def text_is(self, text: str) -> None:
        self._add(AssertTextIsAction(self._ui_element, text))

    def contains_text(self, text: str) -> None:
        self._add(AssertContainsTextAction(self._ui_element, text))

    def value_is(self, value: str) -> None:
        self._add(AssertValueIsAction(self._ui_element, value))

    def exists(self) -> None:
        self._add(AssertExistsAction(self._ui_element))

    def not_exists(self) -> None:
        self._add(AssertNotExistsAction(self._ui_element))


class _RemovalWait:
    def __init__(self, add: Callable[[Action], None], ui_element: UIElementRef) -> None:
        self._add = add
        self._ui_element = ui_element

    def is_removed(self) -> None:
        self._add(WaitUntilElementRemovedAction(self._ui_element))


class _Wait:
    """``wait(ms)`` and ``wait.until_element(ref).is_removed()``."""

    def __init__(self, add: Callable[[Action], None]) -> None:
        self._add = add

    def __call__(self, milliseconds: int) -> None:
        self._add(WaitAction(milliseconds))

    def until_element(self, ui_element: UIElementRef) -> _RemovalWait:
        return _RemovalWait(self._add, ui_element)


class Automation:
    """One independent ActionQA engine plus its DSL."""

    def __init__(
        self,
        provider: ElementProvider | None = None,
        config: ActionQAConfig | None = None,
    ) -> None:
        self.context = ExecutionContext(provider=provider, config=config)
        self.registry = TestRegistry(self.context)
        self.wait = _Wait(self._add)

    # -- Setup ---------------------------------------------------------------

    def attach(self, provider: ElementProvider) -> None:
        """Attach (or replace) the element provider actions run against."""
        self.context.provider = provider

    def setup(self, tests: Iterable[Callable[[Automation], Any]] = ()) -> Automation:
        """Call each installer with this automation so it can register its tests."""
        for installer in tests:
            installer(self)
        return self

    @property
    def config(self) -> ActionQAConfig:
        return self.context.config

    @property
    def events(self) -> EventBus:
        return self.context.bus

    @property
    def runner(self) -> Runner:
        return self.context.runner

    def on(self, event: EventName | str, handler: EventHandler) -> None:
        self.context.bus.on(event, handler)

    def off(self, event: EventName | str, handler: EventHandler) -> None:
        self.context.bus.off(event, handler)

    # -- Elements ------------------------------------------------------------

    def element(
        self,
        name: str,
        query: str,
        where: Filter | None = None,
        child_of: UIElementRef | None = None,
        post_process: PostProcess | None = None,
    ) -> UIElementRef:
        """Declare a UI element located by *query* through the element provider."""
        return UIElementRef(
            name=name,
            locator=QueryLocator(self.context, query, where),
            parent=child_of,
            post_process=post_process,
        )

    # -- Tests and tasks -----------------------------------------------------

    def task(self, task_id: str, steps_fn: Callable[..., Any]) -> TaskHandle:
        return self.registry.task(task_id, steps_fn)

    def test(self, test_id: str, steps_fn: Callable[..., Any]) -> RegisteredTest:
        return self.registry.test(test_id, steps_fn)

    async def run_test(self, test_id: str) -> bool:
        return await self.registry.run_test(test_id)

    # -- Action verbs --------------------------------------------------------

    def _add(self, action: Action) -> None:
        self.context.compiler.add(action)

    def click(self, ui_element: UIElementRef) -> None:
        self._add(ClickAction(ui_element))

    def assert_that(self, ui_element: UIElementRef) -> _Assertions:
        return _Assertions(self._add, ui_element)

    def select(self, value: str) -> _Target:
        return _Target(self._add, lambda ref: SelectAction(ref, value))

    def type(self, value: str) -> _Target:
        return _Target(self._add, lambda ref: TypeAction(ref, value))

    def type_password(self, value: str) -> _Target:
        return _Target(self._add, lambda ref: TypePasswordAction(ref, value))

    def clear_value(self) -> _Target:
        return _Target(self._add, lambda ref: TypeAction(ref, ""))

    def press_esc_key(self) -> _Target:
        return _Target(self._add, PressEscKeyAction)

    def press_down_key(self) -> _Target:
        return _Target(self._add, PressDownKeyAction)

    def press_tab_key(self) -> _Target:
        return _Target(self._add, PressTabKeyAction)

    def save_value(self, ui_element: UIElementRef) -> _SaveTarget:
        return _SaveTarget(self._add, ui_element)

    # -- Run control ---------------------------------------------------------

    @property
    def is_playing(self) -> bool:
        return self.runner.is_playing

    @property
    def is_paused(self) -> bool:
        return self.runner.is_paused

    @property
    def is_stopped(self) -> bool:
        return self.runner.is_stopped

    @property
    def is_step_by_step_mode(self) -> bool:
        return self.runner.is_step_by_step_mode

    def pause(self) -> None:
        self.runner.pause()

    def resume(self) -> None:
        self.runner.resume()

    def next(self) -> None:
        self.runner.next()

    def stop(self) -> None:
        self.runner.stop()
