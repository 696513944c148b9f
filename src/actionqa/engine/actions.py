"""ActionQA Actions — the units of work a test is made of.

Every action shares an envelope (id, status, error, before/after context) and
the :meth:`Action.execute` contract: mark running, snapshot the page, publish,
run the variant effect, record the outcome, snapshot again, publish.

Three structural kinds:

- :class:`CompositeAction`: an ordered list of child actions produced by a
  steps function, executed strictly one after the other.
- :class:`ElementAction`: resolves one UI element, then acts on it (click,
  type, assert, ...).
- :class:`WaitAction`: a plain delay.
"""

from __future__ import annotations

import abc
import asyncio
import dataclasses
import datetime as dt
import enum
import logging
import uuid
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from actionqa.engine.errors import (
    ActionFailedError,
    AssertionFailedError,
    ElementNotFoundError,
    InputControlNotFoundError,
    ParentNotFoundError,
)
from actionqa.engine.protocols import ElementHandle, KeyEvent, maybe_await
from actionqa.models import EDITABLE_TAGS, INPUT_ID_ATTRIBUTE, KEYS, EventName

if TYPE_CHECKING:
    from actionqa.engine.context import ExecutionContext
    from actionqa.engine.elements import UIElementRef

logger = logging.getLogger("actionqa.engine.actions")


class ActionStatus(str, enum.Enum):
    WAITING = "waiting"
    RUNNING = "running"
    SUCCESS = "success"
    ERROR = "error"


def _now() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat(timespec="milliseconds")


@dataclasses.dataclass
class ActionContext:
    """Page state captured around one execution of an action."""

    url: str = ""
    before_html: str = ""
    before_input_snapshot: dict[str, str] = dataclasses.field(default_factory=dict)
    after_html: str = ""
    after_input_snapshot: dict[str, str] = dataclasses.field(default_factory=dict)
    start_timestamp: str = ""
    end_timestamp: str = ""

    def to_json(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "beforeHTML": self.before_html,
            "beforeInputSnapshot": dict(self.before_input_snapshot),
            "afterHTML": self.after_html,
            "afterInputSnapshot": dict(self.after_input_snapshot),
            "startTimestamp": self.start_timestamp,
            "endTimestamp": self.end_timestamp,
        }


async def _input_snapshot(ctx: ExecutionContext) -> dict[str, str]:
    """Tag every input with a synthetic id and map that id to its current value."""
    provider = ctx.provider
    if provider is None:
        return {}
    snapshot: dict[str, str] = {}
    inputs = await maybe_await(provider.query_all(None, "input")) or []
    for index, element in enumerate(inputs):
        input_id = f"value-id-{index}"
        await maybe_await(provider.set_attribute(element, INPUT_ID_ATTRIBUTE, input_id))
        snapshot[input_id] = await maybe_await(provider.get_value(element))
    return snapshot


async def _page_html(ctx: ExecutionContext) -> str:
    if ctx.provider is None:
        return ""
    return await maybe_await(ctx.provider.page_html())


async def _page_url(ctx: ExecutionContext) -> str:
    if ctx.provider is None:
        return ""
    return await maybe_await(ctx.provider.page_url())


# ---------------------------------------------------------------------------
# Base action
# ---------------------------------------------------------------------------


class Action(abc.ABC):
    """Abstract unit of test work with identity, status and captured context."""

    TYPE = ""

    def __init__(self) -> None:
        self.id = str(uuid.uuid4())
        self.status = ActionStatus.WAITING
        self.error = ""
        self.context = ActionContext()

    @property
    @abc.abstractmethod
    def description(self) -> str:
        """Human-readable summary used in logs and error messages."""

    @abc.abstractmethod
    def to_json(self) -> dict[str, Any]:
        """Serialize to the JSON shape published on the event bus."""

    @abc.abstractmethod
    async def execute_action(self, ctx: ExecutionContext) -> None:
        """Perform the variant-specific effect."""

    def reset_action(self) -> None:
        """Clear variant-specific transient state."""

    def reset(self) -> None:
        self.status = ActionStatus.WAITING
        self.error = ""
        self.reset_action()

    async def execute(self, ctx: ExecutionContext) -> None:
        """Run the action, recording its outcome.

        Raises:
            ActionFailedError: wrapping whatever the effect raised, with this
                action's description prepended.
        """
        try:
            self.status = ActionStatus.RUNNING
            self.context = ActionContext(
                url=await _page_url(ctx),
                before_input_snapshot=await _input_snapshot(ctx),
                before_html=await _page_html(ctx),
                start_timestamp=_now(),
            )
            self.notify(ctx)
            logger.info("Action: %s", self.description)
            await self.execute_action(ctx)
            self.status = ActionStatus.SUCCESS
            self.error = ""
        except Exception as exc:
            self.status = ActionStatus.ERROR
            self.error = str(exc)
            raise ActionFailedError(f"Error in Action {self.description}. Message: {exc}") from exc
        finally:
            try:
                self.context.after_input_snapshot = await _input_snapshot(ctx)
                self.context.after_html = await _page_html(ctx)
            except Exception as exc:
                # The effect may have navigated away; keep the partial context
                logger.warning("Could not capture page state after %s: %s", self.description, exc)
            self.context.end_timestamp = _now()
            self.notify(ctx)

    def notify(self, ctx: ExecutionContext) -> None:
        ctx.bus.dispatch(EventName.ACTION_UPDATE, {"action": self.to_json()})

    def _base_json(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.TYPE,
            "description": self.description,
            "status": self.status.value,
            "error": self.error,
            "context": self.context.to_json(),
        }

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.description!r} {self.status.value}>"


# ---------------------------------------------------------------------------
# Composite action
# ---------------------------------------------------------------------------


class CompositeAction(Action):
    """An ordered list of child actions generated by a steps function."""

    TYPE = "Action"

    def __init__(self, name: str, steps_fn: Callable[..., Any], params: Any = None) -> None:
        super().__init__()
        self.name = name
        self.steps_fn = steps_fn
        self.params = params
        self.steps: list[Action] = []
        self.index = 0

    @property
    def description(self) -> str:
        return self.name

    def set_params(self, params: Any = None) -> None:
        self.params = params

    def add_step(self, action: Action) -> None:
        self.steps.append(action)

    def compile_steps(self) -> None:
        """Regenerate ``steps`` from the steps function.

        DSL calls made by the steps function append to this action, so the
        caller must have made it the compiler's current action.
        """
        self.reset()
        if self.params is None:
            self.steps_fn()
        else:
            self.steps_fn(self.params)

    def reset_action(self) -> None:
        self.steps.clear()
        self.index = 0

    async def execute_action(self, ctx: ExecutionContext) -> None:
        self.index = 0
        while self.index < len(self.steps):
            await ctx.runner.checkpoint()
            await asyncio.sleep(ctx.config.step_delay_ms / 1000)
            await self.steps[self.index].execute(ctx)
            self.index += 1
            ctx.runner.step_completed()

    def to_json(self) -> dict[str, Any]:
        data = self._base_json()
        data["params"] = self.params
        data["steps"] = [step.to_json() for step in self.steps]
        return data


# ---------------------------------------------------------------------------
# Element actions
# ---------------------------------------------------------------------------


class ElementAction(Action):
    """An action whose effect targets one resolved UI element."""

    until_removed = False

    def __init__(self, ui_element: UIElementRef) -> None:
        super().__init__()
        self.ui_element = ui_element
        self.element: ElementHandle | None = None
        self.tries = 0

    @property
    def element_name(self) -> str:
        return self.ui_element.element_name

    def update_tries(self, tries: int) -> None:
        self.tries = tries

    def reset_action(self) -> None:
        self.element = None
        self.tries = 0

    async def locate(self, ctx: ExecutionContext) -> ElementHandle | None:
        return await ctx.resolver.resolve(self, self.ui_element, until_removed=self.until_removed)

    async def execute_action(self, ctx: ExecutionContext) -> None:
        self.element = await self.locate(ctx)
        if self.element is None:
            await self.execute_action_on_element(ctx)
            return

        provider = ctx.require_provider()
        await maybe_await(provider.set_attribute(self.element, ctx.config.test_id_attribute, self.element_name))
        await maybe_await(provider.highlight(self.element, self.element_name))
        try:
            await self.execute_action_on_element(ctx)
        finally:
            await maybe_await(provider.clear_highlight(self.element))

    @abc.abstractmethod
    async def execute_action_on_element(self, ctx: ExecutionContext) -> None:
        """Act on ``self.element`` once it has been resolved."""

    async def editable_control(self, ctx: ExecutionContext, purpose: str) -> ElementHandle:
        """The element itself when it accepts a value, else its first ``<input>``."""
        provider = ctx.require_provider()
        tag = await maybe_await(provider.tag_name(self.element))
        if str(tag).upper() in EDITABLE_TAGS:
            return self.element
        inputs = await maybe_await(provider.query_all(self.element, "input")) or []
        if not inputs:
            raise InputControlNotFoundError(
                f"Input element not found. Not able to {purpose} element {self.element_name}"
            )
        return inputs[0]

    def to_json(self) -> dict[str, Any]:
        data = self._base_json()
        data["element"] = self.element_name
        data["tries"] = self.tries
        return data


class ClickAction(ElementAction):
    TYPE = "Click"

    @property
    def description(self) -> str:
        return f"Click in {self.element_name}"

    async def execute_action_on_element(self, ctx: ExecutionContext) -> None:
        await maybe_await(ctx.require_provider().click(self.element))


class _ValueEntryAction(ElementAction):
    """Assigns a value to an editable control and notifies listeners."""

    events: tuple[str, ...] = ("change",)

    def __init__(self, ui_element: UIElementRef, value: str) -> None:
        super().__init__(ui_element)
        self.value = value

    async def execute_action_on_element(self, ctx: ExecutionContext) -> None:
        provider = ctx.require_provider()
        control = await self.editable_control(ctx, "type value in")
        await maybe_await(provider.set_value(control, self.value))
        for event_type in self.events:
            await maybe_await(provider.dispatch_event(control, event_type))

    def to_json(self) -> dict[str, Any]:
        data = super().to_json()
        data["value"] = self.value
        return data


class SelectAction(_ValueEntryAction):
    TYPE = "Select"

    @property
    def description(self) -> str:
        return f"Select value '{self.value}' in {self.element_name}"


class TypeAction(_ValueEntryAction):
    TYPE = "Type"
    events = ("change", "keyup")

    @property
    def description(self) -> str:
        return f"Type value '{self.value}' in {self.element_name}"


class TypePasswordAction(_ValueEntryAction):
    TYPE = "TypePassword"

    @property
    def description(self) -> str:
        return f"Type a password in {self.element_name}"


class _PressKeyAction(ElementAction):
    """Dispatches a synthetic keydown on the element."""

    KEY = ""
    KEY_LABEL = ""

    @property
    def description(self) -> str:
        return f"Press {self.KEY_LABEL} key in {self.element_name}"

    @property
    def key_event(self) -> KeyEvent:
        key, code, key_code = KEYS[self.KEY]
        return KeyEvent(key=key, code=code, key_code=key_code)

    async def execute_action_on_element(self, ctx: ExecutionContext) -> None:
        await maybe_await(ctx.require_provider().dispatch_key(self.element, self.key_event))


class PressEscKeyAction(_PressKeyAction):
    TYPE = "PressEscKey"
    KEY = "escape"
    KEY_LABEL = "Esc"


class PressDownKeyAction(_PressKeyAction):
    TYPE = "PressDownKey"
    KEY = "down"
    KEY_LABEL = "Down"


class PressTabKeyAction(_PressKeyAction):
    TYPE = "PressTabKey"
    KEY = "tab"
    KEY_LABEL = "Tab"


class AssertTextIsAction(ElementAction):
    TYPE = "AssertTextIsAction"

    def __init__(self, ui_element: UIElementRef, text: str) -> None:
        super().__init__(ui_element)
        self.text = text

    @property
    def description(self) -> str:
        return f"Assert that text in {self.element_name} is '{self.text}'"

    async def execute_action_on_element(self, ctx: ExecutionContext) -> None:
        actual = str(await maybe_await(ctx.require_provider().get_text(self.element))).strip()
        if actual != self.text:
            raise AssertionFailedError(
                f"Text in element {self.element_name} is not '{self.text}' (found '{actual}')"
            )

    def to_json(self) -> dict[str, Any]:
        data = super().to_json()
        data["value"] = self.text
        return data


class AssertContainsTextAction(AssertTextIsAction):
    TYPE = "AssertContainsText"

    @property
    def description(self) -> str:
        return f"Assert that {self.element_name} contains '{self.text}'"

    async def execute_action_on_element(self, ctx: ExecutionContext) -> None:
        actual = str(await maybe_await(ctx.require_provider().get_text(self.element))).strip()
        if self.text not in actual:
            raise AssertionFailedError(f"Text in element {self.element_name} doesn't contain '{self.text}'")


class AssertValueIsAction(ElementAction):
    TYPE = "AssertValueIsAction"

    def __init__(self, ui_element: UIElementRef, value: str) -> None:
        super().__init__(ui_element)
        self.value = value

    @property
    def description(self) -> str:
        return f"Assert that value in {self.element_name} is '{self.value}'"

    async def execute_action_on_element(self, ctx: ExecutionContext) -> None:
        actual = await maybe_await(ctx.require_provider().get_value(self.element))
        if actual != self.value:
            raise AssertionFailedError(
                f"Value in element {self.element_name} is not '{self.value}' (found '{actual}')"
            )

    def to_json(self) -> dict[str, Any]:
        data = super().to_json()
        data["value"] = self.value
        return data


class AssertExistsAction(ElementAction):
    TYPE = "AssertExistsAction"

    @property
    def description(self) -> str:
        return f"Assert that {self.element_name} exists"

    async def execute_action_on_element(self, ctx: ExecutionContext) -> None:
        if self.element is None:
            raise AssertionFailedError(f"Element {self.element_name} doesn't exist")


class AssertNotExistsAction(ElementAction):
    TYPE = "AssertNotExistsAction"

    @property
    def description(self) -> str:
        return f"Assert that {self.element_name} doesn't exist"

    async def locate(self, ctx: ExecutionContext) -> ElementHandle | None:
        try:
            return await super().locate(ctx)
        except (ElementNotFoundError, ParentNotFoundError):
            return None

    async def execute_action_on_element(self, ctx: ExecutionContext) -> None:
        if self.element is not None:
            raise AssertionFailedError(f"Element {self.element_name} exists")


class SaveValueAction(ElementAction):
    TYPE = "SaveValue"

    def __init__(self, ui_element: UIElementRef, memory_slot_name: str) -> None:
        super().__init__(ui_element)
        self.memory_slot_name = memory_slot_name

    @property
    def description(self) -> str:
        return f"Save value of {self.element_name} in {self.memory_slot_name}"

    async def execute_action_on_element(self, ctx: ExecutionContext) -> None:
        control = await self.editable_control(ctx, "save value from")
        value = await maybe_await(ctx.require_provider().get_value(control))
        ctx.bus.dispatch(EventName.SAVE_VALUE, {"memorySlotName": self.memory_slot_name, "value": value})

    def to_json(self) -> dict[str, Any]:
        data = super().to_json()
        data["memorySlotName"] = self.memory_slot_name
        return data


class WaitUntilElementRemovedAction(ElementAction):
    TYPE = "WaitUntilElementRemoved"
    until_removed = True

    @property
    def description(self) -> str:
        return f"Wait until {self.element_name} is removed"

    async def execute_action_on_element(self, ctx: ExecutionContext) -> None:
        pass


# ---------------------------------------------------------------------------
# Timed action
# ---------------------------------------------------------------------------


class WaitAction(Action):
    TYPE = "Wait"

    def __init__(self, duration_ms: int) -> None:
        super().__init__()
        self.duration_ms = duration_ms

    @property
    def description(self) -> str:
        return f"Wait {self.duration_ms} milliseconds"

    async def execute_action(self, ctx: ExecutionContext) -> None:
        await asyncio.sleep(self.duration_ms / 1000)

    def to_json(self) -> dict[str, Any]:
        data = self._base_json()
        data["value"] = self.duration_ms
        return data
