"""ActionQA engine — action execution core.

Provides the complete execution engine:
- Actions: composite, element and timed actions with before/after context capture
- ElementResolver: bounded polling of element locators, parent chains first
- Compiler: expands composite steps functions into concrete step lists
- Runner: runs one top-level action at a time with play/pause/step/stop control
- EventBus: synchronous lifecycle notifications for host UIs
- TestRegistry: named tests and reusable tasks
- ElementProvider: the only contract the engine has with the DOM

The Playwright binding is NOT eagerly imported here because it depends on the
optional ``browser`` extra:
  from actionqa.engine.playwright_provider import PlaywrightElementProvider
"""

from actionqa.engine.actions import (
    Action,
    ActionContext,
    ActionStatus,
    AssertContainsTextAction,
    AssertExistsAction,
    AssertNotExistsAction,
    AssertTextIsAction,
    AssertValueIsAction,
    ClickAction,
    CompositeAction,
    ElementAction,
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
from actionqa.engine.compiler import Compiler
from actionqa.engine.context import ExecutionContext
from actionqa.engine.elements import QueryLocator, UIElementRef
from actionqa.engine.errors import (
    ActionFailedError,
    ActionQAError,
    AssertionFailedError,
    CompilationError,
    ConcurrentRunRejectedError,
    ElementNotFoundError,
    ElementStillPresentError,
    InputControlNotFoundError,
    ParentNotFoundError,
    ResolutionError,
    RunStoppedError,
    UnknownTestError,
)
from actionqa.engine.events import EventBus
from actionqa.engine.protocols import ElementProvider, KeyEvent
from actionqa.engine.registry import RegisteredTest, TaskHandle, TestRegistry
from actionqa.engine.resolver import ElementResolver
from actionqa.engine.runner import PlayStatus, RunMode, Runner

__all__ = [
    "Action",
    "ActionContext",
    "ActionFailedError",
    "ActionQAError",
    "ActionStatus",
    "AssertContainsTextAction",
    "AssertExistsAction",
    "AssertNotExistsAction",
    "AssertTextIsAction",
    "AssertValueIsAction",
    "AssertionFailedError",
    "ClickAction",
    "CompilationError",
    "Compiler",
    "CompositeAction",
    "ConcurrentRunRejectedError",
    "ElementAction",
    "ElementNotFoundError",
    "ElementProvider",
    "ElementResolver",
    "ElementStillPresentError",
    "EventBus",
    "ExecutionContext",
    "InputControlNotFoundError",
    "KeyEvent",
    "ParentNotFoundError",
    "PlayStatus",
    "PressDownKeyAction",
    "PressEscKeyAction",
    "PressTabKeyAction",
    "QueryLocator",
    "RegisteredTest",
    "ResolutionError",
    "RunMode",
    "RunStoppedError",
    "Runner",
    "SaveValueAction",
    "SelectAction",
    "TaskHandle",
    "TestRegistry",
    "TypeAction",
    "TypePasswordAction",
    "UIElementRef",
    "UnknownTestError",
    "WaitAction",
    "WaitUntilElementRemovedAction",
]
