"""Element provider protocol.

The engine never touches a document directly.  Everything it needs from the
DOM goes through an :class:`ElementProvider`: a browser binding
(:class:`~actionqa.engine.playwright_provider.PlaywrightElementProvider`), a
headless driver, or an in-memory test double can each satisfy it.

Every method may be a plain function or a coroutine function; the engine
awaits whatever comes back through :func:`maybe_await`.
"""

from __future__ import annotations

import dataclasses
import inspect
from collections.abc import Callable
from typing import Any, Protocol, TypeVar, Union, runtime_checkable

ElementHandle = Any
"""Opaque element reference owned by the provider."""

PostProcess = Callable[[ElementHandle], Any]
Filter = Callable[[ElementHandle, int], Any]

T = TypeVar("T")


async def maybe_await(value: Union[T, Any]) -> T:
    """Return *value*, awaiting it first when it is awaitable."""
    if inspect.isawaitable(value):
        return await value
    return value


@dataclasses.dataclass(frozen=True)
class KeyEvent:
    """Init dictionary for a synthetic ``keydown`` event."""

    key: str
    code: str
    key_code: int
    alt_key: bool = False
    ctrl_key: bool = False
    meta_key: bool = False
    shift_key: bool = False
    repeat: bool = False
    is_composing: bool = False
    location: int = 0
    char_code: int = 0

    def to_init(self) -> dict[str, Any]:
        """Event init dict in DOM ``KeyboardEventInit`` spelling."""
        return {
            "key": self.key,
            "code": self.code,
            "keyCode": self.key_code,
            "which": self.key_code,
            "charCode": self.char_code,
            "altKey": self.alt_key,
            "ctrlKey": self.ctrl_key,
            "metaKey": self.meta_key,
            "shiftKey": self.shift_key,
            "repeat": self.repeat,
            "isComposing": self.is_composing,
            "location": self.location,
        }


@runtime_checkable
class ElementProvider(Protocol):
    """DOM capabilities the engine depends on."""

    def find(
        self,
        parent: ElementHandle | None,
        query: str,
        where: Filter | None = None,
        post_process: PostProcess | None = None,
    ) -> Any: ...

    def query_all(self, parent: ElementHandle | None, query: str) -> Any: ...

    def tag_name(self, element: ElementHandle) -> Any: ...

    def get_text(self, element: ElementHandle) -> Any: ...

    def get_value(self, element: ElementHandle) -> Any: ...

    def set_value(self, element: ElementHandle, value: str) -> Any: ...

    def set_attribute(self, element: ElementHandle, name: str, value: str) -> Any: ...

    def click(self, element: ElementHandle) -> Any: ...

    def dispatch_event(self, element: ElementHandle, event_type: str) -> Any: ...

    def dispatch_key(self, element: ElementHandle, event: KeyEvent) -> Any: ...

    def page_html(self) -> Any: ...

    def page_url(self) -> Any: ...

    def highlight(self, element: ElementHandle, name: str) -> Any: ...

    def clear_highlight(self, element: ElementHandle) -> Any: ...
