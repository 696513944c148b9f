"""UI element descriptors.

A :class:`UIElementRef` names one logical element and knows how to look it up,
optionally relative to a parent element.  Refs are immutable and shared by
every action that targets the same element.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Optional

from actionqa.engine.protocols import ElementHandle, Filter, PostProcess

if TYPE_CHECKING:
    from actionqa.engine.context import ExecutionContext

Locator = Callable[[Optional[ElementHandle], Optional[PostProcess]], Any]


@dataclasses.dataclass(frozen=True, eq=False)
class UIElementRef:
    """Named, possibly-parented descriptor of how to locate an element."""

    name: str
    locator: Locator
    parent: UIElementRef | None = None
    post_process: PostProcess | None = None

    @property
    def element_name(self) -> str:
        """Dotted chain of names from the root ref down to this one."""
        if self.parent is None:
            return self.name
        return f"{self.parent.element_name}.{self.name}"

    def __str__(self) -> str:
        return self.element_name


class QueryLocator:
    """Locator that asks the context's element provider for a query match.

    The provider is read at call time, so refs can be declared before a
    provider is attached to the engine.
    """

    def __init__(self, context: ExecutionContext, query: str, where: Filter | None = None) -> None:
        self._context = context
        self.query = query
        self.where = where

    def __call__(self, parent: ElementHandle | None, post_process: PostProcess | None = None) -> Any:
        return self._context.require_provider().find(parent, self.query, self.where, post_process)

    def __repr__(self) -> str:
        return f"QueryLocator({self.query!r})"
