"""ActionQA Element Resolver — bounded polling of UI element locators.

Turns a :class:`~actionqa.engine.elements.UIElementRef` into a live element
handle by querying its locator up to ``max_tries`` times, sleeping
``delay_ms`` between polls.  Parents are resolved first and their handle is
passed to the child's locator.  In ``until_removed`` mode the success
condition is inverted: the poll succeeds the first time the locator comes
back empty.

Every poll reports the try index on the owning action and publishes an
``action-update`` event so a host UI can render progress.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from actionqa.engine.errors import (
    ElementNotFoundError,
    ElementStillPresentError,
    ParentNotFoundError,
    ResolutionError,
)
from actionqa.engine.events import EventBus
from actionqa.engine.protocols import ElementHandle, maybe_await
from actionqa.models import DEFAULT_MAX_TRIES, DEFAULT_RESOLVE_DELAY_MS, EventName

if TYPE_CHECKING:
    from actionqa.engine.actions import ElementAction
    from actionqa.engine.elements import UIElementRef

logger = logging.getLogger("actionqa.engine.resolver")


class ElementResolver:
    """Polls locators until an element is found, confirmed removed, or tries run out."""

    def __init__(
        self,
        bus: EventBus,
        delay_ms: int = DEFAULT_RESOLVE_DELAY_MS,
        max_tries: int = DEFAULT_MAX_TRIES,
    ) -> None:
        """
        Args:
            bus: Event bus receiving an ``action-update`` per poll.
            delay_ms: Default pause between polls.
            max_tries: Default number of polls before giving up.
        """
        self._bus = bus
        self._delay_ms = delay_ms
        self._max_tries = max_tries

    async def resolve(
        self,
        action: ElementAction,
        ref: UIElementRef,
        delay_ms: int | None = None,
        max_tries: int | None = None,
        until_removed: bool = False,
    ) -> ElementHandle | None:
        """Resolve *ref* on behalf of *action*.

        Returns the element handle, or ``None`` when ``until_removed`` is set
        and the element is gone.

        Raises:
            ParentNotFoundError: The parent chain could not be resolved.  No
                poll of *ref*'s own locator happens in that case.
            ElementNotFoundError: Normal mode exhausted ``max_tries``.
            ElementStillPresentError: Removal mode exhausted ``max_tries``.
        """
        delay_ms = self._delay_ms if delay_ms is None else delay_ms
        max_tries = self._max_tries if max_tries is None else max_tries
        element_name = ref.element_name

        parent_element: ElementHandle | None = None
        if ref.parent is not None:
            logger.debug("Look for parent %s of %s", ref.parent.element_name, element_name)
            try:
                parent_element = await self.resolve(action, ref.parent)
            except ResolutionError as exc:
                raise ParentNotFoundError(
                    f"Parent {ref.parent.element_name} of UI Element {element_name} not found"
                ) from exc

        logger.debug("Looking for element %s", element_name)
        for index in range(max_tries):
            logger.debug("%s: try %d/%d", element_name, index, max_tries)
            action.update_tries(index)
            self._notify(action)

            element = await maybe_await(ref.locator(parent_element, ref.post_process))
            present = element is not None

            if until_removed and not present:
                logger.info("Element %s removed after %d tries", element_name, index)
                return None
            if not until_removed and present:
                logger.info("Element %s found after %d tries", element_name, index)
                return element

            if index < max_tries - 1:
                await asyncio.sleep(delay_ms / 1000)

        action.update_tries(max_tries)
        self._notify(action)
        if until_removed:
            raise ElementStillPresentError(f"UI Element {element_name} still present after {max_tries} tries")
        raise ElementNotFoundError(f"UI Element {element_name} not found after {max_tries} tries")

    def _notify(self, action: ElementAction) -> None:
        self._bus.dispatch(EventName.ACTION_UPDATE, {"action": action.to_json()})
