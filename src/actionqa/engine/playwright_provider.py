"""ActionQA Playwright provider — ElementProvider over Playwright's async API.

Maps the engine's element capabilities onto a Playwright ``Page`` and its
``ElementHandle`` objects.  Visibility filtering mirrors what a user can see:
elements hidden with ``display: none`` never match a query.

Requires the ``browser`` extra (``pip install actionqa[browser]``) and a
Chromium install (``playwright install chromium``).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from actionqa.engine.protocols import ElementHandle, Filter, KeyEvent, PostProcess, maybe_await

if TYPE_CHECKING:
    from playwright.async_api import Page

logger = logging.getLogger("actionqa.engine.playwright_provider")

_HIGHLIGHT_STYLE = "0px 0px 5px 2px lightgreen"


class PlaywrightElementProvider:
    """Element provider backed by a live Playwright page."""

    def __init__(self, page: Page) -> None:
        self._page = page

    @property
    def page(self) -> Page:
        return self._page

    # -- Queries -------------------------------------------------------------

    async def query_all(self, parent: ElementHandle | None, query: str) -> list[ElementHandle]:
        root = parent if parent is not None else self._page
        return await root.query_selector_all(query)

    async def find(
        self,
        parent: ElementHandle | None,
        query: str,
        where: Filter | None = None,
        post_process: PostProcess | None = None,
    ) -> ElementHandle | None:
        """First displayed element matching *query* (and *where*), post-processed."""
        candidates = []
        for element in await self.query_all(parent, query):
            display = await element.evaluate("e => e.style.display")
            if display != "none":
                candidates.append(element)
        logger.debug("Query %r matched %d displayed elements", query, len(candidates))

        found: ElementHandle | None = None
        if where is None:
            found = candidates[0] if candidates else None
        else:
            for index, element in enumerate(candidates):
                if await maybe_await(where(element, index)):
                    found = element
                    break

        if found is not None and post_process is not None:
            found = await maybe_await(post_process(found))
        return found

    async def tag_name(self, element: ElementHandle) -> str:
        return await element.evaluate("e => e.tagName")

    async def get_text(self, element: ElementHandle) -> str:
        return await element.inner_text()

    async def get_value(self, element: ElementHandle) -> str:
        value = await element.evaluate("e => e.value")
        return "" if value is None else str(value)

    # -- Mutations -----------------------------------------------------------

    async def set_value(self, element: ElementHandle, value: str) -> None:
        await element.evaluate("(e, v) => { e.value = v }", value)

    async def set_attribute(self, element: ElementHandle, name: str, value: str) -> None:
        await element.evaluate("(e, [n, v]) => e.setAttribute(n, v)", [name, value])

    async def click(self, element: ElementHandle) -> None:
        await element.click()

    async def dispatch_event(self, element: ElementHandle, event_type: str) -> None:
        await element.dispatch_event(event_type)

    async def dispatch_key(self, element: ElementHandle, event: KeyEvent) -> None:
        await element.evaluate(
            "(e, init) => e.dispatchEvent(new KeyboardEvent('keydown', init))",
            event.to_init(),
        )

    # -- Page ----------------------------------------------------------------

    async def page_html(self) -> str:
        return await self._page.evaluate("() => document.body ? document.body.innerHTML : ''")

    async def page_url(self) -> str:
        return self._page.url

    # -- Visual hooks --------------------------------------------------------

    async def highlight(self, element: ElementHandle, name: str) -> None:
        try:
            await element.scroll_into_view_if_needed()
            await element.evaluate(
                "(e, s) => { e.dataset.aqaShadow = e.style.boxShadow; e.style.boxShadow = s }",
                _HIGHLIGHT_STYLE,
            )
        except Exception as exc:
            # Overlay failures must not fail the step
            logger.debug("Highlight of %s failed: %s", name, exc)

    async def clear_highlight(self, element: ElementHandle) -> None:
        try:
            await element.evaluate(
                "e => { if ('aqaShadow' in e.dataset) { e.style.boxShadow = e.dataset.aqaShadow; delete e.dataset.aqaShadow } }"
            )
        except Exception as exc:
            logger.debug("Clearing highlight failed: %s", exc)


async def open_page(url: str, headless: bool = True, viewport: tuple[int, int] = (1280, 720)) -> tuple[Any, Any, Page]:
    """Launch Chromium and open *url*.

    Returns ``(playwright, browser, page)``; pass the first two to
    :func:`close_page` when done.
    """
    from playwright.async_api import async_playwright

    playwright = await async_playwright().start()
    browser = await playwright.chromium.launch(headless=headless)
    context = await browser.new_context(viewport={"width": viewport[0], "height": viewport[1]})
    page = await context.new_page()
    if url:
        await page.goto(url)
    return playwright, browser, page


async def close_page(playwright: Any, browser: Any) -> None:
    """Close the browser and Playwright, ignoring teardown errors."""
    try:
        if browser is not None:
            await browser.close()
    except Exception:
        pass
    try:
        if playwright is not None:
            await playwright.stop()
    except Exception:
        pass
