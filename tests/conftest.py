"""Shared fixtures for ActionQA unit tests.

Engine tests run against :class:`FakeDOM`, a small in-memory element tree that
implements the element provider contract synchronously.  Queries support a
bare tag name (``button``) or an id (``#ok``).
"""

from __future__ import annotations

import asyncio
import itertools
from pathlib import Path
from typing import Any, Callable

import pytest
import yaml

from actionqa.config import ActionQAConfig
from actionqa.dsl import Automation
from actionqa.engine.events import EventBus
from actionqa.engine.protocols import KeyEvent
from actionqa.models import EventName


def run_async(coro):
    """Run an async coroutine synchronously for testing."""
    return asyncio.run(coro)


# ---------------------------------------------------------------------------
# In-memory DOM
# ---------------------------------------------------------------------------


class FakeElement:
    def __init__(
        self,
        tag: str,
        id: str = "",
        text: str = "",
        value: str = "",
        display: str = "",
        children: list[FakeElement] | None = None,
    ) -> None:
        self.tag = tag.upper()
        self.id = id
        self.text = text
        self.value = value
        self.display = display
        self.attrs: dict[str, str] = {}
        self.parent: FakeElement | None = None
        self.children: list[FakeElement] = []
        self.events: list[str] = []
        self.keys: list[KeyEvent] = []
        self.clicks = 0
        self.highlighted = False
        for child in children or []:
            self.append(child)

    def append(self, child: FakeElement) -> FakeElement:
        child.parent = self
        self.children.append(child)
        return child

    def remove(self) -> None:
        if self.parent is not None:
            self.parent.children.remove(self)
            self.parent = None

    def descendants(self):
        for child in self.children:
            yield child
            yield from child.descendants()

    def matches(self, query: str) -> bool:
        if query.startswith("#"):
            return self.id == query[1:]
        return self.tag == query.upper()

    def html(self) -> str:
        attrs = "".join(f' {k}="{v}"' for k, v in sorted(self.attrs.items()))
        if self.id:
            attrs = f' id="{self.id}"' + attrs
        inner = self.text + "".join(child.html() for child in self.children)
        return f"<{self.tag.lower()}{attrs}>{inner}</{self.tag.lower()}>"

    def __repr__(self) -> str:
        return f"<FakeElement {self.tag} #{self.id}>"


class FakeDOM:
    """Synchronous element provider over a :class:`FakeElement` tree."""

    def __init__(self, url: str = "http://app.test/") -> None:
        self.body = FakeElement("body")
        self.url = url
        self.find_calls = 0

    def add(self, element: FakeElement, parent: FakeElement | None = None) -> FakeElement:
        return (parent or self.body).append(element)

    # -- ElementProvider -------------------------------------------------------

    def query_all(self, parent, query):
        root = parent if parent is not None else self.body
        return [el for el in root.descendants() if el.matches(query)]

    def find(self, parent, query, where=None, post_process=None):
        self.find_calls += 1
        candidates = [el for el in self.query_all(parent, query) if el.display != "none"]
        if where is not None:
            candidates = [el for index, el in enumerate(candidates) if where(el, index)]
        found = candidates[0] if candidates else None
        if found is not None and post_process is not None:
            found = post_process(found)
        return found

    def tag_name(self, element):
        return element.tag

    def get_text(self, element):
        return element.text

    def get_value(self, element):
        return element.value

    def set_value(self, element, value):
        element.value = value

    def set_attribute(self, element, name, value):
        element.attrs[name] = value

    def click(self, element):
        element.clicks += 1
        element.events.append("click")

    def dispatch_event(self, element, event_type):
        element.events.append(event_type)

    def dispatch_key(self, element, event):
        element.keys.append(event)
        element.events.append("keydown")

    def page_html(self):
        return "".join(child.html() for child in self.body.children)

    def page_url(self):
        return self.url

    def highlight(self, element, name):
        element.highlighted = True

    def clear_highlight(self, element):
        element.highlighted = False


# ---------------------------------------------------------------------------
# Event recording
# ---------------------------------------------------------------------------


class EventLog:
    """Records every event published on a bus as ``(name, payload)`` pairs."""

    def __init__(self, bus: EventBus) -> None:
        self.entries: list[tuple[str, dict[str, Any]]] = []
        for name in EventName:
            bus.on(name, self._recorder(name.value))

    def _recorder(self, name: str) -> Callable[[dict[str, Any]], None]:
        return lambda payload: self.entries.append((name, payload))

    @property
    def names(self) -> list[str]:
        return [name for name, _ in self.entries]

    def payloads(self, name: str) -> list[dict[str, Any]]:
        return [payload for n, payload in self.entries if n == name]

    def contains_in_order(self, expected: list[str]) -> bool:
        """True when *expected* is a subsequence of the recorded names."""
        it = iter(self.names)
        return all(any(n == e for n in it) for e in expected)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fast_config() -> ActionQAConfig:
    """Config with no step or poll delays and a small retry budget."""
    return ActionQAConfig(step_delay_ms=0, resolve_delay_ms=0, max_tries=3)


@pytest.fixture
def dom() -> FakeDOM:
    return FakeDOM()


@pytest.fixture
def qa(dom: FakeDOM, fast_config: ActionQAConfig) -> Automation:
    return Automation(dom, fast_config)


@pytest.fixture
def events(qa: Automation) -> EventLog:
    return EventLog(qa.events)


@pytest.fixture
def tmp_project_dir(tmp_path: Path) -> Path:
    """Create a temporary .actionqa/ project directory with a config file."""
    project_dir = tmp_path / ".actionqa"
    project_dir.mkdir()
    config_data = {
        "base_url": "http://localhost:3000",
        "speed": "fast",
        "headless": True,
        "viewport": {"width": 1280, "height": 720},
    }
    (project_dir / "config.yaml").write_text(yaml.dump(config_data, default_flow_style=False), encoding="utf-8")
    return project_dir


_suite_counter = itertools.count()


@pytest.fixture
def write_suite(tmp_path: Path) -> Callable[[str], Path]:
    """Write suite source to a uniquely named file and return its path."""

    def _write(source: str) -> Path:
        path = tmp_path / f"suite_{next(_suite_counter)}.py"
        path.write_text(source, encoding="utf-8")
        return path

    return _write
