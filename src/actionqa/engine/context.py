"""Per-engine execution state.

The event bus, the compiler's current-action pointer and the runner's running
flag all live on an :class:`ExecutionContext`, so independent engines can
coexist in one process.
"""

from __future__ import annotations

from actionqa.config import ActionQAConfig
from actionqa.engine.compiler import Compiler
from actionqa.engine.errors import ActionQAError
from actionqa.engine.events import EventBus
from actionqa.engine.protocols import ElementProvider
from actionqa.engine.resolver import ElementResolver
from actionqa.engine.runner import Runner


class ExecutionContext:
    def __init__(
        self,
        provider: ElementProvider | None = None,
        config: ActionQAConfig | None = None,
        bus: EventBus | None = None,
    ) -> None:
        self.provider = provider
        self.config = config or ActionQAConfig()
        self.bus = bus or EventBus()
        self.compiler = Compiler()
        self.runner = Runner(self)

    @property
    def resolver(self) -> ElementResolver:
        return ElementResolver(
            self.bus,
            delay_ms=self.config.resolve_delay_ms,
            max_tries=self.config.max_tries,
        )

    def require_provider(self) -> ElementProvider:
        if self.provider is None:
            raise ActionQAError("No element provider attached. Call Automation.attach(provider) before running.")
        return self.provider
