"""Expands composite actions into concrete step lists.

DSL calls such as ``click(ref)`` don't run anything; they append an action to
whichever composite is currently being compiled.  The compiler owns that
pointer and saves/restores it around nested compilations, so a steps function
may itself call a task that compiles a sub-composite.
"""

from __future__ import annotations

import logging

from actionqa.engine.actions import Action, CompositeAction
from actionqa.engine.errors import CompilationError

logger = logging.getLogger("actionqa.engine.compiler")


class Compiler:
    def __init__(self) -> None:
        self.current: CompositeAction | None = None
        self.is_compiling = False

    def init(self, action: CompositeAction) -> None:
        """Compile a top-level composite, flagging compilation as in progress."""
        was_compiling = self.is_compiling
        self.is_compiling = True
        logger.debug("Compile: %s", action.description)
        try:
            self.compile(action)
        finally:
            self.is_compiling = was_compiling
        logger.debug("Compilation finished: %s (%d steps)", action.description, len(action.steps))

    def compile(self, action: CompositeAction) -> None:
        """Make *action* current, regenerate its steps, restore the previous pointer."""
        previous = self.current
        self.current = action
        try:
            action.compile_steps()
        finally:
            self.current = previous

    def add(self, action: Action) -> None:
        """Append *action* to the composite being compiled."""
        if self.current is None:
            raise CompilationError(
                f"Cannot add '{action.description}': no task or test is being compiled. "
                "DSL calls must be made inside a task or test steps function."
            )
        logger.debug("Add action: %s", action.description)
        self.current.add_step(action)
