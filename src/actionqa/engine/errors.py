"""Exceptions raised by the ActionQA engine."""

from __future__ import annotations


class ActionQAError(Exception):
    """Base class for all engine errors."""


# -- Resolution --------------------------------------------------------------


class ResolutionError(ActionQAError):
    """A UI element could not be brought into the expected state."""


class ElementNotFoundError(ResolutionError):
    """Resolution exhausted its tries without the locator producing an element."""


class ElementStillPresentError(ResolutionError):
    """A removal wait exhausted its tries while the element was still present."""


class ParentNotFoundError(ResolutionError):
    """The parent of a UI element could not be resolved."""


# -- Effects -----------------------------------------------------------------


class InputControlNotFoundError(ActionQAError):
    """No editable control exists at or under the target element."""


class AssertionFailedError(ActionQAError):
    """A text, value or existence assertion did not hold."""


class ActionFailedError(ActionQAError):
    """An action failed; wraps the underlying error with the action's description."""

    @property
    def root_cause(self) -> BaseException:
        """The innermost error, unwrapping nested action failures."""
        exc: BaseException = self
        while isinstance(exc, ActionFailedError) and exc.__cause__ is not None:
            exc = exc.__cause__
        return exc


# -- Compilation and run control ---------------------------------------------


class CompilationError(ActionQAError):
    """A DSL call was made with no composite action being compiled."""


class ConcurrentRunRejectedError(ActionQAError):
    """A top-level run was requested while another one is in progress."""


class RunStoppedError(ActionQAError):
    """The run was stopped through run control before all steps executed."""


class UnknownTestError(ActionQAError):
    """A run was requested for a test id that was never registered."""
