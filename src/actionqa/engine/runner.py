"""ActionQA Runner — drives one top-level action and owns run control.

Holds the engine-wide "something is running" flag, so a second top-level run
is rejected instead of queued, and the play/pause/step/stop state machine.

Pausing is cooperative: composite actions call :meth:`Runner.checkpoint`
before each child step, and the checkpoint suspends until the host resumes,
steps or stops.  An element action that is already polling or acting is never
interrupted.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from actionqa.engine.errors import ConcurrentRunRejectedError, RunStoppedError
from actionqa.models import EventName

if TYPE_CHECKING:
    from actionqa.engine.actions import CompositeAction
    from actionqa.engine.context import ExecutionContext

logger = logging.getLogger("actionqa.engine.runner")


class PlayStatus(str, enum.Enum):
    PLAYING = "Playing"
    STOPPED = "Stopped"
    PAUSED = "Paused"


class RunMode(str, enum.Enum):
    NORMAL = "Normal"
    STEP_BY_STEP = "Step By Step"


class Runner:
    """Executes top-level composite actions, one at a time."""

    def __init__(self, context: ExecutionContext) -> None:
        self._context = context
        self.running = False
        self.status = PlayStatus.STOPPED
        self.run_mode = RunMode.NORMAL
        self._resume = asyncio.Event()
        self._parked: Callable[[], Any] | None = None

    # -- Status queries -----------------------------------------------------

    @property
    def is_playing(self) -> bool:
        return self.status is PlayStatus.PLAYING

    @property
    def is_paused(self) -> bool:
        return self.status is PlayStatus.PAUSED

    @property
    def is_stopped(self) -> bool:
        return self.status is PlayStatus.STOPPED

    @property
    def is_step_by_step_mode(self) -> bool:
        return self.run_mode is RunMode.STEP_BY_STEP

    # -- Run ----------------------------------------------------------------

    async def start(self, root: CompositeAction) -> None:
        """Execute *root* to completion.

        Publishes ``start`` before and ``end`` after, the latter even when the
        run fails.  Failures are re-raised once ``end`` has been published.

        Raises:
            ConcurrentRunRejectedError: Another run is already in progress.
        """
        if self.running:
            raise ConcurrentRunRejectedError(
                f"Not able to run '{root.description}' while another test is running."
            )
        bus = self._context.bus
        self.running = True
        self.status = PlayStatus.PLAYING
        self._resume = asyncio.Event()
        logger.info("Start action: %s", root.description)
        try:
            bus.dispatch(EventName.START, {"action": root.to_json()})
            await root.execute(self._context)
        except Exception as exc:
            logger.error("Error running task %s. Reason: %s", root.description, exc)
            raise
        finally:
            self.running = False
            self.status = PlayStatus.STOPPED
            bus.dispatch(EventName.END, {"action": root.to_json()})

    async def checkpoint(self) -> None:
        """Suspend point taken before each composite step.

        Raises:
            RunStoppedError: The run was stopped through :meth:`stop`.
        """
        if not self.running:
            return
        while self.status is PlayStatus.PAUSED:
            logger.debug("Paused before next step")
            await self._resume.wait()
        if self.status is PlayStatus.STOPPED:
            raise RunStoppedError("Test stopped")

    def step_completed(self) -> None:
        """Re-pause after each step while in step-by-step mode."""
        if self.running and self.is_step_by_step_mode and self.is_playing:
            self.pause()

    # -- Control ------------------------------------------------------------

    def pause(self) -> None:
        logger.info("Pause test")
        self.status = PlayStatus.PAUSED
        self._resume.clear()

    def resume(self) -> None:
        logger.info("Continue test")
        self.status = PlayStatus.PLAYING
        self.run_mode = RunMode.NORMAL
        self._release()

    def next(self) -> None:
        logger.info("Continue test to next step")
        self.status = PlayStatus.PLAYING
        self.run_mode = RunMode.STEP_BY_STEP
        self._release()

    def stop(self) -> None:
        logger.info("Stop test")
        self.status = PlayStatus.STOPPED
        self._release()

    def park(self, callback: Callable[[], Any]) -> None:
        """Store a continuation to be invoked on the next resume, step or stop."""
        self._parked = callback

    def _release(self) -> None:
        self._resume.set()
        if self._parked is not None:
            callback, self._parked = self._parked, None
            callback()
