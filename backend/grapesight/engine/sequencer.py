"""Stage sequencer — drives the decorative CNN walkthrough one step at a time.

A run is a single self-rescheduling timer chain: each step renders, then
schedules the next one after its own dwell time. The chain never aborts on a
missing raster; that step's image is simply skipped.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Any, Callable, Protocol

from PIL import Image

from grapesight.engine import raster as rt
from grapesight.engine.renderer import FrameRenderer
from grapesight.engine.steps import INPUT_SIZE, PROCESSING_STEPS, ProcessingStep, StepKind
from grapesight.engine.surface import DrawingSurface
from grapesight.errors import InvalidStepTransition

logger = logging.getLogger(__name__)

IDLE_STEP = -1
DEFAULT_SURFACE_RETRY_S = 0.1


class Scheduler(Protocol):
    def schedule(
        self, delay: float, callback: Callable[..., Any], *args: Any, owner: str = ...
    ) -> int: ...

    def cancel_all(self, owner: str | None = None) -> int: ...


@dataclass
class SimulationState:
    """Mutable simulation state; only changed through the transition methods.

    Allowed transitions: idle -> 0 (``begin``), i -> i+1 (``advance``),
    any -> idle (``finish`` / ``cancel`` / ``clear``).
    """

    last_step: int
    step_index: int = IDLE_STEP
    paused: bool = False
    snapshot: rt.Raster | None = None
    width: int = 0
    height: int = 0

    @property
    def is_idle(self) -> bool:
        return self.step_index == IDLE_STEP

    def begin(self) -> None:
        if not self.is_idle:
            raise InvalidStepTransition(f"cannot begin while at step {self.step_index}")
        self.step_index = 0
        self.snapshot = None
        self.width = self.height = 0

    def advance(self) -> int:
        if self.is_idle or self.step_index >= self.last_step:
            raise InvalidStepTransition(f"cannot advance from step {self.step_index}")
        self.step_index += 1
        return self.step_index

    def finish(self) -> None:
        if self.step_index != self.last_step:
            raise InvalidStepTransition(f"cannot finish from step {self.step_index}")
        self.step_index = IDLE_STEP

    def cancel(self) -> None:
        self.step_index = IDLE_STEP
        self.paused = False

    def clear(self) -> None:
        self.cancel()
        self.snapshot = None
        self.width = self.height = 0

    def set_snapshot(self, raster: rt.Raster | None) -> None:
        self.snapshot = raster
        if raster is None:
            self.width = self.height = 0
        else:
            self.height, self.width = raster.shape[:2]


class StageSequencer:
    """Advances through ``steps``, transforming the working raster and drawing each frame."""

    OWNER = "sequencer"

    def __init__(
        self,
        timers: Scheduler,
        surface: DrawingSurface | None = None,
        steps: tuple[ProcessingStep, ...] = PROCESSING_STEPS,
        retry_delay: float = DEFAULT_SURFACE_RETRY_S,
        rng: random.Random | None = None,
    ) -> None:
        if not steps:
            raise ValueError("at least one processing step is required")
        self.steps = steps
        self.retry_delay = retry_delay
        self.state = SimulationState(last_step=len(steps) - 1)
        self._timers = timers
        self._surface = surface
        self._rng = rng or random.Random()
        self._renderer: FrameRenderer | None = None
        self._source: Image.Image | None = None
        self._run_id = 0
        self._held_step: int | None = None

    @property
    def surface(self) -> DrawingSurface | None:
        return self._surface

    def attach_surface(self, surface: DrawingSurface) -> None:
        self._surface = surface

    @property
    def current_step(self) -> ProcessingStep | None:
        if self.state.is_idle:
            return None
        return self.steps[self.state.step_index]

    def start(self, source: Image.Image | None) -> bool:
        """Begin a new run at step 0. Returns False if the run was deferred or abandoned."""
        return self._start(source, retried=False)

    def _start(self, source: Image.Image | None, retried: bool) -> bool:
        self.cancel_all()
        if self._surface is None:
            if retried:
                logger.warning("Drawing surface still unavailable; simulation abandoned")
                return False
            logger.debug("Drawing surface unavailable; retrying in %.2fs", self.retry_delay)
            self._timers.schedule(self.retry_delay, self._start, source, True, owner=self.OWNER)
            return False

        self._source = source
        self._renderer = FrameRenderer(self._surface, self._rng)
        self.state.begin()
        logger.info("Simulation started (%d steps)", len(self.steps))
        self._render_and_schedule(self._run_id)
        return True

    def cancel_all(self) -> None:
        """Halt every scheduled transition and return to idle."""
        self._run_id += 1
        self._held_step = None
        self._timers.cancel_all(owner=self.OWNER)
        self.state.cancel()

    def clear(self) -> None:
        """Cancel, drop the working raster and blank the surface."""
        self.cancel_all()
        self.state.clear()
        self._source = None
        if self._surface is not None:
            self._surface.clear()

    def pause(self) -> None:
        if not self.state.is_idle:
            self.state.paused = True

    def resume(self) -> None:
        self.state.paused = False
        held, self._held_step = self._held_step, None
        if held is not None:
            self._on_due(held, self._run_id)

    def _on_due(self, step_index: int, run_id: int) -> None:
        if run_id != self._run_id:
            return
        if self.state.paused:
            self._held_step = step_index
            return
        if self.state.advance() != step_index:
            raise InvalidStepTransition(f"expected step {step_index}, got {self.state.step_index}")
        self._render_and_schedule(run_id)

    def _render_and_schedule(self, run_id: int) -> None:
        index = self.state.step_index
        step = self.steps[index]

        renderer = self._renderer
        if renderer is None:
            raise InvalidStepTransition("simulation is running without a renderer")

        # A step that fails to draw still advances the chain
        try:
            self.state.set_snapshot(self._transform(step))
            if not renderer.render(step, self.state.snapshot):
                logger.debug("Step %d (%s): no raster, image skipped", index, step.name)
        except Exception as e:
            logger.warning("Step %d (%s) FAILED: %s", index, step.name, e)

        if index < self.state.last_step:
            self._timers.schedule(step.dwell, self._on_due, index + 1, run_id, owner=self.OWNER)
        else:
            self.state.finish()
            logger.info("Simulation finished")

    def _transform(self, step: ProcessingStep) -> rt.Raster | None:
        current = self.state.snapshot
        if step.kind is StepKind.RESIZE:
            if self._source is None:
                return None
            return rt.fit_square(self._source, step.size or INPUT_SIZE)
        if current is None:
            return None
        if step.kind is StepKind.ATTENUATE and step.channel:
            return rt.channel_attenuate(current, step.channel)
        if step.kind is StepKind.POOL and step.size:
            return rt.downsample(current, step.size, step.size)
        return current
