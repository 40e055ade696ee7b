"""Classification orchestrator — the top-level state machine.

    IDLE -> VERIFYING -> REJECTED
                      -> CLASSIFYING -> DONE | FAILED | REJECTED
    (any) -> IDLE on reset_all()

Every submit() and reset_all() bumps the generation token. Each suspension
point (network call, reveal-gate sleep) re-checks the generation it captured
and drops its result silently if a newer run or a reset has superseded it.
"""

from __future__ import annotations

import enum
import logging
from typing import Protocol

from PIL import Image, UnidentifiedImageError

from grapesight.engine.diseases import DISEASE_TABLE, parse_disease_class
from grapesight.engine.sequencer import StageSequencer
from grapesight.engine.steps import ProcessingStep
from grapesight.engine.timers import TimerRegistry
from grapesight.errors import TransportFailure, UnknownDiseaseClass
from grapesight.models.image import ImageAsset
from grapesight.models.responses import ImageSummary, OrchestratorSnapshot, SimulationSnapshot
from grapesight.models.results import ClassificationResult, VerificationResult

logger = logging.getLogger(__name__)

# A classification only counts if some class clears this probability
CONFIDENCE_THRESHOLD = 0.5
NOT_A_LEAF_MESSAGE = "❌ The image does not appear to be a grape leaf"


class RunState(str, enum.Enum):
    IDLE = "idle"
    VERIFYING = "verifying"
    REJECTED = "rejected"
    CLASSIFYING = "classifying"
    DONE = "done"
    FAILED = "failed"


class InferenceBackend(Protocol):
    async def verify(self, asset: ImageAsset) -> VerificationResult: ...

    async def classify(self, asset: ImageAsset) -> ClassificationResult: ...


class ClassificationOrchestrator:
    GATE_OWNER = "reveal"

    def __init__(
        self,
        backend: InferenceBackend,
        sequencer: StageSequencer,
        timers: TimerRegistry,
    ) -> None:
        self._backend = backend
        self._sequencer = sequencer
        self._timers = timers
        self._generation = 0
        self._reset_fields()

    def _reset_fields(self) -> None:
        self._state = RunState.IDLE
        self._asset: ImageAsset | None = None
        self._verification: VerificationResult | None = None
        self._classification: ClassificationResult | None = None
        self._message = ""
        self._error = ""
        self._reveal_step = 0

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def steps(self) -> tuple[ProcessingStep, ...]:
        return self._sequencer.steps

    @property
    def sequencer(self) -> StageSequencer:
        return self._sequencer

    def _is_stale(self, gen: int, where: str) -> bool:
        if gen != self._generation:
            logger.debug("Discarding stale %s (gen %d, current %d)", where, gen, self._generation)
            return True
        return False

    async def submit(self, asset: ImageAsset) -> OrchestratorSnapshot:
        """Run one full verification + classification cycle for ``asset``."""
        self._generation += 1
        my_gen = self._generation
        self._timers.cancel_all()
        self._sequencer.clear()
        self._reset_fields()
        self._asset = asset

        self._state = RunState.VERIFYING
        logger.info("Run %d: verifying %s (%d bytes)", my_gen, asset.filename, len(asset.data))
        try:
            verification = await self._backend.verify(asset)
        except TransportFailure as e:
            if not self._is_stale(my_gen, "verification failure"):
                self._fail(e)
            return self.snapshot()
        if self._is_stale(my_gen, "verification response"):
            return self.snapshot()

        self._verification = verification
        if not verification.is_grape_leaf:
            self._reject(verification.message)
            return self.snapshot()

        self._state = RunState.CLASSIFYING
        logger.info("Run %d: grape leaf (p=%.2f), classifying", my_gen, verification.grape_probability)
        try:
            classification = await self._backend.classify(asset)
        except TransportFailure as e:
            if not self._is_stale(my_gen, "classification failure"):
                self._fail(e)
            return self.snapshot()
        if self._is_stale(my_gen, "classification response"):
            return self.snapshot()

        # The two services can disagree; a flat distribution means "not a leaf"
        if not classification.has_confident_class(CONFIDENCE_THRESHOLD):
            logger.info("Run %d: no class above %.2f, rejecting", my_gen, CONFIDENCE_THRESHOLD)
            self._verification = VerificationResult(
                is_grape_leaf=False, grape_probability=0.0, message=NOT_A_LEAF_MESSAGE
            )
            self._reject(NOT_A_LEAF_MESSAGE)
            return self.snapshot()

        try:
            disease = parse_disease_class(classification.predicted_class)
        except UnknownDiseaseClass as e:
            self._fail(e)
            return self.snapshot()
        classification = classification.model_copy(update={"disease_info": DISEASE_TABLE[disease]})

        self._sequencer.start(self._decode(asset))
        if not await self._reveal_gate(my_gen):
            return self.snapshot()

        self._classification = classification
        self._state = RunState.DONE
        logger.info(
            "Run %d: %s (confidence %.2f)",
            my_gen, classification.predicted_class, classification.confidence,
        )
        return self.snapshot()

    async def _reveal_gate(self, gen: int) -> bool:
        """Hold the result back for the dwell of every step after the first.

        Runs alongside the sequencer's own chain so the reveal stays in step
        with the walkthrough even if the sequencer starts late.
        """
        for i, step in enumerate(self.steps[1:], start=1):
            elapsed = await self._timers.sleep(step.dwell, owner=self.GATE_OWNER)
            if not elapsed or self._is_stale(gen, "reveal timer"):
                return False
            self._reveal_step = i
        return True

    def reset_all(self) -> OrchestratorSnapshot:
        """Invalidate in-flight work, cancel every timer and return to IDLE."""
        self._generation += 1
        cancelled = self._timers.cancel_all()
        self._sequencer.clear()
        self._reset_fields()
        logger.info("Reset (gen %d, %d timer(s) cancelled)", self._generation, cancelled)
        return self.snapshot()

    def pause(self) -> None:
        self._sequencer.pause()

    def resume(self) -> None:
        self._sequencer.resume()

    def _reject(self, message: str) -> None:
        self._state = RunState.REJECTED
        self._message = message
        self._classification = None

    def _fail(self, error: Exception) -> None:
        logger.error("Run %d failed: %s", self._generation, error)
        self._state = RunState.FAILED
        self._error = str(error)
        self._classification = None

    @staticmethod
    def _decode(asset: ImageAsset) -> Image.Image | None:
        try:
            return asset.open()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
            logger.warning("Cannot decode %s for the simulation: %s", asset.filename, e)
            return None

    def snapshot(self) -> OrchestratorSnapshot:
        sim = self._sequencer.state
        current = self._sequencer.current_step
        image = None
        if self._asset is not None:
            image = ImageSummary(
                filename=self._asset.filename,
                content_type=self._asset.content_type,
                size_bytes=len(self._asset.data),
                display_ref=self._asset.display_ref,
            )
        return OrchestratorSnapshot(
            state=self._state.value,
            generation=self._generation,
            image=image,
            verification=self._verification.model_copy() if self._verification else None,
            classification=(
                self._classification.model_copy()
                if self._state is RunState.DONE and self._classification else None
            ),
            message=self._message,
            error=self._error,
            reveal_step=self._reveal_step,
            simulation=SimulationSnapshot(
                step_index=sim.step_index,
                step_name=current.name if current else None,
                paused=sim.paused,
                raster_width=sim.width,
                raster_height=sim.height,
            ),
        )
