"""GrapeSight staged orchestration engine."""

from grapesight.engine.orchestrator import ClassificationOrchestrator, RunState
from grapesight.engine.sequencer import SimulationState, StageSequencer
from grapesight.engine.steps import PROCESSING_STEPS, ProcessingStep
from grapesight.engine.timers import TimerRegistry

__all__ = [
    "ClassificationOrchestrator",
    "RunState",
    "SimulationState",
    "StageSequencer",
    "PROCESSING_STEPS",
    "ProcessingStep",
    "TimerRegistry",
]
