"""The fixed sequence of pseudo-processing steps shown during classification.

Each step mimics one layer of a small CNN. The ``kind`` decides what the
sequencer does to the working raster and what the renderer draws.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace


class StepKind(enum.Enum):
    RESIZE = "resize"
    ATTENUATE = "attenuate"
    POOL = "pool"
    FLATTEN = "flatten"
    DENSE = "dense"
    DROPOUT = "dropout"


# Steps that operate on (and display) the working raster
RASTER_KINDS = frozenset({StepKind.RESIZE, StepKind.ATTENUATE, StepKind.POOL})

INPUT_SIZE = 128
DEFAULT_DWELL_S = 4.0


@dataclass(frozen=True)
class ProcessingStep:
    name: str
    description: str
    dwell: float  # seconds
    kind: StepKind
    channel: str | None = None  # ATTENUATE only
    size: int | None = None  # RESIZE / POOL target edge


PROCESSING_STEPS: tuple[ProcessingStep, ...] = (
    ProcessingStep("Preprocessing", f"Resizing to {INPUT_SIZE}x{INPUT_SIZE} pixels",
                   DEFAULT_DWELL_S, StepKind.RESIZE, size=INPUT_SIZE),
    ProcessingStep("Conv2D Layer #1", "Applying convolutional filters",
                   DEFAULT_DWELL_S, StepKind.ATTENUATE, channel="red"),
    ProcessingStep("MaxPooling #1", "Reducing dimensionality",
                   DEFAULT_DWELL_S, StepKind.POOL, size=64),
    ProcessingStep("Conv2D Layer #2", "Extracting advanced features",
                   DEFAULT_DWELL_S, StepKind.ATTENUATE, channel="green"),
    ProcessingStep("MaxPooling #2", "Compressing information",
                   DEFAULT_DWELL_S, StepKind.POOL, size=32),
    ProcessingStep("Conv2D Layer #3", "High-level features",
                   DEFAULT_DWELL_S, StepKind.ATTENUATE, channel="blue"),
    ProcessingStep("MaxPooling #3", "Final reduction",
                   DEFAULT_DWELL_S, StepKind.POOL, size=16),
    ProcessingStep("Flatten", "Converting to a 1D vector",
                   DEFAULT_DWELL_S, StepKind.FLATTEN),
    ProcessingStep("Dense Layer", "Dense neural processing",
                   DEFAULT_DWELL_S, StepKind.DENSE),
    ProcessingStep("Dropout", "Overfitting regularization",
                   DEFAULT_DWELL_S, StepKind.DROPOUT),
)


def with_dwell(
    steps: tuple[ProcessingStep, ...], dwell: float
) -> tuple[ProcessingStep, ...]:
    """Return a copy of ``steps`` with every dwell time set to ``dwell`` seconds."""
    if dwell < 0:
        raise ValueError(f"dwell must be non-negative, got {dwell}")
    return tuple(replace(step, dwell=dwell) for step in steps)
