"""API response models."""

from __future__ import annotations

from pydantic import BaseModel, Field

from grapesight.models.results import ClassificationResult, DiseaseInfo, VerificationResult


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    steps_registered: int = 0


class StepInfo(BaseModel):
    index: int
    name: str
    description: str
    dwell_s: float
    kind: str


class DiseaseEntry(BaseModel):
    name: str
    info: DiseaseInfo


class ImageSummary(BaseModel):
    filename: str
    content_type: str
    size_bytes: int
    # data: URL of the upload, usable directly as an <img> source
    display_ref: str


class SimulationSnapshot(BaseModel):
    step_index: int = -1
    step_name: str | None = None
    paused: bool = False
    raster_width: int = 0
    raster_height: int = 0


class OrchestratorSnapshot(BaseModel):
    state: str = "idle"
    generation: int = 0
    image: ImageSummary | None = None
    verification: VerificationResult | None = None
    # Only populated once the run is DONE
    classification: ClassificationResult | None = None
    message: str = ""
    error: str = ""
    reveal_step: int = 0
    simulation: SimulationSnapshot = Field(default_factory=SimulationSnapshot)
