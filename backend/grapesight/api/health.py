"""Health check + meta endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from grapesight import __version__
from grapesight.dependencies import get_orchestrator
from grapesight.engine.diseases import DISEASE_TABLE
from grapesight.engine.orchestrator import ClassificationOrchestrator
from grapesight.models.responses import DiseaseEntry, HealthResponse, StepInfo

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(
    orchestrator: ClassificationOrchestrator = Depends(get_orchestrator),
) -> HealthResponse:
    return HealthResponse(
        status="ok",
        version=__version__,
        steps_registered=len(orchestrator.steps),
    )


@router.get("/steps", response_model=list[StepInfo])
async def steps(
    orchestrator: ClassificationOrchestrator = Depends(get_orchestrator),
) -> list[StepInfo]:
    return [
        StepInfo(index=i, name=s.name, description=s.description, dwell_s=s.dwell, kind=s.kind.value)
        for i, s in enumerate(orchestrator.steps)
    ]


@router.get("/diseases", response_model=list[DiseaseEntry])
async def diseases() -> list[DiseaseEntry]:
    return [DiseaseEntry(name=cls.value, info=info) for cls, info in DISEASE_TABLE.items()]
