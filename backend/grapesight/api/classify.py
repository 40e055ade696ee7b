"""Classification session endpoints: submit, reset, poll and the live frame."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import Response

from grapesight.config import Settings
from grapesight.dependencies import get_orchestrator, get_settings
from grapesight.engine.orchestrator import ClassificationOrchestrator
from grapesight.errors import UnsupportedImageType
from grapesight.models.image import ImageAsset
from grapesight.models.responses import OrchestratorSnapshot

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/classify", response_model=OrchestratorSnapshot)
async def classify(
    image: UploadFile = File(...),
    orchestrator: ClassificationOrchestrator = Depends(get_orchestrator),
    cfg: Settings = Depends(get_settings),
) -> OrchestratorSnapshot:
    data = await image.read()
    try:
        asset = ImageAsset.from_upload(
            data, image.content_type, image.filename, cfg.accepted_content_types
        )
    except UnsupportedImageType as e:
        raise HTTPException(status_code=415, detail=str(e)) from e

    # Resolves once the run reaches a terminal state (or is superseded)
    return await orchestrator.submit(asset)


@router.post("/reset", response_model=OrchestratorSnapshot)
async def reset(
    orchestrator: ClassificationOrchestrator = Depends(get_orchestrator),
) -> OrchestratorSnapshot:
    return orchestrator.reset_all()


@router.get("/snapshot", response_model=OrchestratorSnapshot)
async def snapshot(
    orchestrator: ClassificationOrchestrator = Depends(get_orchestrator),
) -> OrchestratorSnapshot:
    return orchestrator.snapshot()


@router.post("/pause", response_model=OrchestratorSnapshot)
async def pause(
    orchestrator: ClassificationOrchestrator = Depends(get_orchestrator),
) -> OrchestratorSnapshot:
    orchestrator.pause()
    return orchestrator.snapshot()


@router.post("/resume", response_model=OrchestratorSnapshot)
async def resume(
    orchestrator: ClassificationOrchestrator = Depends(get_orchestrator),
) -> OrchestratorSnapshot:
    orchestrator.resume()
    return orchestrator.snapshot()


@router.get("/frame")
async def frame(
    orchestrator: ClassificationOrchestrator = Depends(get_orchestrator),
) -> Response:
    surface = orchestrator.sequencer.surface
    to_png = getattr(surface, "to_png", None)
    if to_png is None:
        raise HTTPException(status_code=404, detail="No renderable surface attached")
    return Response(content=to_png(), media_type="image/png")
