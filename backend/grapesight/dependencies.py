"""FastAPI dependency injection."""

from __future__ import annotations

from grapesight.config import Settings, settings
from grapesight.engine.orchestrator import ClassificationOrchestrator
from grapesight.engine.sequencer import StageSequencer
from grapesight.engine.steps import PROCESSING_STEPS, with_dwell
from grapesight.engine.surface import PillowSurface
from grapesight.engine.timers import TimerRegistry
from grapesight.inference.client import InferenceClient

_orchestrator: ClassificationOrchestrator | None = None
_client: InferenceClient | None = None


def get_settings() -> Settings:
    return settings


def build_orchestrator(cfg: Settings, client: InferenceClient) -> ClassificationOrchestrator:
    timers = TimerRegistry()
    sequencer = StageSequencer(
        timers,
        surface=PillowSurface(cfg.canvas_width, cfg.canvas_height),
        steps=with_dwell(PROCESSING_STEPS, cfg.step_dwell_ms / 1000),
        retry_delay=cfg.surface_retry_ms / 1000,
    )
    return ClassificationOrchestrator(client, sequencer, timers)


def get_orchestrator() -> ClassificationOrchestrator:
    # One shared session per process
    global _orchestrator, _client
    if _orchestrator is None:
        _client = InferenceClient(
            settings.verify_url, settings.classify_url, timeout=settings.http_timeout_s
        )
        _orchestrator = build_orchestrator(settings, _client)
    return _orchestrator


async def shutdown_orchestrator() -> None:
    """Cancel pending timers and close the shared HTTP client."""
    global _orchestrator, _client
    if _orchestrator is not None:
        _orchestrator.reset_all()
    if _client is not None:
        await _client.aclose()
    _orchestrator = None
    _client = None
