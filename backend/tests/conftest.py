"""Shared test fixtures."""

from __future__ import annotations

import io
import json
from typing import Any, Callable

import httpx
import numpy as np
import pytest
from PIL import Image

from grapesight.engine.orchestrator import ClassificationOrchestrator
from grapesight.engine.sequencer import StageSequencer
from grapesight.engine.steps import PROCESSING_STEPS, with_dwell
from grapesight.engine.surface import PillowSurface
from grapesight.engine.timers import TimerRegistry
from grapesight.inference.client import InferenceClient
from grapesight.models.image import ImageAsset

VERIFY_URL = "http://verifier.test/predict"
CLASSIFY_URL = "http://classifier.test/predict"

LEAF_VERIFICATION = {"is_grape_leaf": True, "grape_probability": 0.91, "message": "ok"}
NOT_LEAF_VERIFICATION = {"is_grape_leaf": False, "grape_probability": 0.1, "message": "not a leaf"}

HEALTHY_CLASSIFICATION = {
    "predicted_class": "Healthy",
    "confidence": 0.97,
    "all_predictions": {
        "Healthy": 0.97,
        "Black Rot": 0.01,
        "ESCA (Black measles)": 0.01,
        "Leaf Blight": 0.01,
    },
    "disease_info": {
        "emoji": "🟢",
        "description": "Healthy leaf",
        "severity": "None",
        "treatment": "Keep it up",
    },
}

FLAT_CLASSIFICATION = {
    "predicted_class": "Black Rot",
    "confidence": 0.3,
    "all_predictions": {
        "Healthy": 0.2,
        "Black Rot": 0.3,
        "ESCA (Black measles)": 0.25,
        "Leaf Blight": 0.25,
    },
    "disease_info": {
        "emoji": "🔴",
        "description": "Black rot",
        "severity": "High",
        "treatment": "Fungicide",
    },
}


def make_jpeg(width: int = 200, height: int = 150, color=(40, 160, 60)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buf, format="JPEG")
    return buf.getvalue()


def make_raster(width: int = 8, height: int = 8, seed: int = 0) -> np.ndarray:
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8)


class ManualTimers:
    """Timer registry stand-in: records schedules and fires them on demand."""

    def __init__(self) -> None:
        self.entries: dict[int, tuple[float, Callable[..., Any], tuple, str]] = {}
        self.history: list[tuple[float, tuple, str]] = []
        self._next = 1

    def schedule(self, delay: float, callback, *args, owner: str = "default") -> int:
        tid = self._next
        self._next += 1
        self.entries[tid] = (delay, callback, args, owner)
        self.history.append((delay, args, owner))
        return tid

    def cancel_all(self, owner: str | None = None) -> int:
        ids = [t for t, e in self.entries.items() if owner is None or e[3] == owner]
        for t in ids:
            del self.entries[t]
        return len(ids)

    def pending(self, owner: str | None = None) -> int:
        return sum(1 for e in self.entries.values() if owner is None or e[3] == owner)

    def fire_next(self) -> float:
        """Fire the oldest pending entry and return its delay."""
        tid = min(self.entries)
        delay, callback, args, _ = self.entries.pop(tid)
        callback(*args)
        return delay


class RecordingSurface:
    """Drawing surface that records every call instead of drawing."""

    def __init__(self, width: int = 400, height: int = 300) -> None:
        self.width = width
        self.height = height
        self.calls: list[tuple] = []

    def clear(self) -> None:
        self.calls.append(("clear",))

    def blit_raster(self, raster, x: int, y: int) -> None:
        self.calls.append(("blit", raster.shape, x, y))

    def draw_text(self, text, x, y, *, fill, size=12, bold=False) -> None:
        self.calls.append(("text", text))

    def draw_shape(self, shape) -> None:
        self.calls.append(("shape", shape))

    def ops(self) -> list[str]:
        return [c[0] for c in self.calls]

    def frames(self) -> list[list[tuple]]:
        """Calls grouped per frame (each frame starts with a clear)."""
        frames: list[list[tuple]] = []
        for call in self.calls:
            if call[0] == "clear":
                frames.append([])
            frames[-1].append(call)
        return frames


class Inference:
    """Routes mock HTTP traffic to canned verification/classification payloads."""

    def __init__(
        self,
        verification: dict | None = None,
        classification: dict | None = None,
        verify_status: int = 200,
        classify_status: int = 200,
    ) -> None:
        self.verification = verification or LEAF_VERIFICATION
        self.classification = classification or HEALTHY_CLASSIFICATION
        self.verify_status = verify_status
        self.classify_status = classify_status
        self.verify_calls = 0
        self.classify_calls = 0
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if str(request.url) == VERIFY_URL:
            self.verify_calls += 1
            return httpx.Response(self.verify_status, content=json.dumps(self.verification))
        if str(request.url) == CLASSIFY_URL:
            self.classify_calls += 1
            return httpx.Response(self.classify_status, content=json.dumps(self.classification))
        return httpx.Response(404)

    def client(self) -> InferenceClient:
        http = httpx.AsyncClient(transport=httpx.MockTransport(self.handler))
        return InferenceClient(VERIFY_URL, CLASSIFY_URL, http=http)


def build_orchestrator(
    backend, dwell: float = 0.0, surface=None
) -> ClassificationOrchestrator:
    timers = TimerRegistry()
    sequencer = StageSequencer(
        timers,
        surface=surface if surface is not None else PillowSurface(),
        steps=with_dwell(PROCESSING_STEPS, dwell),
    )
    return ClassificationOrchestrator(backend, sequencer, timers)


@pytest.fixture
def leaf_jpeg() -> bytes:
    return make_jpeg()


@pytest.fixture
def leaf_asset(leaf_jpeg) -> ImageAsset:
    return ImageAsset(data=leaf_jpeg, content_type="image/jpeg", filename="leaf.jpg")


@pytest.fixture
def manual_timers() -> ManualTimers:
    return ManualTimers()


@pytest.fixture
def recording_surface() -> RecordingSurface:
    return RecordingSurface()


@pytest.fixture
def source_image() -> Image.Image:
    return Image.new("RGB", (300, 200), (120, 200, 80))
