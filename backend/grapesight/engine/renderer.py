"""Frame renderer for the processing simulation.

Every frame starts from a fully cleared surface: background, step title and
description, then either the working raster (centred) or the synthetic
visualisation for steps that have no raster.
"""

from __future__ import annotations

import random

from grapesight.engine.raster import Raster
from grapesight.engine.steps import RASTER_KINDS, ProcessingStep, StepKind
from grapesight.engine.surface import Circle, DrawingSurface, Line, Rect

BACKGROUND = "#1e293b"
TITLE_COLOR = "#f1f5f9"
DESCRIPTION_COLOR = "#94a3b8"
VECTOR_COLOR = "#10b981"
NETWORK_COLOR = "#60a5fa"
DROPOUT_COLOR = (239, 68, 68, 77)  # 30% opacity

TITLE_Y = 30
DESCRIPTION_Y = 50
# Drawing area centre sits a little below the surface centre, under the text
CENTER_Y_OFFSET = 10

# Flatten visualisation
VECTOR_BARS = 20
VECTOR_LENGTH = 200
BAR_MIN_HEIGHT = 10
BAR_HEIGHT_RANGE = 40

# Dense/dropout visualisation
NETWORK_WIDTH = 200
NETWORK_HEIGHT = 100
NETWORK_NODES = 8
NODE_RADIUS = 6
NODE_INSET = 20
DROPPED_NODES = 3
DROPPED_RADIUS = 8


class FrameRenderer:
    """Draws one simulation frame per step onto an injected surface."""

    def __init__(self, surface: DrawingSurface, rng: random.Random | None = None) -> None:
        self.surface = surface
        self.rng = rng or random.Random()

    @property
    def center(self) -> tuple[float, float]:
        return self.surface.width / 2, self.surface.height / 2 + CENTER_Y_OFFSET

    def render(self, step: ProcessingStep, raster: Raster | None) -> bool:
        """Draw a full frame for ``step``.

        Returns False when the step needs a raster but none is available; the
        frame is still drawn, just without its image.
        """
        s = self.surface
        s.clear()
        s.draw_shape(Rect(0, 0, s.width, s.height, BACKGROUND))
        s.draw_text(step.name, s.width / 2, TITLE_Y, fill=TITLE_COLOR, size=16, bold=True)
        s.draw_text(step.description, s.width / 2, DESCRIPTION_Y, fill=DESCRIPTION_COLOR, size=12)

        if step.kind in RASTER_KINDS:
            if raster is None:
                return False
            self._blit_centered(raster)
        elif step.kind is StepKind.FLATTEN:
            self._draw_vector()
        elif step.kind is StepKind.DENSE:
            self._draw_network()
        elif step.kind is StepKind.DROPOUT:
            self._draw_network()
            self._draw_dropout()
        return True

    def _blit_centered(self, raster: Raster) -> None:
        cx, cy = self.center
        h, w = raster.shape[:2]
        self.surface.blit_raster(raster, int(cx - w / 2), int(cy - h / 2))

    def _draw_vector(self) -> None:
        cx, cy = self.center
        start = cx - VECTOR_LENGTH / 2
        base = cy + 20
        for i in range(VECTOR_BARS):
            x = start + i * VECTOR_LENGTH / VECTOR_BARS
            height = self.rng.random() * BAR_HEIGHT_RANGE + BAR_MIN_HEIGHT
            self.surface.draw_shape(Line(x, base, x, base - height, VECTOR_COLOR, width=2))

    def _draw_network(self) -> None:
        cx, cy = self.center
        x = cx - NETWORK_WIDTH / 2
        y = cy - NETWORK_HEIGHT / 2
        spacing = NETWORK_HEIGHT / (NETWORK_NODES + 1)
        left = x + NODE_INSET
        right = x + NETWORK_WIDTH - NODE_INSET
        for i in range(NETWORK_NODES):
            node_y = y + (i + 1) * spacing
            self.surface.draw_shape(Circle(left, node_y, NODE_RADIUS, NETWORK_COLOR))
            self.surface.draw_shape(Circle(right, node_y, NODE_RADIUS, NETWORK_COLOR))
            self.surface.draw_shape(
                Line(left + NODE_RADIUS, node_y, right - NODE_RADIUS, node_y, NETWORK_COLOR, width=2)
            )

    def _draw_dropout(self) -> None:
        cx, cy = self.center
        for i in range(DROPPED_NODES):
            node_x = cx - 80 + self.rng.random() * 160
            node_y = cy - 30 + i * 30
            self.surface.draw_shape(Circle(node_x, node_y, DROPPED_RADIUS, DROPOUT_COLOR))
