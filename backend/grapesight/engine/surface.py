"""Drawing surface abstraction and its Pillow-backed implementation.

The renderer only talks to a ``DrawingSurface``: clear, blit a raster, draw
text, draw a shape. Any backend (PIL image, recording fake in tests) that
provides those four operations can be injected.
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from typing import Protocol, Union

import numpy as np
from PIL import Image, ImageColor, ImageDraw, ImageFont

from grapesight.engine.raster import Raster

Color = Union[str, tuple[int, int, int], tuple[int, int, int, int]]


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float
    fill: Color


@dataclass(frozen=True)
class Line:
    x0: float
    y0: float
    x1: float
    y1: float
    color: Color
    width: int = 1


@dataclass(frozen=True)
class Circle:
    cx: float
    cy: float
    radius: float
    fill: Color


Shape = Union[Rect, Line, Circle]


class DrawingSurface(Protocol):
    width: int
    height: int

    def clear(self) -> None: ...

    def blit_raster(self, raster: Raster, x: int, y: int) -> None: ...

    def draw_text(
        self,
        text: str,
        x: float,
        y: float,
        *,
        fill: Color,
        size: int = 12,
        bold: bool = False,
    ) -> None: ...

    def draw_shape(self, shape: Shape) -> None: ...


def _rgba(color: Color) -> tuple[int, int, int, int]:
    if isinstance(color, str):
        return ImageColor.getcolor(color, "RGBA")  # type: ignore[return-value]
    if len(color) == 3:
        return (*color, 255)  # type: ignore[return-value]
    return color  # type: ignore[return-value]


class PillowSurface:
    """A ``DrawingSurface`` backed by an RGBA PIL image."""

    def __init__(self, width: int = 400, height: int = 300) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"surface size must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self._image = Image.new("RGBA", (width, height), (0, 0, 0, 0))

    def clear(self) -> None:
        self._image = Image.new("RGBA", (self.width, self.height), (0, 0, 0, 0))

    def blit_raster(self, raster: Raster, x: int, y: int) -> None:
        # Replaces pixels outright, alpha included (no blending)
        self._image.paste(Image.fromarray(np.ascontiguousarray(raster)), (int(x), int(y)))

    def draw_text(
        self,
        text: str,
        x: float,
        y: float,
        *,
        fill: Color,
        size: int = 12,
        bold: bool = False,
    ) -> None:
        font = ImageFont.load_default(size=size)
        draw = ImageDraw.Draw(self._image)
        # Horizontally centred on x, baseline at y
        left = x - draw.textlength(text, font=font) / 2
        top = y - size
        draw.text((left, top), text, fill=_rgba(fill), font=font)
        if bold:
            draw.text((left + 1, top), text, fill=_rgba(fill), font=font)

    def draw_shape(self, shape: Shape) -> None:
        color = _rgba(shape.color if isinstance(shape, Line) else shape.fill)
        if color[3] < 255:
            overlay = Image.new("RGBA", self._image.size, (0, 0, 0, 0))
            self._draw_onto(ImageDraw.Draw(overlay), shape, color)
            self._image = Image.alpha_composite(self._image, overlay)
        else:
            self._draw_onto(ImageDraw.Draw(self._image), shape, color)

    @staticmethod
    def _draw_onto(
        draw: ImageDraw.ImageDraw, shape: Shape, color: tuple[int, int, int, int]
    ) -> None:
        if isinstance(shape, Rect):
            draw.rectangle(
                [shape.x, shape.y, shape.x + shape.width - 1, shape.y + shape.height - 1],
                fill=color,
            )
        elif isinstance(shape, Line):
            draw.line([(shape.x0, shape.y0), (shape.x1, shape.y1)], fill=color, width=shape.width)
        elif isinstance(shape, Circle):
            r = shape.radius
            draw.ellipse([shape.cx - r, shape.cy - r, shape.cx + r, shape.cy + r], fill=color)
        else:
            raise TypeError(f"unsupported shape: {type(shape).__name__}")

    def pixels(self) -> Raster:
        """Copy of the current surface contents."""
        return np.array(self._image, dtype=np.uint8)

    def to_png(self) -> bytes:
        buf = io.BytesIO()
        self._image.save(buf, format="PNG")
        return buf.getvalue()
