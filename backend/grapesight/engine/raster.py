"""Raster transforms used by the visual simulation.

A raster is an ``H x W x 4`` uint8 RGBA numpy array. Every function here is
pure: inputs are never mutated and identical inputs give byte-identical
outputs.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray
from PIL import Image, ImageOps

Raster = NDArray[np.uint8]

# Scale applied to the two channels that are not selected
DAMPING_FACTOR = 0.3

_CHANNEL_INDEX = {"red": 0, "green": 1, "blue": 2}


def to_raster(image: Image.Image) -> Raster:
    """Copy a PIL image into a fresh RGBA raster."""
    return np.array(image.convert("RGBA"), dtype=np.uint8)


def fit_square(image: Image.Image, size: int) -> Raster:
    """Center-crop and resize an image to a ``size x size`` raster."""
    if size <= 0:
        raise ValueError(f"size must be positive, got {size}")
    fitted = ImageOps.fit(image.convert("RGBA"), (size, size), method=Image.Resampling.BILINEAR)
    return to_raster(fitted)


def _check_raster(raster: Raster) -> None:
    if raster.ndim != 3 or raster.shape[2] != 4:
        raise ValueError(f"expected an HxWx4 raster, got shape {raster.shape}")


def channel_attenuate(raster: Raster, channel: str) -> Raster:
    """Keep ``channel`` and alpha, damp the other two colour channels by 0.3."""
    _check_raster(raster)
    try:
        keep = _CHANNEL_INDEX[channel]
    except KeyError:
        raise ValueError(f"unknown channel {channel!r}") from None

    damped = [i for i in range(3) if i != keep]
    out = raster.copy()
    scaled = np.rint(raster[..., damped].astype(np.float64) * DAMPING_FACTOR)
    out[..., damped] = np.clip(scaled, 0, 255).astype(np.uint8)
    return out


def downsample(raster: Raster, width: int, height: int) -> Raster:
    """Resample ``raster`` to exactly ``width x height``.

    The raster is first put onto a full-resolution intermediate image, which
    is then scaled onto a target-sized canvas.
    """
    _check_raster(raster)
    if width <= 0 or height <= 0:
        raise ValueError(f"target size must be positive, got {width}x{height}")

    intermediate = Image.fromarray(np.ascontiguousarray(raster))
    canvas = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    canvas.paste(intermediate.resize((width, height), Image.Resampling.BILINEAR), (0, 0))
    return to_raster(canvas)
