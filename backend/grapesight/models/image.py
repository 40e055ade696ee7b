"""Uploaded image asset."""

from __future__ import annotations

import base64
import io
from dataclasses import dataclass

from PIL import Image

from grapesight.errors import UnsupportedImageType


@dataclass(frozen=True)
class ImageAsset:
    data: bytes
    content_type: str = "image/jpeg"
    filename: str = "image.jpg"

    @classmethod
    def from_upload(
        cls,
        data: bytes,
        content_type: str | None,
        filename: str | None,
        accepted: list[str],
    ) -> ImageAsset:
        ctype = (content_type or "").lower()
        if not ctype.startswith("image/") or ctype not in accepted:
            raise UnsupportedImageType(ctype, accepted)
        return cls(data=data, content_type=ctype, filename=filename or "image")

    @property
    def display_ref(self) -> str:
        """A ``data:`` URL usable directly as an <img> source."""
        return f"data:{self.content_type};base64,{base64.b64encode(self.data).decode('ascii')}"

    def open(self) -> Image.Image:
        image = Image.open(io.BytesIO(self.data))
        image.load()
        return image
