"""Tests for upload validation."""

from __future__ import annotations

import base64

import pytest

from grapesight.errors import UnsupportedImageType
from grapesight.models.image import ImageAsset
from tests.conftest import make_jpeg


def test_accepts_jpeg():
    asset = ImageAsset.from_upload(b"x", "image/jpeg", "a.jpg", ["image/jpeg"])
    assert asset.content_type == "image/jpeg"
    assert asset.filename == "a.jpg"


@pytest.mark.parametrize("ctype", ["image/png", "text/plain", None, ""])
def test_rejects_other_types_by_default(ctype):
    with pytest.raises(UnsupportedImageType):
        ImageAsset.from_upload(b"x", ctype, "a", ["image/jpeg"])


def test_accepted_types_are_configurable():
    asset = ImageAsset.from_upload(b"x", "image/png", None, ["image/jpeg", "image/png"])
    assert asset.filename == "image"


def test_display_ref_is_a_data_url():
    asset = ImageAsset(data=b"\xff\xd8abc")
    prefix, payload = asset.display_ref.split(",", 1)
    assert prefix == "data:image/jpeg;base64"
    assert base64.b64decode(payload) == b"\xff\xd8abc"


def test_open_decodes():
    image = ImageAsset(data=make_jpeg(20, 10)).open()
    assert image.size == (20, 10)
