"""Tests for the inference HTTP client (mocked transport, no network)."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from grapesight.errors import TransportFailure
from grapesight.inference.client import InferenceClient
from grapesight.models.image import ImageAsset
from tests.conftest import (
    CLASSIFY_URL,
    HEALTHY_CLASSIFICATION,
    NOT_LEAF_VERIFICATION,
    VERIFY_URL,
    Inference,
    make_jpeg,
)


def _asset() -> ImageAsset:
    return ImageAsset(data=make_jpeg(), content_type="image/jpeg", filename="leaf.jpg")


def _client(handler) -> InferenceClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return InferenceClient(VERIFY_URL, CLASSIFY_URL, http=http)


def test_verify_sends_multipart_image_field():
    inference = Inference(NOT_LEAF_VERIFICATION)
    result = asyncio.run(inference.client().verify(_asset()))

    assert result.is_grape_leaf is False
    assert result.message == "not a leaf"
    request = inference.requests[0]
    assert request.method == "POST"
    assert request.headers["content-type"].startswith("multipart/form-data")
    body = request.content
    assert b'name="image"' in body
    assert b'filename="leaf.jpg"' in body


def test_classify_parses_payload():
    inference = Inference(classification=HEALTHY_CLASSIFICATION)
    result = asyncio.run(inference.client().classify(_asset()))

    assert result.predicted_class == "Healthy"
    assert result.all_predictions["Black Rot"] == 0.01
    assert result.disease_info.emoji == "🟢"
    assert inference.classify_calls == 1


@pytest.mark.parametrize("status", [400, 404, 500, 503])
def test_non_success_status(status):
    client = _client(lambda request: httpx.Response(status))
    with pytest.raises(TransportFailure) as exc:
        asyncio.run(client.verify(_asset()))
    assert exc.value.stage == "verification"
    assert str(status) in str(exc.value)


def test_network_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransportFailure) as exc:
        asyncio.run(_client(handler).classify(_asset()))
    assert exc.value.stage == "classification"
    assert "connection refused" in str(exc.value)


def test_malformed_body():
    client = _client(lambda request: httpx.Response(200, content=b"<html>oops</html>"))
    with pytest.raises(TransportFailure):
        asyncio.run(client.verify(_asset()))


def test_missing_fields():
    client = _client(lambda request: httpx.Response(200, json={"confidence": 0.4}))
    with pytest.raises(TransportFailure):
        asyncio.run(client.classify(_asset()))
