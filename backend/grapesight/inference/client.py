"""HTTP client for the two remote inference services."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError

from grapesight.config import settings
from grapesight.errors import TransportFailure
from grapesight.models.image import ImageAsset
from grapesight.models.results import ClassificationResult, VerificationResult

logger = logging.getLogger(__name__)

_UNSET: Any = object()


class InferenceClient:
    """Uploads an image as multipart field ``image`` and parses the JSON verdict.

    Every failure (network error, non-2xx status, malformed body) surfaces as
    ``TransportFailure``; nothing is retried.
    """

    def __init__(
        self,
        verify_url: str | None = None,
        classify_url: str | None = None,
        http: httpx.AsyncClient | None = None,
        timeout: float | None = _UNSET,
    ) -> None:
        self.verify_url = verify_url or settings.verify_url
        self.classify_url = classify_url or settings.classify_url
        if timeout is _UNSET:
            timeout = settings.http_timeout_s
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    async def verify(self, asset: ImageAsset) -> VerificationResult:
        return await self._post_image("verification", self.verify_url, asset, VerificationResult)

    async def classify(self, asset: ImageAsset) -> ClassificationResult:
        return await self._post_image("classification", self.classify_url, asset, ClassificationResult)

    async def _post_image(self, stage: str, url: str, asset: ImageAsset, model: type[BaseModel]) -> Any:
        files = {"image": (asset.filename, asset.data, asset.content_type)}
        logger.debug("POST %s (%s, %d bytes)", url, stage, len(asset.data))
        try:
            response = await self._http.post(url, files=files)
        except httpx.HTTPError as e:
            raise TransportFailure(stage, str(e) or type(e).__name__) from e

        if not response.is_success:
            raise TransportFailure(stage, f"HTTP {response.status_code}")

        try:
            return model.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise TransportFailure(stage, f"invalid response body: {e}") from e

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()
