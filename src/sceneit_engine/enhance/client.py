"""Client for the external generative image model."""

import base64
import binascii
import logging

import httpx

from sceneit_engine.blobs.store import DecodedImage
from sceneit_engine.common.config import SceneItSettings
from sceneit_engine.common.exceptions import (
    EnhancementNotConfiguredError,
    EnhancementRefusedError,
    EnhancementTimeoutError,
    EnhancementUnavailableError,
    NoEnhancementError,
)

logger = logging.getLogger(__name__)


class EnhancementClient:
    """POSTs an inline image plus instructions to ``generateContent``.

    One attempt per call. The response must carry an inline image part;
    a text-only answer (e.g. a safety refusal) is surfaced verbatim.
    """

    def __init__(self, settings: SceneItSettings, http_client: httpx.AsyncClient | None = None):
        self.settings = settings
        self._http_client = http_client
        self._owns_client = http_client is None

    @property
    def configured(self) -> bool:
        return bool(self.settings.google_api_key)

    def _get_http_client(self) -> httpx.AsyncClient:
        """Lazy-init httpx.AsyncClient."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient()
        return self._http_client

    async def close(self) -> None:
        if self._http_client is not None and self._owns_client:
            await self._http_client.aclose()
        self._http_client = None

    @property
    def endpoint(self) -> str:
        base = self.settings.enhance_api_base.rstrip("/")
        return f"{base}/models/{self.settings.enhance_model}:generateContent"

    async def enhance(self, image: DecodedImage, prompt: str) -> DecodedImage:
        if not self.configured:
            raise EnhancementNotConfiguredError()

        payload = {
            "contents": [{
                "parts": [
                    {"text": prompt},
                    {"inlineData": {"mimeType": image.mime_type, "data": image.base64}},
                ],
            }],
            "generationConfig": {"responseModalities": ["TEXT", "IMAGE"]},
        }

        client = self._get_http_client()
        try:
            resp = await client.post(
                self.endpoint,
                json=payload,
                headers={"x-goog-api-key": self.settings.google_api_key},
                timeout=self.settings.enhance_timeout,
            )
        except httpx.TimeoutException as exc:
            logger.error("Enhancement API timed out after %ss", self.settings.enhance_timeout)
            raise EnhancementTimeoutError() from exc
        except httpx.HTTPError as exc:
            logger.error("Enhancement API transport error: %s", exc)
            raise EnhancementUnavailableError() from exc

        if not resp.is_success:
            logger.error("Enhancement API error %d: %s", resp.status_code, resp.text[:500])
            raise EnhancementUnavailableError()

        try:
            result = resp.json()
        except ValueError as exc:
            logger.error("Enhancement API returned non-JSON body")
            raise EnhancementUnavailableError() from exc

        return self._extract_image(result)

    @staticmethod
    def _extract_image(result: dict) -> DecodedImage:
        candidates = result.get("candidates") or []
        if not candidates:
            raise NoEnhancementError()

        parts = (candidates[0].get("content") or {}).get("parts") or []
        image_part = next((p for p in parts if p.get("inlineData")), None)
        if image_part is None:
            text = next((p["text"] for p in parts if p.get("text")), None)
            raise EnhancementRefusedError(text or "No image in response")

        inline = image_part["inlineData"]
        try:
            data = base64.b64decode(inline.get("data", ""))
        except (binascii.Error, ValueError) as exc:
            raise EnhancementRefusedError("No image in response") from exc
        return DecodedImage(mime_type=inline.get("mimeType") or "image/png", data=data)
