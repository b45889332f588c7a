"""Persist consented enhancement results."""

import asyncio
import logging

from sceneit_engine.blobs.store import BlobStore, DecodedImage
from sceneit_engine.common.config import SceneItSettings
from sceneit_engine.storage.base import StorageBackend
from sceneit_engine.storage.schemas import TransformationCreate

logger = logging.getLogger(__name__)

ORIGINALS_PREFIX = "originals"
ENHANCED_PREFIX = "enhanced"


class TransformationRecorder:
    """Uploads both images and writes one Transformation record.

    Never raises: a failed upload or write is logged and reported as
    ``None`` so the enhanced image still reaches the user.
    """

    def __init__(
        self,
        settings: SceneItSettings,
        storage: StorageBackend,
        blobs: BlobStore | None = None,
    ):
        self.settings = settings
        self.storage = storage
        self.blobs = blobs

    async def record(
        self,
        *,
        session_id: str | None,
        opt_in: bool,
        original: DecodedImage,
        enhanced: DecodedImage,
        processing_time_ms: int,
        prompt_used: str | None = None,
        style_key: str | None = None,
        style_name: str | None = None,
        user_agent: str | None = None,
        ip_hash: str | None = None,
        referrer: str | None = None,
    ) -> str | None:
        if not opt_in or not session_id:
            return None
        if not self.storage.enabled:
            return None

        try:
            original_url = enhanced_url = None
            original_size = len(original.data)
            enhanced_size = len(enhanced.data)
            if self.blobs is not None:
                original_blob, enhanced_blob = await asyncio.gather(
                    self.blobs.put_image(original, ORIGINALS_PREFIX),
                    self.blobs.put_image(enhanced, ENHANCED_PREFIX),
                )
                original_url, original_size = original_blob.url, original_blob.size
                enhanced_url, enhanced_size = enhanced_blob.url, enhanced_blob.size

            return await self.storage.append_transformation(TransformationCreate(
                session_id=session_id,
                original_blob_url=original_url,
                enhanced_blob_url=enhanced_url,
                prompt_used=prompt_used or None,
                style_key=style_key,
                style_name=style_name,
                processing_time_ms=max(0, processing_time_ms),
                original_size_bytes=original_size,
                enhanced_size_bytes=enhanced_size,
                opt_in=True,
                user_agent=user_agent,
                ip_hash=ip_hash,
                referrer=referrer,
            ))
        except Exception:
            logger.exception("Failed to record transformation for session %s", session_id)
            return None
