"""Object storage for image bytes and blob-JSON collections."""

import asyncio
import base64
import binascii
import logging
import re
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from sceneit_engine.common.config import SceneItSettings
from sceneit_engine.common.exceptions import InvalidImageError

logger = logging.getLogger(__name__)

_DATA_URL_RE = re.compile(r"^data:image/(\w+);base64,(.+)$", re.DOTALL)


@dataclass
class BlobInfo:
    url: str
    size: int


@dataclass
class DecodedImage:
    mime_type: str
    data: bytes

    @property
    def base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    @property
    def extension(self) -> str:
        return self.mime_type.split("/", 1)[1].replace("jpeg", "jpg")

    def to_data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.base64}"


def decode_data_url(data_url: str) -> DecodedImage:
    """Parse ``data:image/<type>;base64,<payload>`` into bytes."""
    match = _DATA_URL_RE.match(data_url or "")
    if not match:
        raise InvalidImageError()
    try:
        data = base64.b64decode(match.group(2), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidImageError() from exc
    return DecodedImage(mime_type=f"image/{match.group(1)}", data=data)


class BlobStore(ABC):
    """put(bytes) -> URL contract over an external object store."""

    @abstractmethod
    async def put(self, key: str, data: bytes, content_type: str) -> BlobInfo:
        ...

    @abstractmethod
    async def get(self, key: str) -> bytes | None:
        """Return the object's bytes, or None if it does not exist."""

    async def put_image(self, image: DecodedImage, prefix: str) -> BlobInfo:
        key = f"{prefix}/{uuid.uuid4()}.{image.extension}"
        return await self.put(key, image.data, image.mime_type)


class LocalBlobStore(BlobStore):
    """Filesystem-backed store for development and tests."""

    def __init__(self, root: str | Path, public_base_url: str):
        self.root = Path(root)
        self.public_base_url = public_base_url.rstrip("/")

    def _path(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if self.root.resolve() not in path.parents:
            raise ValueError(f"Blob key escapes store root: {key!r}")
        return path

    async def put(self, key: str, data: bytes, content_type: str) -> BlobInfo:
        path = self._path(key)

        def _write() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)

        await asyncio.to_thread(_write)
        return BlobInfo(url=f"{self.public_base_url}/{key}", size=len(data))

    async def get(self, key: str) -> bytes | None:
        path = self._path(key)
        if not path.exists():
            return None
        return await asyncio.to_thread(path.read_bytes)


class S3BlobStore(BlobStore):
    """Amazon S3 (or S3-compatible) store. boto3 calls run off the event loop."""

    def __init__(
        self,
        bucket: str,
        region: str = "us-east-1",
        endpoint_url: str | None = None,
        public_base_url: str | None = None,
        client=None,
    ):
        self.bucket = bucket
        self.region = region
        self.public_base_url = (
            public_base_url or f"https://{bucket}.s3.{region}.amazonaws.com"
        ).rstrip("/")
        if client is None:
            import boto3
            client = boto3.client("s3", region_name=region, endpoint_url=endpoint_url or None)
        self._client = client

    async def put(self, key: str, data: bytes, content_type: str) -> BlobInfo:
        await asyncio.to_thread(
            self._client.put_object,
            Bucket=self.bucket, Key=key, Body=data, ContentType=content_type,
        )
        return BlobInfo(url=f"{self.public_base_url}/{key}", size=len(data))

    async def get(self, key: str) -> bytes | None:
        from botocore.exceptions import ClientError

        try:
            response = await asyncio.to_thread(
                self._client.get_object, Bucket=self.bucket, Key=key,
            )
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") in ("NoSuchKey", "404"):
                return None
            raise
        return await asyncio.to_thread(response["Body"].read)


def create_blob_store(settings: SceneItSettings) -> BlobStore | None:
    """Build the configured store, or None when blob storage is off."""
    if settings.blob_backend == "local":
        return LocalBlobStore(settings.blob_local_dir, settings.blob_public_base_url)
    if settings.blob_backend == "s3":
        if not settings.s3_bucket:
            logger.warning("blob_backend=s3 but SCENEIT_S3_BUCKET is empty; blob storage disabled")
            return None
        return S3BlobStore(
            settings.s3_bucket,
            region=settings.s3_region,
            endpoint_url=settings.s3_endpoint_url or None,
            public_base_url=settings.s3_public_base_url or None,
        )
    return None
