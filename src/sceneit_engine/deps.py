"""Dependency injection singletons for the SceneIt engine.

The storage backend is chosen here, once per process; everything else
receives it through its constructor.
"""

import logging

from sceneit_engine.blobs.store import BlobStore, create_blob_store
from sceneit_engine.common.config import SceneItSettings, get_settings
from sceneit_engine.common.database import DatabaseManager
from sceneit_engine.enhance.client import EnhancementClient
from sceneit_engine.events.service import EventService
from sceneit_engine.export.service import ExportService
from sceneit_engine.gallery.service import GalleryService
from sceneit_engine.stats.service import StatsService
from sceneit_engine.storage.base import DisabledStorageBackend, StorageBackend
from sceneit_engine.storage.blob_json import BlobJsonStorageBackend
from sceneit_engine.storage.sql import SqlStorageBackend
from sceneit_engine.transformations.service import TransformationRecorder

logger = logging.getLogger(__name__)

_UNSET = object()

_blob_store: BlobStore | None | object = _UNSET
_storage: StorageBackend | None = None
_enhancement: EnhancementClient | None = None
_events: EventService | None = None
_recorder: TransformationRecorder | None = None
_gallery: GalleryService | None = None
_stats: StatsService | None = None
_export: ExportService | None = None


def create_storage_backend(
    settings: SceneItSettings,
    blobs: BlobStore | None = None,
) -> StorageBackend:
    if settings.storage_backend == "sql" and settings.db_url:
        return SqlStorageBackend(DatabaseManager(settings.db_url))
    if settings.storage_backend == "blob_json":
        if blobs is None:
            logger.warning("storage_backend=blob_json needs a blob store; persistence disabled")
            return DisabledStorageBackend()
        return BlobJsonStorageBackend(blobs, prefix=settings.blob_json_prefix)
    return DisabledStorageBackend()


def get_blob_store() -> BlobStore | None:
    global _blob_store
    if _blob_store is _UNSET:
        _blob_store = create_blob_store(get_settings())
    return _blob_store


def get_storage() -> StorageBackend:
    global _storage
    if _storage is None:
        _storage = create_storage_backend(get_settings(), get_blob_store())
    return _storage


def get_enhancement_client() -> EnhancementClient:
    global _enhancement
    if _enhancement is None:
        _enhancement = EnhancementClient(get_settings())
    return _enhancement


def get_event_service() -> EventService:
    global _events
    if _events is None:
        _events = EventService(get_settings(), get_storage())
    return _events


def get_transformation_recorder() -> TransformationRecorder:
    global _recorder
    if _recorder is None:
        _recorder = TransformationRecorder(get_settings(), get_storage(), get_blob_store())
    return _recorder


def get_gallery_service() -> GalleryService:
    global _gallery
    if _gallery is None:
        _gallery = GalleryService(get_settings(), get_storage())
    return _gallery


def get_stats_service() -> StatsService:
    global _stats
    if _stats is None:
        _stats = StatsService(get_settings(), get_storage())
    return _stats


def get_export_service() -> ExportService:
    global _export
    if _export is None:
        _export = ExportService(get_settings(), get_storage())
    return _export


def override(
    storage: StorageBackend | None = None,
    blob_store: BlobStore | None | object = _UNSET,
    enhancement_client: EnhancementClient | None = None,
) -> None:
    """Install specific collaborators (for testing)."""
    global _storage, _blob_store, _enhancement
    if storage is not None:
        _storage = storage
    if blob_store is not _UNSET:
        _blob_store = blob_store
    if enhancement_client is not None:
        _enhancement = enhancement_client


def reset_singletons() -> None:
    """Reset all singletons (for testing)."""
    global _blob_store, _storage, _enhancement, _events, _recorder, _gallery, _stats, _export
    _blob_store = _UNSET
    _storage = None
    _enhancement = None
    _events = None
    _recorder = None
    _gallery = None
    _stats = None
    _export = None
