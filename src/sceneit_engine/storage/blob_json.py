"""Blob-JSON storage backend: each collection is one JSON array object.

Every append fetches the whole array, appends, and writes the whole array
back. There is no locking: two concurrent appends can interleave and the
later write silently discards the earlier one. Use this backend only for
low-traffic deployments that have object storage but no database; the SQL
backend has no such gap.
"""

import json
import logging
from datetime import datetime, timezone

from sceneit_engine.blobs.store import BlobStore
from sceneit_engine.common.models import as_utc, generate_uuid
from sceneit_engine.stats.aggregator import StatsMaterials, collect_materials
from sceneit_engine.storage.base import (
    StorageBackend,
    TransformationFilter,
    clamp_page,
    in_range,
)
from sceneit_engine.storage.schemas import (
    EventCreate,
    Transformation,
    TransformationCreate,
    UsageEvent,
)

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"


class BlobJsonStorageBackend(StorageBackend):
    name = "blob_json"

    def __init__(self, blobs: BlobStore, prefix: str = "analytics"):
        self.blobs = blobs
        self.transformations_key = f"{prefix}/transformations.json"
        self.events_key = f"{prefix}/events.json"

    # ── Raw collection I/O ──

    async def _read(self, key: str) -> list[dict]:
        raw = await self.blobs.get(key)
        if not raw:
            return []
        data = json.loads(raw)
        return data if isinstance(data, list) else []

    async def _write(self, key: str, items: list[dict]) -> None:
        await self.blobs.put(key, json.dumps(items).encode("utf-8"), JSON_CONTENT_TYPE)

    @staticmethod
    def _stamp(data: dict) -> dict:
        created = data.get("created_at")
        data["created_at"] = as_utc(created) if created else datetime.now(timezone.utc)
        data["id"] = generate_uuid()
        return data

    async def _transformations(self) -> list[Transformation]:
        return [Transformation.model_validate(d) for d in await self._read(self.transformations_key)]

    async def _events(self) -> list[UsageEvent]:
        return [UsageEvent.model_validate(d) for d in await self._read(self.events_key)]

    # ── Write ──

    async def append_transformation(self, record: TransformationCreate) -> str | None:
        stored = Transformation.model_validate(self._stamp(record.model_dump()))
        items = await self._read(self.transformations_key)
        items.append(stored.model_dump(mode="json"))
        await self._write(self.transformations_key, items)
        return stored.id

    async def append_events(self, records: list[EventCreate]) -> None:
        if not records:
            return
        try:
            items = await self._read(self.events_key)
            for record in records:
                stored = UsageEvent.model_validate(self._stamp(record.model_dump()))
                items.append(stored.model_dump(mode="json"))
            await self._write(self.events_key, items)
        except Exception:
            logger.exception("Failed to write %d usage events", len(records))

    # ── Read ──

    async def query_transformations(
        self,
        filters: TransformationFilter,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[list[Transformation], int]:
        page, per_page = clamp_page(page, per_page)
        matched = [t for t in await self._transformations() if filters.matches(t)]
        matched.sort(key=lambda t: (t.created_at, t.id), reverse=True)
        start = (page - 1) * per_page
        return matched[start:start + per_page], len(matched)

    async def list_transformations(
        self,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
    ) -> list[Transformation]:
        items = [t for t in await self._transformations() if in_range(t.created_at, date_from, date_to)]
        return sorted(items, key=lambda t: t.created_at, reverse=True)

    async def list_events(
        self,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
        event_type: str | None = None,
    ) -> list[UsageEvent]:
        items = [
            e for e in await self._events()
            if in_range(e.created_at, date_from, date_to)
            and (not event_type or e.event_type == event_type)
        ]
        return sorted(items, key=lambda e: e.created_at, reverse=True)

    async def aggregate_all(self, now: datetime, recent_limit: int = 20) -> StatsMaterials:
        return collect_materials(
            await self._transformations(),
            await self._events(),
            now,
            recent_limit=recent_limit,
        )
