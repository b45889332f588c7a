"""Event ingestion — normalize client batches and forward them to storage."""

import json
import logging
from typing import Any

from sceneit_engine.common.config import SceneItSettings
from sceneit_engine.storage.base import StorageBackend
from sceneit_engine.storage.schemas import EventCreate

logger = logging.getLogger(__name__)

UTM_KEYS = ("utm_source", "utm_medium", "utm_campaign")

_MAX_SESSION_ID = 255
_MAX_SHORT_FIELD = 50


def _opt_str(value: Any, limit: int | None = None) -> str | None:
    """Stringify truthy values, map falsy ones (None, "", 0) to None."""
    if not value:
        return None
    text = str(value)
    return text[:limit] if limit else text


def utm_text(value: Any) -> str | None:
    """Canonical string form of a UTM value. None and "" mean absent.

    Non-string values are rendered as compact JSON, so every backend groups
    the stored string the same way.
    """
    if value is None or value == "":
        return None
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"), sort_keys=True, default=str)


def normalize_event(
    raw: dict[str, Any],
    ip_hash: str | None = None,
    user_agent: str | None = None,
) -> EventCreate:
    """Coerce one client-asserted event into a storable record.

    Provenance (``ip_hash``, ``user_agent``) always comes from the HTTP
    request, never from the client payload.
    """
    event_data = raw.get("event_data")
    event_data = dict(event_data) if isinstance(event_data, dict) else {}
    for key in UTM_KEYS:
        text = utm_text(event_data.pop(key, None))
        if text is None:
            text = utm_text(raw.get(key))
        if text is not None:
            event_data[key] = text

    return EventCreate(
        session_id=_opt_str(raw.get("session_id"), _MAX_SESSION_ID) or "unknown",
        event_type=_opt_str(raw.get("event_type")) or "unknown",
        event_data=event_data,
        transformation_id=_opt_str(raw.get("transformation_id"), 36),
        ip_hash=ip_hash,
        user_agent=user_agent or None,
        referrer=_opt_str(raw.get("referrer")),
        device_type=_opt_str(raw.get("device_type"), _MAX_SHORT_FIELD),
        screen_size=_opt_str(raw.get("screen_size"), _MAX_SHORT_FIELD),
    )


class EventService:
    """Best-effort ingestion: nothing here ever raises to the caller."""

    def __init__(self, settings: SceneItSettings, storage: StorageBackend):
        self.settings = settings
        self.storage = storage

    def normalize_batch(
        self,
        raw_events: Any,
        ip_hash: str | None = None,
        user_agent: str | None = None,
    ) -> list[EventCreate]:
        """Keep the first ``event_batch_limit`` entries; drop non-object entries."""
        if not isinstance(raw_events, list):
            return []
        window = raw_events[: self.settings.event_batch_limit]
        return [
            normalize_event(raw, ip_hash=ip_hash, user_agent=user_agent)
            for raw in window
            if isinstance(raw, dict)
        ]

    async def ingest(
        self,
        raw_events: Any,
        ip_hash: str | None = None,
        user_agent: str | None = None,
    ) -> int:
        """Normalize and store a client batch. Returns the number forwarded."""
        events = self.normalize_batch(raw_events, ip_hash=ip_hash, user_agent=user_agent)
        if not events:
            return 0
        try:
            await self.storage.append_events(events)
        except Exception:
            logger.exception("Event ingestion failed for batch of %d", len(events))
        return len(events)

    async def log_server_events(self, events: list[dict[str, Any]]) -> None:
        """Record server-observed events (e.g. enhancement outcomes)."""
        records = [normalize_event(e, ip_hash=e.get("ip_hash"), user_agent=e.get("user_agent")) for e in events]
        try:
            await self.storage.append_events(records)
        except Exception:
            logger.exception("Failed to log %d server events", len(records))
