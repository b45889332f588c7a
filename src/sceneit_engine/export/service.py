"""Date-ranged record projections as JSON rows or CSV."""

import csv
import io
import json
from collections import Counter
from datetime import datetime
from typing import Any, Iterable, Iterator

from sceneit_engine.common.config import SceneItSettings
from sceneit_engine.common.dates import parse_date_bound
from sceneit_engine.common.exceptions import InvalidQueryError
from sceneit_engine.storage.base import StorageBackend
from sceneit_engine.storage.schemas import UsageEvent

PROJECTIONS: dict[str, list[str]] = {
    "transformations": [
        "id", "created_at", "session_id", "prompt_used", "style_key", "style_name",
        "processing_time_ms", "original_size_bytes", "enhanced_size_bytes", "opt_in",
    ],
    "events": [
        "id", "transformation_id", "session_id", "event_type", "event_data",
        "created_at", "referrer", "device_type", "screen_size",
    ],
    "sessions": ["session_id", "first_seen", "last_seen", "event_count", "event_types"],
    "attribution": ["utm_source", "utm_medium", "utm_campaign", "referrer", "count"],
}

FORMATS = ("json", "csv")


def _iso(value: datetime) -> str:
    return value.isoformat()


def session_rows(events: Iterable[UsageEvent]) -> list[dict[str, Any]]:
    """Group events by session: first/last seen, count and distinct types."""
    sessions: dict[str, dict[str, Any]] = {}
    for e in events:
        s = sessions.get(e.session_id)
        if s is None:
            sessions[e.session_id] = {
                "session_id": e.session_id,
                "first_seen": e.created_at,
                "last_seen": e.created_at,
                "event_count": 1,
                "event_types": {e.event_type},
            }
            continue
        s["first_seen"] = min(s["first_seen"], e.created_at)
        s["last_seen"] = max(s["last_seen"], e.created_at)
        s["event_count"] += 1
        s["event_types"].add(e.event_type)

    ordered = sorted(sessions.values(), key=lambda s: s["first_seen"], reverse=True)
    return [
        {
            **s,
            "first_seen": _iso(s["first_seen"]),
            "last_seen": _iso(s["last_seen"]),
            "event_types": sorted(s["event_types"]),
        }
        for s in ordered
    ]


def attribution_rows(events: Iterable[UsageEvent]) -> list[dict[str, Any]]:
    """Page views grouped by (utm_source, utm_medium, utm_campaign, referrer)."""
    counts: Counter[tuple[str, str, str, str]] = Counter()
    for e in events:
        if e.event_type != "page_view":
            continue
        data = e.event_data or {}
        counts[(
            str(data.get("utm_source") or "none"),
            str(data.get("utm_medium") or "none"),
            str(data.get("utm_campaign") or "none"),
            e.referrer or "",
        )] += 1
    ranked = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
    return [
        {
            "utm_source": source,
            "utm_medium": medium,
            "utm_campaign": campaign,
            "referrer": referrer,
            "count": count,
        }
        for (source, medium, campaign, referrer), count in ranked
    ]


def _project(data: dict[str, Any], columns: list[str]) -> dict[str, Any]:
    return {c: data.get(c) for c in columns}


def _csv_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def encode_csv(rows: list[dict[str, Any]], columns: list[str]) -> Iterator[str]:
    """Yield RFC 4180 CSV lines.

    The header is the key set of the first row (``columns`` when there are
    no rows). Fields containing a comma, quote or line break are quoted with
    inner quotes doubled.
    """
    header = list(rows[0].keys()) if rows else columns
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\r\n")

    def _line(values: list[str]) -> str:
        buf.seek(0)
        buf.truncate()
        writer.writerow(values)
        return buf.getvalue()

    yield _line(header)
    for row in rows:
        yield _line([_csv_value(row.get(h)) for h in header])


class ExportService:
    def __init__(self, settings: SceneItSettings, storage: StorageBackend):
        self.settings = settings
        self.storage = storage

    async def export(
        self,
        export_type: str,
        date_from: str | None = None,
        date_to: str | None = None,
    ) -> list[dict[str, Any]]:
        if export_type not in PROJECTIONS:
            raise InvalidQueryError(f"Unknown export type: {export_type!r}")
        start = parse_date_bound(date_from)
        end = parse_date_bound(date_to, end=True)

        if export_type == "transformations":
            records = await self.storage.list_transformations(start, end)
            return [_project(t.model_dump(mode="json"), PROJECTIONS[export_type]) for t in records]

        if export_type == "events":
            records = await self.storage.list_events(start, end)
            return [_project(e.model_dump(mode="json"), PROJECTIONS[export_type]) for e in records]

        if export_type == "sessions":
            return session_rows(await self.storage.list_events(start, end))

        return attribution_rows(await self.storage.list_events(start, end, event_type="page_view"))
