"""Dashboard statistics computed from the transformation and event streams.

Backends hand over a ``StatsMaterials`` bundle: the blob-JSON backend builds
it with ``collect_materials`` from a full scan, the SQL backend fills it from
GROUP BY queries. ``build_admin_stats`` then shapes either into the
dashboard payload, so ranking, rounding and time bucketing are identical for
every backend.

All calendar-day and hour-of-day bucketing is done in UTC.
"""

import math
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Iterable, Optional

from sceneit_engine.stats.schemas import (
    AdminStats,
    BucketCount,
    DailyCount,
    DeviceCount,
    Funnel,
    HourCount,
    SourceCount,
    StyleCount,
)
from sceneit_engine.storage.schemas import Transformation, UsageEvent

TOP_N = 10
DEFAULT_STYLE = "default"
UNKNOWN_DEVICE = "unknown"
DIRECT_SOURCE = "direct"

# (label, exclusive upper bound in ms); the last bucket is open-ended.
PROCESSING_BUCKETS: list[tuple[str, Optional[int]]] = [
    ("<5s", 5000),
    ("5-15s", 15000),
    ("15-30s", 30000),
    (">30s", None),
]

FUNNEL_EVENTS = {
    "page_views": "page_view",
    "uploads": "upload_complete",
    "enhances": "enhance_complete",
    "downloads": "download",
}


@dataclass
class StatsMaterials:
    """Raw or pre-aggregated inputs for ``build_admin_stats``."""
    now: datetime
    total_transformations: int = 0
    total_storage_bytes: int = 0
    processing_time_sum: int = 0
    opt_in_count: int = 0
    timestamps: list[datetime] = field(default_factory=list)
    style_counts: dict[str, int] = field(default_factory=dict)
    processing_buckets: dict[str, int] = field(default_factory=dict)
    event_type_counts: dict[str, int] = field(default_factory=dict)
    attribution_counts: dict[str, int] = field(default_factory=dict)
    device_counts: dict[str, int] = field(default_factory=dict)
    recent_transformations: list[Transformation] = field(default_factory=list)


def processing_bucket(processing_time_ms: int) -> str:
    for label, upper in PROCESSING_BUCKETS:
        if upper is None or processing_time_ms < upper:
            return label
    return PROCESSING_BUCKETS[-1][0]


def attribution_source(event_data: dict[str, Any], referrer: str | None) -> str:
    """UTM source, else referrer, else ``direct``."""
    utm = event_data.get("utm_source") if event_data else None
    if utm:
        return str(utm)
    if referrer:
        return referrer
    return DIRECT_SOURCE


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def top_counts(counts: dict[str, int], limit: int | None = None) -> list[tuple[str, int]]:
    """Sort by count descending, ties by key ascending."""
    ranked = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
    return ranked[:limit] if limit is not None else ranked


def collect_materials(
    transformations: Iterable[Transformation],
    events: Iterable[UsageEvent],
    now: datetime,
    recent_limit: int = 20,
) -> StatsMaterials:
    """Single pass over both streams for backends without native aggregates."""
    m = StatsMaterials(now=now)
    styles: Counter[str] = Counter()
    buckets: Counter[str] = Counter()
    records: list[Transformation] = []

    for t in transformations:
        records.append(t)
        m.total_transformations += 1
        m.total_storage_bytes += (t.original_size_bytes or 0) + (t.enhanced_size_bytes or 0)
        m.processing_time_sum += t.processing_time_ms or 0
        if t.opt_in:
            m.opt_in_count += 1
        m.timestamps.append(t.created_at)
        styles[t.style_key or DEFAULT_STYLE] += 1
        buckets[processing_bucket(t.processing_time_ms or 0)] += 1

    types: Counter[str] = Counter()
    sources: Counter[str] = Counter()
    devices: Counter[str] = Counter()
    for e in events:
        types[e.event_type] += 1
        if e.event_type == "page_view":
            sources[attribution_source(e.event_data, e.referrer)] += 1
            devices[e.device_type or UNKNOWN_DEVICE] += 1

    m.style_counts = dict(styles)
    m.processing_buckets = dict(buckets)
    m.event_type_counts = dict(types)
    m.attribution_counts = dict(sources)
    m.device_counts = dict(devices)
    records.sort(key=lambda t: t.created_at, reverse=True)
    m.recent_transformations = records[:recent_limit]
    return m


def build_admin_stats(m: StatsMaterials) -> AdminStats:
    """Shape a materials bundle into the dashboard payload."""
    total = m.total_transformations
    now = m.now
    day_ago = now - timedelta(days=1)
    week_ago = now - timedelta(days=7)
    month_ago = now - timedelta(days=30)

    daily: Counter[str] = Counter()
    hours: Counter[int] = Counter()
    today = week = month = 0
    for ts in m.timestamps:
        hours[ts.hour] += 1
        if ts > month_ago:
            month += 1
            daily[ts.date().isoformat()] += 1
            if ts > week_ago:
                week += 1
                if ts > day_ago:
                    today += 1

    types = m.event_type_counts
    starts = types.get("enhance_start", 0)
    errors = types.get("enhance_error", 0)

    return AdminStats(
        total_transformations=total,
        today_count=today,
        week_count=week,
        month_count=month,
        total_storage_bytes=m.total_storage_bytes,
        avg_processing_time_ms=round_half_up(m.processing_time_sum / total) if total else 0,
        opt_in_rate=round_half_up(m.opt_in_count * 100 / total) if total else 0,
        daily_counts=[DailyCount(date=d, count=c) for d, c in sorted(daily.items())],
        popular_styles=[
            StyleCount(style=s, count=c) for s, c in top_counts(m.style_counts, TOP_N)
        ],
        processing_distribution=[
            BucketCount(bucket=label, count=m.processing_buckets.get(label, 0))
            for label, _ in PROCESSING_BUCKETS
        ],
        peak_hours=[HourCount(hour=h, count=c) for h, c in sorted(hours.items())],
        funnel=Funnel(**{
            stage: types.get(event_type, 0) for stage, event_type in FUNNEL_EVENTS.items()
        }),
        attribution=[
            SourceCount(source=s, count=c) for s, c in top_counts(m.attribution_counts, TOP_N)
        ],
        device_breakdown=[
            DeviceCount(device=d, count=c) for d, c in top_counts(m.device_counts)
        ],
        error_rate=round(errors * 100 / starts, 2) if starts else 0.0,
        recent_transformations=m.recent_transformations,
    )
