"""Tests for the storage backends — SQL and blob-JSON must behave the same."""

from datetime import datetime, timedelta, timezone

import pytest

from sceneit_engine.blobs.store import LocalBlobStore
from sceneit_engine.common.database import DatabaseManager
from sceneit_engine.events.service import normalize_event
from sceneit_engine.storage.base import DisabledStorageBackend, TransformationFilter, clamp_page
from sceneit_engine.storage.blob_json import BlobJsonStorageBackend
from sceneit_engine.storage.schemas import EventCreate, TransformationCreate
from sceneit_engine.storage.sql import SqlStorageBackend


BASE = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(params=["sql", "blob_json"])
async def backend(request, tmp_path):
    if request.param == "sql":
        storage = SqlStorageBackend(DatabaseManager("sqlite+aiosqlite://"))
    else:
        blobs = LocalBlobStore(tmp_path, "http://blobs.test")
        storage = BlobJsonStorageBackend(blobs, prefix="analytics")
    await storage.init()
    yield storage
    await storage.close()


def make_transformation(n: int, **overrides) -> TransformationCreate:
    defaults = {
        "created_at": BASE + timedelta(minutes=n),
        "session_id": f"s-{n}",
        "prompt_used": None,
        "style_key": "pure-form",
        "style_name": "Pure Form",
        "processing_time_ms": 4000,
        "original_size_bytes": 100,
        "enhanced_size_bytes": 300,
        "opt_in": True,
    }
    defaults.update(overrides)
    return TransformationCreate(**defaults)


async def _seed(backend, count: int, **overrides) -> list[str]:
    return [await backend.append_transformation(make_transformation(i, **overrides)) for i in range(count)]


class TestAppendTransformation:
    async def test_returns_id(self, backend):
        tid = await backend.append_transformation(make_transformation(0))
        assert isinstance(tid, str) and len(tid) == 36

    async def test_assigns_created_at_when_missing(self, backend):
        await backend.append_transformation(make_transformation(0, created_at=None))
        items = await backend.list_transformations()
        assert items[0].created_at.tzinfo is not None
        assert abs(items[0].created_at - datetime.now(timezone.utc)) < timedelta(minutes=1)

    async def test_round_trip_fields(self, backend):
        await backend.append_transformation(make_transformation(
            0, prompt_used="warmer light", original_dimensions="1024x768", referrer="https://ref",
        ))
        item = (await backend.list_transformations())[0]
        assert item.prompt_used == "warmer light"
        assert item.original_dimensions == "1024x768"
        assert item.referrer == "https://ref"
        assert item.created_at == BASE


class TestQueryTransformations:
    async def test_newest_first(self, backend):
        await _seed(backend, 3)
        items, total = await backend.query_transformations(TransformationFilter())
        assert total == 3
        assert [t.session_id for t in items] == ["s-2", "s-1", "s-0"]

    async def test_opt_out_excluded(self, backend):
        await _seed(backend, 2)
        await backend.append_transformation(make_transformation(5, opt_in=False))
        items, total = await backend.query_transformations(TransformationFilter(opt_in_only=True))
        assert total == 2
        assert all(t.opt_in for t in items)

    async def test_pages_disjoint_and_complete(self, backend):
        ids = await _seed(backend, 7)
        seen = []
        for page in (1, 2, 3):
            items, total = await backend.query_transformations(TransformationFilter(), page, 3)
            assert total == 7
            seen.extend(t.id for t in items)
        assert len(seen) == 7
        assert sorted(seen) == sorted(ids)

    async def test_page_past_end(self, backend):
        await _seed(backend, 2)
        items, total = await backend.query_transformations(TransformationFilter(), page=5, per_page=10)
        assert items == []
        assert total == 2

    async def test_style_filter(self, backend):
        await _seed(backend, 2)
        await backend.append_transformation(make_transformation(9, style_key="coastal-modern"))
        items, total = await backend.query_transformations(TransformationFilter(style_key="coastal-modern"))
        assert total == 1
        assert items[0].style_key == "coastal-modern"

    async def test_search_is_case_insensitive(self, backend):
        await backend.append_transformation(make_transformation(0, prompt_used="Add WARM lighting"))
        await backend.append_transformation(make_transformation(1, style_name="Urban Penthouse", style_key="urban-penthouse"))
        await backend.append_transformation(make_transformation(2))

        items, total = await backend.query_transformations(TransformationFilter(search_text="warm"))
        assert total == 1
        assert items[0].prompt_used == "Add WARM lighting"

        items, total = await backend.query_transformations(TransformationFilter(search_text="penthouse"))
        assert total == 1

    async def test_search_treats_wildcards_literally(self, backend):
        await backend.append_transformation(make_transformation(0, prompt_used="100% brighter"))
        await backend.append_transformation(make_transformation(1, prompt_used="1000 brighter"))
        items, total = await backend.query_transformations(TransformationFilter(search_text="0%"))
        assert total == 1

    async def test_date_range_inclusive(self, backend):
        await _seed(backend, 5)
        items, total = await backend.query_transformations(TransformationFilter(
            date_from=BASE + timedelta(minutes=1),
            date_to=BASE + timedelta(minutes=3),
        ))
        assert total == 3
        assert [t.session_id for t in items] == ["s-3", "s-2", "s-1"]


class TestEvents:
    async def test_append_and_list(self, backend):
        await backend.append_events([
            EventCreate(session_id="s1", event_type="page_view", created_at=BASE),
            EventCreate(session_id="s1", event_type="download", created_at=BASE + timedelta(minutes=1),
                        event_data={"format": "png"}, transformation_id="not-a-real-id"),
        ])
        events = await backend.list_events()
        assert [e.event_type for e in events] == ["download", "page_view"]
        assert events[0].event_data == {"format": "png"}
        assert events[0].transformation_id == "not-a-real-id"

    async def test_filter_by_type_and_range(self, backend):
        await backend.append_events([
            EventCreate(session_id="s1", event_type="page_view", created_at=BASE),
            EventCreate(session_id="s1", event_type="page_view", created_at=BASE + timedelta(days=2)),
            EventCreate(session_id="s1", event_type="download", created_at=BASE),
        ])
        events = await backend.list_events(date_to=BASE + timedelta(days=1), event_type="page_view")
        assert len(events) == 1

    async def test_empty_batch(self, backend):
        await backend.append_events([])
        assert await backend.list_events() == []

    async def test_long_unknown_event_type_stored_verbatim(self, backend):
        event_type = "custom_" + "x" * 200
        await backend.append_events([normalize_event({"session_id": "s1", "event_type": event_type})])
        events = await backend.list_events(event_type=event_type)
        assert [e.event_type for e in events] == [event_type]


class TestAggregateAll:
    async def test_materials(self, backend):
        await backend.append_transformation(make_transformation(0, processing_time_ms=2000))
        await backend.append_transformation(make_transformation(1, processing_time_ms=20000, opt_in=False, style_key=None))
        await backend.append_events([
            EventCreate(session_id="s1", event_type="page_view", event_data={"utm_source": "google"}, device_type="mobile"),
            EventCreate(session_id="s2", event_type="page_view", referrer="https://ref.example"),
            EventCreate(session_id="s3", event_type="page_view"),
            EventCreate(session_id="s3", event_type="enhance_start", device_type="desktop"),
        ])

        m = await backend.aggregate_all(datetime.now(timezone.utc))
        assert m.total_transformations == 2
        assert m.total_storage_bytes == 800
        assert m.processing_time_sum == 22000
        assert m.opt_in_count == 1
        assert len(m.timestamps) == 2
        assert m.style_counts == {"pure-form": 1, "default": 1}
        assert m.processing_buckets == {"<5s": 1, "15-30s": 1}
        assert m.event_type_counts == {"page_view": 3, "enhance_start": 1}
        assert m.attribution_counts == {"google": 1, "https://ref.example": 1, "direct": 1}
        assert m.device_counts == {"mobile": 1, "unknown": 2}
        assert [t.session_id for t in m.recent_transformations] == ["s-1", "s-0"]

    async def test_empty_style_key_counts_as_default(self, backend):
        await backend.append_transformation(make_transformation(0, style_key=""))
        await backend.append_transformation(make_transformation(1, style_key=None))
        m = await backend.aggregate_all(datetime.now(timezone.utc))
        assert m.style_counts == {"default": 2}

    async def test_non_string_utm_source_groups_alike(self, backend):
        await backend.append_events([
            normalize_event({"event_type": "page_view", "utm_source": True}),
            normalize_event({"event_type": "page_view", "event_data": {"utm_source": {"a": 1}}}),
            normalize_event({"event_type": "page_view", "event_data": {"utm_source": 7}}),
        ])
        m = await backend.aggregate_all(datetime.now(timezone.utc))
        assert m.attribution_counts == {"true": 1, '{"a":1}': 1, "7": 1}

    async def test_recent_limit(self, backend):
        await _seed(backend, 5)
        m = await backend.aggregate_all(datetime.now(timezone.utc), recent_limit=2)
        assert len(m.recent_transformations) == 2


class TestDisabledBackend:
    async def test_writes_dropped(self):
        storage = DisabledStorageBackend()
        assert storage.enabled is False
        assert await storage.append_transformation(make_transformation(0)) is None
        await storage.append_events([EventCreate(session_id="s", event_type="page_view")])
        assert await storage.query_transformations(TransformationFilter()) == ([], 0)
        assert await storage.list_events() == []
        m = await storage.aggregate_all(BASE)
        assert m.total_transformations == 0


class TestBlobJsonLayout:
    async def test_collections_are_json_arrays(self, tmp_path):
        blobs = LocalBlobStore(tmp_path, "http://blobs.test")
        storage = BlobJsonStorageBackend(blobs, prefix="analytics")
        await storage.append_transformation(make_transformation(0))
        await storage.append_events([EventCreate(session_id="s", event_type="page_view")])
        assert (tmp_path / "analytics" / "transformations.json").read_text().startswith("[")
        assert (tmp_path / "analytics" / "events.json").read_text().startswith("[")


def test_clamp_page():
    assert clamp_page(0, 0) == (1, 1)
    assert clamp_page(-3, 500) == (1, 50)
    assert clamp_page(2, 20) == (2, 20)
