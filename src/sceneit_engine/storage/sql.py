"""Relational storage backend (SQLite or PostgreSQL through SQLAlchemy)."""

import logging
from datetime import datetime

from sqlalchemy import case, func, or_, select

from sceneit_engine.common.database import DatabaseManager
from sceneit_engine.common.models import as_utc
from sceneit_engine.stats.aggregator import (
    DEFAULT_STYLE,
    DIRECT_SOURCE,
    PROCESSING_BUCKETS,
    UNKNOWN_DEVICE,
    StatsMaterials,
)
from sceneit_engine.storage.base import StorageBackend, TransformationFilter, clamp_page
from sceneit_engine.storage.models import TransformationModel, UsageEventModel
from sceneit_engine.storage.schemas import (
    EventCreate,
    Transformation,
    TransformationCreate,
    UsageEvent,
)

logger = logging.getLogger(__name__)


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _row_data(record: TransformationCreate | EventCreate) -> dict:
    data = record.model_dump()
    if data.get("created_at") is None:
        data.pop("created_at", None)
    else:
        data["created_at"] = as_utc(data["created_at"])
    return data


class SqlStorageBackend(StorageBackend):
    """Row-per-record storage; concurrent appends are independent inserts."""

    name = "sql"

    def __init__(self, db: DatabaseManager, create_schema: bool = True):
        self.db = db
        self.create_schema = create_schema

    async def init(self) -> None:
        if not self.db.initialized:
            await self.db.init()
        if self.create_schema:
            await self.db.create_all()

    async def close(self) -> None:
        await self.db.close()

    # ── Write ──

    async def append_transformation(self, record: TransformationCreate) -> str | None:
        async with self.db.get_session() as session:
            row = TransformationModel(**_row_data(record))
            session.add(row)
            await session.flush()
            return row.id

    async def append_events(self, records: list[EventCreate]) -> None:
        if not records:
            return
        try:
            async with self.db.get_session() as session:
                session.add_all([UsageEventModel(**_row_data(r)) for r in records])
        except Exception:
            logger.exception("Failed to write %d usage events", len(records))

    # ── Read ──

    @staticmethod
    def _conditions(filters: TransformationFilter) -> list:
        conditions = []
        if filters.opt_in_only:
            conditions.append(TransformationModel.opt_in.is_(True))
        if filters.style_key:
            conditions.append(TransformationModel.style_key == filters.style_key)
        if filters.search_text:
            pattern = f"%{_escape_like(filters.search_text)}%"
            conditions.append(or_(
                TransformationModel.prompt_used.ilike(pattern, escape="\\"),
                TransformationModel.style_name.ilike(pattern, escape="\\"),
                TransformationModel.style_key.ilike(pattern, escape="\\"),
            ))
        if filters.date_from is not None:
            conditions.append(TransformationModel.created_at >= filters.date_from)
        if filters.date_to is not None:
            conditions.append(TransformationModel.created_at <= filters.date_to)
        return conditions

    async def query_transformations(
        self,
        filters: TransformationFilter,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[list[Transformation], int]:
        page, per_page = clamp_page(page, per_page)
        conditions = self._conditions(filters)
        async with self.db.get_session() as session:
            count_result = await session.execute(
                select(func.count(TransformationModel.id)).where(*conditions)
            )
            total = count_result.scalar() or 0

            result = await session.execute(
                select(TransformationModel)
                .where(*conditions)
                .order_by(TransformationModel.created_at.desc(), TransformationModel.id.desc())
                .offset((page - 1) * per_page)
                .limit(per_page)
            )
            items = [Transformation.model_validate(row) for row in result.scalars().all()]
        return items, total

    async def list_transformations(
        self,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
    ) -> list[Transformation]:
        filters = TransformationFilter(opt_in_only=False, date_from=date_from, date_to=date_to)
        async with self.db.get_session() as session:
            result = await session.execute(
                select(TransformationModel)
                .where(*self._conditions(filters))
                .order_by(TransformationModel.created_at.desc())
            )
            return [Transformation.model_validate(row) for row in result.scalars().all()]

    async def list_events(
        self,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
        event_type: str | None = None,
    ) -> list[UsageEvent]:
        query = select(UsageEventModel)
        if date_from is not None:
            query = query.where(UsageEventModel.created_at >= date_from)
        if date_to is not None:
            query = query.where(UsageEventModel.created_at <= date_to)
        if event_type:
            query = query.where(UsageEventModel.event_type == event_type)
        async with self.db.get_session() as session:
            result = await session.execute(query.order_by(UsageEventModel.created_at.desc()))
            return [UsageEvent.model_validate(row) for row in result.scalars().all()]

    # ── Aggregates ──

    @staticmethod
    async def _grouped(session, expr, *where) -> dict[str, int]:
        """COUNT(*) grouped by ``expr``, via a subquery so PostgreSQL sees
        one column name instead of two copies of a parameterized expression."""
        sub = select(expr.label("key")).where(*where).subquery()
        result = await session.execute(
            select(sub.c.key, func.count()).group_by(sub.c.key)
        )
        return {str(key): count for key, count in result.all()}

    async def aggregate_all(self, now: datetime, recent_limit: int = 20) -> StatsMaterials:
        t = TransformationModel
        e = UsageEventModel
        m = StatsMaterials(now=now)

        bucket_expr = case(
            *[
                (t.processing_time_ms < upper, label)
                for label, upper in PROCESSING_BUCKETS
                if upper is not None
            ],
            else_=PROCESSING_BUCKETS[-1][0],
        )
        source_expr = func.coalesce(
            func.nullif(e.event_data["utm_source"].as_string(), ""),
            func.nullif(e.referrer, ""),
            DIRECT_SOURCE,
        )
        device_expr = func.coalesce(func.nullif(e.device_type, ""), UNKNOWN_DEVICE)

        async with self.db.get_session() as session:
            totals = (await session.execute(
                select(
                    func.count(t.id),
                    func.coalesce(func.sum(t.original_size_bytes + t.enhanced_size_bytes), 0),
                    func.coalesce(func.sum(t.processing_time_ms), 0),
                    func.coalesce(func.sum(case((t.opt_in.is_(True), 1), else_=0)), 0),
                )
            )).one()
            m.total_transformations = int(totals[0] or 0)
            m.total_storage_bytes = int(totals[1] or 0)
            m.processing_time_sum = int(totals[2] or 0)
            m.opt_in_count = int(totals[3] or 0)

            # Day/hour bucketing happens in Python (UTC) so every backend agrees.
            stamps = await session.execute(select(t.created_at))
            m.timestamps = [as_utc(ts) for ts in stamps.scalars().all()]

            m.style_counts = await self._grouped(
                session, func.coalesce(func.nullif(t.style_key, ""), DEFAULT_STYLE),
            )
            m.processing_buckets = await self._grouped(session, bucket_expr)
            m.event_type_counts = await self._grouped(session, e.event_type)
            m.attribution_counts = await self._grouped(
                session, source_expr, e.event_type == "page_view",
            )
            m.device_counts = await self._grouped(
                session, device_expr, e.event_type == "page_view",
            )

            recent = await session.execute(
                select(t).order_by(t.created_at.desc()).limit(recent_limit)
            )
            m.recent_transformations = [
                Transformation.model_validate(row) for row in recent.scalars().all()
            ]
        return m
