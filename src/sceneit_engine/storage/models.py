"""SQLAlchemy models for transformations and usage events."""

from sqlalchemy import JSON, Boolean, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from sceneit_engine.common.models import Base, TimestampMixin, generate_uuid


class TransformationModel(Base, TimestampMixin):
    __tablename__ = "transformations"
    __table_args__ = (
        # Gallery reads only ever touch opted-in rows
        Index(
            "ix_transformations_opt_in",
            "opt_in",
            sqlite_where=text("opt_in = 1"),
            postgresql_where=text("opt_in"),
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    session_id: Mapped[str] = mapped_column(String(255), nullable=False)
    original_blob_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    enhanced_blob_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    prompt_used: Mapped[str | None] = mapped_column(Text, nullable=True)
    style_key: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    style_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    processing_time_ms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    original_size_bytes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    enhanced_size_bytes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    original_dimensions: Mapped[str | None] = mapped_column(String(50), nullable=True)
    enhanced_dimensions: Mapped[str | None] = mapped_column(String(50), nullable=True)
    opt_in: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)
    ip_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)
    referrer: Mapped[str | None] = mapped_column(Text, nullable=True)


class UsageEventModel(Base, TimestampMixin):
    __tablename__ = "usage_events"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    # Weak reference: no foreign key, client-supplied ids are stored verbatim.
    transformation_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    session_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    event_type: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    event_data: Mapped[dict] = mapped_column(JSON, default=dict)
    ip_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)
    referrer: Mapped[str | None] = mapped_column(Text, nullable=True)
    device_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    screen_size: Mapped[str | None] = mapped_column(String(50), nullable=True)


Index("ix_transformations_created_at", TransformationModel.created_at.desc())
Index("ix_usage_events_created_at", UsageEventModel.created_at.desc())
