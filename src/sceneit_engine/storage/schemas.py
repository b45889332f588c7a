"""Storage-neutral record types shared by every backend."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from sceneit_engine.common.models import as_utc

EVENT_TYPES: frozenset[str] = frozenset({
    "page_view",
    "upload_start",
    "upload_complete",
    "enhance_start",
    "enhance_complete",
    "enhance_error",
    "download",
    "gallery_view",
    "style_selected",
    "prompt_custom",
    "consent_given",
    "consent_revoked",
    "share_click",
})


class TransformationCreate(BaseModel):
    """Fields supplied when recording a transformation.

    ``created_at`` is normally left unset and stamped by the backend; seeding
    and imports may provide it.
    """

    created_at: Optional[datetime] = None
    session_id: str
    original_blob_url: Optional[str] = None
    enhanced_blob_url: Optional[str] = None
    prompt_used: Optional[str] = None
    style_key: Optional[str] = None
    style_name: Optional[str] = None
    processing_time_ms: int = Field(default=0, ge=0)
    original_size_bytes: int = Field(default=0, ge=0)
    enhanced_size_bytes: int = Field(default=0, ge=0)
    original_dimensions: Optional[str] = None
    enhanced_dimensions: Optional[str] = None
    opt_in: bool = False
    user_agent: Optional[str] = None
    ip_hash: Optional[str] = None
    referrer: Optional[str] = None


class Transformation(TransformationCreate):
    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class EventCreate(BaseModel):
    """A normalized usage event ready to persist.

    ``event_type`` is deliberately an open string: unknown types from
    clients are stored as-is. ``event_data`` is a forward-compatible,
    unvalidated bag of JSON values.
    """

    created_at: Optional[datetime] = None
    session_id: str
    event_type: str
    event_data: dict[str, Any] = Field(default_factory=dict)
    transformation_id: Optional[str] = None
    ip_hash: Optional[str] = None
    user_agent: Optional[str] = None
    referrer: Optional[str] = None
    device_type: Optional[str] = None
    screen_size: Optional[str] = None


class UsageEvent(EventCreate):
    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return as_utc(value)
