"""Pydantic schemas for the public gallery."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class GalleryItem(BaseModel):
    """Public projection of an opted-in transformation (no provenance fields)."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: datetime
    original_blob_url: Optional[str] = None
    enhanced_blob_url: Optional[str] = None
    prompt_used: Optional[str] = None
    style_key: Optional[str] = None
    style_name: Optional[str] = None
    processing_time_ms: int = 0
    original_size_bytes: int = 0
    enhanced_size_bytes: int = 0
    original_dimensions: Optional[str] = None
    enhanced_dimensions: Optional[str] = None


class GalleryResponse(BaseModel):
    transformations: list[GalleryItem]
    total: int
    page: int
    per_page: int
