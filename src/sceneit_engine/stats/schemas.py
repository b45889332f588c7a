"""Pydantic schemas for the admin dashboard payload."""

from pydantic import BaseModel, Field

from sceneit_engine.storage.schemas import Transformation


class DailyCount(BaseModel):
    date: str
    count: int


class StyleCount(BaseModel):
    style: str
    count: int


class BucketCount(BaseModel):
    bucket: str
    count: int


class HourCount(BaseModel):
    hour: int = Field(..., ge=0, le=23)
    count: int


class Funnel(BaseModel):
    page_views: int = 0
    uploads: int = 0
    enhances: int = 0
    downloads: int = 0


class SourceCount(BaseModel):
    source: str
    count: int


class DeviceCount(BaseModel):
    device: str
    count: int


class AdminStats(BaseModel):
    total_transformations: int = 0
    today_count: int = 0
    week_count: int = 0
    month_count: int = 0
    total_storage_bytes: int = 0
    avg_processing_time_ms: int = 0
    opt_in_rate: int = 0
    daily_counts: list[DailyCount] = Field(default_factory=list)
    popular_styles: list[StyleCount] = Field(default_factory=list)
    processing_distribution: list[BucketCount] = Field(default_factory=list)
    peak_hours: list[HourCount] = Field(default_factory=list)
    funnel: Funnel = Field(default_factory=Funnel)
    attribution: list[SourceCount] = Field(default_factory=list)
    device_breakdown: list[DeviceCount] = Field(default_factory=list)
    error_rate: float = 0.0
    recent_transformations: list[Transformation] = Field(default_factory=list)
