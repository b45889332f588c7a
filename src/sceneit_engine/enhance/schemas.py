"""Pydantic schemas for enhancement endpoints."""

from typing import Optional

from pydantic import BaseModel


class EnhanceRequest(BaseModel):
    image: Optional[str] = None  # data:image/<type>;base64,...
    prompt: Optional[str] = None
    opt_in: bool = False
    session_id: Optional[str] = None
    style_tag: Optional[str] = None
    style_key: Optional[str] = None

    @property
    def style(self) -> Optional[str]:
        return self.style_key or self.style_tag


class EnhanceResponse(BaseModel):
    enhanced: str
    transformation_id: Optional[str] = None


class StyleResponse(BaseModel):
    key: str
    name: str
    subtitle: str
