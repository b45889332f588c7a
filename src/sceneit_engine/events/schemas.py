"""Pydantic schemas for event ingestion."""

from pydantic import BaseModel


class EventAck(BaseModel):
    ok: bool = True
