"""Event ingestion API router."""

import json
import logging

from fastapi import APIRouter, Request

from sceneit_engine.common.security import request_ip_hash
from sceneit_engine.events.schemas import EventAck

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service():
    from sceneit_engine.deps import get_event_service
    return get_event_service()


@router.post("/events", response_model=EventAck)
async def ingest_events(request: Request):
    # Beacons arrive as text/plain, so the body is parsed regardless of
    # content type. Telemetry never fails the client.
    try:
        body = json.loads(await request.body())
        raw_events = body.get("events") if isinstance(body, dict) else None
        await _get_service().ingest(
            raw_events,
            ip_hash=request_ip_hash(request),
            user_agent=request.headers.get("user-agent"),
        )
    except Exception:
        logger.warning("Discarding malformed event batch", exc_info=True)
    return EventAck()
