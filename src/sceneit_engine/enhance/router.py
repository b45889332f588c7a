"""Enhancement API router."""

import logging
import time

from fastapi import APIRouter, BackgroundTasks, Request
from fastapi.responses import JSONResponse

from sceneit_engine.blobs.store import decode_data_url
from sceneit_engine.common.exceptions import (
    EnhancementNotConfiguredError,
    ImageTooLargeError,
    InvalidImageError,
    SceneItError,
)
from sceneit_engine.common.schemas import error_response
from sceneit_engine.common.security import request_ip_hash
from sceneit_engine.enhance.prompts import STYLE_PRESETS, build_prompt, get_style
from sceneit_engine.enhance.schemas import EnhanceRequest, EnhanceResponse, StyleResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_client():
    from sceneit_engine.deps import get_enhancement_client
    return get_enhancement_client()


def _get_recorder():
    from sceneit_engine.deps import get_transformation_recorder
    return get_transformation_recorder()


def _get_event_service():
    from sceneit_engine.deps import get_event_service
    return get_event_service()


def _get_settings():
    from sceneit_engine.common.config import get_settings
    return get_settings()


@router.get("/styles", response_model=list[StyleResponse])
async def list_styles():
    return [StyleResponse(key=s.key, name=s.name, subtitle=s.subtitle) for s in STYLE_PRESETS]


@router.post("/enhance", response_model=EnhanceResponse, response_model_exclude_none=True)
async def enhance(body: EnhanceRequest, request: Request, background: BackgroundTasks):
    settings = _get_settings()
    client = _get_client()
    style = get_style(body.style)
    provenance = {
        "session_id": body.session_id,
        "ip_hash": request_ip_hash(request),
        "user_agent": request.headers.get("user-agent"),
    }

    # Input problems short-circuit before any external call.
    try:
        if not body.image:
            raise InvalidImageError("No image provided")
        if not client.configured:
            raise EnhancementNotConfiguredError()
        original = decode_data_url(body.image)
        if len(original.data) > settings.max_image_bytes:
            raise ImageTooLargeError()
    except SceneItError as exc:
        return error_response(exc)

    server_events = [{**provenance, "event_type": "enhance_start",
                      "event_data": {"style_key": style.key if style else None}}]
    # Telemetry is written after the response is sent, success or not.
    background.add_task(_get_event_service().log_server_events, server_events)

    started = time.monotonic()
    try:
        enhanced = await client.enhance(original, build_prompt(style, body.prompt))
    except SceneItError as exc:
        server_events.append({**provenance, "event_type": "enhance_error",
                              "event_data": {"error": exc.message, "code": exc.code}})
        return error_response(exc)
    except Exception:
        logger.exception("Enhancement failed")
        server_events.append({**provenance, "event_type": "enhance_error",
                              "event_data": {"error": "Enhancement failed"}})
        return JSONResponse({"error": "Enhancement failed"}, status_code=500)
    elapsed_ms = int((time.monotonic() - started) * 1000)

    transformation_id = await _get_recorder().record(
        session_id=body.session_id,
        opt_in=body.opt_in,
        original=original,
        enhanced=enhanced,
        processing_time_ms=elapsed_ms,
        prompt_used=body.prompt,
        style_key=style.key if style else body.style or None,
        style_name=style.name if style else None,
        user_agent=provenance["user_agent"],
        ip_hash=provenance["ip_hash"],
        referrer=request.headers.get("referer"),
    )

    server_events.append({
        **provenance,
        "event_type": "enhance_complete",
        "transformation_id": transformation_id,
        "event_data": {
            "processing_time_ms": elapsed_ms,
            "style_key": style.key if style else None,
            "opt_in": body.opt_in,
        },
    })
    return EnhanceResponse(enhanced=enhanced.to_data_url(), transformation_id=transformation_id)
