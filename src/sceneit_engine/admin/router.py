"""Admin API router: login, dashboard statistics and data export."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import ValidationError

from sceneit_engine.admin.auth import COOKIE_NAME, MAX_AGE, check_password, create_session_cookie, get_session
from sceneit_engine.admin.schemas import AuthStatus, LoginRequest, LoginResponse
from sceneit_engine.common.exceptions import InvalidQueryError, SceneItError
from sceneit_engine.common.security import require_admin
from sceneit_engine.export.service import FORMATS, PROJECTIONS, encode_csv
from sceneit_engine.stats.schemas import AdminStats

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_stats_service():
    from sceneit_engine.deps import get_stats_service
    return get_stats_service()


def _get_export_service():
    from sceneit_engine.deps import get_export_service
    return get_export_service()


def _get_settings():
    from sceneit_engine.common.config import get_settings
    return get_settings()


# ── Auth ──

@router.post("/admin/auth", response_model=LoginResponse)
async def login(request: Request):
    try:
        body = LoginRequest.model_validate(await request.json())
    except (ValueError, ValidationError):
        return JSONResponse({"error": "Invalid request"}, status_code=400)

    # Same answer for a wrong password and for no password configured.
    if not check_password(body.password):
        return JSONResponse({"error": "Invalid password"}, status_code=401)

    response = JSONResponse(LoginResponse().model_dump())
    response.set_cookie(
        COOKIE_NAME, create_session_cookie(), max_age=MAX_AGE,
        httponly=True, samesite="lax", path="/",
        secure=_get_settings().environment != "development",
    )
    return response


@router.get("/admin/auth", response_model=AuthStatus)
async def auth_status(request: Request):
    return AuthStatus(authenticated=get_session(request) is not None)


@router.delete("/admin/auth", response_model=LoginResponse)
async def logout():
    response = JSONResponse(LoginResponse().model_dump())
    response.delete_cookie(COOKIE_NAME, path="/")
    return response


# ── Dashboard ──

@router.get("/admin/stats", response_model=AdminStats)
async def admin_stats(_=Depends(require_admin)):
    try:
        return await _get_stats_service().get_admin_stats()
    except Exception:
        logger.exception("Stats aggregation failed")
        return JSONResponse({"error": "Failed to load stats"}, status_code=500)


@router.get("/admin/export")
async def admin_export(
    type: str = Query("transformations"),
    format: str = Query("json"),
    date_from: str | None = Query(None),
    date_to: str | None = Query(None),
    _=Depends(require_admin),
):
    if format not in FORMATS:
        raise InvalidQueryError(f"Unknown export format: {format!r}")
    try:
        rows = await _get_export_service().export(type, date_from=date_from, date_to=date_to)
    except SceneItError:
        raise
    except Exception:
        logger.exception("Export failed")
        return JSONResponse({"error": "Export failed"}, status_code=500)

    if format == "csv":
        stamp = datetime.now(timezone.utc).strftime("%Y-%m-%d")
        return StreamingResponse(
            encode_csv(rows, PROJECTIONS[type]),
            media_type="text/csv",
            headers={"Content-Disposition": f"attachment; filename=sceneit-{type}-{stamp}.csv"},
        )
    return JSONResponse(rows)
