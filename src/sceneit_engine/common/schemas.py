"""Shared Pydantic schemas for the SceneIt engine."""

from fastapi.responses import JSONResponse
from pydantic import BaseModel

from sceneit_engine.common.exceptions import SceneItError


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    service: str = "sceneit-engine"
    storage: str = "none"


class ErrorResponse(BaseModel):
    error: str
    code: str = ""


def error_response(exc: SceneItError, **kwargs) -> JSONResponse:
    body = ErrorResponse(error=exc.message, code=exc.code)
    return JSONResponse(body.model_dump(), status_code=exc.status_code, **kwargs)
