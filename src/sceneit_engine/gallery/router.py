"""Public gallery API router."""

import logging

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from sceneit_engine.common.exceptions import SceneItError
from sceneit_engine.gallery.schemas import GalleryResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service():
    from sceneit_engine.deps import get_gallery_service
    return get_gallery_service()


@router.get("/gallery", response_model=GalleryResponse)
async def get_gallery(
    page: int = Query(1),
    per_page: int = Query(20),
    style: str | None = Query(None),
    search: str | None = Query(None),
    date_from: str | None = Query(None),
    date_to: str | None = Query(None),
):
    try:
        return await _get_service().list_gallery(
            page=page, per_page=per_page, style_key=style, search=search,
            date_from=date_from, date_to=date_to,
        )
    except SceneItError:
        raise
    except Exception:
        logger.exception("Gallery query failed")
        return JSONResponse({"error": "Failed to load gallery"}, status_code=500)
