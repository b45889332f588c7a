"""FastAPI application factory for the SceneIt engine."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from sceneit_engine.common.config import get_settings
from sceneit_engine.common.exceptions import SceneItError
from sceneit_engine.common.logging import setup_logging
from sceneit_engine.common.schemas import HealthResponse, error_response

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        from sceneit_engine.deps import get_enhancement_client, get_storage
        storage = get_storage()
        await storage.init()
        logger.info("Storage backend ready: %s", storage.name)
        yield
        # Shutdown
        await get_enhancement_client().close()
        await storage.close()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(SceneItError)
    async def sceneit_error_handler(request: Request, exc: SceneItError):
        return error_response(exc)

    @app.get("/health", response_model=HealthResponse)
    async def health():
        from sceneit_engine.deps import get_storage
        return HealthResponse(version=settings.api_version, storage=get_storage().name)

    # Mount routers
    from sceneit_engine.enhance.router import router as enhance_router
    from sceneit_engine.events.router import router as events_router
    from sceneit_engine.gallery.router import router as gallery_router
    from sceneit_engine.admin.router import router as admin_router

    prefix = settings.api_prefix
    app.include_router(enhance_router, prefix=prefix, tags=["enhance"])
    app.include_router(events_router, prefix=prefix, tags=["events"])
    app.include_router(gallery_router, prefix=prefix, tags=["gallery"])
    app.include_router(admin_router, prefix=prefix, tags=["admin"])

    return app
