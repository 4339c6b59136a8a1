"""
FastAPI application for the video library.

This is the HTTP API the web client talks to. Routes only resolve the
principal and shape HTTP; the access rules live in vidvault.auth and the
catalog rules in vidvault.services.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse, Response

from vidvault.auth import (
    IdentityVerifier,
    Principal,
    SessionManager,
    auth_router,
    require_admin,
    require_auth,
)
from vidvault.config import Settings, get_settings
from vidvault.core.errors import ValidationError, VidVaultError
from vidvault.core.models import VideoCreate, VideoUpdate
from vidvault.integrations.sentry import capture_exception, init_sentry
from vidvault.services import (
    AdminVideoView,
    CatalogService,
    CatalogStats,
    DetailedVideoView,
    PublicVideoView,
)
from vidvault.storage import StorageProvider, create_local_storage

logger = logging.getLogger(__name__)


# =============================================================================
# Lifespan
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize and cleanup app resources."""
    settings: Settings = app.state.settings

    if init_sentry(settings):
        logger.info("Sentry error tracking enabled")

    if settings.admin_email and settings.admin_password:
        admin = await app.state.identity.ensure_admin(
            settings.admin_email, settings.admin_password
        )
        logger.info(f"Bootstrap admin ready: {admin.id}")

    logger.info(f"VidVault API starting in {settings.environment} mode")

    yield

    logger.info("VidVault API shutting down")


# =============================================================================
# Error Handlers
# =============================================================================


async def handle_vidvault_error(request: Request, exc: VidVaultError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def handle_request_validation(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    error = ValidationError(extra={"errors": jsonable_encoder(exc.errors())})
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    capture_exception(exc, path=request.url.path)
    return JSONResponse(
        status_code=500,
        content={"kind": "error", "detail": "Internal error"},
    )


# =============================================================================
# Dependencies
# =============================================================================


def get_catalog(request: Request) -> CatalogService:
    return request.app.state.catalog


# =============================================================================
# App Factory
# =============================================================================


def create_app(
    storage: StorageProvider | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """
    Build the API.

    Services are wired eagerly so the app works with or without running
    the lifespan; the lifespan only handles Sentry and the admin bootstrap.
    """
    settings = settings or get_settings()
    storage = storage or create_local_storage()

    app = FastAPI(
        title="VidVault API",
        description="Browsable video library with per-video permissions",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.storage = storage
    app.state.identity = IdentityVerifier(
        store=storage.catalog,
        sessions=SessionManager(storage.cache, settings),
        settings=settings,
    )
    app.state.catalog = CatalogService(storage.catalog)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(VidVaultError, handle_vidvault_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(Exception, handle_unexpected)

    app.include_router(auth_router)
    _register_routes(app)

    return app


def _register_routes(app: FastAPI) -> None:

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "service": "vidvault-api"}

    # =========================================================================
    # Videos (any logged-in user)
    # =========================================================================

    @app.get("/videos", response_model=list[PublicVideoView])
    async def list_videos(
        principal: Principal = Depends(require_auth()),
        catalog: CatalogService = Depends(get_catalog),
    ):
        """The catalog, newest first. Source URLs are never listed."""
        return await catalog.list_videos(principal)

    @app.get("/videos/{video_id}", response_model=DetailedVideoView)
    async def get_video(
        video_id: str,
        principal: Principal = Depends(require_auth()),
        catalog: CatalogService = Depends(get_catalog),
    ):
        """Open a video for playback. Counts as one view."""
        return await catalog.open_video(video_id, principal)

    @app.get("/videos/{video_id}/download")
    async def download_video(
        video_id: str,
        principal: Principal = Depends(require_auth()),
        catalog: CatalogService = Depends(get_catalog),
    ):
        """Redirect to the source file if the video allows downloads."""
        url = await catalog.download_url(video_id, principal)
        return RedirectResponse(url, status_code=302)

    @app.get("/videos/{video_id}/share", response_model=PublicVideoView)
    async def share_video(
        video_id: str,
        principal: Principal = Depends(require_auth()),
        catalog: CatalogService = Depends(get_catalog),
    ):
        """Share card for a video, if the video allows sharing."""
        return await catalog.check_share(video_id, principal)

    # =========================================================================
    # Admin
    # =========================================================================

    @app.get("/admin/videos", response_model=list[AdminVideoView])
    async def admin_list_videos(
        principal: Principal = Depends(require_admin()),
        catalog: CatalogService = Depends(get_catalog),
    ):
        return await catalog.admin_list(principal)

    @app.get("/admin/videos/{video_id}", response_model=AdminVideoView)
    async def admin_get_video(
        video_id: str,
        principal: Principal = Depends(require_admin()),
        catalog: CatalogService = Depends(get_catalog),
    ):
        return await catalog.admin_get(video_id, principal)

    @app.post("/admin/videos", response_model=AdminVideoView, status_code=201)
    async def admin_create_video(
        data: VideoCreate,
        principal: Principal = Depends(require_admin()),
        catalog: CatalogService = Depends(get_catalog),
    ):
        """Add a video. View count always starts at zero."""
        return await catalog.create(data, principal)

    @app.api_route(
        "/admin/videos/{video_id}",
        methods=["PUT", "PATCH"],
        response_model=AdminVideoView,
    )
    async def admin_update_video(
        video_id: str,
        data: VideoUpdate,
        principal: Principal = Depends(require_admin()),
        catalog: CatalogService = Depends(get_catalog),
    ):
        """Partial update: only supplied fields change."""
        return await catalog.update(video_id, data, principal)

    @app.delete("/admin/videos/{video_id}", status_code=204)
    async def admin_delete_video(
        video_id: str,
        principal: Principal = Depends(require_admin()),
        catalog: CatalogService = Depends(get_catalog),
    ):
        await catalog.delete(video_id, principal)
        return Response(status_code=204)

    @app.get("/admin/stats", response_model=CatalogStats)
    async def admin_stats(
        principal: Principal = Depends(require_admin()),
        catalog: CatalogService = Depends(get_catalog),
    ):
        """Totals computed from the current catalog."""
        return await catalog.stats(principal)


app = create_app()
