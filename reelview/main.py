"""
Main FastAPI application entry point.
Configures logging, exception handlers, middleware, and routers.
"""
import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from reelview.api.dependencies import get_session_registry, init_backend
from reelview.api.routers import follows_router, health_router, posts_router, reels_router
from reelview.config import get_settings
from reelview.config.logging import configure_logging
from reelview.core.exceptions import AppException
from reelview.core.telemetry import setup_telemetry
from reelview.services.registry import prune_periodically


# =============================================================================
# Lifespan (Startup/Shutdown)
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown events."""
    logger = logging.getLogger(__name__)
    settings = get_settings()

    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Like rollback on failure: {settings.LIKE_ROLLBACK_ON_FAILURE}")
    await init_backend(app, settings)
    pruner = asyncio.create_task(
        prune_periodically(get_session_registry(), settings.SESSION_PRUNE_INTERVAL_SEC)
    )

    yield

    logger.info("Shutting down application")
    pruner.cancel()
    with suppress(asyncio.CancelledError):
        await pruner
    get_session_registry().close_all()


# =============================================================================
# Exception Handlers
# =============================================================================


async def app_exception_handler(
    request: Request,
    exc: AppException,
) -> JSONResponse:
    """Handle custom application exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
    )


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle unexpected exceptions - return generic error."""
    logger = logging.getLogger(__name__)
    logger.exception(f"Unhandled exception: {exc}")

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
            }
        },
    )


# =============================================================================
# Application Factory
# =============================================================================


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    configure_logging(debug=settings.DEBUG)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="""
        Reelview API

        Headless view-model for a social video client. A thin host shell
        reports scroll, orientation and media events; the service keeps the
        feed, engagement and playback state and answers with media commands.

        ## Features
        - Snap-scroll active item tracking
        - Per-item playback state machine with fullscreen fallback chain
        - Optimistic likes and comments with rollback
        - Stale-response protection on reload and teardown
        - Observability: JSON logs, Prometheus, OpenTelemetry
        """,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(health_router)
    app.include_router(reels_router)
    app.include_router(posts_router)
    app.include_router(follows_router)

    setup_telemetry(app)

    return app


app = create_app()


# =============================================================================
# Development Entry Point
# =============================================================================


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "reelview.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
