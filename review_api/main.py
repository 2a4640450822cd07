"""
FastAPI application entry point.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from review_api import __version__
from review_api.api.v1.router import router as v1_router
from review_api.config import Settings, get_settings
from review_api.core.summary_cache import RedisSummaryCache
from review_api.deps import build_image_storage, build_review_service
from review_api.schemas.common import HealthResponse

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown."""
    # Startup
    app.state.settings.upload_dir.mkdir(parents=True, exist_ok=True)
    logger.info(f"Review API started, uploads in {app.state.settings.upload_dir}")
    yield
    # Shutdown
    await app.state.review_service.cache.close()
    logger.info("Review API stopped")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application with its own store, cache and image storage.

    Args:
        settings: Settings override, defaults to environment settings
    """
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(
        title=settings.app_name,
        description="Reviews, responses, helpful votes and rating summaries",
        version=__version__,
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.review_service = build_review_service(settings)
    app.state.image_storage = build_image_storage(settings)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(v1_router, prefix=settings.api_prefix)

    app.mount(
        settings.upload_url_prefix,
        StaticFiles(directory=settings.upload_dir, check_dir=False),
        name="uploads"
    )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        fields = sorted({str(error["loc"][-1]) for error in exc.errors() if error.get("loc")})
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": f"Invalid parameters: {', '.join(fields)}"}
        )

    @app.get(f"{settings.api_prefix}/health", response_model=HealthResponse, tags=["health"])
    async def health_check():
        """Health check endpoint."""
        return HealthResponse(ok=True)

    @app.get(f"{settings.api_prefix}/health/redis", tags=["health"])
    async def health_check_redis():
        """Check Redis connection health when it backs the summary cache."""
        cache = app.state.review_service.cache
        if not isinstance(cache, RedisSummaryCache):
            return {"ok": True, "redis": "disabled"}
        try:
            await cache.redis.ping()
            return {"ok": True, "redis": "connected"}
        except Exception as e:
            return {"ok": False, "redis": "disconnected", "error": str(e)}

    @app.get("/", tags=["root"])
    async def root():
        """Root endpoint."""
        return {
            "message": settings.app_name,
            "version": __version__,
            "docs": "/docs"
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "review_api.main:app",
        host="0.0.0.0",
        port=8000,
        log_level=get_settings().log_level.lower()
    )
