# Idemark v1.0.0 - FastAPI Main Application
"""
Import API used by the idea submission form to pre-fill fields from an
Idestrim post. Includes lifespan events, CORS handling and health checks.
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import Depends, FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers

from idemark_backend.core.config import get_settings
from idemark_backend.core.errors import InvalidLinkError
from idemark_backend.core.logging import SERVICE_VERSION, get_logger, setup_logging
from idemark_backend.models import ImportRequest, ImportResponse
from idemark_backend.services.config_cache import PlatformConfigCache
from idemark_backend.services.data_api_resolver import DataApiResolver
from idemark_backend.services.import_orchestrator import ImportOrchestrator
from idemark_backend.services.link_validator import LinkValidator
from idemark_backend.services.metadata_scraper import MetadataScraper
from idemark_backend.services.page_fetcher import PageFetcher

logger = get_logger(__name__)

page_fetcher: PageFetcher
config_cache: PlatformConfigCache
orchestrator: ImportOrchestrator


def build_orchestrator(
    fetcher: PageFetcher,
    cache: PlatformConfigCache,
) -> ImportOrchestrator:
    """Wire the import pipeline around a shared fetcher and config cache."""
    return ImportOrchestrator(
        validator=LinkValidator(),
        api_resolver=DataApiResolver(fetcher, cache),
        scraper=MetadataScraper(fetcher),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    global page_fetcher, config_cache, orchestrator

    setup_logging()
    settings = get_settings()

    logger.info(f"Idemark v{SERVICE_VERSION} starting up...")
    logger.info(f"Import strategy: {settings.import_strategy}")
    logger.info(f"Idestrim base URL: {settings.idestrim_base_url}")

    page_fetcher = PageFetcher()
    config_cache = PlatformConfigCache()
    orchestrator = build_orchestrator(page_fetcher, config_cache)

    logger.info("All services initialized successfully")

    yield

    logger.info("Idemark shutting down...")
    await page_fetcher.close()
    logger.info("Shutdown complete")


app = FastAPI(
    title="Idemark Import API",
    description="Import ideas from Idestrim posts into the submission form",
    version=SERVICE_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)


class ImportCORSMiddleware(CORSMiddleware):
    """CORSMiddleware that answers accepted preflights with an empty 204."""

    def preflight_response(self, request_headers: Headers) -> Response:
        response = super().preflight_response(request_headers)
        if response.status_code != 200:
            return response
        headers = {
            key: value
            for key, value in response.headers.items()
            if key not in ("content-length", "content-type")
        }
        return Response(status_code=204, headers=headers)


app.add_middleware(
    ImportCORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["POST", "OPTIONS"],
    allow_headers=get_settings().cors_allow_headers,
)


def cors_headers() -> Dict[str, str]:
    return {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Headers": ", ".join(get_settings().cors_allow_headers),
    }


def get_orchestrator() -> ImportOrchestrator:
    return orchestrator


def get_config_cache() -> PlatformConfigCache:
    return config_cache


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report bad request bodies with the import error envelope instead of a 422."""
    logger.info(f"Rejected import request body: {exc.errors()[:3]}")
    body = ImportResponse(
        success=False,
        error=InvalidLinkError.user_message,
        code=InvalidLinkError.code,
    )
    return JSONResponse(
        status_code=InvalidLinkError.status_code,
        content=body.model_dump(exclude_none=True),
        headers=cors_headers(),
    )


@app.options("/v1/import")
async def import_preflight() -> Response:
    return Response(status_code=204, headers=cors_headers())


@app.post("/v1/import")
async def import_idea(
    request: ImportRequest,
    import_orchestrator: ImportOrchestrator = Depends(get_orchestrator),
) -> JSONResponse:
    """
    Import an idea from an Idestrim link.

    Returns the post's title, description, image and tags on success, or
    a human-readable error with a 400/404/500 status on failure.
    """
    status_code, body = await import_orchestrator.handle(request)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
        headers=cors_headers(),
    )


@app.get("/v1/health")
async def health_check(
    cache: PlatformConfigCache = Depends(get_config_cache),
) -> JSONResponse:
    """
    Health check endpoint for monitoring.

    Returns service status, the active import strategy and config cache stats.
    """
    settings = get_settings()

    health: Dict[str, Any] = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": SERVICE_VERSION,
        "import_strategy": settings.import_strategy,
        "platform": settings.idestrim_base_url,
        "config_cache": cache.stats(),
    }
    return JSONResponse(content=health, status_code=200)


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "idemark_backend.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=False,
        workers=1,
    )
