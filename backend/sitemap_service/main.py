"""
FastAPI main application module for the localized sitemap service
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from typing import Optional
import time
import logging

from sitemap_service import __version__
from sitemap_service.core.config import Settings, settings as default_settings
from sitemap_service.core.exceptions import UnknownLocale
from sitemap_service.core.site_config import load_site_config
from sitemap_service.schemas.site import SiteConfig
from sitemap_service.services.content_source import ContentSourceAdapter, build_content_source
from sitemap_service.services.engine import build_engine
from sitemap_service.api.api_v1.api import api_router, documents_router

# Configure logging
logging.basicConfig(level=getattr(logging, default_settings.LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger(__name__)

VERSION = __version__


def create_app(settings: Optional[Settings] = None, site_config: Optional[SiteConfig] = None,
               content_source: Optional[ContentSourceAdapter] = None) -> FastAPI:
    """
    Create the FastAPI application

    Args:
        settings: Service settings, the environment-loaded ones by default
        site_config: Site configuration, loaded from SITE_CONFIG_FILE by default
        content_source: Content source, selected by CONTENT_SOURCE by default
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Build the engine at startup, stop the coordinator at shutdown"""
        logger.info("Starting localized sitemap service...")

        config = site_config if site_config is not None else load_site_config(settings.SITE_CONFIG_FILE)
        source = content_source
        if source is None:
            source = build_content_source(settings)
            if settings.CONTENT_SOURCE == "database":
                from sitemap_service.core.database import create_tables
                create_tables()

        engine = build_engine(
            config,
            source,
            timeout=settings.CONTENT_SOURCE_TIMEOUT,
            debounce=settings.REVALIDATION_DEBOUNCE_SECONDS,
        )
        app.state.engine = engine
        await engine.coordinator.start()

        if settings.WARM_ON_STARTUP:
            engine.coordinator.submit()

        logger.info("Application startup complete")
        try:
            yield
        finally:
            logger.info("Shutting down localized sitemap service...")
            await engine.coordinator.stop()
            app.state.engine = None

    app = FastAPI(
        title="Localized Sitemap Service",
        description="Per-locale sitemap and robots.txt generation with webhook revalidation",
        version=VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = None

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_HOSTS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request timing middleware
    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)
        return response

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        """Health check endpoint for monitoring"""
        engine = app.state.engine
        return {
            "status": "healthy" if engine is not None and engine.coordinator.running else "starting",
            "timestamp": time.time(),
            "version": VERSION
        }

    # Root endpoint
    @app.get("/")
    async def root():
        """Root endpoint with API information"""
        return {
            "message": "Localized Sitemap Service",
            "version": VERSION,
            "docs": "/docs",
            "endpoints": {
                "sitemap_index": "GET /sitemap.xml",
                "robots": "GET /robots.txt",
                "locale_sitemap": "GET /{locale}/sitemap.xml",
                "locale_robots": "GET /{locale}/robots.txt",
                "revalidate": "POST /api/v1/revalidate",
                "revalidation_status": "GET /api/v1/revalidate/status",
                "health": "GET /health",
            },
        }

    # Include API routes
    app.include_router(api_router, prefix="/api/v1")
    app.include_router(documents_router)

    @app.exception_handler(UnknownLocale)
    async def unknown_locale_handler(request: Request, exc: UnknownLocale):
        return JSONResponse(
            status_code=404,
            content={"error": "Not found", "message": str(exc)}
        )

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Global exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "message": "An unexpected error occurred"
            }
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "sitemap_service.main:app",
        host="0.0.0.0",
        port=8000,
        reload=default_settings.DEBUG,
        log_level="info"
    )
