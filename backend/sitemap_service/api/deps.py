"""
Request dependencies shared by the endpoints
"""

from fastapi import HTTPException, Request

from sitemap_service.services.engine import SitemapEngine


def get_engine(request: Request) -> SitemapEngine:
    """
    Dependency to get the sitemap engine built at startup
    """
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        raise HTTPException(status_code=503, detail="Sitemap engine is not initialized")
    return engine


def get_settings(request: Request):
    return request.app.state.settings
