"""
robots.txt endpoints
"""

from fastapi import APIRouter, Depends, Header
from fastapi.responses import PlainTextResponse
from typing import Optional

from sitemap_service.api.api_v1.endpoints.sitemaps import conditional_response
from sitemap_service.api.deps import get_engine
from sitemap_service.services.engine import SitemapEngine

router = APIRouter()


@router.get("/robots.txt", response_class=PlainTextResponse)
async def robots_combined(engine: SitemapEngine = Depends(get_engine)):
    """
    Host-level robots.txt covering every locale
    """
    policies = [engine.robots_builder.build(locale) for locale in engine.resolver.locales]
    return PlainTextResponse(engine.robots_builder.serialize_combined(policies))


@router.get("/{locale}/robots.txt", response_class=PlainTextResponse)
async def locale_robots(locale: str, engine: SitemapEngine = Depends(get_engine),
                        if_none_match: Optional[str] = Header(None)):
    """
    robots.txt of a locale
    """
    published = await engine.coordinator.current(locale)
    return conditional_response(
        published.robots_txt, published.robots_etag, "text/plain; charset=utf-8", if_none_match
    )
