"""
Sitemap read endpoints
"""

from fastapi import APIRouter, Depends, Header, Response
from typing import Optional
import logging

from sitemap_service.api.deps import get_engine
from sitemap_service.services.engine import SitemapEngine

logger = logging.getLogger(__name__)

router = APIRouter()

XML_MEDIA_TYPE = "application/xml"


def conditional_response(body, etag: str, media_type: str, if_none_match: Optional[str]) -> Response:
    """Full response, or 304 when the client already holds this version"""
    headers = {"ETag": etag, "Cache-Control": "public, max-age=0, must-revalidate"}
    if if_none_match is not None:
        candidates = {tag.strip() for tag in if_none_match.split(",")}
        if etag in candidates or "*" in candidates:
            return Response(status_code=304, headers=headers)
    return Response(content=body, media_type=media_type, headers=headers)


@router.get("/sitemap.xml")
async def sitemap_index(engine: SitemapEngine = Depends(get_engine)):
    """
    Sitemap index pointing at every locale's sitemap
    """
    coordinator = engine.coordinator
    documents = []
    for locale in engine.resolver.locales:
        published = coordinator.published(locale)
        documents.append((locale, published.sitemap if published is not None else None))
    body = engine.sitemap_builder.serialize_index(documents)
    return Response(content=body, media_type=XML_MEDIA_TYPE)


@router.get("/{locale}/sitemap.xml")
async def locale_sitemap(locale: str, engine: SitemapEngine = Depends(get_engine),
                         if_none_match: Optional[str] = Header(None)):
    """
    Current sitemap of a locale

    Serves the last published version; the first read of a locale
    builds it.
    """
    published = await engine.coordinator.current(locale)
    return conditional_response(published.sitemap_xml, published.sitemap_etag, XML_MEDIA_TYPE, if_none_match)
