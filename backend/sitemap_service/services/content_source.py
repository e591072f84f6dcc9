"""
Content source adapters yielding dynamic routes per locale
"""

from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Mapping, Sequence
import logging

from sitemap_service.core.exceptions import ConfigurationError
from sitemap_service.schemas.route import RouteEntry

logger = logging.getLogger(__name__)


class ContentSourceAdapter(ABC):
    """
    Uniform interface to an external content provider

    Implementations may be slow and may fail with SourceUnavailable;
    callers bound them with a deadline and recover from failures.
    """

    name = "content-source"

    @abstractmethod
    async def fetch_dynamic_routes(self, locale: str) -> Sequence[RouteEntry]:
        """Return the dynamic route entries of a locale"""


class NullContentSource(ContentSourceAdapter):
    """A site without dynamic content"""

    name = "none"

    async def fetch_dynamic_routes(self, locale: str) -> Sequence[RouteEntry]:
        return []


class StaticContentSource(ContentSourceAdapter):
    """Dynamic routes held in memory, keyed by locale"""

    name = "static"

    def __init__(self, routes: Mapping[str, Iterable[RouteEntry]] = None):
        self._routes: Dict[str, List[RouteEntry]] = {
            locale: list(entries) for locale, entries in (routes or {}).items()
        }

    def set_routes(self, locale: str, entries: Iterable[RouteEntry]) -> None:
        self._routes[locale] = list(entries)

    async def fetch_dynamic_routes(self, locale: str) -> Sequence[RouteEntry]:
        return list(self._routes.get(locale, []))


def build_content_source(settings) -> ContentSourceAdapter:
    """
    Create the content source selected by settings.CONTENT_SOURCE

    Raises:
        ConfigurationError: unknown source or missing source settings
    """
    kind = (settings.CONTENT_SOURCE or "none").lower()

    if kind == "none":
        return NullContentSource()

    if kind == "cms":
        from sitemap_service.services.cms_client import CmsContentSource

        if not settings.CMS_API_URL:
            raise ConfigurationError("CONTENT_SOURCE=cms requires CMS_API_URL")
        return CmsContentSource(
            settings.CMS_API_URL,
            token=settings.CMS_API_TOKEN,
            path_prefix=settings.CMS_PATH_PREFIX,
            page_size=settings.CMS_PAGE_SIZE,
        )

    if kind == "database":
        from sitemap_service.core.database import SessionLocal
        from sitemap_service.services.database_source import DatabaseContentSource

        return DatabaseContentSource(SessionLocal)

    raise ConfigurationError(f"Unknown CONTENT_SOURCE: {settings.CONTENT_SOURCE!r}")
