"""
Headless CMS client for dynamic route slugs
"""

import httpx
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from sitemap_service.core.exceptions import MalformedEntry, SourceUnavailable
from sitemap_service.schemas.route import ChangeFrequency, RouteEntry
from sitemap_service.services.content_source import ContentSourceAdapter

logger = logging.getLogger(__name__)


class CmsRouteItem(BaseModel):
    """One published document as returned by the CMS routes endpoint"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    slug: str = Field(..., min_length=1)
    updated_at: datetime = Field(..., alias="updatedAt")
    path: Optional[str] = Field(None, description="Full path, overrides prefix + slug")
    change_frequency: Optional[ChangeFrequency] = Field(None, alias="changeFrequency")
    priority: Optional[float] = None


class CmsContentSource(ContentSourceAdapter):
    """Content source backed by a headless CMS REST API"""

    name = "cms"

    # Guard against a CMS that keeps returning a next cursor
    MAX_PAGES = 100

    def __init__(self, api_url: str, token: Optional[str] = None, path_prefix: str = "",
                 page_size: int = 100, default_change_frequency: ChangeFrequency = ChangeFrequency.WEEKLY,
                 default_priority: float = 0.6, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize the CMS client

        Args:
            api_url: Base URL of the CMS API
            token: Bearer token for the API, if required
            path_prefix: Prefix joined with each slug (e.g. "blog")
            page_size: Items requested per page
            transport: Optional httpx transport, used by tests
        """
        self.api_url = api_url.rstrip("/")
        self.token = token
        self.path_prefix = path_prefix.strip("/")
        self.page_size = page_size
        self.default_change_frequency = default_change_frequency
        self.default_priority = default_priority
        self._transport = transport

    @property
    def headers(self) -> Dict[str, str]:
        """Get headers for API calls"""
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def fetch_dynamic_routes(self, locale: str) -> Sequence[RouteEntry]:
        """
        Fetch every published route of a locale, following pagination

        Raises:
            SourceUnavailable: transport error, non-2xx response or invalid JSON
        """
        entries: List[RouteEntry] = []
        after: Optional[str] = None

        try:
            async with httpx.AsyncClient(transport=self._transport, headers=self.headers) as client:
                for _ in range(self.MAX_PAGES):
                    params = {"locale": locale, "limit": self.page_size, "after": after}
                    params = {k: v for k, v in params.items() if v is not None}

                    response = await client.get(f"{self.api_url}/routes", params=params)
                    response.raise_for_status()
                    data = response.json()

                    for item in data.get("items", []):
                        try:
                            entries.append(self._to_entry(locale, item))
                        except MalformedEntry as e:
                            logger.warning(f"Skipping malformed CMS item for {locale}: {e}")

                    after = data.get("next") or self._extract_next_cursor(response.headers.get("Link", ""))
                    if not after:
                        break
                else:
                    logger.warning(f"CMS pagination for {locale} stopped after {self.MAX_PAGES} pages")

        except httpx.HTTPError as e:
            logger.error(f"Failed to fetch CMS routes for {locale}: {e}")
            raise SourceUnavailable(f"CMS request failed: {e}") from e
        except ValueError as e:
            logger.error(f"CMS returned invalid JSON for {locale}: {e}")
            raise SourceUnavailable(f"CMS returned invalid JSON: {e}") from e

        logger.info(f"Fetched {len(entries)} CMS routes for {locale}")
        return entries

    def _to_entry(self, locale: str, item: Any) -> RouteEntry:
        try:
            parsed = CmsRouteItem.model_validate(item)
            if parsed.path is not None:
                path = parsed.path
            else:
                path = "/".join(part for part in (self.path_prefix, parsed.slug.strip("/")) if part)
            return RouteEntry(
                path=path,
                locale=locale,
                last_modified=parsed.updated_at,
                change_frequency=parsed.change_frequency or self.default_change_frequency,
                priority=self.default_priority if parsed.priority is None else parsed.priority,
            )
        except ValidationError as e:
            raise MalformedEntry(f"{item!r}: {e.error_count()} validation errors") from e

    def _extract_next_cursor(self, link_header: str) -> Optional[str]:
        """
        Extract next cursor from Link header for pagination

        Args:
            link_header: Link header from response

        Returns:
            Next cursor if available, None otherwise
        """
        if not link_header:
            return None

        # Parse Link header: <url?after=cursor>; rel="next"
        for link in link_header.split(','):
            if 'rel="next"' in link:
                url_part = link.split(';')[0].strip()
                if url_part.startswith('<') and url_part.endswith('>'):
                    url = httpx.URL(url_part[1:-1])
                    return url.params.get('after')

        return None
