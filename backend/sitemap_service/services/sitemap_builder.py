"""
Sitemap Builder: locale route sets to sitemap XML.

Produces one <urlset> document per locale plus a <sitemapindex> pointing
at all of them. Serialization is deterministic: unchanged inputs give
byte-identical output, so the bytes can back ETags and caches.
"""

import logging
import re
import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from typing import Iterable, Optional, Tuple
from urllib.parse import quote

from sitemap_service.schemas.documents import SitemapDocument
from sitemap_service.services.locale_resolver import LocaleResolver
from sitemap_service.services.route_registry import RouteRegistry

logger = logging.getLogger(__name__)

# Common XML namespace used by sitemaps
SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"

# Sitemap protocol limit per document
MAX_URLS_PER_SITEMAP = 50000

SITEMAP_FILENAME = "sitemap.xml"

_XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'

# A "%" that does not start a %XX escape
_BARE_PERCENT = re.compile(r"%(?![0-9A-Fa-f]{2})")


def format_lastmod(value: datetime) -> str:
    """W3C datetime in UTC, second precision"""
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S+00:00")


def format_priority(value: float) -> str:
    text = f"{value:.2f}"
    return text[:-1] if text.endswith("0") else text


class SitemapBuilder:
    """Builds and serializes sitemap documents"""

    def __init__(self, resolver: LocaleResolver, registry: RouteRegistry,
                 max_urls: int = MAX_URLS_PER_SITEMAP):
        self.resolver = resolver
        self.registry = registry
        self.max_urls = max_urls

    def url_for(self, locale: str, path: str) -> str:
        """
        Absolute URL of a path under the locale's canonical base

        Existing %XX escapes are kept; any other "%" is encoded.
        """
        base = self.resolver.resolve(locale).canonical_base
        if not path:
            return base
        path = _BARE_PERCENT.sub("%25", path)
        return f"{base}/{quote(path, safe='/-_.~!$&()*+,;=:@%')}"

    def sitemap_url(self, locale: str) -> str:
        """Published location of a locale's sitemap"""
        return f"{self.resolver.resolve(locale).canonical_base}/{SITEMAP_FILENAME}"

    async def build(self, locale: str, timeout: Optional[float] = None) -> SitemapDocument:
        """
        Generate the sitemap document of a locale

        Never fails for a configured locale: content source problems
        degrade to static and last-known entries.

        Raises:
            UnknownLocale: locale is not configured
        """
        self.resolver.resolve(locale)
        result = await self.registry.merge(locale, timeout=timeout)

        entries = result.entries
        warnings = list(result.warnings)
        if len(entries) > self.max_urls:
            message = f"{len(entries)} URLs exceed the sitemap limit of {self.max_urls}; extra URLs dropped"
            logger.warning(f"[{locale}] {message}")
            warnings.append(message)
            entries = entries[:self.max_urls]

        document = SitemapDocument(
            locale=locale,
            entries=entries,
            generated_at=datetime.now(timezone.utc),
            warnings=tuple(warnings),
            source_degraded=result.degraded,
        )
        logger.info(
            f"Built sitemap for {locale}: {len(entries)} URLs"
            + (" (degraded)" if result.degraded else "")
        )
        return document

    def serialize(self, document: SitemapDocument) -> bytes:
        """Render a document as sitemap XML"""
        urlset = ET.Element("urlset", {"xmlns": SITEMAP_NS})
        for entry in document.entries:
            url_el = ET.SubElement(urlset, "url")
            ET.SubElement(url_el, "loc").text = self.url_for(document.locale, entry.path)
            ET.SubElement(url_el, "lastmod").text = format_lastmod(entry.last_modified)
            ET.SubElement(url_el, "changefreq").text = entry.change_frequency.value
            ET.SubElement(url_el, "priority").text = format_priority(entry.priority)
        return self._to_bytes(urlset)

    def serialize_index(self, documents: Iterable[Tuple[str, Optional[SitemapDocument]]]) -> bytes:
        """
        Render a <sitemapindex> over locale sitemaps

        Args:
            documents: (locale, published document or None) pairs; lastmod
                is omitted for locales without a published document
        """
        index = ET.Element("sitemapindex", {"xmlns": SITEMAP_NS})
        for locale, document in documents:
            sitemap_el = ET.SubElement(index, "sitemap")
            ET.SubElement(sitemap_el, "loc").text = self.sitemap_url(locale)
            last_modified = document.last_modified if document is not None else None
            if last_modified is not None:
                ET.SubElement(sitemap_el, "lastmod").text = format_lastmod(last_modified)
        return self._to_bytes(index)

    def _to_bytes(self, root: ET.Element) -> bytes:
        body = ET.tostring(root, encoding="unicode")
        return (_XML_DECLARATION + body + "\n").encode("utf-8")
