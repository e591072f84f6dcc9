"""
Wiring of the sitemap engine components
"""

from dataclasses import dataclass
from typing import Optional
import logging

from sitemap_service.schemas.site import SiteConfig
from sitemap_service.services.content_source import ContentSourceAdapter, NullContentSource
from sitemap_service.services.locale_resolver import LocaleResolver
from sitemap_service.services.revalidation import RevalidationCoordinator
from sitemap_service.services.robots_builder import RobotsPolicyBuilder
from sitemap_service.services.route_registry import RouteRegistry
from sitemap_service.services.sitemap_builder import SitemapBuilder

logger = logging.getLogger(__name__)


@dataclass
class SitemapEngine:
    """All engine components of one site"""
    site_config: SiteConfig
    resolver: LocaleResolver
    registry: RouteRegistry
    sitemap_builder: SitemapBuilder
    robots_builder: RobotsPolicyBuilder
    coordinator: RevalidationCoordinator


def build_engine(site_config: SiteConfig, content_source: Optional[ContentSourceAdapter] = None,
                 timeout: Optional[float] = 10.0, debounce: float = 0.0) -> SitemapEngine:
    """
    Assemble the engine for a site

    Raises:
        ConfigurationError: invalid locales, including FallbackCycle
    """
    resolver = LocaleResolver(site_config.locales, default_locale=site_config.default_locale)
    content_source = content_source or NullContentSource()
    registry = RouteRegistry(resolver, site_config, content_source, timeout=timeout)
    sitemap_builder = SitemapBuilder(resolver, registry)
    robots_builder = RobotsPolicyBuilder(resolver, sitemap_builder, site_config.robots)
    coordinator = RevalidationCoordinator(
        resolver, sitemap_builder, robots_builder, debounce=debounce, timeout=timeout
    )
    logger.info(
        f"Sitemap engine ready: locales={','.join(resolver.locales)} "
        f"default={resolver.default_locale} source={content_source.name}"
    )
    return SitemapEngine(
        site_config=site_config,
        resolver=resolver,
        registry=registry,
        sitemap_builder=sitemap_builder,
        robots_builder=robots_builder,
        coordinator=coordinator,
    )
