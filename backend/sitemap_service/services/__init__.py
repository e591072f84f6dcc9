"""
Sitemap engine services
"""

from .content_source import ContentSourceAdapter, NullContentSource, StaticContentSource, build_content_source
from .locale_resolver import LocaleResolver
from .route_registry import MergeResult, RouteRegistry
from .sitemap_builder import SitemapBuilder
from .robots_builder import RobotsPolicyBuilder
from .revalidation import PublishedDocuments, RevalidationCoordinator
from .engine import SitemapEngine, build_engine

__all__ = [
    "ContentSourceAdapter", "NullContentSource", "StaticContentSource", "build_content_source",
    "LocaleResolver", "MergeResult", "RouteRegistry", "SitemapBuilder", "RobotsPolicyBuilder",
    "PublishedDocuments", "RevalidationCoordinator", "SitemapEngine", "build_engine"
]
