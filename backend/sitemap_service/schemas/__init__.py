"""
Pydantic schemas for configuration, documents and API payloads
"""

from .route import ChangeFrequency, RouteEntry, normalize_path
from .locale import LocaleConfig
from .site import RouteDefaults, StaticRoute, RobotsRules, SiteConfig
from .documents import SitemapDocument, RobotsPolicy
from .revalidation import (
    ALL_LOCALES, LocaleStateEnum, RevalidationEvent, RevalidationRequest,
    RevalidationAck, LocaleStatus, CoordinatorStatus
)

__all__ = [
    # Routes
    "ChangeFrequency", "RouteEntry", "normalize_path",
    # Configuration
    "LocaleConfig", "RouteDefaults", "StaticRoute", "RobotsRules", "SiteConfig",
    # Documents
    "SitemapDocument", "RobotsPolicy",
    # Revalidation
    "ALL_LOCALES", "LocaleStateEnum", "RevalidationEvent", "RevalidationRequest",
    "RevalidationAck", "LocaleStatus", "CoordinatorStatus"
]
