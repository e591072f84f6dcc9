"""Shared fixtures: a two-locale academy site and a controllable content source."""

import asyncio
from collections import Counter
from datetime import datetime, timezone

import pytest

from sitemap_service.schemas import ChangeFrequency, LocaleConfig, RouteEntry, SiteConfig
from sitemap_service.schemas.site import RobotsRules, RouteDefaults, StaticRoute
from sitemap_service.services.content_source import ContentSourceAdapter
from sitemap_service.services.engine import build_engine

STATIC_TS = datetime(2025, 1, 1, tzinfo=timezone.utc)
CMS_TS = datetime(2025, 3, 15, 8, 30, tzinfo=timezone.utc)


def route(path: str, locale: str = "en", priority: float = 0.6,
          change_frequency: ChangeFrequency = ChangeFrequency.WEEKLY,
          last_modified: datetime = CMS_TS) -> RouteEntry:
    return RouteEntry(
        path=path,
        locale=locale,
        last_modified=last_modified,
        change_frequency=change_frequency,
        priority=priority,
    )


class FakeContentSource(ContentSourceAdapter):
    """In-memory source that counts calls and can fail or block per locale."""

    name = "fake"

    def __init__(self, routes=None):
        self.routes = {locale: list(entries) for locale, entries in (routes or {}).items()}
        self.failures: dict[str, BaseException] = {}
        self.gates: dict[str, asyncio.Event] = {}
        self.calls: Counter = Counter()

    def block(self, locale: str) -> asyncio.Event:
        gate = asyncio.Event()
        self.gates[locale] = gate
        return gate

    async def fetch_dynamic_routes(self, locale):
        self.calls[locale] += 1
        gate = self.gates.get(locale)
        if gate is not None:
            await gate.wait()
        if locale in self.failures:
            raise self.failures[locale]
        return list(self.routes.get(locale, []))


def make_site_config(**overrides) -> SiteConfig:
    values = dict(
        locales=[
            LocaleConfig(code="en", canonical_base="https://academy.com/en"),
            LocaleConfig(code="hi", canonical_base="https://academy.com/hi", fallback_locale="en"),
        ],
        default_locale="en",
        defaults=RouteDefaults(change_frequency=ChangeFrequency.WEEKLY, priority=0.5),
        static_routes=[
            StaticRoute(path="", change_frequency=ChangeFrequency.DAILY, priority=1.0),
            StaticRoute(path="about", change_frequency=ChangeFrequency.MONTHLY),
            StaticRoute(path="courses", priority=0.8, locales=["en"]),
        ],
        static_last_modified=STATIC_TS,
        robots=RobotsRules(disallow=["/api/", "/admin/"]),
    )
    values.update(overrides)
    return SiteConfig(**values)


@pytest.fixture
def site_config() -> SiteConfig:
    return make_site_config()


@pytest.fixture
def source() -> FakeContentSource:
    return FakeContentSource({"en": [route("blog/upsc-2025")]})


@pytest.fixture
def engine(site_config, source):
    return build_engine(site_config, source, timeout=1.0, debounce=0.0)
