"""
Route registry: static routes merged with dynamic content per locale
"""

import asyncio
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Tuple

from pydantic import ValidationError

from sitemap_service.core.exceptions import MalformedEntry, SourceUnavailable
from sitemap_service.schemas.route import RouteEntry
from sitemap_service.schemas.site import SiteConfig
from sitemap_service.services.content_source import ContentSourceAdapter
from sitemap_service.services.locale_resolver import LocaleResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MergeResult:
    """Outcome of one generation pass for a locale"""
    locale: str
    entries: Tuple[RouteEntry, ...]
    warnings: Tuple[str, ...] = ()
    degraded: bool = False


@dataclass
class _MergeState:
    locale: str
    warnings: List[str] = field(default_factory=list)
    degraded: bool = False

    def warn(self, message: str) -> None:
        logger.warning(f"[{self.locale}] {message}")
        self.warnings.append(message)


class RouteRegistry:
    """
    Produces the merged, de-duplicated, path-ordered route set of a locale

    Static routes come from the site configuration; dynamic ones from the
    content source. The last successful fetch of each locale is kept so a
    failing source degrades to last-known-good data. A fallback locale is
    fetched the first time a dependent locale needs it; afterwards its
    last-known entries are used, and the coordinator rebuilds dependents
    whenever the fallback locale publishes a changed sitemap.
    """

    def __init__(self, resolver: LocaleResolver, site_config: SiteConfig,
                 content_source: ContentSourceAdapter, timeout: Optional[float] = 10.0,
                 static_last_modified: Optional[datetime] = None):
        self.resolver = resolver
        self.site_config = site_config
        self.content_source = content_source
        self.timeout = timeout

        if static_last_modified is None:
            static_last_modified = site_config.static_last_modified
        if static_last_modified is None:
            static_last_modified = datetime.now(timezone.utc).replace(microsecond=0)
        self.static_last_modified = static_last_modified

        self._last_known: Dict[str, Tuple[RouteEntry, ...]] = {}

    def static_routes(self, locale: str) -> List[RouteEntry]:
        """Statically configured routes of a locale, with defaults applied"""
        defaults = self.site_config.defaults
        entries = []
        for route in self.site_config.static_routes:
            if not route.applies_to(locale):
                continue
            entries.append(RouteEntry(
                path=route.path,
                locale=locale,
                last_modified=route.last_modified or self.static_last_modified,
                change_frequency=route.change_frequency or defaults.change_frequency,
                priority=defaults.priority if route.priority is None else route.priority,
            ))
        return entries

    def last_known(self, locale: str) -> Tuple[RouteEntry, ...]:
        """Dynamic entries of the last successful fetch, empty if none"""
        return self._last_known.get(locale, ())

    async def merged_routes(self, locale: str, timeout: Optional[float] = None) -> List[RouteEntry]:
        result = await self.merge(locale, timeout=timeout)
        return list(result.entries)

    async def merge(self, locale: str, timeout: Optional[float] = None) -> MergeResult:
        """
        Merge static and dynamic routes of a locale

        Args:
            locale: Locale code
            timeout: Deadline in seconds for the content source call,
                defaults to the registry timeout

        Returns:
            MergeResult with entries sorted by path

        Raises:
            UnknownLocale: locale is not configured
        """
        chain = self.resolver.fallback_chain(locale)
        state = _MergeState(locale)
        deadline = timeout if timeout is not None else self.timeout

        # Fallback locales with no fetch yet are fetched alongside the locale
        cold = [fallback.code for fallback in chain[1:] if fallback.code not in self._last_known]
        dynamic, *_ = await asyncio.gather(
            self._fetch(locale, deadline, state),
            *(self._fetch(code, deadline, state) for code in cold),
        )

        merged: Dict[str, RouteEntry] = {}
        for entry in self.static_routes(locale):
            merged[entry.path] = entry
        # Dynamic entries override static ones on the same path
        for entry in dynamic:
            merged[entry.path] = entry

        # First locale of the chain that has a path wins
        for fallback in chain[1:]:
            borrowed = 0
            for entry in self._known_entries(fallback.code):
                if entry.path not in merged:
                    merged[entry.path] = entry.model_copy(update={"locale": locale})
                    borrowed += 1
            if borrowed:
                logger.debug(f"[{locale}] {borrowed} routes taken from fallback {fallback.code}")

        entries = tuple(merged[path] for path in sorted(merged))
        return MergeResult(
            locale=locale,
            entries=entries,
            warnings=tuple(state.warnings),
            degraded=state.degraded,
        )

    async def _fetch(self, locale: str, timeout: Optional[float], state: _MergeState) -> Tuple[RouteEntry, ...]:
        source = self.content_source.name
        try:
            raw = await asyncio.wait_for(self.content_source.fetch_dynamic_routes(locale), timeout)
        except asyncio.TimeoutError:
            return self._degrade(state, locale, f"Content source {source} timed out after {timeout}s for {locale}")
        except SourceUnavailable as e:
            return self._degrade(state, locale, f"Content source {source} unavailable for {locale}: {e}")
        except Exception as e:
            logger.exception(f"[{state.locale}] Content source {source} raised unexpectedly for {locale}")
            return self._degrade(state, locale, f"Content source {source} failed for {locale}: {e!r}")

        entries = tuple(self._sanitize(locale, raw or (), state))
        self._last_known[locale] = entries
        return entries

    def _degrade(self, state: _MergeState, locale: str, reason: str) -> Tuple[RouteEntry, ...]:
        fallback = self.last_known(locale)
        state.degraded = True
        state.warn(f"{reason}; using {len(fallback)} last-known dynamic routes")
        return fallback

    def _sanitize(self, locale: str, raw: Iterable, state: _MergeState) -> Iterable[RouteEntry]:
        for item in raw:
            try:
                yield self._check_entry(locale, item, state)
            except MalformedEntry as e:
                state.warn(f"Skipped malformed entry: {e}")

    def _check_entry(self, locale: str, item, state: _MergeState) -> RouteEntry:
        if not isinstance(item, RouteEntry):
            try:
                item = RouteEntry.model_validate(item)
            except ValidationError as e:
                raise MalformedEntry(f"{item!r} ({e.error_count()} validation errors)") from e

        if item.locale != locale:
            raise MalformedEntry(f"{item.path!r} belongs to locale {item.locale!r}")

        priority = item.priority
        if math.isnan(priority):
            clamped = self.site_config.defaults.priority
        else:
            clamped = min(1.0, max(0.0, priority))
        if clamped != priority:
            state.warn(f"Priority {priority} of {item.path!r} clamped to {clamped}")
            item = item.model_copy(update={"priority": clamped})
        return item

    def _known_entries(self, locale: str) -> List[RouteEntry]:
        """Static plus last-known dynamic entries of a locale, without fetching"""
        known: Dict[str, RouteEntry] = {}
        for entry in self.static_routes(locale):
            known[entry.path] = entry
        for entry in self.last_known(locale):
            known[entry.path] = entry
        return [known[path] for path in sorted(known)]
