"""
Revalidation coordinator: event queue, coalescing and single-flight rebuilds
"""

import asyncio
import hashlib
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional

from sitemap_service.schemas.documents import RobotsPolicy, SitemapDocument
from sitemap_service.schemas.revalidation import (
    ALL_LOCALES, CoordinatorStatus, LocaleStateEnum, LocaleStatus, RevalidationEvent
)
from sitemap_service.services.locale_resolver import LocaleResolver
from sitemap_service.services.robots_builder import RobotsPolicyBuilder
from sitemap_service.services.sitemap_builder import SitemapBuilder

logger = logging.getLogger(__name__)


def make_etag(payload: bytes) -> str:
    return '"' + hashlib.sha256(payload).hexdigest()[:32] + '"'


@dataclass(frozen=True)
class PublishedDocuments:
    """Sitemap and robots of a locale as published by one rebuild"""
    locale: str
    version: int
    sitemap: SitemapDocument
    robots: RobotsPolicy
    sitemap_xml: bytes
    robots_txt: str
    sitemap_etag: str
    robots_etag: str
    published_at: datetime


@dataclass
class _LocaleSlot:
    locale: str
    state: LocaleStateEnum = LocaleStateEnum.IDLE
    timer: Optional[asyncio.Task] = None
    inflight: Optional[asyncio.Task] = None
    dirty: bool = False
    events_received: int = 0
    events_coalesced: int = 0
    rebuilds: int = 0
    failures: int = 0
    last_error: Optional[str] = None


class RevalidationCoordinator:
    """
    Owns the published documents of every locale and decides when to rebuild

    Per locale: IDLE -> PENDING -> REBUILDING -> IDLE. Events are consumed
    from a queue by a dispatcher task. Events that arrive while a rebuild
    is pending collapse into it; events that arrive during a rebuild arm
    exactly one follow-up rebuild. At most one rebuild per locale runs at
    a time and every caller asking for one shares its result. Locales
    rebuild independently; a locale that publishes a changed sitemap
    revalidates the locales falling back to it.
    """

    def __init__(self, resolver: LocaleResolver, sitemap_builder: SitemapBuilder,
                 robots_builder: RobotsPolicyBuilder, debounce: float = 0.0,
                 timeout: Optional[float] = None):
        """
        Args:
            resolver: Locale resolver
            sitemap_builder: Builds sitemap documents
            robots_builder: Builds robots policies
            debounce: Seconds between the first event and the rebuild it arms
            timeout: Content source deadline passed to every rebuild
        """
        self.resolver = resolver
        self.sitemap_builder = sitemap_builder
        self.robots_builder = robots_builder
        self.debounce = debounce
        self.timeout = timeout

        self._published: Dict[str, PublishedDocuments] = {}
        self._slots: Dict[str, _LocaleSlot] = {code: _LocaleSlot(code) for code in resolver.locales}
        self._queue: Optional[asyncio.Queue] = None
        self._dispatcher: Optional[asyncio.Task] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    @property
    def running(self) -> bool:
        return self._dispatcher is not None and not self._dispatcher.done()

    async def start(self) -> None:
        if self.running:
            return
        self._queue = asyncio.Queue()
        self._dispatcher = asyncio.create_task(self._dispatch(), name="revalidation-dispatcher")
        logger.info(f"Revalidation coordinator started for {len(self._slots)} locales")

    async def stop(self) -> None:
        """Stop consuming events and cancel armed or running rebuilds"""
        tasks = []
        if self._dispatcher is not None:
            self._dispatcher.cancel()
            tasks.append(self._dispatcher)
            self._dispatcher = None
        for slot in self._slots.values():
            for task in (slot.timer, slot.inflight):
                if task is not None and not task.done():
                    task.cancel()
                    tasks.append(task)
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("Revalidation coordinator stopped")

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.stop()

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------
    def submit(self, locale: str = ALL_LOCALES) -> List[str]:
        """
        Enqueue revalidation of a locale, or of every locale for '*'

        Returns immediately with the locales that were enqueued.

        Raises:
            UnknownLocale: locale is not configured
            RuntimeError: the coordinator is not running
        """
        if not self.running:
            raise RuntimeError("Revalidation coordinator is not running")
        locales = self.resolver.expand(locale)
        for code in locales:
            self._queue.put_nowait(RevalidationEvent(locale=code))
        return locales

    async def _dispatch(self) -> None:
        while True:
            event = await self._queue.get()
            try:
                self._on_event(event)
            except Exception:
                logger.exception(f"Failed to handle revalidation event for {event.locale}")
            finally:
                self._queue.task_done()

    def _on_event(self, event: RevalidationEvent) -> None:
        slot = self._slots[event.locale]
        slot.events_received += 1

        if slot.state is LocaleStateEnum.PENDING:
            slot.events_coalesced += 1
            return

        if slot.state is LocaleStateEnum.REBUILDING:
            if slot.dirty:
                slot.events_coalesced += 1
            slot.dirty = True
            return

        self._arm(slot)

    def _arm(self, slot: _LocaleSlot) -> None:
        slot.state = LocaleStateEnum.PENDING
        slot.timer = asyncio.create_task(self._fire(slot), name=f"revalidate-{slot.locale}")
        logger.debug(f"[{slot.locale}] rebuild armed in {self.debounce}s")

    async def _fire(self, slot: _LocaleSlot) -> None:
        await asyncio.sleep(self.debounce)
        slot.timer = None
        self._start_rebuild(slot)

    # ------------------------------------------------------------------
    # Rebuilds
    # ------------------------------------------------------------------
    def _start_rebuild(self, slot: _LocaleSlot) -> asyncio.Task:
        if slot.inflight is not None:
            return slot.inflight

        # A direct rebuild satisfies any pending event
        if slot.timer is not None:
            slot.timer.cancel()
            slot.timer = None

        slot.state = LocaleStateEnum.REBUILDING
        slot.inflight = asyncio.create_task(self._rebuild(slot), name=f"rebuild-{slot.locale}")
        return slot.inflight

    async def _rebuild(self, slot: _LocaleSlot) -> Optional[PublishedDocuments]:
        slot.rebuilds += 1
        previous = self._published.get(slot.locale)
        try:
            published = await self._generate(slot.locale)
        except Exception as e:
            slot.failures += 1
            slot.last_error = f"{type(e).__name__}: {e}"
            logger.error(f"[{slot.locale}] rebuild failed, keeping last known good documents: {e}", exc_info=True)
            return self._published.get(slot.locale)
        else:
            self._published[slot.locale] = published
            slot.last_error = None
            logger.info(f"[{slot.locale}] published version {published.version}")
            if previous is None or previous.sitemap_etag != published.sitemap_etag:
                self._notify_dependents(slot.locale)
            return published
        finally:
            slot.inflight = None
            if slot.dirty and self.running:
                slot.dirty = False
                self._arm(slot)
            else:
                slot.dirty = False
                slot.state = LocaleStateEnum.IDLE

    def _notify_dependents(self, locale: str) -> None:
        """Revalidate the locales that borrow routes from this one"""
        dependents = self.resolver.dependents(locale)
        if not dependents or not self.running:
            return
        logger.debug(f"[{locale}] changed, revalidating {', '.join(dependents)}")
        for code in dependents:
            self._queue.put_nowait(RevalidationEvent(locale=code))

    async def _generate(self, locale: str) -> PublishedDocuments:
        document = await self.sitemap_builder.build(locale, timeout=self.timeout)
        policy = self.robots_builder.build(locale)
        sitemap_xml = self.sitemap_builder.serialize(document)
        robots_txt = self.robots_builder.serialize(policy)

        previous = self._published.get(locale)
        return PublishedDocuments(
            locale=locale,
            version=(previous.version if previous is not None else 0) + 1,
            sitemap=document,
            robots=policy,
            sitemap_xml=sitemap_xml,
            robots_txt=robots_txt,
            sitemap_etag=make_etag(sitemap_xml),
            robots_etag=make_etag(robots_txt.encode("utf-8")),
            published_at=datetime.now(timezone.utc),
        )

    async def rebuild(self, locale: str) -> Optional[PublishedDocuments]:
        """
        Rebuild a locale now, or join the rebuild already in flight

        Cancelling the caller does not cancel the rebuild.

        Returns:
            The documents published after the rebuild; the previous ones
            if it failed; None if it failed and nothing was published yet

        Raises:
            UnknownLocale: locale is not configured
        """
        code = self.resolver.resolve(locale).code
        task = self._start_rebuild(self._slots[code])
        return await asyncio.shield(task)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def published(self, locale: str) -> Optional[PublishedDocuments]:
        """Currently published documents without triggering a build"""
        return self._published.get(self.resolver.resolve(locale).code)

    async def current(self, locale: str) -> PublishedDocuments:
        """
        Best available documents of a locale

        Builds on first read. Never fails for a configured locale.

        Raises:
            UnknownLocale: locale is not configured
        """
        published = self.published(locale)
        if published is not None:
            return published
        published = await self.rebuild(locale)
        if published is None:
            published = self._empty(locale)
        return published

    def _empty(self, locale: str) -> PublishedDocuments:
        document = SitemapDocument(locale=locale, generated_at=datetime.now(timezone.utc), source_degraded=True)
        policy = self.robots_builder.build(locale)
        sitemap_xml = self.sitemap_builder.serialize(document)
        robots_txt = self.robots_builder.serialize(policy)
        return PublishedDocuments(
            locale=locale,
            version=0,
            sitemap=document,
            robots=policy,
            sitemap_xml=sitemap_xml,
            robots_txt=robots_txt,
            sitemap_etag=make_etag(sitemap_xml),
            robots_etag=make_etag(robots_txt.encode("utf-8")),
            published_at=document.generated_at,
        )

    async def drain(self) -> None:
        """Wait until every queued event is handled and no rebuild is armed or running"""
        while True:
            # Finished rebuilds may enqueue events for dependent locales
            if self._queue is not None and self.running:
                await self._queue.join()
            tasks = [
                task
                for slot in self._slots.values()
                for task in (slot.timer, slot.inflight)
                if task is not None and not task.done()
            ]
            if not tasks:
                return
            await asyncio.gather(*tasks, return_exceptions=True)

    def status(self) -> CoordinatorStatus:
        locales = {}
        for code, slot in self._slots.items():
            published = self._published.get(code)
            locales[code] = LocaleStatus(
                locale=code,
                state=slot.state,
                version=published.version if published is not None else 0,
                published_at=published.published_at if published is not None else None,
                events_received=slot.events_received,
                events_coalesced=slot.events_coalesced,
                rebuilds=slot.rebuilds,
                failures=slot.failures,
                last_error=slot.last_error,
                source_degraded=published.sitemap.source_degraded if published is not None else False,
            )
        return CoordinatorStatus(locales=locales)
