"""
Database-backed content source
"""

import asyncio
import logging
from typing import List, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from sitemap_service.core.database import session_scope
from sitemap_service.core.exceptions import SourceUnavailable
from sitemap_service.models.content_page import ContentPage
from sitemap_service.schemas.route import RouteEntry
from sitemap_service.services.content_source import ContentSourceAdapter

logger = logging.getLogger(__name__)


class DatabaseContentSource(ContentSourceAdapter):
    """Dynamic routes read from the content_pages table"""

    name = "database"

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    async def fetch_dynamic_routes(self, locale: str) -> Sequence[RouteEntry]:
        """
        Read the published pages of a locale

        The query runs in a worker thread so a slow database does not
        stall the event loop.

        Raises:
            SourceUnavailable: the query failed
        """
        try:
            return await asyncio.to_thread(self._query, locale)
        except SQLAlchemyError as e:
            logger.error(f"Failed to query content pages for {locale}: {e}")
            raise SourceUnavailable(f"Database query failed: {e}") from e

    def _query(self, locale: str) -> List[RouteEntry]:
        with session_scope(self.session_factory) as db:
            pages = db.execute(
                select(ContentPage)
                .where(ContentPage.locale == locale, ContentPage.is_published.is_(True))
                .order_by(ContentPage.path_prefix, ContentPage.slug)
            ).scalars().all()

            entries = []
            for page in pages:
                try:
                    entries.append(RouteEntry(
                        path=page.path,
                        locale=page.locale,
                        last_modified=page.updated_at,
                        change_frequency=page.change_frequency,
                        priority=page.priority,
                    ))
                except ValueError as e:
                    logger.warning(f"Skipping malformed content page {page.id} ({locale}): {e}")

            logger.info(f"Loaded {len(entries)} content pages for {locale}")
            return entries
