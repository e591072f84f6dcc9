"""
Pydantic schemas for generated sitemap and robots documents
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import FrozenSet, Tuple
from datetime import datetime

from .route import RouteEntry


class SitemapDocument(BaseModel):
    """A locale's sitemap as of one generation pass"""

    model_config = ConfigDict(frozen=True)

    locale: str
    entries: Tuple[RouteEntry, ...] = Field(default_factory=tuple, description="Entries ordered by path")
    generated_at: datetime
    warnings: Tuple[str, ...] = Field(default_factory=tuple, description="Recovered problems of this pass")
    source_degraded: bool = Field(False, description="Dynamic content came from last-known-good data")

    @property
    def paths(self) -> list[str]:
        return [entry.path for entry in self.entries]

    @property
    def last_modified(self):
        """Most recent lastmod of the document, None when empty"""
        if not self.entries:
            return None
        return max(entry.last_modified for entry in self.entries)


class RobotsPolicy(BaseModel):
    """Crawl directives of a locale"""

    model_config = ConfigDict(frozen=True)

    locale: str
    allow_all: bool = True
    disallowed_paths: FrozenSet[str] = Field(default_factory=frozenset)
    sitemap_url: str
    user_agent: str = "*"
