"""
ContentPage model for database-sourced dynamic routes
"""

from sqlalchemy import Column, String, Boolean, Float, UniqueConstraint
from sqlalchemy.orm import validates

from sitemap_service.models.base import TimestampedModel
from sitemap_service.schemas.route import ChangeFrequency, normalize_path


class ContentPage(TimestampedModel):
    """
    A published page of a locale, exposed in that locale's sitemap
    as path_prefix/slug
    """
    __tablename__ = "content_pages"
    __table_args__ = (
        UniqueConstraint("locale", "path_prefix", "slug", name="uq_content_pages_locale_path"),
    )

    locale = Column(
        String(35),
        nullable=False,
        index=True,
        comment="Locale code the page belongs to"
    )

    path_prefix = Column(
        String(255),
        nullable=False,
        default="",
        comment="Section prefix of the page path (e.g. blog)"
    )

    slug = Column(
        String(255),
        nullable=False,
        comment="URL slug of the page"
    )

    change_frequency = Column(
        String(16),
        nullable=False,
        default=ChangeFrequency.WEEKLY.value,
        comment="Sitemap changefreq value"
    )

    priority = Column(
        Float,
        nullable=False,
        default=0.5,
        comment="Sitemap priority; out-of-range values are clamped on merge"
    )

    is_published = Column(
        Boolean,
        default=True,
        nullable=False,
        comment="Only published pages are exposed"
    )

    @validates("change_frequency")
    def validate_change_frequency(self, key, value):
        return ChangeFrequency(value).value

    @property
    def path(self) -> str:
        return "/".join(part for part in (normalize_path(self.path_prefix or ""), normalize_path(self.slug)) if part)

    def __repr__(self) -> str:
        return f"<ContentPage(locale={self.locale}, path={self.path})>"
