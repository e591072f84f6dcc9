"""
Pydantic schemas for sitemap route entries
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime, timezone
from enum import Enum
import re

_UNSAFE_PATH = re.compile(r"\s|[?#]|://")


class ChangeFrequency(str, Enum):
    """Values of the sitemap <changefreq> element"""
    ALWAYS = "always"
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    NEVER = "never"


def normalize_path(path: str) -> str:
    """
    Normalize a route path to its stored form

    Leading and trailing slashes are dropped, so "/blog/post/" and
    "blog/post" are the same route and "" is the locale root.

    Raises:
        ValueError: if the path is not a plain relative URL path
    """
    if path is None:
        raise ValueError("Route path cannot be empty")
    path = str(path).strip()
    if path.startswith("//") or _UNSAFE_PATH.search(path):
        raise ValueError(f"Invalid route path: {path!r}")
    return path.strip("/")


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class RouteEntry(BaseModel):
    """A single URL of a locale's sitemap, identified by (locale, path)"""

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="Route path relative to the locale base, '' for the root")
    locale: str = Field(..., min_length=1, description="Locale code the entry belongs to")
    last_modified: datetime = Field(..., description="When the content behind the route last changed")
    change_frequency: ChangeFrequency = Field(ChangeFrequency.WEEKLY, description="Expected change frequency")
    priority: float = Field(0.5, description="Relative priority, clamped to [0.0, 1.0] on merge")

    @field_validator("path", mode="before")
    @classmethod
    def validate_path(cls, v):
        return normalize_path(v)

    @field_validator("last_modified")
    @classmethod
    def validate_last_modified(cls, v):
        return ensure_utc(v)
