"""
Pydantic schemas for the site configuration file
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import List, Optional
from datetime import datetime

from .locale import LocaleConfig
from .route import ChangeFrequency, normalize_path, ensure_utc


class RouteDefaults(BaseModel):
    """Defaults applied to static routes that do not set their own values"""

    model_config = ConfigDict(frozen=True)

    change_frequency: ChangeFrequency = Field(ChangeFrequency.WEEKLY, description="Default change frequency")
    priority: float = Field(0.5, ge=0.0, le=1.0, description="Default priority")


class StaticRoute(BaseModel):
    """A statically configured route"""

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="Route path relative to each locale base")
    change_frequency: Optional[ChangeFrequency] = Field(None, description="Overrides the default change frequency")
    priority: Optional[float] = Field(None, ge=0.0, le=1.0, description="Overrides the default priority")
    locales: Optional[List[str]] = Field(None, description="Restrict the route to these locales (None = all)")
    last_modified: Optional[datetime] = Field(None, description="Overrides the site-wide static last-modified time")

    @field_validator("path", mode="before")
    @classmethod
    def validate_path(cls, v):
        return normalize_path(v)

    @field_validator("last_modified")
    @classmethod
    def validate_last_modified(cls, v):
        return ensure_utc(v) if v is not None else v

    def applies_to(self, locale: str) -> bool:
        return self.locales is None or locale in self.locales


class RobotsRules(BaseModel):
    """Crawl directives shared by every locale"""

    model_config = ConfigDict(frozen=True)

    user_agent: str = Field("*", min_length=1, description="User-agent the rules apply to")
    allow_all: bool = Field(True, description="False blocks the whole site")
    disallow: List[str] = Field(default_factory=list, description="Host-absolute paths blocked for crawlers")


class SiteConfig(BaseModel):
    """Locales, static routes and crawl rules of one site"""

    model_config = ConfigDict(frozen=True)

    locales: List[LocaleConfig] = Field(..., min_length=1, description="Configured locales")
    default_locale: Optional[str] = Field(None, description="Locale served at the root; first locale if unset")
    defaults: RouteDefaults = Field(default_factory=RouteDefaults)
    static_routes: List[StaticRoute] = Field(default_factory=list)
    static_last_modified: Optional[datetime] = Field(
        None, description="Last-modified time of static routes; service start time if unset"
    )
    robots: RobotsRules = Field(default_factory=RobotsRules)

    @field_validator("static_last_modified")
    @classmethod
    def validate_static_last_modified(cls, v):
        return ensure_utc(v) if v is not None else v

    @model_validator(mode="after")
    def validate_locale_references(self):
        codes = {locale.code for locale in self.locales}
        if self.default_locale is not None and self.default_locale not in codes:
            raise ValueError(f"default_locale {self.default_locale!r} is not a configured locale")
        for route in self.static_routes:
            unknown = set(route.locales or ()) - codes
            if unknown:
                raise ValueError(
                    f"Static route {route.path!r} references unknown locales: {', '.join(sorted(unknown))}"
                )
        return self
