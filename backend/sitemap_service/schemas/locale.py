"""
Pydantic schemas for locale configuration
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from urllib.parse import urlparse


class LocaleConfig(BaseModel):
    """A configured locale with its canonical base URL and fallback"""

    model_config = ConfigDict(frozen=True)

    code: str = Field(..., min_length=1, max_length=35, description="Locale code (e.g. en, hi, pt-BR)")
    canonical_base: str = Field(..., description="Absolute base URL of the locale (e.g. https://academy.com/en)")
    fallback_locale: Optional[str] = Field(None, description="Locale whose content is used when this one has none")

    @field_validator("code")
    @classmethod
    def validate_code(cls, v):
        v = v.strip()
        if not v or v == "*" or "/" in v:
            raise ValueError(f"Invalid locale code: {v!r}")
        return v

    @field_validator("canonical_base")
    @classmethod
    def validate_canonical_base(cls, v):
        """Require an absolute http(s) URL and drop the trailing slash"""
        parsed = urlparse(v.strip())
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"canonical_base must be an absolute http(s) URL: {v!r}")
        if parsed.query or parsed.fragment:
            raise ValueError("canonical_base cannot carry a query or fragment")
        return v.strip().rstrip("/")

    @field_validator("fallback_locale")
    @classmethod
    def validate_fallback(cls, v):
        if v is not None:
            v = v.strip()
        return v or None

    @property
    def base_path(self) -> str:
        """Path component of the canonical base, '' for a bare host"""
        return urlparse(self.canonical_base).path.rstrip("/")
