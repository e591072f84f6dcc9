"""
Pydantic schemas for revalidation events and API payloads
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Optional
from datetime import datetime, timezone
from enum import Enum

ALL_LOCALES = "*"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LocaleStateEnum(str, Enum):
    """Revalidation state of a locale"""
    IDLE = "idle"
    PENDING = "pending"
    REBUILDING = "rebuilding"


class RevalidationEvent(BaseModel):
    """A request to regenerate one locale's documents"""

    model_config = ConfigDict(frozen=True)

    locale: str = Field(..., min_length=1)
    requested_at: datetime = Field(default_factory=utcnow)


class RevalidationRequest(BaseModel):
    """Body of the revalidation webhook"""

    locale: str = Field(ALL_LOCALES, min_length=1, description="Locale code, or '*' for all locales")


class RevalidationAck(BaseModel):
    """Acknowledgement returned by the revalidation webhook"""

    status: str = "accepted"
    locales: List[str] = Field(default_factory=list)
    requested_at: datetime


class LocaleStatus(BaseModel):
    """Coordinator bookkeeping for one locale"""

    locale: str
    state: LocaleStateEnum
    version: int = Field(0, description="Version of the published documents, 0 if none")
    published_at: Optional[datetime] = None
    events_received: int = 0
    events_coalesced: int = 0
    rebuilds: int = 0
    failures: int = 0
    last_error: Optional[str] = None
    source_degraded: bool = False


class CoordinatorStatus(BaseModel):
    """Status of every configured locale"""

    locales: Dict[str, LocaleStatus] = Field(default_factory=dict)
