"""
Declarative base for content tables
"""

from sqlalchemy import Column, DateTime, Uuid, func
from sqlalchemy.orm import declarative_base
import uuid

Base = declarative_base()


class TimestampedModel(Base):
    """
    Abstract row with a UUID key and change tracking

    updated_at is what the sitemap publishes as <lastmod>, so it must move
    whenever the content behind a row changes.
    """
    __abstract__ = True

    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
    )

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
        index=True,
        comment="Published as the sitemap lastmod of the row"
    )
