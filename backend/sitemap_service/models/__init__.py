"""
Database models package
"""

from .base import Base, TimestampedModel
from .content_page import ContentPage

__all__ = ["Base", "TimestampedModel", "ContentPage"]
