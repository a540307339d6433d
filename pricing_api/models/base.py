"""
Base model class for all SQLAlchemy models.

WHY: Centralizing common model functionality (timestamps, ID, JSON column
type) in one module ensures consistency across all models.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, DateTime, JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase


# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class TimestampMixin:
    """
    Mixin to add created_at and updated_at timestamps to models.
    """

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class PrimaryKeyMixin:
    """Mixin to add an integer primary key to models."""

    id = Column(Integer, primary_key=True, index=True)
