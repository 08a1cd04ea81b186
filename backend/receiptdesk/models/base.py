"""
Base model class for all SQLAlchemy models.

WHY: Centralizing common model functionality (timestamps, ID, soft delete)
in a base class keeps every record type consistent.
"""

import secrets
import string
import time
from datetime import datetime
from sqlalchemy import Boolean, Column, Integer, DateTime
from sqlalchemy.orm import DeclarativeBase


_ID_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits


def generate_document_id(prefix: str, suffix_length: int = 5) -> str:
    """
    Generate a public document identifier.

    Format: prefix + millisecond timestamp + random uppercase alphanumerics,
    e.g. ``RCP1767225600000K3Z9Q``. Collisions are unlikely but not excluded;
    the unique index on the column is the real guarantee.
    """
    suffix = "".join(secrets.choice(_ID_SUFFIX_ALPHABET) for _ in range(suffix_length))
    return f"{prefix}{int(time.time() * 1000)}{suffix}"


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models.

    WHY: DeclarativeBase provides the foundation for SQLAlchemy 2.0 models
    with improved type hints and async support.
    """

    pass


class TimestampMixin:
    """Adds created_at and updated_at timestamps."""

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class PrimaryKeyMixin:
    """Adds an auto-incrementing integer primary key."""

    id = Column(Integer, primary_key=True, index=True)


class SoftDeleteMixin:
    """
    Adds the is_active flag.

    WHY: Records are never hard-deleted; every read filters on is_active.
    """

    is_active = Column(Boolean, default=True, nullable=False, index=True)
