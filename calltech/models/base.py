"""
SQLAlchemy declarative base for dashboard models.

Production runs on PostgreSQL (asyncpg); tests run on SQLite (aiosqlite),
so column types stick to the portable SQLAlchemy 2.0 generics.
"""

from datetime import datetime, timezone

from sqlalchemy.orm import DeclarativeBase


def _utc_now() -> datetime:
    """Return current UTC time (timezone-aware)."""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """
    Base class for all dashboard SQLAlchemy models.

    Tenant-owned tables carry an ``organisation_id`` (or, for billing,
    ``user_id``) column that every store filters on.
    """

    pass
