"""
Calendar connection model.

Stores the Google OAuth tokens of an organisation; one row per tenant.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from calltech.models.base import Base, _utc_now


class CalendarConnection(Base):
    __tablename__ = "organisation_calendar_connections"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    organisation_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("organisations.id", ondelete="CASCADE"),
        nullable=False,
        unique=True
    )

    access_token: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    refresh_token: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    token_expiry: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    calendar_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, default="primary")

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utc_now,
        onupdate=_utc_now,
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<CalendarConnection(org_id={self.organisation_id}, calendar={self.calendar_id})>"
