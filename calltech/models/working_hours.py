"""
Working hours model.

When the organisation's assistant answers calls; one row per tenant.
Times are local wall-clock "HH:MM" strings in the row's timezone.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from calltech.models.base import Base, _utc_now

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

DEFAULT_TIMEZONE = "America/New_York"
DEFAULT_OUTSIDE_HOURS_MESSAGE = (
    "Sorry, we are currently closed. Please call back during our business hours."
)


class WorkingHours(Base):
    __tablename__ = "working_hours"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    organisation_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("organisations.id", ondelete="CASCADE"),
        nullable=False,
        unique=True
    )

    is_enabled: Mapped[bool] = mapped_column(Boolean, default=False)
    timezone: Mapped[str] = mapped_column(String(64), default=DEFAULT_TIMEZONE)

    monday_enabled: Mapped[bool] = mapped_column(Boolean, default=False)
    monday_start_time: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)
    monday_end_time: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)
    tuesday_enabled: Mapped[bool] = mapped_column(Boolean, default=False)
    tuesday_start_time: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)
    tuesday_end_time: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)
    wednesday_enabled: Mapped[bool] = mapped_column(Boolean, default=False)
    wednesday_start_time: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)
    wednesday_end_time: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)
    thursday_enabled: Mapped[bool] = mapped_column(Boolean, default=False)
    thursday_start_time: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)
    thursday_end_time: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)
    friday_enabled: Mapped[bool] = mapped_column(Boolean, default=False)
    friday_start_time: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)
    friday_end_time: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)
    saturday_enabled: Mapped[bool] = mapped_column(Boolean, default=False)
    saturday_start_time: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)
    saturday_end_time: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)
    sunday_enabled: Mapped[bool] = mapped_column(Boolean, default=False)
    sunday_start_time: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)
    sunday_end_time: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)

    outside_hours_message: Mapped[str] = mapped_column(Text, default=DEFAULT_OUTSIDE_HOURS_MESSAGE)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utc_now,
        onupdate=_utc_now,
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<WorkingHours(org_id={self.organisation_id}, enabled={self.is_enabled})>"
