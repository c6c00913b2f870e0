"""
Phone number model.

Numbers customers call; each may be registered with the voice platform
under ``vapi_phone_number_id`` so inbound calls reach the org's assistant.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from calltech.models.base import Base, _utc_now


class PhoneNumber(Base):
    __tablename__ = "phone_numbers"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    organisation_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("organisations.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    phone_number: Mapped[str] = mapped_column(String(32), nullable=False)
    vapi_phone_number_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    label: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now, nullable=False
    )

    def __repr__(self) -> str:
        return f"<PhoneNumber(id={self.id}, number={self.phone_number}, org_id={self.organisation_id})>"
