"""
Intent model.

An intent pairs example caller phrases with canned responses; the set of
an organisation's intents is appended to its assistant's system prompt.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from calltech.models.base import Base, _utc_now


class Intent(Base):
    """Phrase/response record owned by an organisation."""

    __tablename__ = "intents"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    # Tenant key
    organisation_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("organisations.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    # Author, kept for audit only
    user_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    intent_name: Mapped[str] = mapped_column(String(255), nullable=False)
    example_user_phrases: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    english_responses: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    russian_responses: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now, nullable=False, index=True
    )

    def __repr__(self) -> str:
        return f"<Intent(id={self.id}, name={self.intent_name}, org_id={self.organisation_id})>"
