"""
Organisation and membership models.

Each organisation is a tenant; all dashboard data is isolated by
organisation_id.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from calltech.models.base import Base, _utc_now


class Organisation(Base):
    """
    Organisation (Tenant) model.

    ``selected_voice_agent_id`` references an assistant hosted by the voice
    platform; it is null until the organisation picks one.
    """

    __tablename__ = "organisations"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    name: Mapped[str] = mapped_column(String(255), nullable=False, default="My Organisation")
    selected_voice_agent_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utc_now,
        onupdate=_utc_now,
        nullable=False
    )

    members: Mapped[list["OrganisationMember"]] = relationship(
        "OrganisationMember",
        back_populates="organisation",
        cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Organisation(id={self.id}, name={self.name})>"


class OrganisationMember(Base):
    """
    Links a user to an organisation.

    A user may belong to several organisations; the earliest membership is
    the one requests are scoped to.
    """

    __tablename__ = "organisation_members"
    __table_args__ = (
        UniqueConstraint("organisation_id", "user_id", name="uq_organisation_members_org_user"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    organisation_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("organisations.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    user_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    role: Mapped[str] = mapped_column(String(50), default="member")  # owner, member

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now, nullable=False
    )

    organisation: Mapped["Organisation"] = relationship("Organisation", back_populates="members")
    user: Mapped["User"] = relationship("User", back_populates="memberships")

    def __repr__(self) -> str:
        return (
            f"<OrganisationMember(org_id={self.organisation_id}, "
            f"user_id={self.user_id}, role={self.role})>"
        )
