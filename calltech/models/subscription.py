"""
Billing models.

Subscriptions and usage counters are scoped per user (billing predates
organisations); they are written by the payment processor integration.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import DateTime, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from calltech.models.base import Base, _utc_now


class Subscription(Base):
    """Payment processor subscription state for a user."""

    __tablename__ = "subscriptions"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    user_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True
    )

    stripe_customer_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    stripe_subscription_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    status: Mapped[str] = mapped_column(String(50), default="inactive")  # active, trialing, canceled, ...
    plan_name: Mapped[str] = mapped_column(String(50), default="basic")  # basic, pro, ultimate
    billing_cycle: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)  # monthly, yearly

    current_period_start: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    current_period_end: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now, nullable=False
    )

    usage: Mapped[list["UsageTracking"]] = relationship(
        "UsageTracking",
        back_populates="subscription",
        cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Subscription(user_id={self.user_id}, plan={self.plan_name}, status={self.status})>"


class UsageTracking(Base):
    """Metered usage for one billing period."""

    __tablename__ = "usage_tracking"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    subscription_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("subscriptions.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    calls_count: Mapped[int] = mapped_column(Integer, default=0)
    intents_count: Mapped[int] = mapped_column(Integer, default=0)

    period_start: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    period_end: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    subscription: Mapped["Subscription"] = relationship("Subscription", back_populates="usage")
