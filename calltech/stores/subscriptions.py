"""
Subscription and usage storage.

Billing is still scoped per user, so these methods take a user TenantKey.
Plan limits are compared against the usage row of the current period.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from calltech.models import Subscription, UsageTracking
from calltech.tenancy import TenantKey

UNLIMITED = -1

PLAN_LIMITS: dict[str, dict[str, int]] = {
    "basic": {"calls": 100, "intents": 3},
    "pro": {"calls": 500, "intents": 10},
    "ultimate": {"calls": UNLIMITED, "intents": UNLIMITED},
}

FEATURES = ("calls", "intents")

ACTIVE_STATUSES = ("active", "trialing")


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes (SQLite) as UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def is_subscription_active(subscription: Optional[Subscription], now: Optional[datetime] = None) -> bool:
    """Active or trialing, with a billing period that hasn't ended yet."""
    if subscription is None or subscription.status not in ACTIVE_STATUSES:
        return False
    period_end = as_utc(subscription.current_period_end)
    if period_end is None:
        return False
    return period_end > (now or datetime.now(timezone.utc))


@dataclass
class LimitCheck:
    allowed: bool
    limit: Optional[int] = None
    remaining: Optional[int] = None
    error: Optional[str] = None


def check_limit(plan_name: str, usage: Optional[UsageTracking], feature: str) -> LimitCheck:
    """
    Compare a period's usage against the plan limit for a feature.

    No usage row yet means nothing has been consumed.
    """
    if feature not in FEATURES:
        return LimitCheck(allowed=False, error="Invalid feature")

    limits = PLAN_LIMITS.get((plan_name or "").lower())
    if limits is None:
        return LimitCheck(allowed=False, error=f"Unknown plan: {plan_name}")

    limit = limits[feature]
    if limit == UNLIMITED:
        return LimitCheck(allowed=True, limit=UNLIMITED)

    used = getattr(usage, f"{feature}_count", 0) if usage is not None else 0
    remaining = max(limit - used, 0)
    return LimitCheck(allowed=used < limit, limit=limit, remaining=remaining)


class SubscriptionStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, tenant: TenantKey) -> Optional[Subscription]:
        result = await self.db.execute(
            select(Subscription).where(Subscription.user_id == tenant.user_id)
        )
        return result.scalar_one_or_none()

    async def current_usage(
        self,
        tenant: TenantKey,
        subscription: Subscription,
        now: Optional[datetime] = None,
    ) -> Optional[UsageTracking]:
        """Usage row of the period that is still running, if any."""
        now = now or datetime.now(timezone.utc)
        stmt = (
            select(UsageTracking)
            .where(
                UsageTracking.user_id == tenant.user_id,
                UsageTracking.subscription_id == subscription.id,
                UsageTracking.period_end >= now,
            )
            .order_by(UsageTracking.period_end.asc())
            .limit(1)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def save_customer(self, tenant: TenantKey, customer_id: str) -> Subscription:
        """Record the user's Stripe customer, creating an inactive subscription row if needed."""
        subscription = await self.get(tenant)
        if subscription is None:
            subscription = Subscription(user_id=tenant.user_id, status="inactive")
            self.db.add(subscription)
        subscription.stripe_customer_id = customer_id
        await self.db.commit()
        await self.db.refresh(subscription)
        return subscription
