"""
Dashboard API routes.

Setup progress for the organisation and the caller's subscription state.
"""

from dataclasses import asdict
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from calltech.database import get_db
from calltech.middleware.auth import get_active_identity, get_tenant
from calltech.middleware.session import SessionIdentity
from calltech.stores import IntentStore, OrganisationStore, PhoneNumberStore, SubscriptionStore
from calltech.stores.subscriptions import FEATURES, check_limit, is_subscription_active
from calltech.tenancy import TenantContext, TenantKey

router = APIRouter(prefix="/api", tags=["dashboard"])


class DashboardStats(BaseModel):
    intentsCount: int
    hasPhoneNumber: bool
    hasAssistant: bool
    assistantActive: bool


class SubscriptionSummary(BaseModel):
    status: str
    plan_type: str
    billing_cycle: Optional[str] = None
    current_period_start: Optional[datetime] = None
    current_period_end: Optional[datetime] = None


class SubscriptionStatus(BaseModel):
    hasActiveSubscription: bool
    subscription: Optional[SubscriptionSummary] = None
    limits: Optional[dict] = None


@router.get("/dashboard-stats", response_model=DashboardStats)
async def get_dashboard_stats(
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
):
    """
    Setup progress for the organisation.

    The assistant counts as active once it is selected and has both intents
    to answer with and a number to be reached on.
    """
    key = tenant.organisation_key
    intents_count = await IntentStore(db).count(key)
    has_phone_number = await PhoneNumberStore(db).count(key) > 0
    organisation = await OrganisationStore(db).get(key)
    has_assistant = bool(organisation and organisation.selected_voice_agent_id)

    return DashboardStats(
        intentsCount=intents_count,
        hasPhoneNumber=has_phone_number,
        hasAssistant=has_assistant,
        assistantActive=has_assistant and has_phone_number and intents_count > 0,
    )


@router.get(
    "/subscription-status",
    response_model=SubscriptionStatus,
    response_model_exclude_none=True,
)
async def get_subscription_status(
    identity: SessionIdentity = Depends(get_active_identity),
    db: AsyncSession = Depends(get_db),
):
    """Subscription summary for the caller; ``limits`` only while it is active."""
    key = TenantKey.for_user(identity.user_id)
    store = SubscriptionStore(db)
    subscription = await store.get(key)
    if subscription is None:
        return SubscriptionStatus(hasActiveSubscription=False)

    active = is_subscription_active(subscription)
    limits = None
    if active:
        usage = await store.current_usage(key, subscription)
        limits = {
            feature: asdict(check_limit(subscription.plan_name, usage, feature))
            for feature in FEATURES
        }

    return SubscriptionStatus(
        hasActiveSubscription=active,
        subscription=SubscriptionSummary(
            status=subscription.status,
            plan_type=subscription.plan_name,
            billing_cycle=subscription.billing_cycle,
            current_period_start=subscription.current_period_start,
            current_period_end=subscription.current_period_end,
        ),
        limits=limits,
    )
