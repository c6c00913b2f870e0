"""
Subscription purchase and cancellation routes.

Checkout and cancellation are delegated to the payment processor; the
local subscription row only remembers the customer and mirrors the state
the processor reports.
"""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from calltech.config.settings import Settings, get_settings
from calltech.database import get_db
from calltech.dependencies import get_billing_portal, public_base_url
from calltech.integrations import BillingPortal
from calltech.middleware.auth import get_active_identity
from calltech.middleware.session import SessionIdentity
from calltech.stores import SubscriptionStore
from calltech.stores.subscriptions import as_utc
from calltech.tenancy import TenantKey

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/stripe", tags=["billing"])


class CheckoutRequest(BaseModel):
    planId: str


class StripeSubscription(BaseModel):
    id: UUID
    status: str
    plan_name: str
    current_period_end: Optional[datetime] = None
    cancel_at_period_end: bool = False
    stripe_customer_id: Optional[str] = None
    stripe_subscription_id: Optional[str] = None


class UsageCounts(BaseModel):
    calls_count: int = 0
    intents_count: int = 0


class StripeSubscriptionStatus(BaseModel):
    subscription: Optional[StripeSubscription] = None
    usage: UsageCounts


def plan_price_ids(settings: Settings) -> dict[str, Optional[str]]:
    return {
        "basic": settings.stripe_basic_price_id,
        "pro": settings.stripe_pro_price_id,
        "ultimate": settings.stripe_ultimate_price_id,
    }


@router.post("/create-checkout-session")
async def create_checkout_session(
    checkout: CheckoutRequest,
    identity: SessionIdentity = Depends(get_active_identity),
    db: AsyncSession = Depends(get_db),
    billing: BillingPortal = Depends(get_billing_portal),
    base_url: str = Depends(public_base_url),
    settings: Settings = Depends(get_settings),
):
    """
    Start a subscription checkout for one of the plans.

    The caller's Stripe customer is created on first checkout and stored
    on an inactive subscription row.

    Raises:
        HTTPException: 400 for an unknown or unpriced plan, 500 if the
            processor fails
    """
    plan_id = checkout.planId.lower()
    price_id = plan_price_ids(settings).get(plan_id)
    if not price_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid plan")

    key = TenantKey.for_user(identity.user_id)
    store = SubscriptionStore(db)
    subscription = await store.get(key)
    customer_id = subscription.stripe_customer_id if subscription else None

    if not customer_id:
        customer_id = await billing.create_customer(identity.email, identity.user_id)
        if customer_id is None:
            raise _checkout_failed()
        await store.save_customer(key, customer_id)
        logger.info(f"Created Stripe customer {customer_id} for user {identity.user_id}")

    url = await billing.create_checkout_session(
        customer_id,
        price_id,
        success_url=f"{base_url}/dashboard?success=true",
        cancel_url=f"{base_url}/pricing?canceled=true",
        metadata={"userId": identity.user_id, "planName": plan_id},
    )
    if url is None:
        raise _checkout_failed()
    return {"url": url}


def _checkout_failed() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Failed to create checkout session",
    )


@router.post("/cancel-subscription")
async def cancel_subscription(
    identity: SessionIdentity = Depends(get_active_identity),
    db: AsyncSession = Depends(get_db),
    billing: BillingPortal = Depends(get_billing_portal),
):
    """
    Cancel the caller's subscription at the end of the paid period.

    Raises:
        HTTPException: 404 without a processor subscription, 500 if the
            processor fails
    """
    subscription = await SubscriptionStore(db).get(TenantKey.for_user(identity.user_id))
    if subscription is None or not subscription.stripe_subscription_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No subscription found")

    cancelled = await billing.cancel_subscription(subscription.stripe_subscription_id)
    if cancelled is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to cancel subscription",
        )

    logger.info(f"Subscription {cancelled.id} of user {identity.user_id} set to cancel at period end")
    return {
        "success": True,
        "cancel_at_period_end": cancelled.cancel_at_period_end,
        "current_period_end": cancelled.current_period_end,
    }


@router.get("/subscription-status", response_model=StripeSubscriptionStatus)
async def get_stripe_subscription_status(
    identity: SessionIdentity = Depends(get_active_identity),
    db: AsyncSession = Depends(get_db),
    billing: BillingPortal = Depends(get_billing_portal),
):
    """
    Subscription state as the processor reports it, with this period's usage.

    When the processor can't be reached the stored state is returned.
    """
    key = TenantKey.for_user(identity.user_id)
    store = SubscriptionStore(db)
    subscription = await store.get(key)
    if subscription is None:
        return StripeSubscriptionStatus(usage=UsageCounts())

    remote = None
    if subscription.stripe_subscription_id:
        remote = await billing.get_subscription(subscription.stripe_subscription_id)

    usage = await store.current_usage(key, subscription)
    return StripeSubscriptionStatus(
        subscription=StripeSubscription(
            id=subscription.id,
            status=subscription.status or "inactive",
            plan_name=subscription.plan_name or "No Plan",
            current_period_end=(
                remote.current_period_end if remote and remote.current_period_end
                else as_utc(subscription.current_period_end)
            ),
            cancel_at_period_end=remote.cancel_at_period_end if remote else False,
            stripe_customer_id=subscription.stripe_customer_id,
            stripe_subscription_id=subscription.stripe_subscription_id,
        ),
        usage=UsageCounts(
            calls_count=usage.calls_count if usage else 0,
            intents_count=usage.intents_count if usage else 0,
        ),
    )
