"""Billing (Stripe) adapter.

Creates customers, checkout and customer portal sessions, and reads or
cancels subscriptions. The Stripe SDK is synchronous, so calls run on the
threadpool. Failures are logged and reported as None.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

import stripe
from starlette.concurrency import run_in_threadpool

logger = logging.getLogger(__name__)


@dataclass
class StripeSubscriptionInfo:
    """The parts of a Stripe subscription the dashboard shows."""

    id: str
    status: str
    cancel_at_period_end: bool
    current_period_end: Optional[datetime]


def _period_end(subscription: Any) -> Optional[datetime]:
    # Newer API versions report the period on the subscription items
    timestamp = subscription.get("current_period_end")
    if timestamp is None:
        items = (subscription.get("items") or {}).get("data") or []
        if items:
            timestamp = items[0].get("current_period_end")
    if timestamp is None:
        return None
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


def subscription_info(subscription: Any) -> StripeSubscriptionInfo:
    return StripeSubscriptionInfo(
        id=subscription.get("id"),
        status=subscription.get("status") or "inactive",
        cancel_at_period_end=bool(subscription.get("cancel_at_period_end")),
        current_period_end=_period_end(subscription),
    )


class BillingPortal:
    """Gateway to the user's Stripe customer, checkout and subscription."""

    def __init__(self, secret_key: Optional[str]):
        self.secret_key = secret_key
        self._client: Optional[stripe.StripeClient] = None

    @property
    def configured(self) -> bool:
        return bool(self.secret_key)

    def _stripe(self) -> stripe.StripeClient:
        if self._client is None:
            self._client = stripe.StripeClient(self.secret_key)
        return self._client

    def _create_session(self, customer_id: str, return_url: str) -> str:
        session = self._stripe().billing_portal.sessions.create(
            params={"customer": customer_id, "return_url": return_url}
        )
        return session.url

    def _create_customer(self, email: Optional[str], user_id: str) -> str:
        customer = self._stripe().customers.create(
            params={"email": email, "metadata": {"userId": user_id}}
        )
        return customer.id

    def _create_checkout(self, params: dict) -> str:
        session = self._stripe().checkout.sessions.create(params=params)
        return session.url

    def _retrieve_subscription(self, subscription_id: str) -> StripeSubscriptionInfo:
        return subscription_info(self._stripe().subscriptions.retrieve(subscription_id))

    def _cancel_at_period_end(self, subscription_id: str) -> StripeSubscriptionInfo:
        subscription = self._stripe().subscriptions.update(
            subscription_id, params={"cancel_at_period_end": True}
        )
        return subscription_info(subscription)

    async def _call(self, action: str, func, *args):
        if not self.configured:
            logger.warning(f"Stripe secret key not configured; cannot {action}")
            return None

        try:
            return await run_in_threadpool(func, *args)
        except stripe.StripeError as e:
            logger.error(f"Stripe failed to {action}: {e}")
            return None

    async def create_portal_session(self, customer_id: str, return_url: str) -> Optional[str]:
        """
        Create a portal session for a customer.

        Args:
            customer_id: Stripe customer id stored on the user's subscription
            return_url: Where Stripe sends the user afterwards

        Returns:
            Portal URL, or None when billing is unavailable
        """
        return await self._call(
            f"create portal session for customer {customer_id}",
            self._create_session,
            customer_id,
            return_url,
        )

    async def create_customer(self, email: Optional[str], user_id: str) -> Optional[str]:
        """Create a Stripe customer for a user and return its id."""
        return await self._call(f"create customer for user {user_id}", self._create_customer, email, user_id)

    async def create_checkout_session(
        self,
        customer_id: str,
        price_id: str,
        success_url: str,
        cancel_url: str,
        metadata: Optional[dict[str, str]] = None,
    ) -> Optional[str]:
        """
        Create a subscription checkout session.

        Returns:
            Checkout URL, or None when billing is unavailable
        """
        params = {
            "customer": customer_id,
            "payment_method_types": ["card"],
            "line_items": [{"price": price_id, "quantity": 1}],
            "mode": "subscription",
            "success_url": success_url,
            "cancel_url": cancel_url,
            "metadata": metadata or {},
        }
        return await self._call(
            f"create checkout session for customer {customer_id}", self._create_checkout, params
        )

    async def get_subscription(self, subscription_id: str) -> Optional[StripeSubscriptionInfo]:
        return await self._call(
            f"retrieve subscription {subscription_id}", self._retrieve_subscription, subscription_id
        )

    async def cancel_subscription(self, subscription_id: str) -> Optional[StripeSubscriptionInfo]:
        """Cancel a subscription at the end of its current period."""
        return await self._call(
            f"cancel subscription {subscription_id}", self._cancel_at_period_end, subscription_id
        )
