"""
Billing API routes.

Subscriptions are managed on the payment processor; the dashboard only
hands the user over to its customer portal.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from calltech.database import get_db
from calltech.dependencies import get_billing_portal, public_base_url
from calltech.integrations import BillingPortal
from calltech.middleware.auth import get_active_identity
from calltech.middleware.session import SessionIdentity
from calltech.stores import SubscriptionStore
from calltech.tenancy import TenantKey

router = APIRouter(prefix="/api/billing", tags=["billing"])


@router.post("/portal-session")
async def create_portal_session(
    identity: SessionIdentity = Depends(get_active_identity),
    db: AsyncSession = Depends(get_db),
    portal: BillingPortal = Depends(get_billing_portal),
    base_url: str = Depends(public_base_url),
):
    """
    Create a billing portal session for the caller.

    Returns:
        ``{"url": ...}`` to redirect the browser to

    Raises:
        HTTPException: 404 without a customer record, 500 if the processor
            fails
    """
    subscription = await SubscriptionStore(db).get(TenantKey.for_user(identity.user_id))
    if subscription is None or not subscription.stripe_customer_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No customer record found")

    url = await portal.create_portal_session(
        subscription.stripe_customer_id,
        return_url=f"{base_url}/dashboard/billing",
    )
    if url is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create portal session",
        )
    return {"url": url}
