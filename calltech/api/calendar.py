"""
Calendar connection API routes.

Runs the Google OAuth handshake for the caller's organisation. The
organisation travels through Google inside a signed ``state``; the
callback trusts it only if the signature holds and the caller is still a
member. The outcome is reported to the dashboard as ``?calendar=...``.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import RedirectResponse
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from calltech.config.settings import Settings, get_settings
from calltech.database import get_db
from calltech.dependencies import get_calendar_oauth, public_base_url
from calltech.integrations import GoogleCalendarOAuth
from calltech.middleware.auth import get_active_identity, get_tenant
from calltech.middleware.session import SessionIdentity
from calltech.security import create_oauth_state, verify_oauth_state
from calltech.stores import CalendarConnectionStore
from calltech.tenancy import TenantContext, TenantKey, is_member

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/calendar", tags=["calendar"])

CALLBACK_PATH = "/api/calendar/callback"


def _dashboard_redirect(outcome: str) -> RedirectResponse:
    return RedirectResponse(
        url=f"/dashboard?calendar={outcome}",
        status_code=status.HTTP_307_TEMPORARY_REDIRECT,
    )


@router.get("/connect")
async def connect_calendar(
    tenant: TenantContext = Depends(get_tenant),
    oauth: GoogleCalendarOAuth = Depends(get_calendar_oauth),
    base_url: str = Depends(public_base_url),
    settings: Settings = Depends(get_settings),
):
    """Send the browser to Google's consent screen."""
    state = create_oauth_state(tenant.organisation_id, settings=settings)
    url = oauth.authorization_url(state, redirect_uri=f"{base_url}{CALLBACK_PATH}")
    if url is None:
        logger.error("GOOGLE_CLIENT_ID not set; calendar connection unavailable")
        return _dashboard_redirect("error")

    return RedirectResponse(url=url, status_code=status.HTTP_307_TEMPORARY_REDIRECT)


@router.get("/callback")
async def calendar_callback(
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
    identity: SessionIdentity = Depends(get_active_identity),
    db: AsyncSession = Depends(get_db),
    oauth: GoogleCalendarOAuth = Depends(get_calendar_oauth),
    base_url: str = Depends(public_base_url),
    settings: Settings = Depends(get_settings),
):
    """
    Finish the handshake and store the organisation's tokens.

    Redirects to ``/dashboard?calendar=connected`` on success, ``denied``
    when the user declined consent and ``error`` otherwise.
    """
    if error:
        logger.info(f"Calendar consent declined: {error}")
        return _dashboard_redirect("denied")

    if not code or not state:
        return _dashboard_redirect("error")

    try:
        organisation_id = verify_oauth_state(state, settings=settings)
    except (JWTError, ValueError) as e:
        logger.warning(f"Rejected calendar OAuth state: {e}")
        return _dashboard_redirect("error")

    if not await is_member(db, identity.user_id, organisation_id):
        logger.warning(
            f"User {identity.user_id} completed calendar OAuth for foreign organisation {organisation_id}"
        )
        return _dashboard_redirect("error")

    tokens = await oauth.exchange_code(code, redirect_uri=f"{base_url}{CALLBACK_PATH}")
    if tokens is None:
        return _dashboard_redirect("error")

    await CalendarConnectionStore(db).upsert(
        TenantKey.for_organisation(organisation_id),
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        token_expiry=tokens.expires_at,
    )
    logger.info(f"Calendar connected for organisation {organisation_id}")
    return _dashboard_redirect("connected")
