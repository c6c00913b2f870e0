"""
Authentication and tenant dependencies for API routes.

Provides FastAPI dependencies for:
- the session identity placed on the request by the access gate
- the same identity, re-checked against the user's current account state
- the caller's tenant (organisation) resolved once per request
- organisation-level access control for routes naming an organisation
"""

from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from calltech.config.settings import get_settings
from calltech.database import get_db
from calltech.middleware.session import SessionIdentity, SessionResolver
from calltech.models import User
from calltech.tenancy import TenantContext, is_member, resolve_tenant


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
    )


async def get_current_identity(request: Request) -> SessionIdentity:
    """
    Return the authenticated identity for the request.

    The access gate normally resolves the session; routes mounted without
    the gate resolve it here.

    Raises:
        HTTPException: 401 if there is no valid session
    """
    if hasattr(request.state, "identity"):
        identity = request.state.identity
    else:
        identity = SessionResolver(get_settings()).resolve(request).identity

    if identity is None:
        raise _unauthorized()
    return identity


async def _require_active_user(db: AsyncSession, user_id: str) -> None:
    # A session outlives the account state it was issued for
    user = await db.get(User, user_id)
    if user is None or not user.is_active:
        raise _unauthorized()


async def get_active_identity(
    identity: SessionIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> SessionIdentity:
    """
    Return the session identity if its user still exists and is active.

    Raises:
        HTTPException: 401 if the user was deleted or deactivated
    """
    await _require_active_user(db, identity.user_id)
    return identity


async def get_tenant(
    identity: SessionIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> TenantContext:
    """
    Resolve the caller's organisation.

    A user without any organisation is treated exactly like an
    unauthenticated caller.

    Raises:
        HTTPException: 401 if the user is inactive or belongs to no organisation
    """
    await _require_active_user(db, identity.user_id)

    organisation_id = await resolve_tenant(db, identity.user_id)
    if organisation_id is None:
        raise _unauthorized()

    return TenantContext(
        user_id=identity.user_id,
        organisation_id=organisation_id,
        email=identity.email,
    )


class OrganisationAccessChecker:
    """
    Dependency class for organisation-level access control.

    Ensures the caller is a member of the organisation named by the
    ``organisation_id`` path parameter. Non-members get 403 whether or not
    the organisation exists. Deactivated users get 401.

    Usage:
        @router.get("/organisations/{organisation_id}")
        async def get_org(
            organisation_id: UUID,
            identity: SessionIdentity = Depends(require_org_access)
        ):
            ...
    """

    async def __call__(
        self,
        organisation_id: UUID,
        identity: SessionIdentity = Depends(get_current_identity),
        db: AsyncSession = Depends(get_db),
    ) -> SessionIdentity:
        await _require_active_user(db, identity.user_id)
        if not await is_member(db, identity.user_id, organisation_id):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Access denied: You do not belong to this organisation"
            )
        return identity


# Create singleton instance for use as dependency
require_org_access = OrganisationAccessChecker()
