"""
Tenant resolution.

Maps an authenticated user to the organisation their requests are scoped to
and checks membership when a resource names its organisation explicitly.
The resulting TenantKey is handed to every store call; stores never work
out the tenant themselves.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from calltech.models import OrganisationMember

logger = logging.getLogger(__name__)


class TenantScope(str, enum.Enum):
    """What a tenant key identifies."""

    ORGANISATION = "organisation"
    # Billing records still belong to individual users
    USER = "user"


@dataclass(frozen=True)
class TenantKey:
    """
    The value a store filters and stamps rows with.

    Attributes:
        scope: Whether ``value`` is an organisation id or a user id
        value: The id, as a string
    """

    scope: TenantScope
    value: str

    @classmethod
    def for_organisation(cls, organisation_id: UUID) -> "TenantKey":
        return cls(TenantScope.ORGANISATION, str(organisation_id))

    @classmethod
    def for_user(cls, user_id: str) -> "TenantKey":
        return cls(TenantScope.USER, user_id)

    def require(self, scope: TenantScope) -> "TenantKey":
        """Return self if the scope matches, else raise ValueError."""
        if self.scope != scope:
            raise ValueError(f"Expected a {scope.value} tenant key, got {TenantScope(self.scope).value}")
        return self

    @property
    def organisation_id(self) -> UUID:
        return UUID(self.require(TenantScope.ORGANISATION).value)

    @property
    def user_id(self) -> str:
        return self.require(TenantScope.USER).value


@dataclass(frozen=True)
class TenantContext:
    """Caller identity plus resolved organisation, built once per request."""

    user_id: str
    organisation_id: UUID
    email: Optional[str] = None

    @property
    def organisation_key(self) -> TenantKey:
        return TenantKey.for_organisation(self.organisation_id)

    @property
    def user_key(self) -> TenantKey:
        return TenantKey.for_user(self.user_id)


async def resolve_tenant(db: AsyncSession, user_id: str) -> Optional[UUID]:
    """
    Return the organisation a user's requests are scoped to.

    The earliest membership wins; ties on creation time fall back to the
    membership id so the choice is stable.

    Args:
        db: Database session
        user_id: Authenticated user id

    Returns:
        Organisation id, or None when the user belongs to no organisation
    """
    stmt = (
        select(OrganisationMember.organisation_id)
        .where(OrganisationMember.user_id == user_id)
        .order_by(OrganisationMember.created_at.asc(), OrganisationMember.id.asc())
        .limit(1)
    )
    result = await db.execute(stmt)
    organisation_id = result.scalar_one_or_none()

    if organisation_id is None:
        logger.info(f"User {user_id} has no organisation membership")
    return organisation_id


async def is_member(db: AsyncSession, user_id: str, organisation_id: UUID) -> bool:
    """Check whether a user belongs to the given organisation."""
    stmt = select(OrganisationMember.id).where(
        OrganisationMember.user_id == user_id,
        OrganisationMember.organisation_id == organisation_id,
    )
    result = await db.execute(stmt)
    return result.first() is not None
