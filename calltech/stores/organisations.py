"""
Organisation storage.

Reads and writes the caller's own organisation row, addressed by the
organisation TenantKey.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from calltech.models import Organisation
from calltech.tenancy import TenantKey

# Distinguishes "leave unchanged" from an explicit None
UNSET = object()


class OrganisationStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, tenant: TenantKey) -> Optional[Organisation]:
        result = await self.db.execute(
            select(Organisation).where(Organisation.id == tenant.organisation_id)
        )
        return result.scalar_one_or_none()

    async def update(
        self,
        tenant: TenantKey,
        name=UNSET,
        selected_voice_agent_id=UNSET,
    ) -> Optional[Organisation]:
        """
        Update the tenant's organisation.

        Returns:
            The updated organisation, or None if it doesn't exist
        """
        organisation = await self.get(tenant)
        if organisation is None:
            return None

        if name is not UNSET:
            organisation.name = name
        if selected_voice_agent_id is not UNSET:
            organisation.selected_voice_agent_id = selected_voice_agent_id

        await self.db.commit()
        await self.db.refresh(organisation)
        return organisation
