"""
Working hours storage, one schedule per organisation.
"""

from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from calltech.models import WorkingHours
from calltech.tenancy import TenantKey


class WorkingHoursStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, tenant: TenantKey) -> Optional[WorkingHours]:
        result = await self.db.execute(
            select(WorkingHours).where(WorkingHours.organisation_id == tenant.organisation_id)
        )
        return result.scalar_one_or_none()

    async def upsert(self, tenant: TenantKey, values: dict[str, Any]) -> WorkingHours:
        """Replace the tenant's schedule with ``values``, creating it on first save."""
        schedule = await self.get(tenant)
        if schedule is None:
            schedule = WorkingHours(organisation_id=tenant.organisation_id)
            self.db.add(schedule)

        for field, value in values.items():
            setattr(schedule, field, value)

        await self.db.commit()
        await self.db.refresh(schedule)
        return schedule
