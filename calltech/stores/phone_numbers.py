"""
Phone number storage, scoped by organisation.
"""

from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from calltech.models import PhoneNumber
from calltech.tenancy import TenantKey


class PhoneNumberStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list(self, tenant: TenantKey) -> Sequence[PhoneNumber]:
        """List a tenant's phone numbers, newest first."""
        stmt = (
            select(PhoneNumber)
            .where(PhoneNumber.organisation_id == tenant.organisation_id)
            .order_by(PhoneNumber.created_at.desc(), PhoneNumber.id.desc())
        )
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def count(self, tenant: TenantKey) -> int:
        stmt = select(func.count(PhoneNumber.id)).where(
            PhoneNumber.organisation_id == tenant.organisation_id
        )
        result = await self.db.execute(stmt)
        return result.scalar_one()

    async def vapi_ids(self, tenant: TenantKey) -> Sequence[str]:
        """Voice-platform ids of the tenant's registered numbers."""
        stmt = select(PhoneNumber.vapi_phone_number_id).where(
            PhoneNumber.organisation_id == tenant.organisation_id,
            PhoneNumber.vapi_phone_number_id.is_not(None),
        )
        result = await self.db.execute(stmt)
        return [vapi_id for vapi_id in result.scalars().all() if vapi_id]

    async def create(
        self,
        tenant: TenantKey,
        phone_number: str,
        vapi_phone_number_id: Optional[str] = None,
        label: Optional[str] = None,
    ) -> PhoneNumber:
        record = PhoneNumber(
            organisation_id=tenant.organisation_id,
            phone_number=phone_number,
            vapi_phone_number_id=vapi_phone_number_id,
            label=label,
        )
        self.db.add(record)
        await self.db.commit()
        await self.db.refresh(record)
        return record

    async def delete(self, tenant: TenantKey, phone_number_id: UUID) -> Optional[PhoneNumber]:
        """
        Delete one of the tenant's numbers.

        Returns:
            The deleted row, or None if the tenant owns no such number
        """
        stmt = select(PhoneNumber).where(
            PhoneNumber.id == phone_number_id,
            PhoneNumber.organisation_id == tenant.organisation_id,
        )
        result = await self.db.execute(stmt)
        record = result.scalar_one_or_none()
        if record is None:
            return None

        await self.db.delete(record)
        await self.db.commit()
        return record
