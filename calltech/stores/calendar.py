"""
Calendar connection storage, one connection per organisation.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from calltech.models import CalendarConnection
from calltech.tenancy import TenantKey


class CalendarConnectionStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, tenant: TenantKey) -> Optional[CalendarConnection]:
        result = await self.db.execute(
            select(CalendarConnection).where(
                CalendarConnection.organisation_id == tenant.organisation_id
            )
        )
        return result.scalar_one_or_none()

    async def upsert(
        self,
        tenant: TenantKey,
        access_token: str,
        refresh_token: Optional[str],
        token_expiry: Optional[datetime],
        calendar_id: str = "primary",
    ) -> CalendarConnection:
        """
        Store fresh OAuth tokens for the tenant.

        An existing refresh token is kept when the provider doesn't send a
        new one (it only does so on first consent).
        """
        connection = await self.get(tenant)
        if connection is None:
            connection = CalendarConnection(organisation_id=tenant.organisation_id)
            self.db.add(connection)

        connection.access_token = access_token
        if refresh_token:
            connection.refresh_token = refresh_token
        connection.token_expiry = token_expiry
        connection.calendar_id = calendar_id

        await self.db.commit()
        await self.db.refresh(connection)
        return connection
