"""
Intent storage.

Every method takes the caller's organisation TenantKey first. Reads and
deletes filter on it, inserts stamp it; no tenant value from a request
payload ever reaches a row.
"""

import logging
from typing import Iterable, Optional, Sequence
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from calltech.models import Intent
from calltech.tenancy import TenantKey

logger = logging.getLogger(__name__)


class IntentStore:
    """Organisation-scoped access to the intents table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list(self, tenant: TenantKey) -> Sequence[Intent]:
        """List a tenant's intents, newest first."""
        stmt = (
            select(Intent)
            .where(Intent.organisation_id == tenant.organisation_id)
            .order_by(Intent.created_at.desc(), Intent.id.desc())
        )
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def list_for_assistant(self, tenant: TenantKey) -> Sequence[Intent]:
        """
        List a tenant's intents in definition order.

        The assistant prompt keeps this order, so earlier intents take
        precedence when phrases overlap.
        """
        stmt = (
            select(Intent)
            .where(Intent.organisation_id == tenant.organisation_id)
            .order_by(Intent.created_at.asc(), Intent.id.asc())
        )
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def count(self, tenant: TenantKey) -> int:
        stmt = select(func.count(Intent.id)).where(Intent.organisation_id == tenant.organisation_id)
        result = await self.db.execute(stmt)
        return result.scalar_one()

    async def get(self, tenant: TenantKey, intent_id: UUID) -> Optional[Intent]:
        stmt = select(Intent).where(
            Intent.id == intent_id,
            Intent.organisation_id == tenant.organisation_id,
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    def _build(
        self,
        tenant: TenantKey,
        intent_name: str,
        example_user_phrases: Iterable[str],
        english_responses: Iterable[str],
        russian_responses: Optional[Iterable[str]] = None,
        user_id: Optional[str] = None,
    ) -> Intent:
        return Intent(
            organisation_id=tenant.organisation_id,
            user_id=user_id,
            intent_name=intent_name,
            example_user_phrases=list(example_user_phrases),
            english_responses=list(english_responses),
            russian_responses=list(russian_responses or []),
        )

    async def create(
        self,
        tenant: TenantKey,
        intent_name: str,
        example_user_phrases: Iterable[str],
        english_responses: Iterable[str],
        russian_responses: Optional[Iterable[str]] = None,
        user_id: Optional[str] = None,
    ) -> Intent:
        """Insert an intent owned by the tenant."""
        intent = self._build(
            tenant,
            intent_name,
            example_user_phrases,
            english_responses,
            russian_responses,
            user_id=user_id,
        )
        self.db.add(intent)
        await self.db.commit()
        await self.db.refresh(intent)

        logger.info(f"Created intent {intent.id} for organisation {tenant.value}")
        return intent

    async def update(
        self,
        tenant: TenantKey,
        intent_id: UUID,
        intent_name: str,
        example_user_phrases: Iterable[str],
        english_responses: Iterable[str],
        russian_responses: Optional[Iterable[str]] = None,
    ) -> Optional[Intent]:
        """
        Replace an intent's content.

        Returns:
            The updated intent, or None if the tenant owns no such intent
        """
        intent = await self.get(tenant, intent_id)
        if intent is None:
            return None

        intent.intent_name = intent_name
        intent.example_user_phrases = list(example_user_phrases)
        intent.english_responses = list(english_responses)
        intent.russian_responses = list(russian_responses or [])

        await self.db.commit()
        await self.db.refresh(intent)
        return intent

    async def delete(self, tenant: TenantKey, intent_id: UUID) -> bool:
        """
        Delete one of the tenant's intents.

        Returns:
            True if a row was deleted
        """
        stmt = delete(Intent).where(
            Intent.id == intent_id,
            Intent.organisation_id == tenant.organisation_id,
        )
        result = await self.db.execute(stmt)
        await self.db.commit()
        return result.rowcount > 0

    async def replace_all(
        self,
        tenant: TenantKey,
        rows: Sequence[dict],
        user_id: Optional[str] = None,
    ) -> Sequence[Intent]:
        """
        Replace all of a tenant's intents in one transaction.

        If the insert fails the delete is rolled back, so the tenant never
        ends up with an empty intent list.

        Args:
            tenant: Organisation key
            rows: Dicts with intent_name, example_user_phrases,
                english_responses and optionally russian_responses
            user_id: Author recorded on the new rows
        """
        try:
            await self.db.execute(
                delete(Intent).where(Intent.organisation_id == tenant.organisation_id)
            )
            intents = [
                self._build(
                    tenant,
                    row["intent_name"],
                    row["example_user_phrases"],
                    row["english_responses"],
                    row.get("russian_responses"),
                    user_id=user_id,
                )
                for row in rows
            ]
            self.db.add_all(intents)
            await self.db.flush()
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            logger.error(f"Intent reset failed for organisation {tenant.value}; rolled back")
            raise

        logger.info(f"Replaced intents for organisation {tenant.value} ({len(intents)} rows)")
        return await self.list(tenant)
