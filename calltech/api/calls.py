"""
Call history API routes.

Only calls placed through the caller's own platform-backed phone numbers
are fetched; numbers without a platform id have no history.
"""

import logging
from dataclasses import asdict
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from calltech.calls import CallLog, call_log_from_vapi, newest_first, summarize_calls, time_range_start
from calltech.database import get_db
from calltech.dependencies import get_vapi_client
from calltech.integrations import VapiClient
from calltech.middleware.auth import get_tenant
from calltech.stores import PhoneNumberStore
from calltech.tenancy import TenantContext, TenantKey

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["calls"])


async def collect_call_logs(db: AsyncSession, tenant: TenantKey, vapi: VapiClient) -> list[CallLog]:
    """Newest-first call logs across the organisation's phone numbers."""
    logs = {}
    for number in await PhoneNumberStore(db).list(tenant):
        if not number.vapi_phone_number_id:
            continue
        for call in await vapi.list_calls(number.vapi_phone_number_id):
            logs[call.id] = call_log_from_vapi(call, number.phone_number)
    return newest_first(logs.values())


@router.get("/call-logs", response_model=List[CallLog])
async def list_call_logs(
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
    vapi: VapiClient = Depends(get_vapi_client),
):
    """
    Recent calls, newest first.

    An unavailable platform yields an empty list rather than an error.
    """
    return await collect_call_logs(db, tenant.organisation_key, vapi)


@router.get("/analytics")
async def get_call_analytics(
    timeRange: Optional[str] = None,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
    vapi: VapiClient = Depends(get_vapi_client),
):
    """Call totals, success rate and average duration over a recent window."""
    since = time_range_start(timeRange)
    logs = [
        log for log in await collect_call_logs(db, tenant.organisation_key, vapi)
        if log.createdAt >= since
    ]
    logger.debug(f"Analytics over {len(logs)} calls for organisation {tenant.organisation_id}")
    return asdict(summarize_calls(logs))
