"""
Organisation API routes.

The caller's own organisation is addressed implicitly (``/api/organisation``);
addressing one by id requires membership.
"""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from calltech.database import get_db
from calltech.dependencies import get_vapi_client
from calltech.integrations import VapiClient
from calltech.middleware.auth import get_tenant, require_org_access
from calltech.middleware.session import SessionIdentity
from calltech.models import Organisation
from calltech.stores import OrganisationStore
from calltech.stores.organisations import UNSET
from calltech.sync import bind_phone_numbers, sync_intents_to_assistant
from calltech.tenancy import TenantContext

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["organisations"])


# Pydantic schemas
class OrganisationUpdate(BaseModel):
    """
    Schema for updating the current organisation.

    An empty ``selected_voice_agent_id`` clears the selection.
    """

    name: Optional[str] = Field(None, max_length=255)
    selected_voice_agent_id: Optional[str] = Field(None, max_length=255)


class OrganisationResponse(BaseModel):
    id: UUID
    name: str
    selected_voice_agent_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class OrganisationEnvelope(BaseModel):
    organisation: OrganisationResponse


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Organisation not found")


@router.get("/organisation", response_model=OrganisationEnvelope)
async def get_current_organisation(
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
):
    organisation = await OrganisationStore(db).get(tenant.organisation_key)
    if organisation is None:
        raise _not_found()
    return {"organisation": organisation}


@router.patch("/organisation", response_model=OrganisationEnvelope)
async def update_current_organisation(
    update_data: OrganisationUpdate,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
    vapi: VapiClient = Depends(get_vapi_client),
):
    """
    Rename the organisation and/or select its assistant.

    Selecting an assistant points all of the organisation's phone numbers at
    it and rewrites its prompt from the organisation's intents.

    Raises:
        HTTPException: 400 if nothing updatable was sent
    """
    fields = update_data.model_dump(exclude_unset=True)

    name = UNSET
    if isinstance(fields.get("name"), str) and fields["name"].strip():
        name = fields["name"].strip()

    assistant_id = UNSET
    if "selected_voice_agent_id" in fields:
        assistant_id = fields["selected_voice_agent_id"] or None

    if name is UNSET and assistant_id is UNSET:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No valid fields to update")

    key = tenant.organisation_key
    organisation = await OrganisationStore(db).update(key, name=name, selected_voice_agent_id=assistant_id)
    if organisation is None:
        raise _not_found()

    if assistant_id is not UNSET:
        logger.info(f"Organisation {key.value} selected assistant {assistant_id}")
        await bind_phone_numbers(db, key, vapi, assistant_id)
        await sync_intents_to_assistant(db, key, vapi)

    return {"organisation": organisation}


@router.get("/organisations/{organisation_id}", response_model=OrganisationEnvelope)
async def get_organisation(
    organisation_id: UUID,
    identity: SessionIdentity = Depends(require_org_access),
    db: AsyncSession = Depends(get_db),
):
    """
    Get an organisation the caller belongs to.

    Non-members get 403 whether or not the organisation exists.
    """
    result = await db.execute(select(Organisation).where(Organisation.id == organisation_id))
    organisation = result.scalar_one_or_none()
    if organisation is None:
        raise _not_found()
    return {"organisation": organisation}
