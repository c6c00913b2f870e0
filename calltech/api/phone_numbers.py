"""
Phone number API routes.

Numbers are provisioned on the voice platform; the dashboard records them
per organisation and keeps each one pointed at the selected assistant.
"""

import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.ext.asyncio import AsyncSession

from calltech.database import get_db
from calltech.dependencies import get_vapi_client
from calltech.integrations import VapiClient
from calltech.middleware.auth import get_tenant
from calltech.stores import OrganisationStore, PhoneNumberStore
from calltech.tenancy import TenantContext

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/phone-numbers", tags=["phone-numbers"])

E164_PATTERN = r"^\+[1-9]\d{6,14}$"


# Pydantic schemas
class PhoneNumberCreate(BaseModel):
    """Schema for registering a number already provisioned on the platform."""

    phone_number: str = Field(..., pattern=E164_PATTERN)
    vapi_phone_number_id: Optional[str] = Field(None, max_length=255)
    label: Optional[str] = Field(None, max_length=255)

    @field_validator("phone_number", mode="before")
    @classmethod
    def strip_spaces(cls, value):
        if isinstance(value, str):
            return "".join(value.split())
        return value


class PhoneNumberResponse(BaseModel):
    id: UUID
    phone_number: str
    vapi_phone_number_id: Optional[str] = None
    label: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class PhoneNumberEnvelope(BaseModel):
    phoneNumber: PhoneNumberResponse


class PhoneNumberListEnvelope(BaseModel):
    phoneNumbers: List[PhoneNumberResponse]


@router.get("", response_model=PhoneNumberListEnvelope)
async def list_phone_numbers(
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
):
    numbers = await PhoneNumberStore(db).list(tenant.organisation_key)
    return {"phoneNumbers": numbers}


@router.post("", response_model=PhoneNumberEnvelope, status_code=status.HTTP_201_CREATED)
async def create_phone_number(
    number_data: PhoneNumberCreate,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
    vapi: VapiClient = Depends(get_vapi_client),
):
    """
    Register a phone number for the organisation.

    A platform-backed number is bound to the currently selected assistant;
    a failed binding is logged and the number is still recorded.
    """
    key = tenant.organisation_key
    record = await PhoneNumberStore(db).create(
        key,
        phone_number=number_data.phone_number,
        vapi_phone_number_id=number_data.vapi_phone_number_id,
        label=number_data.label,
    )

    organisation = await OrganisationStore(db).get(key)
    assistant_id = organisation.selected_voice_agent_id if organisation else None
    if record.vapi_phone_number_id and assistant_id:
        if not await vapi.set_phone_number_assistant(record.vapi_phone_number_id, assistant_id):
            logger.warning(f"Phone number {record.id} registered but not bound to {assistant_id}")

    return {"phoneNumber": record}


@router.delete("/{phone_number_id}")
async def delete_phone_number(
    phone_number_id: UUID,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
    vapi: VapiClient = Depends(get_vapi_client),
):
    """
    Remove a phone number and unbind it from the assistant.

    Raises:
        HTTPException: 404 if the organisation owns no such number
    """
    record = await PhoneNumberStore(db).delete(tenant.organisation_key, phone_number_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Phone number not found")

    if record.vapi_phone_number_id:
        await vapi.set_phone_number_assistant(record.vapi_phone_number_id, None)

    return {"success": True}
