"""
Intent API routes.

Intents are owned by the caller's organisation. The tenant comes from the
session, never from the request body; any ``organisation_id`` a client
sends is ignored. Every change is pushed to the organisation's assistant.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from calltech.database import get_db
from calltech.dependencies import get_vapi_client
from calltech.integrations import VapiClient
from calltech.middleware.auth import get_tenant
from calltech.sample_data import SAMPLE_INTENTS
from calltech.stores import IntentStore
from calltech.sync import sync_intents_to_assistant
from calltech.tenancy import TenantContext

router = APIRouter(prefix="/api/intents", tags=["intents"])


# Pydantic schemas
class IntentWrite(BaseModel):
    """Schema for creating or replacing an intent."""

    intent_name: str = Field(..., min_length=1, max_length=255)
    example_user_phrases: List[str]
    english_responses: List[str]
    russian_responses: List[str] = Field(default_factory=list)


class IntentResponse(BaseModel):
    id: UUID
    organisation_id: UUID
    user_id: Optional[str] = None
    intent_name: str
    example_user_phrases: List[str]
    english_responses: List[str]
    russian_responses: List[str]
    created_at: datetime

    class Config:
        from_attributes = True


class IntentEnvelope(BaseModel):
    intent: IntentResponse


class IntentListEnvelope(BaseModel):
    intents: List[IntentResponse]


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Intent not found")


@router.get("", response_model=IntentListEnvelope)
async def list_intents(
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
):
    """List the organisation's intents, newest first."""
    intents = await IntentStore(db).list(tenant.organisation_key)
    return {"intents": intents}


@router.post("", response_model=IntentEnvelope, status_code=status.HTTP_201_CREATED)
async def create_intent(
    intent_data: IntentWrite,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
    vapi: VapiClient = Depends(get_vapi_client),
):
    """
    Create an intent for the caller's organisation.

    The row is stamped with the resolved organisation and the caller as
    author.
    """
    intent = await IntentStore(db).create(
        tenant.organisation_key,
        intent_name=intent_data.intent_name,
        example_user_phrases=intent_data.example_user_phrases,
        english_responses=intent_data.english_responses,
        russian_responses=intent_data.russian_responses,
        user_id=tenant.user_id,
    )
    await sync_intents_to_assistant(db, tenant.organisation_key, vapi)
    return {"intent": intent}


@router.post("/reset", response_model=IntentListEnvelope)
async def reset_intents(
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
    vapi: VapiClient = Depends(get_vapi_client),
):
    """Replace the organisation's intents with the starter set."""
    intents = await IntentStore(db).replace_all(
        tenant.organisation_key, SAMPLE_INTENTS, user_id=tenant.user_id
    )
    await sync_intents_to_assistant(db, tenant.organisation_key, vapi)
    return {"intents": intents}


@router.put("/{intent_id}", response_model=IntentEnvelope)
async def update_intent(
    intent_id: UUID,
    intent_data: IntentWrite,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
    vapi: VapiClient = Depends(get_vapi_client),
):
    """
    Replace an intent's content.

    Raises:
        HTTPException: 404 if the organisation owns no such intent
    """
    intent = await IntentStore(db).update(
        tenant.organisation_key,
        intent_id,
        intent_name=intent_data.intent_name,
        example_user_phrases=intent_data.example_user_phrases,
        english_responses=intent_data.english_responses,
        russian_responses=intent_data.russian_responses,
    )
    if intent is None:
        raise _not_found()

    await sync_intents_to_assistant(db, tenant.organisation_key, vapi)
    return {"intent": intent}


@router.delete("/{intent_id}")
async def delete_intent(
    intent_id: UUID,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
    vapi: VapiClient = Depends(get_vapi_client),
):
    """
    Delete an intent.

    Raises:
        HTTPException: 404 if the organisation owns no such intent
    """
    if not await IntentStore(db).delete(tenant.organisation_key, intent_id):
        raise _not_found()

    await sync_intents_to_assistant(db, tenant.organisation_key, vapi)
    return {"success": True}
