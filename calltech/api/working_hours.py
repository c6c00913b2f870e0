"""
Working hours API routes.

Each organisation has at most one weekly schedule. Saving replaces the
whole schedule; fields left out fall back to their defaults.
"""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.ext.asyncio import AsyncSession

from calltech.database import get_db
from calltech.middleware.auth import get_tenant
from calltech.models.working_hours import DEFAULT_OUTSIDE_HOURS_MESSAGE, DEFAULT_TIMEZONE, WEEKDAYS
from calltech.stores import WorkingHoursStore
from calltech.tenancy import TenantContext

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/working-hours", tags=["working-hours"])

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class WorkingHoursBase(BaseModel):
    is_enabled: bool = False
    timezone: str = Field(DEFAULT_TIMEZONE, min_length=1, max_length=64)

    monday_enabled: bool = False
    monday_start_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    monday_end_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    tuesday_enabled: bool = False
    tuesday_start_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    tuesday_end_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    wednesday_enabled: bool = False
    wednesday_start_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    wednesday_end_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    thursday_enabled: bool = False
    thursday_start_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    thursday_end_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    friday_enabled: bool = False
    friday_start_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    friday_end_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    saturday_enabled: bool = False
    saturday_start_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    saturday_end_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    sunday_enabled: bool = False
    sunday_start_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    sunday_end_time: Optional[str] = Field(None, pattern=TIME_PATTERN)

    outside_hours_message: str = DEFAULT_OUTSIDE_HOURS_MESSAGE


class WorkingHoursWrite(WorkingHoursBase):
    """Schema for saving a schedule. Blank times and messages count as unset."""

    @field_validator("*", mode="before")
    @classmethod
    def blank_is_unset(cls, value, info):
        if isinstance(value, str) and not value.strip():
            if info.field_name == "outside_hours_message":
                return DEFAULT_OUTSIDE_HOURS_MESSAGE
            if info.field_name == "timezone":
                return DEFAULT_TIMEZONE
            return None
        return value


class WorkingHoursResponse(WorkingHoursBase):
    id: UUID
    organisation_id: UUID
    updated_at: datetime

    class Config:
        from_attributes = True


def schedule_errors(schedule: WorkingHoursWrite) -> list[str]:
    """Open days need both times, with the start before the end."""
    errors = []
    for day in WEEKDAYS:
        if not getattr(schedule, f"{day}_enabled"):
            continue
        start = getattr(schedule, f"{day}_start_time")
        end = getattr(schedule, f"{day}_end_time")
        if start is None or end is None:
            errors.append(f"{day}: start and end times are required")
        elif start >= end:
            errors.append(f"{day}: start time must be before end time")
    return errors


@router.get("")
async def get_working_hours(
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
):
    schedule = await WorkingHoursStore(db).get(tenant.organisation_key)
    if schedule is None:
        return {"workingHours": None, "message": "No working hours configured"}
    return {"workingHours": WorkingHoursResponse.model_validate(schedule)}


@router.post("")
async def save_working_hours(
    schedule: WorkingHoursWrite,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
):
    """
    Create or replace the organisation's schedule.

    Raises:
        HTTPException: 400 if an open day has missing or inverted times
    """
    errors = schedule_errors(schedule)
    if errors:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="; ".join(errors))

    saved = await WorkingHoursStore(db).upsert(tenant.organisation_key, schedule.model_dump())
    logger.info(f"Saved working hours for organisation {tenant.organisation_id}")
    return {
        "message": "Working hours saved successfully",
        "workingHours": WorkingHoursResponse.model_validate(saved),
    }
