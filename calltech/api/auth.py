"""
Authentication API routes.

Provides endpoints for:
- Signup (user, organisation and owner membership in one transaction)
- Login (sets the session cookie)
- Logout (clears the session cookie)
- The current identity and its organisation
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from calltech.config.settings import Settings, get_settings
from calltech.database import get_db
from calltech.middleware.auth import get_current_identity
from calltech.middleware.session import SessionIdentity, SessionResolver
from calltech.models import Organisation, OrganisationMember, User
from calltech.security import create_session_token, hash_password, verify_password
from calltech.tenancy import resolve_tenant

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["authentication"])

DEFAULT_ORGANISATION_NAME = "My Organisation"


# Pydantic schemas
class SignupRequest(BaseModel):
    """Schema for signup request."""

    email: EmailStr
    password: str = Field(..., min_length=8)
    full_name: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    organisation_name: Optional[str] = Field(None, max_length=255)


class LoginRequest(BaseModel):
    """Schema for login request."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class UserResponse(BaseModel):
    id: str
    email: str
    full_name: str
    trial_ends_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SessionResponse(BaseModel):
    user: UserResponse
    organisation_id: Optional[UUID] = None


def _email_taken() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail="An account with this email already exists",
    )


def _start_session(response: Response, user: User, settings: Settings) -> None:
    token = create_session_token(user_id=user.id, email=user.email, settings=settings)
    SessionResolver(settings).set_cookie(response, token)


@router.post("/signup", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    signup_data: SignupRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Create an account.

    The user, their organisation and the owner membership are committed
    together, so a user never exists without a tenant.

    Raises:
        HTTPException: 409 if the email is already registered
    """
    email = signup_data.email.lower()
    result = await db.execute(select(User.id).where(User.email == email))
    if result.first() is not None:
        raise _email_taken()

    now = datetime.now(timezone.utc)
    user = User(
        email=email,
        hashed_password=hash_password(signup_data.password),
        full_name=(signup_data.full_name or "").strip() or "User",
        phone=signup_data.phone,
        trial_ends_at=now + timedelta(days=settings.trial_days),
        last_login_at=now,
    )
    organisation = Organisation(
        name=(signup_data.organisation_name or "").strip() or DEFAULT_ORGANISATION_NAME,
    )
    db.add_all([user, organisation])
    try:
        await db.flush()
        db.add(OrganisationMember(organisation_id=organisation.id, user_id=user.id, role="owner"))
        await db.commit()
    except IntegrityError:
        # A concurrent signup claimed the email after the check above
        await db.rollback()
        logger.info(f"Signup lost race for email {email}")
        raise _email_taken()

    logger.info(f"New signup {user.id} with organisation {organisation.id}")

    _start_session(response, user, settings)
    return SessionResponse(user=UserResponse.model_validate(user), organisation_id=organisation.id)


@router.post("/login", response_model=SessionResponse)
async def login(
    login_data: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Authenticate with email and password and start a cookie session.

    Raises:
        HTTPException: 401 on bad credentials, 403 for disabled accounts
    """
    result = await db.execute(select(User).where(User.email == login_data.email.lower()))
    user = result.scalar_one_or_none()

    if not user or not verify_password(login_data.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is disabled")

    user.last_login_at = datetime.now(timezone.utc)
    await db.commit()

    _start_session(response, user, settings)
    organisation_id = await resolve_tenant(db, user.id)
    return SessionResponse(user=UserResponse.model_validate(user), organisation_id=organisation_id)


@router.post("/logout")
async def logout(response: Response, settings: Settings = Depends(get_settings)):
    """End the session by clearing its cookie."""
    SessionResolver(settings).delete_cookie(response)
    return {"success": True}


@router.get("/me", response_model=SessionResponse)
async def me(
    identity: SessionIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """
    Current user and the organisation their requests are scoped to.

    Raises:
        HTTPException: 401 if the session's user no longer exists
    """
    user = await db.get(User, identity.user_id)
    if user is None or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    organisation_id = await resolve_tenant(db, user.id)
    return SessionResponse(user=UserResponse.model_validate(user), organisation_id=organisation_id)
