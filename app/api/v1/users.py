"""Viewer account: profile, settings record and email change."""

import logging
import uuid as uuid_pkg
from datetime import datetime

from fastapi import APIRouter
from pydantic import BaseModel, EmailStr, Field

from app.api.deps import CurrentUser, DbSession
from app.config import settings
from app.core.exceptions import ValidationError
from app.domain.entitlement_operations import entitlement_ops, is_effective_admin
from app.domain.user_operations import user_ops
from app.models.user import AccentColor, Theme, User, ViewerSettings, presentation
from app.services.email.postmark import postmark_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


class UserRead(BaseModel):
    """Viewer profile response."""

    id: uuid_pkg.UUID
    email: str | None
    first_name: str | None
    last_name: str | None
    profile_image_url: str | None
    is_admin: bool
    is_premium: bool
    premium_expires_at: datetime | None
    two_factor_enabled: bool
    pending_email: str | None
    settings: ViewerSettings
    presentation: dict[str, str]
    created_at: datetime


class ProfileUpdate(BaseModel):
    """Viewer settings update request. Omitted fields are left unchanged."""

    display_name: str | None = Field(default=None, max_length=50)
    bio: str | None = Field(default=None, max_length=500)
    theme: Theme | None = None
    accent_color: AccentColor | None = None


class EmailChangeRequest(BaseModel):
    new_email: EmailStr


class EmailChangeResponse(BaseModel):
    message: str
    token: str | None = None  # Only echoed in debug mode


class MessageResponse(BaseModel):
    message: str


def _to_read(user: User) -> UserRead:
    viewer_settings = user.settings
    return UserRead(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        profile_image_url=user.profile_image_url,
        is_admin=is_effective_admin(user),
        is_premium=user.is_premium,
        premium_expires_at=user.premium_expires_at,
        two_factor_enabled=user.two_factor_enabled,
        pending_email=user.pending_email,
        settings=viewer_settings,
        presentation=presentation(viewer_settings),
        created_at=user.created_at,
    )


@router.get("/me", response_model=UserRead)
async def get_me(
    current_user: CurrentUser,
    db: DbSession,
) -> UserRead:
    """Current viewer, with a lapsed premium flag corrected first."""
    user = await entitlement_ops.refresh(db, current_user)
    return _to_read(user)


@router.put("/me/profile", response_model=UserRead)
async def update_profile(
    data: ProfileUpdate,
    current_user: CurrentUser,
    db: DbSession,
) -> UserRead:
    user = await user_ops.update_profile(db, current_user, data.model_dump(exclude_unset=True))
    return _to_read(user)


@router.post("/me/email-change", response_model=EmailChangeResponse)
async def request_email_change(
    data: EmailChangeRequest,
    current_user: CurrentUser,
    db: DbSession,
) -> EmailChangeResponse:
    """
    Start an email change.

    A verification link valid for 24 hours goes to the new address; the
    change applies only once it is confirmed.
    """
    new_email = str(data.new_email).lower()
    try:
        token = await user_ops.initiate_email_change(db, current_user, new_email)
    except ValueError as e:
        raise ValidationError(str(e)) from None

    sent = await postmark_service.send_email_verification(new_email, token)
    if not sent:
        logger.warning(f"Verification email to {new_email} was not delivered")

    return EmailChangeResponse(
        message="Verification email sent",
        token=token if settings.debug else None,
    )


@router.post("/verify-email/{token}", response_model=MessageResponse)
async def verify_email(
    token: str,
    db: DbSession,
) -> MessageResponse:
    """Confirm a pending email change. No session needed; the token is the proof."""
    try:
        user = await user_ops.confirm_email_change(db, token)
    except ValueError as e:
        raise ValidationError(str(e)) from None
    if not user:
        raise ValidationError("Invalid or expired verification token")
    return MessageResponse(message="Email address updated")
