"""Two-factor authentication enrollment and removal."""

import logging

from fastapi import APIRouter
from pydantic import BaseModel, Field

from app.api.deps import CurrentUser, DbSession
from app.core.exceptions import ValidationError
from app.core.rate_limit import TWO_FACTOR_LIMIT, rate_limiter
from app.domain.user_operations import user_ops
from app.services import two_factor

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth/2fa", tags=["two-factor"])


class TwoFactorSetupResponse(BaseModel):
    secret: str
    otpauth_url: str
    qr_code: str


class TwoFactorTokenRequest(BaseModel):
    token: str = Field(min_length=6, max_length=8)


class TwoFactorStatusResponse(BaseModel):
    message: str
    two_factor_enabled: bool


@router.post("/setup", response_model=TwoFactorSetupResponse)
async def setup_two_factor(
    current_user: CurrentUser,
    db: DbSession,
) -> TwoFactorSetupResponse:
    """
    Issue a new secret. Two-factor stays disabled until a code is verified.
    """
    if current_user.two_factor_enabled:
        raise ValidationError("Two-factor authentication is already enabled")

    enrollment = two_factor.enroll(current_user.email or str(current_user.id))
    await user_ops.set_two_factor(db, current_user, enrollment.secret, enabled=False)

    return TwoFactorSetupResponse(
        secret=enrollment.secret,
        otpauth_url=enrollment.otpauth_url,
        qr_code=enrollment.qr_code,
    )


@router.post("/verify", response_model=TwoFactorStatusResponse)
async def verify_two_factor(
    data: TwoFactorTokenRequest,
    current_user: CurrentUser,
    db: DbSession,
) -> TwoFactorStatusResponse:
    rate_limiter.check_rate_limit(current_user.id, "2fa", TWO_FACTOR_LIMIT)

    if not current_user.two_factor_secret:
        raise ValidationError("Two-factor authentication is not set up")
    if not two_factor.verify(current_user.two_factor_secret, data.token):
        raise ValidationError("Invalid verification code")

    await user_ops.set_two_factor(db, current_user, current_user.two_factor_secret, enabled=True)
    logger.info(f"Two-factor enabled for viewer {current_user.id}")
    return TwoFactorStatusResponse(
        message="Two-factor authentication enabled",
        two_factor_enabled=True,
    )


@router.post("/disable", response_model=TwoFactorStatusResponse)
async def disable_two_factor(
    data: TwoFactorTokenRequest,
    current_user: CurrentUser,
    db: DbSession,
) -> TwoFactorStatusResponse:
    rate_limiter.check_rate_limit(current_user.id, "2fa", TWO_FACTOR_LIMIT)

    if not current_user.two_factor_enabled:
        raise ValidationError("Two-factor authentication is not enabled")
    if not two_factor.verify(current_user.two_factor_secret, data.token):
        raise ValidationError("Invalid verification code")

    await user_ops.set_two_factor(db, current_user, None, enabled=False)
    logger.info(f"Two-factor disabled for viewer {current_user.id}")
    return TwoFactorStatusResponse(
        message="Two-factor authentication disabled",
        two_factor_enabled=False,
    )
