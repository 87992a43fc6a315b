"""Premium code redemption."""

import logging
from datetime import datetime

from fastapi import APIRouter
from pydantic import BaseModel, Field

from app.api.deps import CurrentUser, DbSession
from app.core.exceptions import ValidationError
from app.core.rate_limit import REDEEM_LIMIT, rate_limiter
from app.domain.entitlement_operations import is_effective_admin
from app.domain.premium_code_operations import premium_code_ops

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/premium-codes", tags=["premium"])


class RedeemRequest(BaseModel):
    code: str = Field(min_length=1, max_length=64)


class RedeemResponse(BaseModel):
    message: str
    is_premium: bool
    is_admin: bool
    premium_expires_at: datetime | None


@router.post("/redeem", response_model=RedeemResponse)
async def redeem_code(
    data: RedeemRequest,
    current_user: CurrentUser,
    db: DbSession,
) -> RedeemResponse:
    """Redeem a premium code for the current viewer."""
    rate_limiter.check_rate_limit(current_user.id, "redeem", REDEEM_LIMIT)

    try:
        result = await premium_code_ops.redeem(db, data.code, current_user)
    except ValueError as e:
        raise ValidationError(str(e)) from None

    message = (
        "Admin access and premium granted"
        if result.is_override
        else "Premium activated"
    )
    return RedeemResponse(
        message=message,
        is_premium=current_user.is_premium,
        is_admin=is_effective_admin(current_user),
        premium_expires_at=result.expires_at,
    )
