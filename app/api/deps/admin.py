"""Admin authorization dependency."""

from typing import Annotated

from fastapi import Depends, HTTPException, status

from app.api.deps.auth import get_current_user
from app.domain.entitlement_operations import is_effective_admin
from app.models.user import User


async def require_admin(
    current_user: User = Depends(get_current_user),
) -> User:
    """
    Require the current viewer to be an admin.

    Admin is the stored flag or an address listed in ADMIN_EMAILS.
    Returns the viewer if authorized, raises 403 otherwise.
    """
    if not is_effective_admin(current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return current_user


AdminUser = Annotated[User, Depends(require_admin)]
