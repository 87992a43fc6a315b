"""Security utilities for token and code generation."""

import secrets
import string

from app.config.premium import PREMIUM_CODE_LENGTH

_CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_verification_token() -> str:
    """Generate a URL-safe token for email-change verification links.

    Returns a 43-character URL-safe string with 256 bits of entropy.
    """
    return secrets.token_urlsafe(32)


def generate_premium_code(length: int = PREMIUM_CODE_LENGTH) -> str:
    """Generate a short uppercase alphanumeric redemption code."""
    return "".join(secrets.choice(_CODE_ALPHABET) for _ in range(length))


def codes_match(presented: str, reserved: str) -> bool:
    """Case-insensitive constant-time comparison for reserved codes."""
    if not presented or not reserved:
        return False
    return secrets.compare_digest(presented.strip().upper(), reserved.strip().upper())
