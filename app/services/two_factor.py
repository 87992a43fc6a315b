"""Two-factor authentication - TOTP secrets, provisioning QR codes, verification."""

import base64
import io
from dataclasses import dataclass

import pyotp
import qrcode

from app.config import settings

# Accept codes from two steps either side of now to absorb clock drift
VERIFY_WINDOW = 2
TOKEN_DIGITS = 6


@dataclass
class TwoFactorEnrollment:
    """Material shown to the viewer while enrolling an authenticator app."""

    secret: str
    otpauth_url: str
    qr_code: str  # PNG data URL


def generate_secret() -> str:
    return pyotp.random_base32()


def provisioning_uri(secret: str, account_name: str) -> str:
    return pyotp.TOTP(secret, digits=TOKEN_DIGITS).provisioning_uri(
        name=account_name,
        issuer_name=settings.two_factor_issuer,
    )


def qr_data_url(text: str) -> str:
    """Render text as a QR code and return it as a PNG data URL."""
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=4,
    )
    qr.add_data(text)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:image/png;base64,{encoded}"


def enroll(account_name: str) -> TwoFactorEnrollment:
    """Create a fresh secret with its provisioning URI and QR image."""
    secret = generate_secret()
    url = provisioning_uri(secret, account_name)
    return TwoFactorEnrollment(secret=secret, otpauth_url=url, qr_code=qr_data_url(url))


def verify(secret: str | None, token: str | None) -> bool:
    """Check a 6-digit code against the secret."""
    if not secret or not token:
        return False
    token = token.strip().replace(" ", "")
    if len(token) != TOKEN_DIGITS or not token.isdigit():
        return False
    return pyotp.TOTP(secret, digits=TOKEN_DIGITS).verify(token, valid_window=VERIFY_WINDOW)
