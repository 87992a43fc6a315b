import uuid as uuid_pkg
from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Text, func
from sqlmodel import Field, SQLModel

from app.models.base import utcnow


class Theme(str, Enum):
    DARK = "dark"
    LIGHT = "light"
    BLUE = "blue"
    PURPLE = "purple"
    RED = "red"


class AccentColor(str, Enum):
    BLUE = "blue"
    PURPLE = "purple"
    RED = "red"
    GREEN = "green"
    YELLOW = "yellow"


class User(SQLModel, table=True):
    """
    Viewer account - mirrors the identity provider's user.

    The id comes from Supabase Auth. Records are created on the first
    authenticated API call and are never hard-deleted.

    Premium state is a flag plus an optional expiry. A set flag with an
    expiry in the past is stale and is corrected the next time the
    entitlement is read (see entitlement_operations).
    """

    __tablename__ = "users"

    id: uuid_pkg.UUID = Field(
        primary_key=True,
        index=True,
        nullable=False,
        description="UUID from Supabase auth.users",
    )
    email: str | None = Field(default=None, max_length=255, unique=True, index=True)
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    profile_image_url: str | None = Field(default=None, max_length=500)

    # Admin flag - once granted, never revoked by the application
    is_admin: bool = Field(default=False, nullable=False)

    # Entitlement
    is_premium: bool = Field(default=False, nullable=False)
    premium_expires_at: datetime | None = Field(  # type: ignore[call-overload]
        default=None,
        sa_type=DateTime(timezone=True),
        description="Null means the entitlement never lapses",
    )

    # Stripe references
    stripe_customer_id: str | None = Field(default=None, max_length=255, index=True)
    stripe_subscription_id: str | None = Field(default=None, max_length=255)

    # Two-factor authentication
    two_factor_secret: str | None = Field(default=None, max_length=64)
    two_factor_enabled: bool = Field(default=False, nullable=False)

    # Viewer settings record
    display_name: str | None = Field(default=None, max_length=50)
    bio: str | None = Field(default=None, sa_type=Text)  # type: ignore[call-overload]
    theme: str = Field(default=Theme.DARK.value, max_length=20)
    accent_color: str = Field(default=AccentColor.BLUE.value, max_length=20)

    # Pending email change
    pending_email: str | None = Field(default=None, max_length=255)
    email_verification_token: str | None = Field(default=None, max_length=64, index=True)
    email_verification_expires: datetime | None = Field(  # type: ignore[call-overload]
        default=None,
        sa_type=DateTime(timezone=True),
    )

    created_at: datetime = Field(  # type: ignore[call-overload]
        default_factory=utcnow,
        nullable=False,
        sa_type=DateTime(timezone=True),
        sa_column_kwargs={"server_default": func.now()},
    )
    updated_at: datetime | None = Field(  # type: ignore[call-overload]
        default=None,
        sa_type=DateTime(timezone=True),
        sa_column_kwargs={"onupdate": func.now()},
    )

    @property
    def settings(self) -> "ViewerSettings":
        return ViewerSettings(
            display_name=self.display_name,
            bio=self.bio,
            theme=Theme(self.theme),
            accent_color=AccentColor(self.accent_color),
        )


class ViewerSettings(SQLModel):
    """Per-viewer presentation preferences, loaded once per session."""

    display_name: str | None = None
    bio: str | None = None
    theme: Theme = Theme.DARK
    accent_color: AccentColor = AccentColor.BLUE


# Theme tokens consumed by the UI. Kept server-side so clients render from
# the settings record instead of ambient local storage.
_THEME_PALETTES: dict[Theme, dict[str, str]] = {
    Theme.DARK: {"background": "#0b0b0f", "foreground": "#f5f5f5", "mode": "dark"},
    Theme.LIGHT: {"background": "#ffffff", "foreground": "#111111", "mode": "light"},
    Theme.BLUE: {"background": "#0a1a33", "foreground": "#e6f0ff", "mode": "dark"},
    Theme.PURPLE: {"background": "#1a0d2e", "foreground": "#f1e9ff", "mode": "dark"},
    Theme.RED: {"background": "#2a0a0a", "foreground": "#ffecec", "mode": "dark"},
}

_ACCENTS: dict[AccentColor, str] = {
    AccentColor.BLUE: "#3b82f6",
    AccentColor.PURPLE: "#8b5cf6",
    AccentColor.RED: "#ef4444",
    AccentColor.GREEN: "#22c55e",
    AccentColor.YELLOW: "#eab308",
}


def presentation(settings: ViewerSettings) -> dict[str, str]:
    """Resolve a settings record into theme tokens."""
    palette = _THEME_PALETTES[settings.theme]
    return {**palette, "accent": _ACCENTS[settings.accent_color]}
