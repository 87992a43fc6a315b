from app.api.v1 import (
    admin,
    ads,
    billing,
    movies,
    premium_codes,
    two_factor,
    users,
)

__all__ = [
    "movies",
    "ads",
    "premium_codes",
    "users",
    "two_factor",
    "billing",
    "admin",
]
