from app.models.ad_view import AdView
from app.models.billing import BillingEvent, BillingEventType
from app.models.movie import Movie, MovieCreate, MovieRead, MovieUpdate
from app.models.premium_code import PremiumCode
from app.models.user import AccentColor, Theme, User, ViewerSettings

__all__ = [
    "User",
    "ViewerSettings",
    "Theme",
    "AccentColor",
    "Movie",
    "MovieCreate",
    "MovieRead",
    "MovieUpdate",
    "PremiumCode",
    "AdView",
    "BillingEvent",
    "BillingEventType",
]
