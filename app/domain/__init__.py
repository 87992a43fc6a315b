from app.domain.ad_view_operations import ad_view_ops
from app.domain.analytics_operations import analytics_ops
from app.domain.billing_operations import billing_ops
from app.domain.entitlement_operations import entitlement_ops
from app.domain.movie_operations import movie_ops
from app.domain.premium_code_operations import premium_code_ops
from app.domain.user_operations import user_ops

__all__ = [
    "ad_view_ops",
    "analytics_ops",
    "billing_ops",
    "entitlement_ops",
    "movie_ops",
    "premium_code_ops",
    "user_ops",
]
