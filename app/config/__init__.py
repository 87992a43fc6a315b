"""Configuration package."""

from app.config.premium import AD_POLICY, PREMIUM_PLAN, AdPolicy, PremiumPlan
from app.config.settings import Settings, settings

__all__ = [
    "AD_POLICY",
    "AdPolicy",
    "PREMIUM_PLAN",
    "PremiumPlan",
    "Settings",
    "settings",
]
