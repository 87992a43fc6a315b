"""Premium and ad policy - pricing, ad gating and redemption limits."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from decimal import Decimal


@dataclass(frozen=True)
class PremiumPlan:
    """The single paid subscription offered to viewers."""

    product_name: str
    description: str
    price_amount: int  # Minor units (grosze)
    currency: str
    interval: str


@dataclass(frozen=True)
class AdPolicy:
    """How free-tier playback is gated by advertisements."""

    ads_per_session: int
    revenue_per_view: Decimal
    ad_duration_seconds: float
    skip_after_seconds: float

    @property
    def skip_fraction(self) -> float:
        """Fraction of the nominal ad duration that must elapse before skipping."""
        return self.skip_after_seconds / self.ad_duration_seconds


PREMIUM_PLAN = PremiumPlan(
    product_name="StreamHub Premium",
    description="Premium subscription for ad-free streaming and 4K quality",
    price_amount=1999,  # 19.99 PLN
    currency="pln",
    interval="month",
)

AD_POLICY = AdPolicy(
    ads_per_session=2,
    revenue_per_view=Decimal("0.15"),
    ad_duration_seconds=15.0,
    skip_after_seconds=10.0,
)

# Premium granted through the admin override never lapses in practice
OVERRIDE_PREMIUM_EXPIRY = datetime(2099, 12, 31, tzinfo=UTC)

# Fallback grant length when a paid invoice carries no billing period
PREMIUM_PERIOD_FALLBACK = timedelta(days=31)

EMAIL_VERIFICATION_TTL = timedelta(hours=24)

# Batch generation limits for premium codes
MIN_CODE_DURATION_DAYS = 1
MAX_CODES_PER_BATCH = 100
PREMIUM_CODE_LENGTH = 12

# "All" category sentinel accepted by the catalog listing
ALL_CATEGORIES = "all"
