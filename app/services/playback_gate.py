"""Playback gate - ad gating of a single viewing session.

The gate decides when the player may start. Premium viewers go straight to
playable; everyone else must get through the session's ads first, either by
letting each one finish or by skipping it once enough of it has played.

The watch endpoint opens a gate to report the session's starting state and
ad count; clients drive the rest of it. The gate is advisory: the watch
endpoint is what authoritatively refuses premium-only titles to
non-entitled viewers.
"""

import logging
from enum import Enum

from app.config.premium import AD_POLICY, AdPolicy

logger = logging.getLogger(__name__)


class GateState(str, Enum):
    LOCKED = "locked"
    AD_GATED = "ad_gated"
    PLAYABLE = "playable"


class PlaybackGateError(Exception):
    """An action that is not allowed in the gate's current state."""


class PlaybackGate:
    """
    State machine: locked -> ad_gated -> playable.

    Each ad that finishes or is skipped returns True so the caller records
    exactly one ad impression for it. Playable is terminal until reset().
    """

    def __init__(self, policy: AdPolicy = AD_POLICY) -> None:
        self.policy = policy
        self.state = GateState.LOCKED
        self.ads_remaining = 0

    @property
    def is_playable(self) -> bool:
        return self.state is GateState.PLAYABLE

    def begin(self, is_premium: bool, ads_count: int | None = None) -> GateState:
        """Start a session. Premium, or a session with no ads, is immediately playable."""
        if self.state is not GateState.LOCKED:
            raise PlaybackGateError(f"Cannot begin a session from {self.state.value}")

        count = self.policy.ads_per_session if ads_count is None else ads_count
        if count < 0:
            raise PlaybackGateError("Ad count cannot be negative")

        if is_premium or count == 0:
            self.ads_remaining = 0
            self.state = GateState.PLAYABLE
        else:
            self.ads_remaining = count
            self.state = GateState.AD_GATED
        return self.state

    def can_skip(self, elapsed_seconds: float) -> bool:
        return (
            self.state is GateState.AD_GATED
            and elapsed_seconds >= self.policy.skip_after_seconds
        )

    def ad_finished(self) -> bool:
        """The current ad played to the end."""
        if self.state is not GateState.AD_GATED:
            raise PlaybackGateError(f"No ad is playing ({self.state.value})")
        self._complete_ad()
        return True

    def skip(self, elapsed_seconds: float) -> bool:
        """
        Skip the current ad.

        Returns False and leaves the state unchanged if not enough of the ad
        has played yet.
        """
        if self.state is not GateState.AD_GATED:
            raise PlaybackGateError(f"No ad is playing ({self.state.value})")
        if not self.can_skip(elapsed_seconds):
            return False
        self._complete_ad()
        return True

    def reset(self) -> None:
        self.state = GateState.LOCKED
        self.ads_remaining = 0

    def _complete_ad(self) -> None:
        self.ads_remaining -= 1
        if self.ads_remaining <= 0:
            self.ads_remaining = 0
            self.state = GateState.PLAYABLE
            logger.debug("Ads complete, playback unlocked")
