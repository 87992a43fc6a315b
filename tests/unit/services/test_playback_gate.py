"""Unit tests for the playback gate state machine."""

from decimal import Decimal

import pytest

from app.config.premium import AdPolicy
from app.services.playback_gate import GateState, PlaybackGate, PlaybackGateError


class TestBegin:
    def test_premium_viewer_is_playable_immediately(self):
        gate = PlaybackGate()
        assert gate.begin(is_premium=True, ads_count=2) is GateState.PLAYABLE
        assert gate.ads_remaining == 0

    def test_free_viewer_is_ad_gated(self):
        gate = PlaybackGate()
        assert gate.begin(is_premium=False, ads_count=2) is GateState.AD_GATED
        assert gate.ads_remaining == 2

    def test_default_ad_count_comes_from_policy(self):
        gate = PlaybackGate()
        gate.begin(is_premium=False)
        assert gate.ads_remaining == 2

    def test_zero_ads_is_playable(self):
        gate = PlaybackGate()
        assert gate.begin(is_premium=False, ads_count=0) is GateState.PLAYABLE

    def test_cannot_begin_twice(self):
        gate = PlaybackGate()
        gate.begin(is_premium=False, ads_count=1)
        with pytest.raises(PlaybackGateError):
            gate.begin(is_premium=False, ads_count=1)

    def test_negative_ad_count_rejected(self):
        with pytest.raises(PlaybackGateError):
            PlaybackGate().begin(is_premium=False, ads_count=-1)


class TestAdProgress:
    def setup_method(self):
        self.gate = PlaybackGate()
        self.gate.begin(is_premium=False, ads_count=2)

    def test_each_finished_ad_counts_once(self):
        impressions = [self.gate.ad_finished(), self.gate.ad_finished()]
        assert impressions == [True, True]
        assert self.gate.state is GateState.PLAYABLE
        assert self.gate.is_playable

    def test_one_of_two_ads_keeps_gate_closed(self):
        self.gate.ad_finished()
        assert self.gate.state is GateState.AD_GATED
        assert self.gate.ads_remaining == 1

    def test_skip_before_threshold_is_refused(self):
        assert self.gate.skip(elapsed_seconds=9.9) is False
        assert self.gate.ads_remaining == 2

    def test_skip_at_threshold_counts_as_impression(self):
        assert self.gate.skip(elapsed_seconds=10.0) is True
        assert self.gate.ads_remaining == 1

    def test_mixed_skip_and_finish_unlocks_playback(self):
        self.gate.skip(elapsed_seconds=12)
        self.gate.ad_finished()
        assert self.gate.state is GateState.PLAYABLE

    def test_playable_is_terminal(self):
        self.gate.ad_finished()
        self.gate.ad_finished()
        with pytest.raises(PlaybackGateError):
            self.gate.ad_finished()
        with pytest.raises(PlaybackGateError):
            self.gate.skip(elapsed_seconds=30)

    def test_reset_returns_to_locked(self):
        self.gate.reset()
        assert self.gate.state is GateState.LOCKED
        assert self.gate.ads_remaining == 0
        assert self.gate.begin(is_premium=True) is GateState.PLAYABLE


def test_custom_policy_threshold():
    policy = AdPolicy(
        ads_per_session=1,
        revenue_per_view=Decimal("0.10"),
        ad_duration_seconds=30.0,
        skip_after_seconds=5.0,
    )
    gate = PlaybackGate(policy)
    gate.begin(is_premium=False)
    assert gate.can_skip(5.0) is True
    assert policy.skip_fraction == pytest.approx(1 / 6)
