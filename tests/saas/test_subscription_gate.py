"""
Tests for VELO SaaS - Subscription Gate and trial arithmetic
"""

from datetime import datetime, timedelta, timezone

import pytest

from core.resilience.connectivity import Connectivity
from core.saas.subscriptions import (
    REASON_SUBSCRIPTION_REQUIRED,
    REASON_SUSPENDED,
    USABLE,
    SubscriptionGate,
    SubscriptionVerdict,
    is_subscription_active,
    is_trial_expired,
    trial_days_remaining,
)
from core.tenancy.models import Tenant, TenantStatus


NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def _tenant(status=TenantStatus.ACTIVE, trial_end_at=None):
    return Tenant(
        tenant_id="t-1",
        name="Shop",
        status=status,
        trial_end_at=trial_end_at,
    )


def _trial(delta):
    return _tenant(TenantStatus.TRIAL, trial_end_at=NOW + delta)


@pytest.fixture
def gate():
    return SubscriptionGate()


class TestSubscriptionGate:
    def test_active_is_usable(self, gate):
        assert gate.evaluate(_tenant(), NOW) == USABLE

    def test_suspended_is_blocked(self, gate):
        verdict = gate.evaluate(_tenant(TenantStatus.SUSPENDED), NOW)
        assert verdict == SubscriptionVerdict(False, REASON_SUSPENDED)

    def test_expired_requires_subscription(self, gate):
        verdict = gate.evaluate(_tenant(TenantStatus.EXPIRED), NOW)
        assert verdict.reason_if_blocked == REASON_SUBSCRIPTION_REQUIRED

    def test_running_trial_is_usable(self, gate):
        assert gate.evaluate(_trial(timedelta(hours=1)), NOW).usable

    def test_trial_end_instant_is_still_usable(self, gate):
        assert gate.evaluate(_trial(timedelta(0)), NOW).usable

    def test_lapsed_trial_requires_subscription(self, gate):
        verdict = gate.evaluate(_trial(-timedelta(microseconds=1)), NOW)
        assert not verdict.usable
        assert verdict.reason_if_blocked == REASON_SUBSCRIPTION_REQUIRED

    @pytest.mark.parametrize(
        "tenant",
        [
            _tenant(TenantStatus.SUSPENDED),
            _tenant(TenantStatus.EXPIRED),
            _trial(-timedelta(days=30)),
        ],
    )
    def test_offline_is_always_usable(self, gate, tenant):
        assert gate.evaluate(tenant, NOW, Connectivity.OFFLINE) == USABLE

    def test_naive_now_rejected(self, gate):
        with pytest.raises(ValueError):
            gate.evaluate(_tenant(), datetime(2026, 3, 1, 12, 0, 0))

    def test_usable_verdict_cannot_carry_reason(self):
        with pytest.raises(ValueError):
            SubscriptionVerdict(True, REASON_SUSPENDED)

    def test_blocked_verdict_needs_known_reason(self):
        with pytest.raises(ValueError):
            SubscriptionVerdict(False, "overdue")


class TestTrialArithmetic:
    def test_expiry_is_recomputed_from_end_date(self):
        tenant = _trial(timedelta(days=1))
        assert not is_trial_expired(tenant, NOW)
        assert is_trial_expired(tenant, NOW + timedelta(days=2))

    def test_non_trial_never_expires_as_trial(self):
        assert not is_trial_expired(_tenant(TenantStatus.EXPIRED), NOW)

    @pytest.mark.parametrize(
        "delta, expected",
        [
            (timedelta(days=14), 14),
            (timedelta(days=13, hours=1), 14),
            (timedelta(seconds=1), 1),
            (timedelta(0), 0),
            (-timedelta(days=3), 0),
        ],
    )
    def test_days_remaining_rounds_up_and_floors_at_zero(self, delta, expected):
        assert trial_days_remaining(_trial(delta), NOW) == expected

    def test_days_remaining_none_outside_trial(self):
        assert trial_days_remaining(_tenant(), NOW) is None

    def test_gate_exposes_helpers(self):
        assert SubscriptionGate.trial_days_remaining(_trial(timedelta(days=2)), NOW) == 2
        assert SubscriptionGate.is_subscription_active(_tenant(), NOW)


class TestSubscriptionActive:
    def test_active(self):
        assert is_subscription_active(_tenant(), NOW)

    def test_running_trial(self):
        assert is_subscription_active(_trial(timedelta(days=1)), NOW)

    def test_lapsed_trial(self):
        assert not is_subscription_active(_trial(-timedelta(days=1)), NOW)

    @pytest.mark.parametrize("status", [TenantStatus.EXPIRED, TenantStatus.SUSPENDED])
    def test_blocked_statuses(self, status):
        assert not is_subscription_active(_tenant(status), NOW)
