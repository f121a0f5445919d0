"""
VELO SaaS - Subscription Gate
=============================
Decides whether a tenant's billing state permits use of the product.

Evaluation order:
  1. OFFLINE               -> usable (cached tenant data is trusted)
  2. SUSPENDED             -> blocked "suspended"
  3. EXPIRED, or TRIAL past trial_end_at -> blocked "subscription_required"
  4. otherwise             -> usable

Trial expiry is always recomputed from trial_end_at against the
injected now, never read from a stored flag.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from core.resilience.connectivity import Connectivity
from core.tenancy.models import Tenant, TenantStatus

REASON_SUSPENDED = "suspended"
REASON_SUBSCRIPTION_REQUIRED = "subscription_required"

BLOCK_REASONS = frozenset({REASON_SUSPENDED, REASON_SUBSCRIPTION_REQUIRED})

_SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True)
class SubscriptionVerdict:
    usable: bool
    reason_if_blocked: Optional[str] = None

    def __post_init__(self):
        if self.usable and self.reason_if_blocked is not None:
            raise ValueError("a usable verdict carries no block reason.")

        if not self.usable and self.reason_if_blocked not in BLOCK_REASONS:
            raise ValueError(
                f"reason_if_blocked must be one of: {sorted(BLOCK_REASONS)}"
            )


USABLE = SubscriptionVerdict(usable=True)


def _require_aware(now: datetime) -> None:
    if now.tzinfo is None:
        raise ValueError("now must be timezone-aware.")


def is_trial_expired(tenant: Tenant, now: datetime) -> bool:
    _require_aware(now)
    if tenant.status != TenantStatus.TRIAL:
        return False
    return now > tenant.trial_end_at


def trial_days_remaining(tenant: Tenant, now: datetime) -> Optional[int]:
    """Whole days left on the trial, rounded up and floored at 0."""
    _require_aware(now)
    if tenant.status != TenantStatus.TRIAL:
        return None
    seconds = (tenant.trial_end_at - now).total_seconds()
    return max(0, math.ceil(seconds / _SECONDS_PER_DAY))


def is_subscription_active(tenant: Tenant, now: datetime) -> bool:
    if tenant.status == TenantStatus.ACTIVE:
        return True
    return tenant.status == TenantStatus.TRIAL and not is_trial_expired(tenant, now)


class SubscriptionGate:
    """Stateless billing check. One instance can be shared freely."""

    def evaluate(
        self,
        tenant: Tenant,
        now: datetime,
        connectivity: Connectivity = Connectivity.ONLINE,
    ) -> SubscriptionVerdict:
        _require_aware(now)

        if connectivity == Connectivity.OFFLINE:
            return USABLE

        if tenant.status == TenantStatus.SUSPENDED:
            return SubscriptionVerdict(False, REASON_SUSPENDED)

        if tenant.status == TenantStatus.EXPIRED or is_trial_expired(tenant, now):
            return SubscriptionVerdict(False, REASON_SUBSCRIPTION_REQUIRED)

        return USABLE

    trial_days_remaining = staticmethod(trial_days_remaining)
    is_subscription_active = staticmethod(is_subscription_active)
