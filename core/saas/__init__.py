"""
VELO SaaS - Public API
======================
Billing gate and plan feature entitlement.
"""

from core.saas.plans import (
    DEFAULT_ENTITLEMENT,
    DEFAULT_FEATURES,
    PLAN_LABEL,
    EntitlementResult,
    FeatureDefinition,
    FeatureEntitlement,
)
from core.saas.subscriptions import (
    REASON_SUBSCRIPTION_REQUIRED,
    REASON_SUSPENDED,
    SubscriptionGate,
    SubscriptionVerdict,
    is_subscription_active,
    trial_days_remaining,
)

__all__ = [
    "DEFAULT_ENTITLEMENT",
    "DEFAULT_FEATURES",
    "PLAN_LABEL",
    "REASON_SUBSCRIPTION_REQUIRED",
    "REASON_SUSPENDED",
    "EntitlementResult",
    "FeatureDefinition",
    "FeatureEntitlement",
    "SubscriptionGate",
    "SubscriptionVerdict",
    "is_subscription_active",
    "trial_days_remaining",
]
