"""
VELO SaaS - Plan Feature Entitlement
====================================
Maps product features to the minimum plan tier that unlocks them and
answers "may this tenant use feature X?".

Entitlement never blocks navigation: a failed check turns into an
upsell in place of the requested view. Feature keys with no catalog
entry fail open, so a feature shipped without a gate entry is not
locked away from everyone.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, Mapping, Optional

from core.tenancy.models import PlanTier, Tenant

logger = logging.getLogger("velo.saas")


# ══════════════════════════════════════════════════════════════
# PLAN LABELS
# ══════════════════════════════════════════════════════════════

PLAN_LABEL: Dict[PlanTier, str] = {
    PlanTier.BASIC: "Basic",
    PlanTier.PRO: "Pro",
    PlanTier.ENTERPRISE: "Enterprise",
}


# ══════════════════════════════════════════════════════════════
# FEATURE DEFINITIONS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class FeatureDefinition:
    """One gated product feature with its upsell copy."""

    key: str
    required_plan: PlanTier
    title: str
    description: str = ""
    upsell_copy: str = ""

    def __post_init__(self):
        if not self.key or not isinstance(self.key, str):
            raise ValueError("key must be a non-empty string.")

        if not isinstance(self.required_plan, PlanTier):
            raise ValueError("required_plan must be PlanTier.")

        if not self.title:
            raise ValueError("title must be non-empty.")


def _feature(key, plan, title, description="", upsell_copy=""):
    if not upsell_copy:
        upsell_copy = f"Upgrade to {PLAN_LABEL[plan]} to unlock {title}."
    return FeatureDefinition(key, plan, title, description, upsell_copy)


DEFAULT_FEATURES: tuple[FeatureDefinition, ...] = (
    # ── Basic ─────────────────────────────────────────────────
    _feature("pos", PlanTier.BASIC, "Point of sale"),
    _feature("products", PlanTier.BASIC, "Products"),
    _feature("categories", PlanTier.BASIC, "Categories"),
    _feature("inventory", PlanTier.BASIC, "Inventory"),
    _feature("transactions", PlanTier.BASIC, "Transactions"),
    _feature("reports_basic", PlanTier.BASIC, "Reports"),
    _feature("users_roles", PlanTier.BASIC, "Users & roles"),
    _feature("activity", PlanTier.BASIC, "Activity"),
    # ── Pro ───────────────────────────────────────────────────
    _feature(
        "expenses", PlanTier.PRO, "Expenses",
        "Track operating costs next to your sales.",
    ),
    _feature(
        "purchase_orders", PlanTier.PRO, "Purchase orders",
        "Order stock from suppliers and receive it into inventory.",
    ),
    _feature(
        "multi_warehouse", PlanTier.PRO, "Multiple warehouses",
        "Hold and transfer stock across several locations.",
    ),
    _feature(
        "reports_advanced", PlanTier.PRO, "Advanced reports",
        "Margins, trends and product performance over any period.",
        "Advanced reports are part of the Pro plan. Upgrade to see "
        "profit, trend and product breakdowns.",
    ),
    # ── Enterprise ────────────────────────────────────────────
    _feature(
        "api_access", PlanTier.ENTERPRISE, "API access",
        "Connect external systems to your business data.",
    ),
    _feature(
        "custom_branding", PlanTier.ENTERPRISE, "Custom branding",
        "Put your own logo and colours on receipts and order pages.",
    ),
    _feature(
        "audit_logs_full", PlanTier.ENTERPRISE, "Full audit logs",
        "Complete, exportable history of every change in your business.",
    ),
    _feature(
        "compliance_mode", PlanTier.ENTERPRISE, "Compliance mode",
        "Fiscal receipts and locked transaction history.",
    ),
)


# ══════════════════════════════════════════════════════════════
# ENTITLEMENT RESULT
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class EntitlementResult:
    allowed: bool
    feature_key: Optional[str]
    required_plan: PlanTier
    current_plan: PlanTier
    title: str = ""
    description: str = ""
    upsell_copy: str = ""
    known: bool = True


# ══════════════════════════════════════════════════════════════
# FEATURE ENTITLEMENT
# ══════════════════════════════════════════════════════════════

class FeatureEntitlement:
    """
    Feature -> plan lookup plus per-plan feature-list overrides.

    A plan with a non-empty override list is entitled to exactly the
    features in that list; other plans use the rank comparison
    tenant.plan_tier >= required_plan.
    """

    def __init__(
        self,
        features: Iterable[FeatureDefinition] = DEFAULT_FEATURES,
        plan_overrides: Optional[Mapping[PlanTier, Iterable[str]]] = None,
    ) -> None:
        catalog: Dict[str, FeatureDefinition] = {}
        for definition in features:
            if definition.key in catalog:
                raise ValueError(f"Duplicate feature '{definition.key}'.")
            catalog[definition.key] = definition
        self._features = MappingProxyType(catalog)

        overrides: Dict[PlanTier, FrozenSet[str]] = {}
        for tier, keys in (plan_overrides or {}).items():
            keys = frozenset(keys)
            if keys:
                overrides[tier] = keys
        self._overrides = MappingProxyType(overrides)

    @property
    def features(self) -> Mapping[str, FeatureDefinition]:
        return self._features

    def definition(self, feature_key: str) -> Optional[FeatureDefinition]:
        return self._features.get(feature_key)

    def required_plan_for(self, feature_key: str) -> PlanTier:
        definition = self._features.get(feature_key)
        return PlanTier.BASIC if definition is None else definition.required_plan

    def features_for_plan(self, tier: PlanTier) -> FrozenSet[str]:
        if tier in self._overrides:
            return self._overrides[tier]
        return frozenset(
            key for key, d in self._features.items() if tier.meets(d.required_plan)
        )

    def check(self, tenant: Tenant, feature_key: str) -> EntitlementResult:
        current = tenant.plan_tier
        definition = self._features.get(feature_key)

        if definition is None:
            logger.debug(f"Feature '{feature_key}' has no gate entry; allowing.")
            return EntitlementResult(
                allowed=True,
                feature_key=feature_key,
                required_plan=PlanTier.BASIC,
                current_plan=current,
                known=False,
            )

        if current in self._overrides:
            allowed = feature_key in self._overrides[current]
        else:
            allowed = current.meets(definition.required_plan)

        required = definition.required_plan
        upsell_copy = definition.upsell_copy
        if not allowed and current.meets(required):
            # Excluded by the current plan's override list.
            required = self._upgrade_tier_for(feature_key, current)
            if required is None:
                required = definition.required_plan
                upsell_copy = f"{definition.title} is not included in your plan."
            else:
                upsell_copy = (
                    f"Upgrade to {PLAN_LABEL[required]} to unlock {definition.title}."
                )

        return EntitlementResult(
            allowed=allowed,
            feature_key=feature_key,
            required_plan=required,
            current_plan=current,
            title=definition.title,
            description=definition.description,
            upsell_copy=upsell_copy,
        )

    def _upgrade_tier_for(
        self, feature_key: str, current: PlanTier
    ) -> Optional[PlanTier]:
        """Lowest tier above current whose feature list holds feature_key."""
        for tier in sorted(PlanTier, key=lambda t: t.rank):
            if tier > current and feature_key in self.features_for_plan(tier):
                return tier
        return None

    def check_plan(self, tenant: Tenant, required_plan: PlanTier) -> EntitlementResult:
        """Gate on a plan tier alone, for routes with no feature key."""
        label = PLAN_LABEL[required_plan]
        return EntitlementResult(
            allowed=tenant.plan_tier.meets(required_plan),
            feature_key=None,
            required_plan=required_plan,
            current_plan=tenant.plan_tier,
            title=f"{label} plan",
            description=f"This page is available on the {label} plan and above.",
            upsell_copy=f"Upgrade to {label} to unlock this page.",
        )


DEFAULT_ENTITLEMENT = FeatureEntitlement()
