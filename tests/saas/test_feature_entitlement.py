"""
Tests for VELO SaaS - Plan Feature Entitlement
"""

import pytest

from core.saas.plans import (
    DEFAULT_ENTITLEMENT,
    DEFAULT_FEATURES,
    FeatureDefinition,
    FeatureEntitlement,
)
from core.tenancy.models import PlanTier, Tenant, TenantStatus


def _tenant(plan_tier):
    return Tenant(
        tenant_id="t-1",
        name="Shop",
        status=TenantStatus.ACTIVE,
        plan_tier=plan_tier,
    )


BASIC = _tenant(PlanTier.BASIC)
PRO = _tenant(PlanTier.PRO)
ENTERPRISE = _tenant(PlanTier.ENTERPRISE)


class TestPlanOrder:
    def test_tiers_are_totally_ordered(self):
        assert PlanTier.BASIC < PlanTier.PRO < PlanTier.ENTERPRISE
        assert sorted([PlanTier.ENTERPRISE, PlanTier.BASIC, PlanTier.PRO]) == [
            PlanTier.BASIC,
            PlanTier.PRO,
            PlanTier.ENTERPRISE,
        ]

    def test_meets(self):
        assert PlanTier.PRO.meets(PlanTier.BASIC)
        assert PlanTier.PRO.meets(PlanTier.PRO)
        assert not PlanTier.PRO.meets(PlanTier.ENTERPRISE)


class TestDefaultCatalog:
    def test_feature_keys_are_unique(self):
        keys = [f.key for f in DEFAULT_FEATURES]
        assert len(keys) == len(set(keys))

    @pytest.mark.parametrize(
        "key, plan",
        [
            ("pos", PlanTier.BASIC),
            ("reports_basic", PlanTier.BASIC),
            ("expenses", PlanTier.PRO),
            ("reports_advanced", PlanTier.PRO),
            ("multi_warehouse", PlanTier.PRO),
            ("api_access", PlanTier.ENTERPRISE),
            ("compliance_mode", PlanTier.ENTERPRISE),
        ],
    )
    def test_required_plans(self, key, plan):
        assert DEFAULT_ENTITLEMENT.required_plan_for(key) == plan

    def test_every_feature_has_upsell_copy(self):
        assert all(f.upsell_copy for f in DEFAULT_FEATURES)

    def test_higher_plans_include_lower_features(self):
        basic = DEFAULT_ENTITLEMENT.features_for_plan(PlanTier.BASIC)
        pro = DEFAULT_ENTITLEMENT.features_for_plan(PlanTier.PRO)
        enterprise = DEFAULT_ENTITLEMENT.features_for_plan(PlanTier.ENTERPRISE)
        assert basic < pro < enterprise
        assert enterprise == frozenset(DEFAULT_ENTITLEMENT.features)


class TestFeatureCheck:
    def test_entitled(self):
        result = DEFAULT_ENTITLEMENT.check(PRO, "reports_advanced")
        assert result.allowed
        assert result.known

    def test_not_entitled_carries_upsell(self):
        result = DEFAULT_ENTITLEMENT.check(BASIC, "reports_advanced")
        assert not result.allowed
        assert result.required_plan == PlanTier.PRO
        assert result.current_plan == PlanTier.BASIC
        assert result.title == "Advanced reports"
        assert "Pro" in result.upsell_copy

    def test_unknown_feature_fails_open(self):
        result = DEFAULT_ENTITLEMENT.check(BASIC, "time_travel")
        assert result.allowed
        assert not result.known

    def test_plan_check(self):
        assert DEFAULT_ENTITLEMENT.check_plan(ENTERPRISE, PlanTier.PRO).allowed
        result = DEFAULT_ENTITLEMENT.check_plan(BASIC, PlanTier.ENTERPRISE)
        assert not result.allowed
        assert result.feature_key is None
        assert "Enterprise" in result.upsell_copy


class TestPlanOverrides:
    def test_override_list_replaces_rank_comparison(self):
        entitlement = FeatureEntitlement(
            plan_overrides={PlanTier.BASIC: ["pos", "expenses"]},
        )
        assert entitlement.check(BASIC, "expenses").allowed
        assert not entitlement.check(BASIC, "inventory").allowed
        assert entitlement.features_for_plan(PlanTier.BASIC) == {"pos", "expenses"}

    def test_empty_override_is_ignored(self):
        entitlement = FeatureEntitlement(plan_overrides={PlanTier.BASIC: []})
        assert entitlement.check(BASIC, "inventory").allowed
        assert not entitlement.check(BASIC, "expenses").allowed

    def test_other_plans_keep_rank_comparison(self):
        entitlement = FeatureEntitlement(plan_overrides={PlanTier.BASIC: ["pos"]})
        assert entitlement.check(PRO, "expenses").allowed

    def test_excluded_feature_points_at_next_tier_that_has_it(self):
        entitlement = FeatureEntitlement(
            plan_overrides={PlanTier.PRO: ["pos", "products"]},
        )
        result = entitlement.check(PRO, "expenses")
        assert not result.allowed
        assert result.required_plan == PlanTier.ENTERPRISE
        assert result.upsell_copy == "Upgrade to Enterprise to unlock Expenses."

    def test_excluded_feature_with_no_upgrade_path(self):
        entitlement = FeatureEntitlement(
            plan_overrides={PlanTier.ENTERPRISE: ["pos"]},
        )
        result = entitlement.check(ENTERPRISE, "api_access")
        assert not result.allowed
        assert result.required_plan == PlanTier.ENTERPRISE
        assert "Upgrade" not in result.upsell_copy

    def test_duplicate_feature_rejected(self):
        feature = FeatureDefinition("pos", PlanTier.BASIC, "Point of sale")
        with pytest.raises(ValueError):
            FeatureEntitlement(features=[feature, feature])

    def test_definition_validation(self):
        with pytest.raises(ValueError):
            FeatureDefinition("", PlanTier.BASIC, "Nameless")
        with pytest.raises(ValueError):
            FeatureDefinition("x", "pro", "Stringly typed")
