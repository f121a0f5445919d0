"""
VELO Access Policy - Rule Set
=============================
The ordered rule list evaluated by AccessPolicyEngine. First match wins;
every rule may assume all earlier rules did not fire.

    ACC-001  auth not initialized          -> Pending("auth-init")
    ACC-002  no user                       -> Redirect("/auth")
    ACC-003  impersonation target loading  -> Pending("impersonation-loading")
    ACC-004  own tenant / super-admin      -> Pending("tenant-loading") | /no-access
    ACC-005  super-admin outside impersonation -> Redirect("/admin")
    ACC-006  no membership                 -> signing-out | tenant-loading | /onboarding
    ACC-007  subscription                  -> /account-suspended | /subscription-required
    ACC-008  business-type partitioning    -> landing route | translated legacy path
    ACC-009  role gates                    -> role default | /access-denied
    ACC-010  cashier allow-list            -> cashier default route
    ACC-011  feature / plan entitlement    -> AllowWithUpsell
    ACC-012  fallthrough                   -> Allow()
"""

from __future__ import annotations

from typing import Optional

from core.policy.contracts import BaseAccessRule, OnError
from core.policy.decisions import (
    Decision,
    PendingReason,
    RedirectReason,
    UpsellPayload,
)
from core.policy.inputs import EvaluationContext
from core.routing.tables import (
    ACCESS_DENIED_ROUTE,
    ACCOUNT_SUSPENDED_ROUTE,
    ADMIN_ROUTE,
    AUTH_ROUTE,
    NO_ACCESS_ROUTE,
    ONBOARDING_ROUTE,
    SUBSCRIPTION_REQUIRED_ROUTE,
)
from core.saas.plans import DEFAULT_ENTITLEMENT, EntitlementResult, FeatureEntitlement
from core.saas.subscriptions import REASON_SUSPENDED, SubscriptionGate
from core.tenancy.models import Role, SuperAdminFlag


# ══════════════════════════════════════════════════════════════
# IDENTITY
# ══════════════════════════════════════════════════════════════

class AuthInitRule(BaseAccessRule):
    rule_id = "ACC-001"
    order = 10
    description = "Wait for the identity source to finish bootstrapping."

    def evaluate(self, ctx: EvaluationContext) -> Optional[Decision]:
        if not ctx.inputs.identity.initialized:
            return self.pending(PendingReason.AUTH_INIT)
        return None


class AuthenticatedRule(BaseAccessRule):
    rule_id = "ACC-002"
    order = 20
    description = "Anonymous users go to sign-in, keeping where they were headed."

    def evaluate(self, ctx: EvaluationContext) -> Optional[Decision]:
        if ctx.inputs.identity.user_id is None:
            return self.redirect(
                AUTH_ROUTE,
                RedirectReason.UNAUTHENTICATED,
                preserve_origin=ctx.route.path,
            )
        return None


# ══════════════════════════════════════════════════════════════
# EXISTENCE
# ══════════════════════════════════════════════════════════════

class ImpersonationTargetRule(BaseAccessRule):
    rule_id = "ACC-003"
    order = 30
    description = "While impersonating, the target tenant replaces the user's own."

    def evaluate(self, ctx: EvaluationContext) -> Optional[Decision]:
        if ctx.is_impersonating and not ctx.inputs.impersonation_target.loaded:
            return self.pending(PendingReason.IMPERSONATION_LOADING)
        return None


class TenantLoadedRule(BaseAccessRule):
    rule_id = "ACC-004"
    order = 40
    description = "Own tenant and super-admin flag must be resolved; lookup errors fail closed."

    def evaluate(self, ctx: EvaluationContext) -> Optional[Decision]:
        if ctx.inputs.super_admin == SuperAdminFlag.UNKNOWN:
            return self.pending(PendingReason.TENANT_LOADING)

        if ctx.is_impersonating:
            return None

        own = ctx.inputs.tenant_state
        if not own.loaded:
            return self.pending(PendingReason.TENANT_LOADING)
        if own.failed:
            return self.redirect(NO_ACCESS_ROUTE, RedirectReason.NO_ACCESS)
        return None


class SuperAdminRule(BaseAccessRule):
    rule_id = "ACC-005"
    order = 50
    description = "Super-admins only enter tenant views through impersonation."

    def evaluate(self, ctx: EvaluationContext) -> Optional[Decision]:
        if ctx.inputs.super_admin == SuperAdminFlag.TRUE and not ctx.is_impersonating:
            return self.redirect(ADMIN_ROUTE, RedirectReason.SUPER_ADMIN)
        return None


class MembershipRule(BaseAccessRule):
    rule_id = "ACC-006"
    order = 60
    description = "Users without a tenant are onboarded; impersonated targets never are."

    def evaluate(self, ctx: EvaluationContext) -> Optional[Decision]:
        if ctx.membership is not None:
            return None
        if ctx.inputs.identity.signing_out:
            return self.pending(PendingReason.SIGNING_OUT)
        if ctx.is_impersonating:
            return self.pending(PendingReason.TENANT_LOADING)
        return self.redirect(ONBOARDING_ROUTE, RedirectReason.ONBOARDING)


# ══════════════════════════════════════════════════════════════
# BILLING
# ══════════════════════════════════════════════════════════════

class SubscriptionRule(BaseAccessRule):
    rule_id = "ACC-007"
    order = 70
    description = "Suspended or lapsed tenants are sent to the billing pages."

    def __init__(self, gate: Optional[SubscriptionGate] = None):
        self._gate = gate or SubscriptionGate()

    def evaluate(self, ctx: EvaluationContext) -> Optional[Decision]:
        if ctx.is_impersonating:
            return None

        verdict = self._gate.evaluate(
            ctx.tenant, ctx.inputs.now, ctx.inputs.connectivity
        )
        if verdict.usable:
            return None
        if verdict.reason_if_blocked == REASON_SUSPENDED:
            return self.redirect(ACCOUNT_SUSPENDED_ROUTE, RedirectReason.SUSPENDED)
        return self.redirect(
            SUBSCRIPTION_REQUIRED_ROUTE, RedirectReason.SUBSCRIPTION_REQUIRED
        )


# ══════════════════════════════════════════════════════════════
# TENANT-TYPE PARTITIONING
# ══════════════════════════════════════════════════════════════

class BusinessTypePartitionRule(BaseAccessRule):
    rule_id = "ACC-008"
    order = 80
    description = "Each business type only sees paths under its own prefix."

    def evaluate(self, ctx: EvaluationContext) -> Optional[Decision]:
        if ctx.is_impersonating or ctx.routing.is_partition_exempt(ctx.path):
            return None

        business_type = ctx.business_type
        if not ctx.routing.owns_path(business_type, ctx.translated_path):
            return self.redirect(
                ctx.routing.landing_route_for(business_type),
                RedirectReason.WRONG_BUSINESS_TYPE,
            )
        if ctx.translated_path != ctx.path:
            return self.redirect(ctx.translated_path, RedirectReason.LEGACY_ROUTE)
        return None


# ══════════════════════════════════════════════════════════════
# ROLE
# ══════════════════════════════════════════════════════════════

class RoleRule(BaseAccessRule):
    rule_id = "ACC-009"
    order = 90
    description = "Admin-only and role-restricted routes."

    def evaluate(self, ctx: EvaluationContext) -> Optional[Decision]:
        role = ctx.role
        route = ctx.route

        if route.admin_only and not role.is_admin:
            return self.redirect(
                ctx.routing.role_default_route(role, ctx.business_type),
                RedirectReason.ADMIN_ONLY,
            )

        required = route.required_role
        if required == Role.OWNER and role != Role.OWNER:
            return self.redirect(ACCESS_DENIED_ROUTE, RedirectReason.OWNER_ONLY)
        if required == Role.ADMIN and not role.is_admin:
            return self.redirect(ACCESS_DENIED_ROUTE, RedirectReason.ADMIN_ONLY)
        return None


class CashierAllowListRule(BaseAccessRule):
    rule_id = "ACC-010"
    order = 100
    description = "Cashiers are confined to POS, menu and product pages."

    def evaluate(self, ctx: EvaluationContext) -> Optional[Decision]:
        if ctx.role != Role.CASHIER:
            return None

        business_type = ctx.business_type
        if ctx.routing.is_cashier_allowed(business_type, ctx.translated_path):
            return None
        return self.redirect(
            ctx.routing.cashier_default_route(business_type),
            RedirectReason.CASHIER_RESTRICTED,
        )


# ══════════════════════════════════════════════════════════════
# ENTITLEMENT
# ══════════════════════════════════════════════════════════════

class FeatureEntitlementRule(BaseAccessRule):
    rule_id = "ACC-011"
    order = 110
    on_error = OnError.FAIL_OPEN
    description = "Plan-gated features render an upsell instead of the page."

    def __init__(self, entitlement: Optional[FeatureEntitlement] = None):
        self._entitlement = entitlement or DEFAULT_ENTITLEMENT

    def evaluate(self, ctx: EvaluationContext) -> Optional[Decision]:
        route = ctx.route
        tenant = ctx.tenant

        if route.required_feature_key is not None:
            result = self._entitlement.check(tenant, route.required_feature_key)
            if not result.allowed:
                return self.upsell(_payload(result))

        if route.required_plan is not None:
            result = self._entitlement.check_plan(tenant, route.required_plan)
            if not result.allowed:
                return self.upsell(_payload(result))

        return None


def _payload(result: EntitlementResult) -> UpsellPayload:
    return UpsellPayload(
        feature_key=result.feature_key,
        required_plan=result.required_plan,
        current_plan=result.current_plan,
        title=result.title,
        description=result.description,
        upsell_copy=result.upsell_copy,
    )


class AllowRule(BaseAccessRule):
    rule_id = "ACC-012"
    order = 120
    description = "Nothing objected."

    def evaluate(self, ctx: EvaluationContext) -> Optional[Decision]:
        return self.allow()


def default_rules(
    gate: Optional[SubscriptionGate] = None,
    entitlement: Optional[FeatureEntitlement] = None,
) -> tuple[BaseAccessRule, ...]:
    return (
        AuthInitRule(),
        AuthenticatedRule(),
        ImpersonationTargetRule(),
        TenantLoadedRule(),
        SuperAdminRule(),
        MembershipRule(),
        SubscriptionRule(gate),
        BusinessTypePartitionRule(),
        RoleRule(),
        CashierAllowListRule(),
        FeatureEntitlementRule(entitlement),
        AllowRule(),
    )
