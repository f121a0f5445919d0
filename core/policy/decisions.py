"""
VELO Access Policy - Decisions
==============================
The tagged union every access evaluation returns:

    Pending          show a loading state; no navigation side effects
    Redirect         navigate to target
    Allow            render the requested view
    AllowWithUpsell  render an upsell in place of the requested view

Denied is returned only by the admin console gate.

Each decision records the rule_id that produced it so callers and
audits can explain it. Decisions are pure data structures.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

from core.tenancy.models import PlanTier


# ══════════════════════════════════════════════════════════════
# REASONS
# ══════════════════════════════════════════════════════════════

class PendingReason:
    AUTH_INIT = "auth-init"
    IMPERSONATION_LOADING = "impersonation-loading"
    TENANT_LOADING = "tenant-loading"
    SIGNING_OUT = "signing-out"
    SUPER_ADMIN_CHECK = "super-admin-check"

    ALL = frozenset({
        "auth-init",
        "impersonation-loading",
        "tenant-loading",
        "signing-out",
        "super-admin-check",
    })


class RedirectReason:
    UNAUTHENTICATED = "unauthenticated"
    SUPER_ADMIN = "super-admin"
    NO_ACCESS = "tenant-lookup-failed"
    ONBOARDING = "no-membership"
    SUSPENDED = "suspended"
    SUBSCRIPTION_REQUIRED = "subscription-required"
    WRONG_BUSINESS_TYPE = "wrong-business-type"
    LEGACY_ROUTE = "legacy-route"
    ADMIN_ONLY = "admin-only"
    OWNER_ONLY = "owner-only"
    CASHIER_RESTRICTED = "cashier-restricted"
    POLICY_ERROR = "policy-error"


# ══════════════════════════════════════════════════════════════
# DECISION VARIANTS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Pending:
    reason: str
    rule_id: str = ""

    def __post_init__(self):
        if self.reason not in PendingReason.ALL:
            raise ValueError(
                f"reason '{self.reason}' not valid. "
                f"Must be one of: {sorted(PendingReason.ALL)}"
            )

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "pending", "reason": self.reason, "rule_id": self.rule_id}


@dataclass(frozen=True)
class Redirect:
    target: str
    reason: str = ""
    preserve_origin: Optional[str] = None
    rule_id: str = ""

    def __post_init__(self):
        if not self.target or not self.target.startswith("/"):
            raise ValueError("target must be an absolute path.")

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": "redirect",
            "target": self.target,
            "reason": self.reason,
            "preserve_origin": self.preserve_origin,
            "rule_id": self.rule_id,
        }


@dataclass(frozen=True)
class Allow:
    rule_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "allow", "rule_id": self.rule_id}


@dataclass(frozen=True)
class UpsellPayload:
    feature_key: Optional[str]
    required_plan: PlanTier
    current_plan: PlanTier
    title: str = ""
    description: str = ""
    upsell_copy: str = ""

    def __post_init__(self):
        if not isinstance(self.required_plan, PlanTier):
            raise ValueError("required_plan must be PlanTier.")

        if not isinstance(self.current_plan, PlanTier):
            raise ValueError("current_plan must be PlanTier.")

    def to_dict(self) -> dict[str, Any]:
        return {
            "feature_key": self.feature_key,
            "required_plan": self.required_plan.value,
            "current_plan": self.current_plan.value,
            "title": self.title,
            "description": self.description,
            "upsell_copy": self.upsell_copy,
        }


@dataclass(frozen=True)
class AllowWithUpsell:
    payload: UpsellPayload
    rule_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": "upsell",
            "payload": self.payload.to_dict(),
            "rule_id": self.rule_id,
        }


@dataclass(frozen=True)
class Denied:
    reason: str
    rule_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "denied", "reason": self.reason, "rule_id": self.rule_id}


Decision = Union[Pending, Redirect, Allow, AllowWithUpsell]
ConsoleDecision = Union[Pending, Redirect, Allow, Denied]
