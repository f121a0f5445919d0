"""
VELO Tenancy - Tenant, Membership and Role Models
=================================================
Canonical tenant (business) and membership models.
These are the inputs every access decision is scoped to.

Closed vocabularies are Enums. PlanTier carries a total order
(BASIC < PRO < ENTERPRISE) so plan checks are plain comparisons.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping, Optional

logger = logging.getLogger("velo.tenancy")


# ══════════════════════════════════════════════════════════════
# ENUMERATIONS
# ══════════════════════════════════════════════════════════════

class Role(Enum):
    """Role a user holds inside one tenant."""
    OWNER = "owner"
    ADMIN = "admin"
    CASHIER = "cashier"

    @property
    def is_admin(self) -> bool:
        """Owners are admins too."""
        return self in (Role.OWNER, Role.ADMIN)


class BusinessType(Enum):
    """Vertical a tenant operates in. Drives route prefix and landing page."""
    RETAIL = "retail"
    FNB = "fnb"
    SERVICE = "service"
    VENUE = "venue"


class TenantStatus(Enum):
    """Billing status recorded on the tenant by billing/admin actions."""
    TRIAL = "trial"
    ACTIVE = "active"
    EXPIRED = "expired"
    SUSPENDED = "suspended"


_PLAN_RANK = {"basic": 0, "pro": 1, "enterprise": 2}


class PlanTier(Enum):
    """Subscription plan tier, totally ordered."""
    BASIC = "basic"
    PRO = "pro"
    ENTERPRISE = "enterprise"

    @property
    def rank(self) -> int:
        return _PLAN_RANK[self.value]

    def __lt__(self, other):
        if not isinstance(other, PlanTier):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, PlanTier):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, PlanTier):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, PlanTier):
            return NotImplemented
        return self.rank >= other.rank

    def meets(self, required: "PlanTier") -> bool:
        return self >= required


class SuperAdminFlag(Enum):
    """
    Result of the authoritative super-admin check.

    UNKNOWN is distinct from FALSE: it means the check has not
    completed yet and must never be read as a denial or a grant.
    """
    UNKNOWN = "unknown"
    TRUE = "true"
    FALSE = "false"

    @classmethod
    def from_bool(cls, value: bool) -> "SuperAdminFlag":
        return cls.TRUE if value is True else cls.FALSE


def _parse_enum(enum_cls, value, default=None):
    if isinstance(value, enum_cls):
        return value
    if value is None:
        return default
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        return default


# ══════════════════════════════════════════════════════════════
# TENANT
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Tenant:
    """
    One subscribed business account.

    business_type may be None when the stored record is incomplete;
    routing treats that as retail (see routing.business_type_for_routing).
    """

    tenant_id: str
    name: str
    status: TenantStatus
    plan_tier: PlanTier = PlanTier.BASIC
    business_type: Optional[BusinessType] = BusinessType.RETAIL
    trial_end_at: Optional[datetime] = None

    def __post_init__(self):
        if not self.tenant_id or not isinstance(self.tenant_id, str):
            raise ValueError("tenant_id must be a non-empty string.")

        if not isinstance(self.status, TenantStatus):
            raise ValueError("status must be TenantStatus.")

        if not isinstance(self.plan_tier, PlanTier):
            raise ValueError("plan_tier must be PlanTier.")

        if self.business_type is not None and not isinstance(
            self.business_type, BusinessType
        ):
            raise ValueError("business_type must be BusinessType or None.")

        if self.status == TenantStatus.TRIAL and self.trial_end_at is None:
            raise ValueError("trial tenants must carry trial_end_at.")

        if self.trial_end_at is not None and self.trial_end_at.tzinfo is None:
            raise ValueError("trial_end_at must be timezone-aware.")

    @property
    def is_suspended(self) -> bool:
        return self.status == TenantStatus.SUSPENDED

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Tenant":
        """
        Build a Tenant from a raw store record.

        Incomplete business_type is kept as None, plan falls back to
        basic and a naive trial_end_at is read as UTC. Status and trial
        invariants are still enforced.
        """
        tenant_id = str(record.get("id") or record.get("tenant_id") or "")

        raw_type = record.get("business_type")
        business_type = _parse_enum(BusinessType, raw_type)
        if business_type is None:
            logger.warning(
                f"Tenant {tenant_id} has unusable business_type "
                f"{raw_type!r}; it will be routed as retail."
            )

        status = _parse_enum(TenantStatus, record.get("status"))
        if status is None:
            raise ValueError(
                f"Tenant {tenant_id} has unknown status {record.get('status')!r}."
            )

        raw_plan = record.get("plan_tier", record.get("plan"))
        plan_tier = _parse_enum(PlanTier, raw_plan, default=PlanTier.BASIC)

        trial_end_at = record.get("trial_end_at")
        if isinstance(trial_end_at, str):
            trial_end_at = datetime.fromisoformat(trial_end_at)
        if isinstance(trial_end_at, datetime) and trial_end_at.tzinfo is None:
            logger.warning(
                f"Tenant {tenant_id} has naive trial_end_at; reading it as UTC."
            )
            trial_end_at = trial_end_at.replace(tzinfo=timezone.utc)

        return cls(
            tenant_id=tenant_id,
            name=str(record.get("name") or ""),
            status=status,
            plan_tier=plan_tier,
            business_type=business_type,
            trial_end_at=trial_end_at,
        )


# ══════════════════════════════════════════════════════════════
# MEMBERSHIP
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TenantMembership:
    """The (tenant, role) pair a user participates in."""

    tenant_id: str
    user_id: str
    role: Role
    branch_id: Optional[str] = None

    def __post_init__(self):
        if not self.tenant_id or not isinstance(self.tenant_id, str):
            raise ValueError("tenant_id must be a non-empty string.")

        if not self.user_id or not isinstance(self.user_id, str):
            raise ValueError("user_id must be a non-empty string.")

        if not isinstance(self.role, Role):
            raise ValueError(
                f"role must be one of: {sorted(r.value for r in Role)}"
            )


# ══════════════════════════════════════════════════════════════
# RESOLVED TENANT STATE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TenantState:
    """
    Materialised result of one membership + tenant resolution.

    loaded=False:  resolution still in flight.
    failed=True:   the authoritative lookup errored (fail closed).
    membership=None with loaded=True: the user has no tenant.
    """

    loaded: bool
    membership: Optional[TenantMembership] = None
    tenant: Optional[Tenant] = None
    failed: bool = False

    def __post_init__(self):
        if not self.loaded and (
            self.membership is not None or self.tenant is not None or self.failed
        ):
            raise ValueError("an unloaded TenantState carries no data.")

        if self.failed and (self.membership is not None or self.tenant is not None):
            raise ValueError("a failed TenantState carries no data.")

        if self.membership is not None and self.tenant is None:
            raise ValueError("membership requires its tenant.")

    @property
    def has_membership(self) -> bool:
        return self.membership is not None

    @property
    def role(self) -> Optional[Role]:
        return None if self.membership is None else self.membership.role

    @classmethod
    def pending(cls) -> "TenantState":
        return cls(loaded=False)

    @classmethod
    def no_tenant(cls) -> "TenantState":
        return cls(loaded=True)

    @classmethod
    def lookup_failed(cls) -> "TenantState":
        return cls(loaded=True, failed=True)

    @classmethod
    def resolved(
        cls, membership: TenantMembership, tenant: Tenant
    ) -> "TenantState":
        return cls(loaded=True, membership=membership, tenant=tenant)
