"""
VELO Tenancy - Public API
=========================
Tenant and membership models, stores, resolver and lifecycle.
"""

from core.tenancy.models import (
    BusinessType,
    PlanTier,
    Role,
    SuperAdminFlag,
    Tenant,
    TenantMembership,
    TenantState,
    TenantStatus,
)
from core.tenancy.stores import (
    InMemoryMembershipStore,
    InMemorySuperAdminRegistry,
    MembershipStore,
    SuperAdminRegistry,
)

__all__ = [
    "BusinessType",
    "InMemoryMembershipStore",
    "InMemorySuperAdminRegistry",
    "MembershipStore",
    "PlanTier",
    "Role",
    "SuperAdminFlag",
    "SuperAdminRegistry",
    "Tenant",
    "TenantMembership",
    "TenantState",
    "TenantStatus",
]
