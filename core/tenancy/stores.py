"""
VELO Tenancy - Store Protocols and In-Memory Stores
===================================================
External collaborators the resolver reads from. Persistence and
querying of tenant/user records live behind these protocols.
"""

from __future__ import annotations

import threading
from typing import Iterable, Optional, Protocol

from core.tenancy.models import Tenant, TenantMembership


class MembershipStore(Protocol):
    def get_membership(self, user_id: str) -> Optional[TenantMembership]:
        ...

    def get_tenant(self, tenant_id: str) -> Optional[Tenant]:
        ...


class SuperAdminRegistry(Protocol):
    def is_super_admin(self, user_id: str) -> bool:
        ...


class InMemoryMembershipStore:
    """
    Deterministic in-memory store used for bootstrap/tests.

    At most one membership per user.
    """

    def __init__(
        self,
        tenants: Iterable[Tenant] | None = None,
        memberships: Iterable[TenantMembership] | None = None,
    ):
        self._tenants: dict[str, Tenant] = {}
        self._memberships: dict[str, TenantMembership] = {}
        self._lock = threading.Lock()

        for tenant in tenants or ():
            if tenant.tenant_id in self._tenants:
                raise ValueError(f"Duplicate tenant_id '{tenant.tenant_id}'.")
            self._tenants[tenant.tenant_id] = tenant

        for membership in memberships or ():
            if membership.user_id in self._memberships:
                raise ValueError(
                    f"User '{membership.user_id}' already has a membership."
                )
            self._memberships[membership.user_id] = membership

    def get_membership(self, user_id: str) -> Optional[TenantMembership]:
        with self._lock:
            return self._memberships.get(user_id)

    def get_tenant(self, tenant_id: str) -> Optional[Tenant]:
        with self._lock:
            return self._tenants.get(tenant_id)

    def put_tenant(self, tenant: Tenant) -> None:
        with self._lock:
            self._tenants[tenant.tenant_id] = tenant

    def put_membership(self, membership: TenantMembership) -> None:
        with self._lock:
            self._memberships[membership.user_id] = membership

    def remove_membership(self, user_id: str) -> None:
        with self._lock:
            self._memberships.pop(user_id, None)

    def tenants(self) -> tuple[Tenant, ...]:
        with self._lock:
            return tuple(sorted(self._tenants.values(), key=lambda t: t.tenant_id))


class InMemorySuperAdminRegistry:
    def __init__(self, user_ids: Iterable[str] | None = None):
        self._user_ids = set(user_ids or ())

    def is_super_admin(self, user_id: str) -> bool:
        return user_id in self._user_ids

    def grant(self, user_id: str) -> None:
        self._user_ids.add(user_id)

    def revoke(self, user_id: str) -> None:
        self._user_ids.discard(user_id)
