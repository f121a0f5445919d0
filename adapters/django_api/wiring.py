"""
VELO Django Adapter Wiring
==========================
Constructs AccessDependencies for local/staging live runs.

This module is adapter-only glue:
- no core contract changes
- in-memory tenant/membership stores seeded with DEV data
- audit events persisted through the core.audit_store app
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime, timedelta

from django.conf import settings as django_settings

from core.access.settings import AccessSettings
from core.audit import AuditSink
from core.audit_store.sink import DbAuditSink
from core.impersonation import ImpersonationManager
from core.policy import AccessPolicyEngine, AdminConsoleGate
from core.resilience import ConnectivityMonitor
from core.routing import DEFAULT_CATALOG, DEFAULT_ROUTING, RouteCatalog
from core.saas import FeatureEntitlement, SubscriptionGate
from core.tenancy import (
    BusinessType,
    InMemoryMembershipStore,
    InMemorySuperAdminRegistry,
    PlanTier,
    Role,
    Tenant,
    TenantMembership,
    TenantStatus,
)
from core.tenancy.resolver import TenantResolver
from core.time import Clock, SystemClock

from adapters.django_api.session_storage import DjangoSessionImpersonationStorage


DEV_RETAIL_TENANT_ID = "dev-retail"
DEV_FNB_TENANT_ID = "dev-fnb"
DEV_TRIAL_TENANT_ID = "dev-trial"

DEV_RETAIL_OWNER_ID = "dev-retail-owner"
DEV_RETAIL_CASHIER_ID = "dev-retail-cashier"
DEV_FNB_OWNER_ID = "dev-fnb-owner"
DEV_TRIAL_OWNER_ID = "dev-trial-owner"
DEV_SUPER_ADMIN_ID = "dev-super-admin"

_DEPENDENCIES_LOCK = threading.Lock()
_DEPENDENCIES: "AccessDependencies | None" = None


@dataclass
class AccessDependencies:
    settings: AccessSettings
    clock: Clock
    store: InMemoryMembershipStore
    registry: InMemorySuperAdminRegistry
    resolver: TenantResolver
    engine: AccessPolicyEngine
    console_gate: AdminConsoleGate
    catalog: RouteCatalog
    connectivity: ConnectivityMonitor
    audit_sink: AuditSink

    def impersonation_for(self, request) -> ImpersonationManager:
        return ImpersonationManager(
            storage=DjangoSessionImpersonationStorage(request.session),
            audit_sink=self.audit_sink,
            clock=self.clock,
            storage_key=self.settings.impersonation_storage_key,
        )


def load_access_settings() -> AccessSettings:
    return AccessSettings.from_mapping(getattr(django_settings, "VELO_ACCESS", None))


def _seed_store(now: datetime, access_settings: AccessSettings) -> InMemoryMembershipStore:
    tenants = (
        Tenant(
            tenant_id=DEV_RETAIL_TENANT_ID,
            name="Dev Retail Store",
            status=TenantStatus.ACTIVE,
            plan_tier=PlanTier.BASIC,
            business_type=BusinessType.RETAIL,
        ),
        Tenant(
            tenant_id=DEV_FNB_TENANT_ID,
            name="Dev Cafe",
            status=TenantStatus.ACTIVE,
            plan_tier=PlanTier.PRO,
            business_type=BusinessType.FNB,
        ),
        Tenant(
            tenant_id=DEV_TRIAL_TENANT_ID,
            name="Dev Trial Shop",
            status=TenantStatus.TRIAL,
            plan_tier=PlanTier.BASIC,
            business_type=BusinessType.RETAIL,
            trial_end_at=now + timedelta(days=access_settings.trial_length_days),
        ),
    )
    memberships = (
        TenantMembership(DEV_RETAIL_TENANT_ID, DEV_RETAIL_OWNER_ID, Role.OWNER),
        TenantMembership(DEV_RETAIL_TENANT_ID, DEV_RETAIL_CASHIER_ID, Role.CASHIER),
        TenantMembership(DEV_FNB_TENANT_ID, DEV_FNB_OWNER_ID, Role.OWNER),
        TenantMembership(DEV_TRIAL_TENANT_ID, DEV_TRIAL_OWNER_ID, Role.OWNER),
    )
    return InMemoryMembershipStore(tenants=tenants, memberships=memberships)


def create_dependencies(
    access_settings: AccessSettings | None = None,
    clock: Clock | None = None,
    store: InMemoryMembershipStore | None = None,
    registry: InMemorySuperAdminRegistry | None = None,
    catalog: RouteCatalog = DEFAULT_CATALOG,
    connectivity: ConnectivityMonitor | None = None,
    audit_sink: AuditSink | None = None,
    entitlement: FeatureEntitlement | None = None,
) -> AccessDependencies:
    access_settings = access_settings or load_access_settings()
    clock = clock or SystemClock()
    if store is None:
        store = _seed_store(clock.now_utc(), access_settings)
    if registry is None:
        registry = InMemorySuperAdminRegistry({DEV_SUPER_ADMIN_ID})
    audit_sink = audit_sink or DbAuditSink()

    routing = catalog.routing_table(
        DEFAULT_ROUTING.with_exemptions(
            global_routes=access_settings.extra_global_routes,
            public_prefixes=access_settings.extra_public_route_prefixes,
        )
    )

    return AccessDependencies(
        settings=access_settings,
        clock=clock,
        store=store,
        registry=registry,
        resolver=TenantResolver(store, registry, clock=clock, settings=access_settings),
        engine=AccessPolicyEngine(
            routing=routing,
            gate=SubscriptionGate(),
            entitlement=entitlement,
        ),
        console_gate=AdminConsoleGate(audit_sink=audit_sink, clock=clock),
        catalog=catalog,
        connectivity=connectivity or ConnectivityMonitor(),
        audit_sink=audit_sink,
    )


def build_dependencies() -> AccessDependencies:
    """
    Lazy singleton wiring for adapter runtime.
    """
    global _DEPENDENCIES
    with _DEPENDENCIES_LOCK:
        if _DEPENDENCIES is None:
            _DEPENDENCIES = create_dependencies()
        return _DEPENDENCIES


def set_dependencies(dependencies: AccessDependencies | None) -> None:
    """Replace (or with None, reset) the singleton. Used by tests."""
    global _DEPENDENCIES
    with _DEPENDENCIES_LOCK:
        _DEPENDENCIES = dependencies

