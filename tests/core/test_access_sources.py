"""
VELO Access - Source Tracker Tests
==================================
Sources complete out of order; the tracker must never combine one
user's identity with another user's resolution results.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from core.access.sources import AccessSources
from core.identity import ANONYMOUS, UNINITIALIZED, Identity, InMemoryIdentitySource
from core.impersonation.session import INACTIVE, ImpersonationSession
from core.policy import AccessPolicyEngine, Allow, Pending, Redirect
from core.resilience.connectivity import Connectivity
from core.routing.request import RouteRequest
from core.tenancy.models import (
    Role,
    SuperAdminFlag,
    Tenant,
    TenantMembership,
    TenantState,
    TenantStatus,
)


FIXED_TIME = datetime(2026, 2, 13, 12, 0, 0, tzinfo=timezone.utc)
ROUTE = RouteRequest(path="/retail/dashboard")

SHOP = Tenant("t-1", "Corner Shop", TenantStatus.ACTIVE)
OWNER_STATE = TenantState.resolved(TenantMembership("t-1", "owner-1", Role.OWNER), SHOP)


def _session(tenant_id="t-1"):
    return ImpersonationSession(
        active=True,
        actor_super_admin_id="root-1",
        target_tenant_id=tenant_id,
        target_user_id="owner-1",
        started_at=FIXED_TIME,
    )


def _signed_in(user_id):
    return Identity(user_id=user_id, initialized=True)


@pytest.fixture
def sources():
    return AccessSources()


class TestUserScopedSlots:
    def test_starts_fully_pending(self, sources):
        inputs = sources.snapshot(ROUTE, FIXED_TIME)
        assert inputs.identity is UNINITIALIZED
        assert inputs.tenant_state == TenantState.pending()
        assert inputs.super_admin == SuperAdminFlag.UNKNOWN

    def test_results_for_current_user_are_kept(self, sources):
        sources.update_identity(_signed_in("owner-1"))
        assert sources.set_tenant_state("owner-1", OWNER_STATE)
        assert sources.set_super_admin("owner-1", SuperAdminFlag.FALSE)

        inputs = sources.snapshot(ROUTE, FIXED_TIME)
        assert inputs.tenant_state == OWNER_STATE
        assert inputs.super_admin == SuperAdminFlag.FALSE

    def test_stale_results_are_discarded(self, sources):
        sources.update_identity(_signed_in("owner-1"))
        sources.update_identity(_signed_in("owner-2"))

        assert not sources.set_tenant_state("owner-1", OWNER_STATE)
        assert not sources.set_super_admin("owner-1", SuperAdminFlag.TRUE)
        assert sources.snapshot(ROUTE, FIXED_TIME).tenant_state == TenantState.pending()

    def test_user_change_resets_slots(self, sources):
        sources.update_identity(_signed_in("owner-1"))
        sources.set_tenant_state("owner-1", OWNER_STATE)
        sources.update_identity(_signed_in("owner-2"))

        inputs = sources.snapshot(ROUTE, FIXED_TIME)
        assert inputs.tenant_state == TenantState.pending()
        assert inputs.super_admin == SuperAdminFlag.UNKNOWN

    def test_signing_out_keeps_slots(self, sources):
        sources.update_identity(_signed_in("owner-1"))
        sources.set_tenant_state("owner-1", OWNER_STATE)
        sources.update_identity(
            Identity(user_id="owner-1", initialized=True, signing_out=True)
        )
        assert sources.snapshot(ROUTE, FIXED_TIME).tenant_state == OWNER_STATE

    def test_sign_out_clears_impersonation(self, sources):
        sources.update_identity(_signed_in("root-1"))
        sources.set_impersonation(_session())
        sources.update_identity(ANONYMOUS)
        assert sources.snapshot(ROUTE, FIXED_TIME).impersonation is INACTIVE


class TestImpersonationSlots:
    def test_target_for_current_session_is_kept(self, sources):
        session = _session()
        sources.set_impersonation(session)
        assert sources.set_impersonation_target(session, OWNER_STATE)
        assert sources.snapshot(ROUTE, FIXED_TIME).impersonation_target == OWNER_STATE

    def test_target_for_replaced_session_is_discarded(self, sources):
        old = _session("t-1")
        sources.set_impersonation(old)
        sources.set_impersonation(_session("t-2"))
        assert not sources.set_impersonation_target(old, OWNER_STATE)

    def test_changing_target_resets_loaded_target(self, sources):
        session = _session("t-1")
        sources.set_impersonation(session)
        sources.set_impersonation_target(session, OWNER_STATE)
        sources.set_impersonation(_session("t-2"))
        assert (
            sources.snapshot(ROUTE, FIXED_TIME).impersonation_target
            == TenantState.pending()
        )

    def test_clear(self, sources):
        sources.update_identity(_signed_in("root-1"))
        sources.set_impersonation(_session())
        sources.clear()
        inputs = sources.snapshot(ROUTE, FIXED_TIME)
        assert inputs.impersonation is INACTIVE
        assert inputs.super_admin == SuperAdminFlag.UNKNOWN


class TestWithIdentitySourceAndEngine:
    def test_decisions_follow_resolution_progress(self, sources):
        engine = AccessPolicyEngine()
        identity_source = InMemoryIdentitySource()
        unsubscribe = sources.attach(identity_source.on_auth_change)

        assert engine.decide(sources.snapshot(ROUTE, FIXED_TIME)) == Pending(
            "auth-init", rule_id="ACC-001"
        )

        identity_source.bootstrap("owner-1")
        assert isinstance(engine.decide(sources.snapshot(ROUTE, FIXED_TIME)), Pending)

        sources.set_tenant_state("owner-1", OWNER_STATE)
        assert isinstance(engine.decide(sources.snapshot(ROUTE, FIXED_TIME)), Pending)

        sources.set_super_admin("owner-1", SuperAdminFlag.FALSE)
        assert engine.decide(sources.snapshot(ROUTE, FIXED_TIME)) == Allow(
            rule_id="ACC-012"
        )

        identity_source.complete_sign_out()
        decision = engine.decide(sources.snapshot(ROUTE, FIXED_TIME))
        assert isinstance(decision, Redirect)
        assert decision.target == "/auth"

        unsubscribe()

    def test_connectivity_flows_into_snapshot(self, sources):
        sources.set_connectivity(Connectivity.OFFLINE)
        assert sources.snapshot(ROUTE, FIXED_TIME).connectivity == Connectivity.OFFLINE
