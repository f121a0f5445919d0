"""
VELO Django Adapter - Guard and View Tests
==========================================
Drives the HTTP surface with the Django test client against the
seeded DEV tenants:

    dev-retail  ACTIVE  BASIC  retail  (dev-retail-owner, dev-retail-cashier)
    dev-fnb     ACTIVE  PRO    fnb     (dev-fnb-owner)
    dev-trial   TRIAL   BASIC  retail  (dev-trial-owner)
    dev-super-admin is the only super-admin
"""

from __future__ import annotations

import json
from dataclasses import replace
from datetime import datetime, timezone

import pytest
from django.test import Client

from adapters.django_api import (
    DEV_FNB_OWNER_ID,
    DEV_FNB_TENANT_ID,
    DEV_RETAIL_CASHIER_ID,
    DEV_RETAIL_OWNER_ID,
    DEV_RETAIL_TENANT_ID,
    DEV_SUPER_ADMIN_ID,
    DEV_TRIAL_OWNER_ID,
    create_dependencies,
    set_dependencies,
)
from adapters.django_api.identity import SESSION_USER_KEY
from core.access.settings import AccessSettings
from core.audit import (
    KIND_ADMIN_CONSOLE_DENIED,
    KIND_IMPERSONATION_EXIT,
    KIND_IMPERSONATION_START,
    KIND_TENANT_SUSPENDED,
    KIND_TENANT_UNSUSPENDED,
    OUTCOME_APPLIED,
    InMemoryAuditSink,
)
from core.tenancy.models import TenantStatus
from core.time import FixedClock

pytestmark = pytest.mark.django_db


FIXED_TIME = datetime(2026, 2, 13, 12, 0, 0, tzinfo=timezone.utc)


# ══════════════════════════════════════════════════════════════
# FIXTURES
# ══════════════════════════════════════════════════════════════

@pytest.fixture
def audit_sink():
    return InMemoryAuditSink()


@pytest.fixture
def deps(audit_sink):
    dependencies = create_dependencies(
        access_settings=AccessSettings(),
        clock=FixedClock(FIXED_TIME),
        audit_sink=audit_sink,
    )
    set_dependencies(dependencies)
    yield dependencies
    set_dependencies(None)


def _client_for(user_id=None) -> Client:
    client = Client()
    if user_id is not None:
        session = client.session
        session[SESSION_USER_KEY] = user_id
        session.save()
    return client


def _post_json(client, url, payload=None):
    return client.post(
        url,
        data=json.dumps(payload or {}),
        content_type="application/json",
    )


def _start_impersonation(client, tenant_id=DEV_FNB_TENANT_ID, target_user_id=DEV_FNB_OWNER_ID):
    return _post_json(
        client,
        "/admin/impersonation/start",
        {"tenant_id": tenant_id, "target_user_id": target_user_id},
    )


# ══════════════════════════════════════════════════════════════
# PAGE GUARD
# ══════════════════════════════════════════════════════════════

class TestPageGuard:
    def test_anonymous_redirected_to_auth_with_origin(self, deps):
        response = _client_for().get("/retail/pos")
        assert response.status_code == 302
        assert response["Location"] == "/auth?from=%2Fretail%2Fpos"

    def test_owner_renders_dashboard(self, deps):
        response = _client_for(DEV_RETAIL_OWNER_ID).get("/retail/dashboard")
        assert response.status_code == 200
        assert response.json()["data"]["page"] == "/retail/dashboard"

    def test_legacy_path_translated(self, deps):
        response = _client_for(DEV_RETAIL_OWNER_ID).get("/pos")
        assert response.status_code == 302
        assert response["Location"] == "/retail/pos"

    def test_other_business_type_goes_to_landing(self, deps):
        response = _client_for(DEV_FNB_OWNER_ID).get("/retail/pos")
        assert response["Location"] == "/fnb/dashboard"

    def test_cashier_on_settings_goes_to_pos(self, deps):
        response = _client_for(DEV_RETAIL_CASHIER_ID).get("/settings")
        assert response.status_code == 302
        assert response["Location"] == "/retail/pos"

    def test_plan_gate_renders_upsell(self, deps):
        response = _client_for(DEV_RETAIL_OWNER_ID).get("/retail/reports/advanced")
        assert response.status_code == 200
        decision = response.json()["data"]["decision"]
        assert decision["kind"] == "upsell"
        assert decision["payload"]["required_plan"] == "pro"
        assert decision["payload"]["current_plan"] == "basic"

    def test_pro_tenant_gets_page(self, deps):
        response = _client_for(DEV_FNB_OWNER_ID).get("/fnb/reports")
        assert response.status_code == 200
        assert response.json()["data"]["page"] == "/fnb/reports"

    def test_user_without_membership_onboards(self, deps):
        response = _client_for("newcomer").get("/retail/dashboard")
        assert response["Location"] == "/onboarding"

    def test_super_admin_sent_to_console(self, deps):
        response = _client_for(DEV_SUPER_ADMIN_ID).get("/retail/dashboard")
        assert response.status_code == 302
        assert response["Location"] == "/admin"

    def test_lapsed_trial_requires_subscription(self, deps):
        deps.clock.advance(days=15)
        response = _client_for(DEV_TRIAL_OWNER_ID).get("/retail/dashboard")
        assert response["Location"] == "/subscription-required"

    def test_offline_trusts_cached_billing(self, deps):
        tenant = deps.store.get_tenant(DEV_RETAIL_TENANT_ID)
        deps.store.put_tenant(replace(tenant, status=TenantStatus.SUSPENDED))
        deps.connectivity.set_manual_offline(True)

        response = _client_for(DEV_RETAIL_OWNER_ID).get("/retail/dashboard")
        assert response.status_code == 200


class TestUnguardedPages:
    @pytest.mark.parametrize(
        "path",
        ["/auth", "/onboarding", "/access-denied", "/no-access",
         "/account-suspended", "/subscription-required"],
    )
    def test_status_pages_render_for_anyone(self, deps, path):
        response = _client_for().get(f"{path}?from=/retail/pos")
        assert response.status_code == 200
        assert response.json()["data"]["from"] == "/retail/pos"

    def test_public_order_pages(self, deps):
        response = _client_for().get("/order/table-4")
        assert response.status_code == 200
        assert response.json()["data"]["public"] is True


# ══════════════════════════════════════════════════════════════
# DECISION ENDPOINT
# ══════════════════════════════════════════════════════════════

class TestDecisionEndpoint:
    def test_serialised_decision(self, deps):
        response = _client_for(DEV_FNB_OWNER_ID).get("/v1/access/decision", {"path": "/pos"})
        assert response.status_code == 200
        decision = response.json()["data"]["decision"]
        assert decision == {
            "kind": "redirect",
            "target": "/fnb/dashboard",
            "reason": "wrong-business-type",
            "preserve_origin": None,
            "rule_id": "ACC-008",
        }

    def test_path_required(self, deps):
        response = _client_for(DEV_FNB_OWNER_ID).get("/v1/access/decision")
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"


# ══════════════════════════════════════════════════════════════
# ADMIN CONSOLE
# ══════════════════════════════════════════════════════════════

class TestAdminConsole:
    def test_super_admin_sees_tenants(self, deps):
        response = _client_for(DEV_SUPER_ADMIN_ID).get("/admin/")
        assert response.status_code == 200
        tenant_ids = [t["tenant_id"] for t in response.json()["data"]["tenants"]]
        assert tenant_ids == sorted([DEV_RETAIL_TENANT_ID, DEV_FNB_TENANT_ID, "dev-trial"])

    def test_anonymous_redirected(self, deps):
        response = _client_for().get("/admin")
        assert response["Location"] == "/auth?from=%2Fadmin"

    def test_tenant_user_denied_and_audited(self, deps, audit_sink):
        response = _client_for(DEV_RETAIL_OWNER_ID).get("/admin/reports")
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "SUPER_ADMIN_REQUIRED"

        (event,) = audit_sink.of_kind(KIND_ADMIN_CONSOLE_DENIED)
        assert event.actor_id == DEV_RETAIL_OWNER_ID
        assert event.path == "/admin/reports"

    def test_suspend_action(self, deps):
        admin = _client_for(DEV_SUPER_ADMIN_ID)
        response = _post_json(admin, f"/admin/tenants/{DEV_RETAIL_TENANT_ID}/suspend")
        assert response.status_code == 200
        assert response.json()["data"]["tenant"]["status"] == "suspended"

        owner = _client_for(DEV_RETAIL_OWNER_ID)
        assert owner.get("/retail/dashboard")["Location"] == "/account-suspended"

    def test_suspend_applies_to_user_with_cached_tenant(self, deps):
        owner = _client_for(DEV_RETAIL_OWNER_ID)
        assert owner.get("/retail/dashboard").status_code == 200

        admin = _client_for(DEV_SUPER_ADMIN_ID)
        _post_json(admin, f"/admin/tenants/{DEV_RETAIL_TENANT_ID}/suspend")
        assert owner.get("/retail/dashboard")["Location"] == "/account-suspended"

        _post_json(admin, f"/admin/tenants/{DEV_RETAIL_TENANT_ID}/unsuspend")
        assert owner.get("/retail/dashboard").status_code == 200

    def test_action_is_audited(self, deps, audit_sink):
        admin = _client_for(DEV_SUPER_ADMIN_ID)
        _post_json(admin, f"/admin/tenants/{DEV_RETAIL_TENANT_ID}/suspend")

        (event,) = audit_sink.of_kind(KIND_TENANT_SUSPENDED)
        assert event.actor_id == DEV_SUPER_ADMIN_ID
        assert event.target_tenant_id == DEV_RETAIL_TENANT_ID
        assert event.outcome == OUTCOME_APPLIED
        assert event.metadata == {"from_status": "active", "to_status": "suspended"}

    def test_rejected_action_is_not_audited(self, deps, audit_sink):
        admin = _client_for(DEV_SUPER_ADMIN_ID)
        _post_json(admin, f"/admin/tenants/{DEV_RETAIL_TENANT_ID}/unsuspend")
        assert audit_sink.of_kind(KIND_TENANT_UNSUSPENDED) == ()

    def test_invalid_transition(self, deps):
        admin = _client_for(DEV_SUPER_ADMIN_ID)
        _post_json(admin, f"/admin/tenants/{DEV_RETAIL_TENANT_ID}/suspend")
        response = _post_json(admin, f"/admin/tenants/{DEV_RETAIL_TENANT_ID}/suspend")
        assert response.status_code == 409
        assert response.json()["error"]["code"] == "INVALID_TRANSITION"

    def test_unknown_action(self, deps):
        admin = _client_for(DEV_SUPER_ADMIN_ID)
        response = _post_json(admin, f"/admin/tenants/{DEV_RETAIL_TENANT_ID}/delete")
        assert response.status_code == 400

    def test_unknown_tenant(self, deps):
        admin = _client_for(DEV_SUPER_ADMIN_ID)
        response = _post_json(admin, "/admin/tenants/nope/suspend")
        assert response.status_code == 404

    def test_tenant_user_cannot_act(self, deps):
        owner = _client_for(DEV_RETAIL_OWNER_ID)
        response = _post_json(owner, f"/admin/tenants/{DEV_RETAIL_TENANT_ID}/activate")
        assert response.status_code == 403
        assert deps.store.get_tenant(DEV_RETAIL_TENANT_ID).status == TenantStatus.ACTIVE


# ══════════════════════════════════════════════════════════════
# IMPERSONATION
# ══════════════════════════════════════════════════════════════

class TestImpersonation:
    def test_full_cycle(self, deps, audit_sink):
        admin = _client_for(DEV_SUPER_ADMIN_ID)

        response = _start_impersonation(admin)
        assert response.status_code == 200
        session = response.json()["data"]["impersonation"]
        assert session["target_tenant_id"] == DEV_FNB_TENANT_ID
        assert session["business_name_snapshot"] == "Dev Cafe"

        assert admin.get("/fnb/dashboard").status_code == 200

        exit_response = _post_json(admin, "/admin/impersonation/exit")
        assert exit_response.json()["data"]["impersonation"]["active"] is False
        assert admin.get("/fnb/dashboard")["Location"] == "/admin"

        assert len(audit_sink.of_kind(KIND_IMPERSONATION_START)) == 1
        assert len(audit_sink.of_kind(KIND_IMPERSONATION_EXIT)) == 1

    def test_impersonation_bypasses_suspension(self, deps):
        tenant = deps.store.get_tenant(DEV_FNB_TENANT_ID)
        deps.store.put_tenant(replace(tenant, status=TenantStatus.SUSPENDED))

        admin = _client_for(DEV_SUPER_ADMIN_ID)
        _start_impersonation(admin)
        assert admin.get("/fnb/dashboard").status_code == 200

    def test_target_without_membership_is_pending(self, deps):
        admin = _client_for(DEV_SUPER_ADMIN_ID)
        _start_impersonation(admin, target_user_id="nobody")

        response = admin.get("/fnb/dashboard")
        assert response.status_code == 202
        assert response["Retry-After"] == "1"
        assert response.json()["data"]["decision"]["reason"] == "tenant-loading"

        assert _post_json(admin, "/admin/impersonation/exit").status_code == 200

    def test_tenant_user_cannot_start(self, deps, audit_sink):
        owner = _client_for(DEV_RETAIL_OWNER_ID)
        response = _start_impersonation(owner)
        assert response.status_code == 403
        assert audit_sink.of_kind(KIND_IMPERSONATION_START) == ()

    def test_unknown_tenant(self, deps):
        response = _start_impersonation(_client_for(DEV_SUPER_ADMIN_ID), tenant_id="nope")
        assert response.status_code == 404

    def test_missing_fields(self, deps):
        response = _post_json(
            _client_for(DEV_SUPER_ADMIN_ID),
            "/admin/impersonation/start",
            {"tenant_id": DEV_FNB_TENANT_ID},
        )
        assert response.status_code == 400


# ══════════════════════════════════════════════════════════════
# SIGN-OUT
# ══════════════════════════════════════════════════════════════

class TestSignOut:
    def test_sign_out_ends_impersonation(self, deps, audit_sink):
        admin = _client_for(DEV_SUPER_ADMIN_ID)
        _start_impersonation(admin)

        response = _post_json(admin, "/v1/auth/sign-out")
        assert response.json()["data"] == {
            "signed_out": True,
            "impersonation_ended": True,
        }
        assert len(audit_sink.of_kind(KIND_IMPERSONATION_EXIT)) == 1

        after = admin.get("/fnb/dashboard")
        assert after["Location"] == "/auth?from=%2Ffnb%2Fdashboard"

    def test_sign_out_flushes_resolver_cache(self, deps):
        owner = _client_for(DEV_RETAIL_OWNER_ID)
        owner.get("/retail/dashboard")
        assert deps.resolver.cache.size > 0

        _post_json(owner, "/v1/auth/sign-out")
        assert deps.resolver.cache.size == 0

    def test_anonymous_sign_out(self, deps):
        response = _post_json(_client_for(), "/v1/auth/sign-out")
        assert response.json()["data"]["signed_out"] is False
