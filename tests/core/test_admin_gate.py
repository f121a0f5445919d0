"""
VELO Access Policy - Admin Console Gate Tests
=============================================
The console never renders before the super-admin check completes,
and a negative check is a hard, audited denial.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from core.audit import KIND_ADMIN_CONSOLE_DENIED, OUTCOME_DENIED, InMemoryAuditSink
from core.identity.models import ANONYMOUS, UNINITIALIZED, Identity
from core.policy import AdminConsoleGate, Allow, Denied, Pending, Redirect
from core.tenancy.models import SuperAdminFlag
from core.time import FixedClock


FIXED_TIME = datetime(2026, 2, 13, 12, 0, 0, tzinfo=timezone.utc)
OWNER = Identity(user_id="owner-1", initialized=True)
ROOT = Identity(user_id="root-1", initialized=True)


class BrokenSink:
    def record(self, event):
        raise RuntimeError("audit store down")


@pytest.fixture
def sink():
    return InMemoryAuditSink()


@pytest.fixture
def gate(sink):
    return AdminConsoleGate(audit_sink=sink, clock=FixedClock(FIXED_TIME))


class TestAdminConsoleGate:
    @pytest.mark.parametrize("flag", list(SuperAdminFlag))
    def test_waits_for_auth(self, gate, flag):
        decision = gate.evaluate(UNINITIALIZED, flag, "/admin")
        assert decision == Pending("auth-init", rule_id="ADM-001")

    def test_anonymous_goes_to_auth(self, gate):
        decision = gate.evaluate(ANONYMOUS, SuperAdminFlag.UNKNOWN, "/admin/tenants")
        assert isinstance(decision, Redirect)
        assert decision.target == "/auth"
        assert decision.preserve_origin == "/admin/tenants"

    def test_unknown_never_renders(self, gate, sink):
        decision = gate.evaluate(ROOT, SuperAdminFlag.UNKNOWN, "/admin")
        assert decision == Pending("super-admin-check", rule_id="ADM-001")
        assert sink.events == ()

    def test_super_admin_allowed(self, gate, sink):
        assert gate.evaluate(ROOT, SuperAdminFlag.TRUE, "/admin") == Allow(
            rule_id="ADM-001"
        )
        assert sink.events == ()

    def test_non_super_admin_denied_and_audited(self, gate, sink):
        decision = gate.evaluate(OWNER, SuperAdminFlag.FALSE, "/admin/tenants")
        assert decision == Denied("super-admin-required", rule_id="ADM-001")

        (event,) = sink.of_kind(KIND_ADMIN_CONSOLE_DENIED)
        assert event.actor_id == "owner-1"
        assert event.path == "/admin/tenants"
        assert event.outcome == OUTCOME_DENIED
        assert event.occurred_at == FIXED_TIME

    def test_explicit_now_is_used(self, gate, sink):
        later = datetime(2026, 2, 14, 8, 30, 0, tzinfo=timezone.utc)
        gate.evaluate(OWNER, SuperAdminFlag.FALSE, "/admin", now=later)
        assert sink.events[0].occurred_at == later

    def test_audit_failure_still_denies(self):
        gate = AdminConsoleGate(audit_sink=BrokenSink(), clock=FixedClock(FIXED_TIME))
        decision = gate.evaluate(OWNER, SuperAdminFlag.FALSE, "/admin")
        assert isinstance(decision, Denied)

    def test_decisions_serialise(self, gate):
        assert gate.evaluate(OWNER, SuperAdminFlag.FALSE, "/admin").to_dict() == {
            "kind": "denied",
            "reason": "super-admin-required",
            "rule_id": "ADM-001",
        }
