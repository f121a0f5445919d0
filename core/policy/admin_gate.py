"""
VELO Access Policy - Super-Admin Console Gate
=============================================
Guards the /admin namespace. Stricter than ACC-005: no admin UI may
render until the super-admin check has completed, and a FALSE result
is a hard denial that is audited.

    not initialized -> Pending("auth-init")
    no user         -> Redirect("/auth")
    UNKNOWN         -> Pending("super-admin-check")
    FALSE           -> Denied("super-admin-required") + audit event
    TRUE            -> Allow()

Lookup errors reach this gate as FALSE (see TenantResolver).
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from core.audit import (
    KIND_ADMIN_CONSOLE_DENIED,
    OUTCOME_DENIED,
    AuditEvent,
    AuditSink,
    record_safely,
)
from core.identity.models import Identity
from core.policy.decisions import (
    Allow,
    ConsoleDecision,
    Denied,
    Pending,
    PendingReason,
    Redirect,
    RedirectReason,
)
from core.routing.tables import AUTH_ROUTE
from core.tenancy.models import SuperAdminFlag
from core.time import Clock, SystemClock

logger = logging.getLogger("velo.policy")

CONSOLE_GATE_ID = "ADM-001"
DENIED_REASON = "super-admin-required"


class AdminConsoleGate:
    def __init__(
        self,
        audit_sink: Optional[AuditSink] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._audit_sink = audit_sink
        self._clock = clock or SystemClock()

    def evaluate(
        self,
        identity: Identity,
        super_admin: SuperAdminFlag,
        path: str,
        now: Optional[datetime] = None,
    ) -> ConsoleDecision:
        if not identity.initialized:
            return Pending(PendingReason.AUTH_INIT, rule_id=CONSOLE_GATE_ID)

        if identity.user_id is None:
            return Redirect(
                AUTH_ROUTE,
                RedirectReason.UNAUTHENTICATED,
                preserve_origin=path,
                rule_id=CONSOLE_GATE_ID,
            )

        if super_admin == SuperAdminFlag.TRUE:
            return Allow(rule_id=CONSOLE_GATE_ID)

        if super_admin == SuperAdminFlag.FALSE:
            logger.warning(
                f"User {identity.user_id} denied admin console at {path}."
            )
            record_safely(
                self._audit_sink,
                AuditEvent(
                    kind=KIND_ADMIN_CONSOLE_DENIED,
                    actor_id=identity.user_id,
                    path=path,
                    outcome=OUTCOME_DENIED,
                    occurred_at=now or self._clock.now_utc(),
                ),
            )
            return Denied(DENIED_REASON, rule_id=CONSOLE_GATE_ID)

        return Pending(PendingReason.SUPER_ADMIN_CHECK, rule_id=CONSOLE_GATE_ID)
