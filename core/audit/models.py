"""
VELO Core Audit - Immutable Access Audit Events
===============================================
Append-only records of security-relevant access outcomes:
impersonation start/exit, denied admin-console attempts and tenant
lifecycle actions taken from the console.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional


# ══════════════════════════════════════════════════════════════
# EVENT KINDS AND OUTCOMES
# ══════════════════════════════════════════════════════════════

KIND_IMPERSONATION_START = "impersonation.start"
KIND_IMPERSONATION_EXIT = "impersonation.exit"
KIND_ADMIN_CONSOLE_DENIED = "admin_console.denied"
KIND_TENANT_ACTIVATED = "tenant.activate"
KIND_TENANT_SUSPENDED = "tenant.suspend"
KIND_TENANT_UNSUSPENDED = "tenant.unsuspend"
KIND_TENANT_EXPIRED = "tenant.expire"
KIND_TENANT_TRIAL_STARTED = "tenant.start_trial"

TENANT_ACTION_KINDS = {
    "activate": KIND_TENANT_ACTIVATED,
    "suspend": KIND_TENANT_SUSPENDED,
    "unsuspend": KIND_TENANT_UNSUSPENDED,
    "expire": KIND_TENANT_EXPIRED,
    "start_trial": KIND_TENANT_TRIAL_STARTED,
}

VALID_KINDS = frozenset({
    KIND_IMPERSONATION_START,
    KIND_IMPERSONATION_EXIT,
    KIND_ADMIN_CONSOLE_DENIED,
    *TENANT_ACTION_KINDS.values(),
})

OUTCOME_GRANTED = "GRANTED"
OUTCOME_DENIED = "DENIED"
OUTCOME_ENDED = "ENDED"
OUTCOME_APPLIED = "APPLIED"

VALID_OUTCOMES = frozenset(
    {OUTCOME_GRANTED, OUTCOME_DENIED, OUTCOME_ENDED, OUTCOME_APPLIED}
)


@dataclass(frozen=True)
class AuditEvent:
    """
    One audit record handed to an AuditSink.

    actor_id is None only for anonymous console attempts.
    """

    kind: str
    actor_id: Optional[str]
    path: str
    outcome: str
    occurred_at: datetime
    target_tenant_id: Optional[str] = None
    metadata: dict = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.kind not in VALID_KINDS:
            raise ValueError(
                f"kind '{self.kind}' not valid. "
                f"Must be one of: {sorted(VALID_KINDS)}"
            )
        if self.outcome not in VALID_OUTCOMES:
            raise ValueError(
                f"outcome '{self.outcome}' not valid. "
                f"Must be one of: {sorted(VALID_OUTCOMES)}"
            )
        if self.occurred_at.tzinfo is None:
            raise ValueError("occurred_at must be timezone-aware.")

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "actor_id": self.actor_id,
            "target_tenant_id": self.target_tenant_id,
            "path": self.path,
            "outcome": self.outcome,
            "occurred_at": self.occurred_at.isoformat(),
            "metadata": dict(self.metadata),
        }
