"""
VELO Core Audit - Public API
===========================
Access audit events and fire-and-forget sinks.
"""

from core.audit.models import (
    KIND_ADMIN_CONSOLE_DENIED,
    KIND_IMPERSONATION_EXIT,
    KIND_IMPERSONATION_START,
    KIND_TENANT_ACTIVATED,
    KIND_TENANT_EXPIRED,
    KIND_TENANT_SUSPENDED,
    KIND_TENANT_TRIAL_STARTED,
    KIND_TENANT_UNSUSPENDED,
    OUTCOME_APPLIED,
    OUTCOME_DENIED,
    OUTCOME_ENDED,
    OUTCOME_GRANTED,
    TENANT_ACTION_KINDS,
    AuditEvent,
)
from core.audit.sinks import (
    AuditSink,
    InMemoryAuditSink,
    LoggingAuditSink,
    record_safely,
)

__all__ = [
    "AuditEvent",
    "AuditSink",
    "InMemoryAuditSink",
    "LoggingAuditSink",
    "record_safely",
    "KIND_IMPERSONATION_START",
    "KIND_IMPERSONATION_EXIT",
    "KIND_ADMIN_CONSOLE_DENIED",
    "KIND_TENANT_ACTIVATED",
    "KIND_TENANT_SUSPENDED",
    "KIND_TENANT_UNSUSPENDED",
    "KIND_TENANT_EXPIRED",
    "KIND_TENANT_TRIAL_STARTED",
    "TENANT_ACTION_KINDS",
    "OUTCOME_GRANTED",
    "OUTCOME_DENIED",
    "OUTCOME_ENDED",
    "OUTCOME_APPLIED",
]
