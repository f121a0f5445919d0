"""
VELO Audit Store - Access Audit Records
=======================================
Append-only table behind DbAuditSink.
"""

from __future__ import annotations

from django.db import models

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
)


class AuditKind(models.TextChoices):
    IMPERSONATION_START = KIND_IMPERSONATION_START, "Impersonation started"
    IMPERSONATION_EXIT = KIND_IMPERSONATION_EXIT, "Impersonation ended"
    ADMIN_CONSOLE_DENIED = KIND_ADMIN_CONSOLE_DENIED, "Admin console denied"
    TENANT_ACTIVATED = KIND_TENANT_ACTIVATED, "Tenant activated"
    TENANT_SUSPENDED = KIND_TENANT_SUSPENDED, "Tenant suspended"
    TENANT_UNSUSPENDED = KIND_TENANT_UNSUSPENDED, "Tenant unsuspended"
    TENANT_EXPIRED = KIND_TENANT_EXPIRED, "Tenant expired"
    TENANT_TRIAL_STARTED = KIND_TENANT_TRIAL_STARTED, "Tenant trial started"


class AuditOutcome(models.TextChoices):
    GRANTED = OUTCOME_GRANTED, "Granted"
    DENIED = OUTCOME_DENIED, "Denied"
    ENDED = OUTCOME_ENDED, "Ended"
    APPLIED = OUTCOME_APPLIED, "Applied"


class AccessAuditRecord(models.Model):
    kind = models.CharField(max_length=64, choices=AuditKind.choices)
    actor_id = models.CharField(max_length=255, null=True, blank=True)
    target_tenant_id = models.CharField(max_length=255, null=True, blank=True)
    path = models.CharField(max_length=512)
    outcome = models.CharField(max_length=16, choices=AuditOutcome.choices)
    occurred_at = models.DateTimeField()
    metadata = models.JSONField(default=dict, blank=True)
    recorded_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "velo_access_audit"
        ordering = ["occurred_at", "id"]
        indexes = [
            models.Index(fields=["actor_id", "occurred_at"], name="idx_audit_actor_time"),
            models.Index(fields=["target_tenant_id", "occurred_at"], name="idx_audit_tenant_time"),
        ]

    def __str__(self) -> str:
        return f"{self.kind} {self.actor_id} {self.outcome}"
