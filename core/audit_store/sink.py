"""
VELO Audit Store - Database Sink
================================
AuditSink that writes one AccessAuditRecord per event. Callers still
go through record_safely(), so a database error never reaches a
decision.
"""

from __future__ import annotations

from core.audit.models import AuditEvent


class DbAuditSink:
    def record(self, event: AuditEvent) -> None:
        from core.audit_store.models import AccessAuditRecord

        AccessAuditRecord.objects.create(
            kind=event.kind,
            actor_id=event.actor_id,
            target_tenant_id=event.target_tenant_id,
            path=event.path,
            outcome=event.outcome,
            occurred_at=event.occurred_at,
            metadata=dict(event.metadata),
        )

    def recent(self, limit: int = 50) -> list[AuditEvent]:
        from core.audit_store.models import AccessAuditRecord

        rows = AccessAuditRecord.objects.order_by("-occurred_at", "-id")[:limit]
        return [
            AuditEvent(
                kind=row.kind,
                actor_id=row.actor_id,
                target_tenant_id=row.target_tenant_id,
                path=row.path,
                outcome=row.outcome,
                occurred_at=row.occurred_at,
                metadata=dict(row.metadata or {}),
            )
            for row in rows
        ]
