"""
VELO Impersonation - Manager
============================
The only mutation API in the access layer: start() and exit().

Callers must have proven super-admin status before calling start();
the manager records the actor but does not re-verify. Every start and
every effective exit is sent to the audit sink.
"""

from __future__ import annotations

import json
import logging
from typing import Optional

from core.access.settings import DEFAULT_SETTINGS
from core.audit import (
    KIND_IMPERSONATION_EXIT,
    KIND_IMPERSONATION_START,
    OUTCOME_ENDED,
    OUTCOME_GRANTED,
    AuditEvent,
    AuditSink,
    record_safely,
)
from core.impersonation.session import INACTIVE, ImpersonationSession
from core.impersonation.storage import SessionStorage
from core.time import Clock, SystemClock

logger = logging.getLogger("velo.impersonation")

IMPERSONATION_PATH = "/admin/impersonation"


class ImpersonationManager:
    def __init__(
        self,
        storage: SessionStorage,
        audit_sink: Optional[AuditSink] = None,
        clock: Optional[Clock] = None,
        storage_key: str = DEFAULT_SETTINGS.impersonation_storage_key,
    ) -> None:
        self._storage = storage
        self._audit_sink = audit_sink
        self._clock = clock or SystemClock()
        self._key = storage_key

    def current(self) -> ImpersonationSession:
        """
        Restore the session from storage.

        Unreadable stored state is logged, removed and treated as
        inactive.
        """
        raw = self._storage.get(self._key)
        if not raw:
            return INACTIVE
        try:
            return ImpersonationSession.from_dict(json.loads(raw))
        except (ValueError, TypeError, AttributeError):
            logger.exception("Failed to restore impersonation state; discarding it.")
            self._storage.delete(self._key)
            return INACTIVE

    def start(
        self,
        actor_id: str,
        tenant_id: str,
        target_user_id: str,
        name_snapshot: str = "",
    ) -> ImpersonationSession:
        for name, value in (
            ("actor_id", actor_id),
            ("tenant_id", tenant_id),
            ("target_user_id", target_user_id),
        ):
            if not value or not isinstance(value, str):
                raise ValueError(f"{name} must be a non-empty string.")

        previous = self.current()
        if previous.active:
            logger.info(
                f"Actor {actor_id} replaces impersonation of tenant "
                f"{previous.target_tenant_id} with {tenant_id}."
            )

        now = self._clock.now_utc()
        session = ImpersonationSession(
            active=True,
            actor_super_admin_id=actor_id,
            target_tenant_id=tenant_id,
            target_user_id=target_user_id,
            business_name_snapshot=name_snapshot or None,
            started_at=now,
        )
        self._storage.set(self._key, json.dumps(session.to_dict()))

        logger.info(f"Actor {actor_id} started impersonating tenant {tenant_id}.")
        record_safely(
            self._audit_sink,
            AuditEvent(
                kind=KIND_IMPERSONATION_START,
                actor_id=actor_id,
                target_tenant_id=tenant_id,
                path=IMPERSONATION_PATH,
                outcome=OUTCOME_GRANTED,
                occurred_at=now,
                metadata={
                    "target_user_id": target_user_id,
                    "business_name": name_snapshot,
                },
            ),
        )
        return session

    def exit(self) -> ImpersonationSession:
        """End impersonation. Calling it with nothing active is a no-op."""
        session = self.current()
        self._storage.delete(self._key)
        if not session.active:
            return INACTIVE

        now = self._clock.now_utc()
        logger.info(
            f"Actor {session.actor_super_admin_id} stopped impersonating "
            f"tenant {session.target_tenant_id}."
        )
        record_safely(
            self._audit_sink,
            AuditEvent(
                kind=KIND_IMPERSONATION_EXIT,
                actor_id=session.actor_super_admin_id,
                target_tenant_id=session.target_tenant_id,
                path=IMPERSONATION_PATH,
                outcome=OUTCOME_ENDED,
                occurred_at=now,
                metadata={
                    "duration_seconds": int(
                        (now - session.started_at).total_seconds()
                    ),
                },
            ),
        )
        return INACTIVE

    def on_sign_out(self, user_id: Optional[str]) -> bool:
        """Destroy the session if user_id is its actor. Returns True if ended."""
        session = self.current()
        if not session.active or session.actor_super_admin_id != user_id:
            return False
        self.exit()
        return True
