"""
VELO Access - Source Tracker
============================
Holds the most recently completed value of each access source for the
current user and turns them into AccessInputs on demand.

Sources resolve independently and out of order. There is no
cancellation: a result for a user that is no longer current is simply
discarded, and an impersonation-target result for a session that has
since changed is discarded the same way.

Sign-out (identity with no user) clears every user-scoped slot.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Callable, Optional

from core.identity.models import UNINITIALIZED, Identity
from core.impersonation.session import INACTIVE, ImpersonationSession
from core.policy.inputs import AccessInputs
from core.resilience.connectivity import Connectivity
from core.routing.request import RouteRequest
from core.tenancy.models import SuperAdminFlag, TenantState

logger = logging.getLogger("velo.access")


def _same_target(a: ImpersonationSession, b: ImpersonationSession) -> bool:
    return (
        a.active == b.active
        and a.target_tenant_id == b.target_tenant_id
        and a.target_user_id == b.target_user_id
    )


class AccessSources:
    def __init__(self, connectivity: Connectivity = Connectivity.ONLINE) -> None:
        self._lock = threading.Lock()
        self._identity: Identity = UNINITIALIZED
        self._tenant_state = TenantState.pending()
        self._super_admin = SuperAdminFlag.UNKNOWN
        self._impersonation: ImpersonationSession = INACTIVE
        self._impersonation_target = TenantState.pending()
        self._connectivity = connectivity

    # ── Identity ──────────────────────────────────────────────

    @property
    def identity(self) -> Identity:
        return self._identity

    @property
    def current_user_id(self) -> Optional[str]:
        return self._identity.user_id

    def update_identity(self, identity: Identity) -> None:
        with self._lock:
            previous = self._identity.user_id
            self._identity = identity
            if identity.user_id != previous:
                self._reset_user_slots()
                if identity.user_id is None:
                    self._impersonation = INACTIVE
                    self._impersonation_target = TenantState.pending()

    def attach(self, subscribe: Callable[[Callable[[Identity], None]], Callable[[], None]]):
        """
        Follow an identity source, e.g. attach(source.on_auth_change).

        Returns the unsubscribe function.
        """
        return subscribe(self.update_identity)

    def clear(self) -> None:
        with self._lock:
            self._reset_user_slots()
            self._impersonation = INACTIVE
            self._impersonation_target = TenantState.pending()

    def _reset_user_slots(self) -> None:
        self._tenant_state = TenantState.pending()
        self._super_admin = SuperAdminFlag.UNKNOWN

    # ── User-scoped results ───────────────────────────────────

    def set_tenant_state(self, user_id: str, state: TenantState) -> bool:
        """Store a membership result. Returns False if it was stale."""
        with self._lock:
            if user_id != self._identity.user_id:
                logger.debug(f"Discarding stale tenant state for user {user_id}.")
                return False
            self._tenant_state = state
            return True

    def set_super_admin(self, user_id: str, flag: SuperAdminFlag) -> bool:
        with self._lock:
            if user_id != self._identity.user_id:
                logger.debug(f"Discarding stale super-admin flag for user {user_id}.")
                return False
            self._super_admin = flag
            return True

    # ── Impersonation ─────────────────────────────────────────

    def set_impersonation(self, session: ImpersonationSession) -> None:
        with self._lock:
            if not _same_target(session, self._impersonation):
                self._impersonation_target = TenantState.pending()
            self._impersonation = session

    def set_impersonation_target(
        self, session: ImpersonationSession, state: TenantState
    ) -> bool:
        with self._lock:
            if not session.active or not _same_target(session, self._impersonation):
                logger.debug(
                    f"Discarding impersonation target for tenant "
                    f"{session.target_tenant_id}; session changed."
                )
                return False
            self._impersonation_target = state
            return True

    # ── Connectivity ──────────────────────────────────────────

    def set_connectivity(self, connectivity: Connectivity) -> None:
        with self._lock:
            self._connectivity = connectivity

    # ── Snapshot ──────────────────────────────────────────────

    def snapshot(self, route: RouteRequest, now: datetime) -> AccessInputs:
        with self._lock:
            return AccessInputs(
                identity=self._identity,
                tenant_state=self._tenant_state,
                super_admin=self._super_admin,
                route=route,
                now=now,
                impersonation=self._impersonation,
                impersonation_target=self._impersonation_target,
                connectivity=self._connectivity,
            )
