"""
VELO Tenancy - Tenant Resolver
==============================
Resolves, for one user id:
  - the membership and its tenant  -> TenantState
  - the super-admin flag           -> SuperAdminFlag
  - an impersonation target        -> TenantState

Results are cached per user id (TTLs from AccessSettings) and flushed
by invalidate(user_id) on sign-out and by invalidate_tenant(tenant_id)
after an admin action changes that tenant.

Failures fail closed:
  super-admin lookup error   -> FALSE, never TRUE
  membership/tenant error    -> TenantState.lookup_failed()
Failed lookups are not cached; the next navigation retries them.
"""

from __future__ import annotations

import logging
from typing import Optional

from core.access.settings import DEFAULT_SETTINGS, AccessSettings
from core.caching import UserScopedCache
from core.impersonation.session import ImpersonationSession
from core.tenancy.models import SuperAdminFlag, TenantState
from core.tenancy.stores import MembershipStore, SuperAdminRegistry
from core.time import Clock, SystemClock

logger = logging.getLogger("velo.tenancy")

_NS_MEMBERSHIP = "membership"
_NS_SUPER_ADMIN = "super_admin"
_NS_TARGET = "impersonation_target"


class TenantResolver:
    def __init__(
        self,
        store: MembershipStore,
        registry: SuperAdminRegistry,
        clock: Optional[Clock] = None,
        settings: AccessSettings = DEFAULT_SETTINGS,
        cache: Optional[UserScopedCache] = None,
    ) -> None:
        self._store = store
        self._registry = registry
        self._clock = clock or SystemClock()
        self._settings = settings
        self._cache = cache or UserScopedCache(max_size=settings.cache_max_size)

    @property
    def cache(self) -> UserScopedCache:
        return self._cache

    # ── Membership ────────────────────────────────────────────

    def resolve_membership(self, user_id: str) -> TenantState:
        now = self._clock.now_utc()
        cached = self._cache.get(_NS_MEMBERSHIP, user_id, now)
        if not UserScopedCache.is_missing(cached):
            return cached

        try:
            membership = self._store.get_membership(user_id)
            if membership is None:
                state = TenantState.no_tenant()
            else:
                tenant = self._store.get_tenant(membership.tenant_id)
                if tenant is None:
                    logger.error(
                        f"Membership of user {user_id} points at missing "
                        f"tenant {membership.tenant_id}."
                    )
                    return TenantState.lookup_failed()
                state = TenantState.resolved(membership, tenant)
        except Exception:
            logger.exception(f"Membership lookup failed for user {user_id}.")
            return TenantState.lookup_failed()

        self._cache.put(
            _NS_MEMBERSHIP,
            user_id,
            state,
            now,
            self._settings.membership_cache_ttl_seconds,
        )
        return state

    # ── Super-admin ───────────────────────────────────────────

    def resolve_super_admin(self, user_id: str) -> SuperAdminFlag:
        now = self._clock.now_utc()
        cached = self._cache.get(_NS_SUPER_ADMIN, user_id, now)
        if not UserScopedCache.is_missing(cached):
            return cached

        try:
            flag = SuperAdminFlag.from_bool(self._registry.is_super_admin(user_id))
        except Exception:
            logger.exception(
                f"Super-admin check failed for user {user_id}; denying."
            )
            return SuperAdminFlag.FALSE

        self._cache.put(
            _NS_SUPER_ADMIN,
            user_id,
            flag,
            now,
            self._settings.super_admin_cache_ttl_seconds,
        )
        return flag

    # ── Impersonation target ──────────────────────────────────

    def resolve_impersonation_target(
        self, session: ImpersonationSession
    ) -> TenantState:
        """
        Load the impersonated tenant and its target user's membership.

        A target membership in a different tenant is discarded, so the
        target appears membership-less rather than leaking another
        tenant's role.
        """
        if not session.active:
            return TenantState.no_tenant()

        actor_id = session.actor_super_admin_id
        namespace = f"{_NS_TARGET}:{session.target_tenant_id}:{session.target_user_id}"
        now = self._clock.now_utc()
        cached = self._cache.get(namespace, actor_id, now)
        if not UserScopedCache.is_missing(cached):
            return cached

        try:
            tenant = self._store.get_tenant(session.target_tenant_id)
            if tenant is None:
                logger.error(
                    f"Impersonated tenant {session.target_tenant_id} not found."
                )
                return TenantState.lookup_failed()

            membership = self._store.get_membership(session.target_user_id)
        except Exception:
            logger.exception(
                f"Impersonation target lookup failed for tenant "
                f"{session.target_tenant_id}."
            )
            return TenantState.lookup_failed()

        if membership is not None and membership.tenant_id != tenant.tenant_id:
            logger.warning(
                f"Impersonation target user {session.target_user_id} belongs to "
                f"tenant {membership.tenant_id}, not {tenant.tenant_id}; "
                "ignoring that membership."
            )
            membership = None

        if membership is None:
            state = TenantState(loaded=True, tenant=tenant)
        else:
            state = TenantState.resolved(membership, tenant)

        self._cache.put(
            namespace,
            actor_id,
            state,
            now,
            self._settings.membership_cache_ttl_seconds,
        )
        return state

    # ── Invalidation ──────────────────────────────────────────

    def invalidate(self, user_id: str) -> int:
        removed = self._cache.invalidate_user(user_id)
        logger.debug(f"Invalidated {removed} cached resolutions for user {user_id}.")
        return removed

    def invalidate_tenant(self, tenant_id: str) -> int:
        """Drop every cached resolution, own or impersonated, holding tenant_id."""

        def holds_tenant(value) -> bool:
            return (
                isinstance(value, TenantState)
                and value.tenant is not None
                and value.tenant.tenant_id == tenant_id
            )

        removed = self._cache.invalidate_matching(holds_tenant)
        logger.debug(
            f"Invalidated {removed} cached resolutions for tenant {tenant_id}."
        )
        return removed
