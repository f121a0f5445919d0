"""
VELO Tenancy - Tenant Lifecycle (Admin Actions)
===============================================
Status changes a super-admin can apply to a tenant:
  activate | suspend | unsuspend | expire | start_trial

Suspension is sticky: on a suspended tenant every action except
unsuspend is rejected. Actions return new Tenant values; persisting
them is the caller's job.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Dict, FrozenSet

from core.access.settings import DEFAULT_SETTINGS, AccessSettings
from core.tenancy.models import Tenant, TenantStatus

logger = logging.getLogger("velo.tenancy")


class TenantLifecycleError(Exception):
    """An admin action is not valid for the tenant's current status."""

    def __init__(self, tenant_id: str, action: str, status: TenantStatus):
        self.tenant_id = tenant_id
        self.action = action
        self.status = status
        super().__init__(
            f"Cannot {action} tenant {tenant_id} in status {status.value}."
        )


ACTION_ACTIVATE = "activate"
ACTION_SUSPEND = "suspend"
ACTION_UNSUSPEND = "unsuspend"
ACTION_EXPIRE = "expire"
ACTION_START_TRIAL = "start_trial"

_ALLOWED_FROM: Dict[str, FrozenSet[TenantStatus]] = {
    ACTION_ACTIVATE: frozenset({TenantStatus.TRIAL, TenantStatus.EXPIRED}),
    ACTION_SUSPEND: frozenset(
        {TenantStatus.TRIAL, TenantStatus.ACTIVE, TenantStatus.EXPIRED}
    ),
    ACTION_UNSUSPEND: frozenset({TenantStatus.SUSPENDED}),
    ACTION_EXPIRE: frozenset({TenantStatus.TRIAL, TenantStatus.ACTIVE}),
    ACTION_START_TRIAL: frozenset({TenantStatus.TRIAL, TenantStatus.EXPIRED}),
}

ADMIN_ACTIONS = tuple(_ALLOWED_FROM)


def _check(tenant: Tenant, action: str) -> None:
    if tenant.status not in _ALLOWED_FROM[action]:
        raise TenantLifecycleError(tenant.tenant_id, action, tenant.status)


def activate(tenant: Tenant) -> Tenant:
    _check(tenant, ACTION_ACTIVATE)
    return replace(tenant, status=TenantStatus.ACTIVE, trial_end_at=None)


def suspend(tenant: Tenant) -> Tenant:
    _check(tenant, ACTION_SUSPEND)
    return replace(tenant, status=TenantStatus.SUSPENDED)


def unsuspend(tenant: Tenant) -> Tenant:
    """Suspended tenants come back as active."""
    _check(tenant, ACTION_UNSUSPEND)
    return replace(tenant, status=TenantStatus.ACTIVE, trial_end_at=None)


def expire(tenant: Tenant) -> Tenant:
    _check(tenant, ACTION_EXPIRE)
    return replace(tenant, status=TenantStatus.EXPIRED)


def start_trial(
    tenant: Tenant,
    now: datetime,
    settings: AccessSettings = DEFAULT_SETTINGS,
) -> Tenant:
    _check(tenant, ACTION_START_TRIAL)
    if now.tzinfo is None:
        raise ValueError("now must be timezone-aware.")
    return replace(
        tenant,
        status=TenantStatus.TRIAL,
        trial_end_at=now + timedelta(days=settings.trial_length_days),
    )


def apply_admin_action(
    tenant: Tenant,
    action: str,
    now: datetime,
    settings: AccessSettings = DEFAULT_SETTINGS,
) -> Tenant:
    """Dispatch an admin action by name."""
    if action not in _ALLOWED_FROM:
        raise ValueError(
            f"Unknown admin action '{action}'. Must be one of: {list(ADMIN_ACTIONS)}"
        )

    if action == ACTION_START_TRIAL:
        updated = start_trial(tenant, now, settings)
    else:
        updated = {
            ACTION_ACTIVATE: activate,
            ACTION_SUSPEND: suspend,
            ACTION_UNSUSPEND: unsuspend,
            ACTION_EXPIRE: expire,
        }[action](tenant)

    logger.info(
        f"Tenant {tenant.tenant_id}: {action} "
        f"({tenant.status.value} -> {updated.status.value})."
    )
    return updated
