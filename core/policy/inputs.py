"""
VELO Access Policy - Evaluation Inputs
======================================
AccessInputs is the fully materialised snapshot of the five access
sources for one navigation. EvaluationContext derives everything the
rules need from it once, so each rule is a plain predicate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from core.identity.models import Identity
from core.impersonation.session import INACTIVE, ImpersonationSession
from core.resilience.connectivity import Connectivity
from core.routing.request import RouteRequest
from core.routing.tables import (
    DEFAULT_ROUTING,
    RoutingTable,
    business_type_for_routing,
    normalize_path,
)
from core.tenancy.models import (
    BusinessType,
    Role,
    SuperAdminFlag,
    Tenant,
    TenantMembership,
    TenantState,
)

logger = logging.getLogger("velo.policy")


@dataclass(frozen=True)
class AccessInputs:
    identity: Identity
    tenant_state: TenantState
    super_admin: SuperAdminFlag
    route: RouteRequest
    now: datetime
    impersonation: ImpersonationSession = INACTIVE
    impersonation_target: TenantState = field(default_factory=TenantState.pending)
    connectivity: Connectivity = Connectivity.ONLINE

    def __post_init__(self):
        if not isinstance(self.identity, Identity):
            raise ValueError("identity must be Identity.")

        if not isinstance(self.tenant_state, TenantState):
            raise ValueError("tenant_state must be TenantState.")

        if not isinstance(self.super_admin, SuperAdminFlag):
            raise ValueError("super_admin must be SuperAdminFlag.")

        if not isinstance(self.route, RouteRequest):
            raise ValueError("route must be RouteRequest.")

        if not isinstance(self.impersonation, ImpersonationSession):
            raise ValueError("impersonation must be ImpersonationSession.")

        if not isinstance(self.impersonation_target, TenantState):
            raise ValueError("impersonation_target must be TenantState.")

        if not isinstance(self.connectivity, Connectivity):
            raise ValueError("connectivity must be Connectivity.")

        if not isinstance(self.now, datetime) or self.now.tzinfo is None:
            raise ValueError("now must be a timezone-aware datetime.")


@dataclass(frozen=True)
class EvaluationContext:
    """
    Derived, read-only view over AccessInputs.

    is_impersonating is True only for an active session whose actor is
    the signed-in user and whose super-admin flag is not FALSE. A
    session left behind by another user, or by a revoked super-admin,
    is ignored.
    """

    inputs: AccessInputs
    routing: RoutingTable
    is_impersonating: bool
    path: str
    translated_path: str

    @classmethod
    def build(
        cls,
        inputs: AccessInputs,
        routing: RoutingTable = DEFAULT_ROUTING,
    ) -> "EvaluationContext":
        session = inputs.impersonation
        impersonating = (
            session.active
            and session.actor_super_admin_id == inputs.identity.user_id
            and inputs.super_admin != SuperAdminFlag.FALSE
        )
        if session.active and not impersonating and inputs.identity.user_id:
            logger.warning(
                f"Ignoring impersonation session of actor "
                f"{session.actor_super_admin_id} for user "
                f"{inputs.identity.user_id}."
            )

        path = normalize_path(inputs.route.path)
        return cls(
            inputs=inputs,
            routing=routing,
            is_impersonating=impersonating,
            path=path,
            translated_path=routing.translate_legacy(path),
        )

    # ── Effective tenant (target's when impersonating) ────────

    @property
    def effective_state(self) -> TenantState:
        if self.is_impersonating:
            return self.inputs.impersonation_target
        return self.inputs.tenant_state

    @property
    def membership(self) -> Optional[TenantMembership]:
        return self.effective_state.membership

    @property
    def tenant(self) -> Optional[Tenant]:
        return self.effective_state.tenant

    @property
    def role(self) -> Optional[Role]:
        return self.effective_state.role

    @property
    def business_type(self) -> BusinessType:
        return business_type_for_routing(self.tenant)

    @property
    def route(self) -> RouteRequest:
        return self.inputs.route
