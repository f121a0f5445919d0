"""
VELO Access Policy - Core Evaluation Engine
===========================================
Pure, deterministic, FAIL-SAFE access evaluation.

decide() NEVER raises. A rule that raises is logged and converted:
    fail_closed -> Redirect("/access-denied", reason="policy-error")
    fail_open   -> rule skipped, evaluation continues

The AccessPolicyEngine does NOT:
- Read the system clock (now is part of AccessInputs)
- Persist anything or emit audit events
- Call stores, registries or probes
- Mutate shared state
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

from core.identity.models import Identity
from core.impersonation.session import INACTIVE, ImpersonationSession
from core.policy.contracts import BaseAccessRule, OnError
from core.policy.decisions import (
    Allow,
    AllowWithUpsell,
    Decision,
    Pending,
    Redirect,
    RedirectReason,
)
from core.policy.exceptions import DuplicateRuleError, InvalidRuleOrderError
from core.policy.inputs import AccessInputs, EvaluationContext
from core.policy.rules import default_rules
from core.resilience.connectivity import Connectivity
from core.routing.request import RouteRequest
from core.routing.tables import ACCESS_DENIED_ROUTE, DEFAULT_ROUTING, RoutingTable
from core.saas.plans import FeatureEntitlement
from core.saas.subscriptions import SubscriptionGate
from core.tenancy.models import SuperAdminFlag, TenantState

logger = logging.getLogger("velo.policy")

_DECISION_TYPES = (Pending, Redirect, Allow, AllowWithUpsell)


class AccessPolicyEngine:
    """
    Ordered first-match evaluation over a validated rule set.

    Usage:
        engine = AccessPolicyEngine()
        decision = engine.decide(AccessInputs(...))
    """

    def __init__(
        self,
        routing: RoutingTable = DEFAULT_ROUTING,
        gate: Optional[SubscriptionGate] = None,
        entitlement: Optional[FeatureEntitlement] = None,
        rules: Optional[Iterable[BaseAccessRule]] = None,
    ):
        if rules is None:
            rules = default_rules(gate=gate, entitlement=entitlement)
        self._rules = self._validate(tuple(rules))
        self._routing = routing

    @staticmethod
    def _validate(rules: tuple[BaseAccessRule, ...]) -> tuple[BaseAccessRule, ...]:
        seen_ids: set[str] = set()
        by_order: dict[int, list[str]] = {}
        for rule in rules:
            if rule.rule_id in seen_ids:
                raise DuplicateRuleError(rule.rule_id)
            seen_ids.add(rule.rule_id)
            by_order.setdefault(rule.order, []).append(rule.rule_id)

        for order, rule_ids in by_order.items():
            if len(rule_ids) > 1:
                raise InvalidRuleOrderError(order, tuple(rule_ids))

        return tuple(sorted(rules, key=lambda r: r.order))

    @property
    def rules(self) -> tuple[BaseAccessRule, ...]:
        return self._rules

    @property
    def routing(self) -> RoutingTable:
        return self._routing

    def decide(self, inputs: AccessInputs) -> Decision:
        """
        Evaluate inputs against the rule set.

        GUARANTEE: This method NEVER raises.
        """
        try:
            ctx = EvaluationContext.build(inputs, self._routing)
        except Exception:
            logger.exception("Failed to build access evaluation context.")
            return Redirect(
                target=ACCESS_DENIED_ROUTE,
                reason=RedirectReason.POLICY_ERROR,
            )

        for rule in self._rules:
            decision = self._execute_rule_safe(rule, ctx)
            if decision is None:
                continue
            if isinstance(decision, Redirect):
                logger.debug(
                    f"{rule.rule_id} redirects {ctx.path} -> {decision.target} "
                    f"({decision.reason})."
                )
            return decision

        # Unreachable with the default rule set (ACC-012 always fires).
        return Allow()

    @staticmethod
    def _execute_rule_safe(
        rule: BaseAccessRule, ctx: EvaluationContext
    ) -> Optional[Decision]:
        try:
            decision = rule.evaluate(ctx)
            if decision is not None and not isinstance(decision, _DECISION_TYPES):
                raise TypeError(
                    f"returned {type(decision).__name__}, expected a Decision"
                )
            return decision
        except Exception:
            logger.exception(
                f"Access rule {rule.rule_id} failed on path {ctx.path} "
                f"({rule.on_error})."
            )
            if rule.on_error == OnError.FAIL_OPEN:
                return None
            return Redirect(
                target=ACCESS_DENIED_ROUTE,
                reason=RedirectReason.POLICY_ERROR,
                rule_id=rule.rule_id,
            )


_DEFAULT_ENGINE = AccessPolicyEngine()


def decide(
    identity: Identity,
    tenant_state: TenantState,
    super_admin: SuperAdminFlag,
    route: RouteRequest,
    now: datetime,
    impersonation: ImpersonationSession = INACTIVE,
    impersonation_target: Optional[TenantState] = None,
    connectivity: Connectivity = Connectivity.ONLINE,
) -> Decision:
    """
    Evaluate with the default rule set and routing table.

    A naive now is read as UTC. Inputs AccessInputs rejects fail closed
    with the same policy-error redirect a raising rule produces.
    """
    if isinstance(now, datetime) and now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    try:
        inputs = AccessInputs(
            identity=identity,
            tenant_state=tenant_state,
            super_admin=super_admin,
            route=route,
            now=now,
            impersonation=impersonation,
            impersonation_target=(
                TenantState.pending()
                if impersonation_target is None
                else impersonation_target
            ),
            connectivity=connectivity,
        )
    except Exception:
        logger.exception("Rejected malformed access inputs.")
        return Redirect(
            target=ACCESS_DENIED_ROUTE,
            reason=RedirectReason.POLICY_ERROR,
        )

    return _DEFAULT_ENGINE.decide(inputs)
