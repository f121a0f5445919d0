"""
VELO Access Policy - Public API
===============================
One operation crosses this boundary: decide(). The console gate is
the stricter sibling used for the /admin namespace.
"""

from core.policy.admin_gate import AdminConsoleGate
from core.policy.contracts import BaseAccessRule, OnError
from core.policy.decisions import (
    Allow,
    AllowWithUpsell,
    ConsoleDecision,
    Decision,
    Denied,
    Pending,
    PendingReason,
    Redirect,
    RedirectReason,
    UpsellPayload,
)
from core.policy.engine import AccessPolicyEngine, decide
from core.policy.exceptions import (
    AccessPolicyError,
    DuplicateRuleError,
    InvalidRuleOrderError,
)
from core.policy.inputs import AccessInputs, EvaluationContext
from core.policy.rules import default_rules

__all__ = [
    "AccessInputs",
    "AccessPolicyEngine",
    "AccessPolicyError",
    "AdminConsoleGate",
    "Allow",
    "AllowWithUpsell",
    "BaseAccessRule",
    "ConsoleDecision",
    "Decision",
    "Denied",
    "DuplicateRuleError",
    "EvaluationContext",
    "InvalidRuleOrderError",
    "OnError",
    "Pending",
    "PendingReason",
    "Redirect",
    "RedirectReason",
    "UpsellPayload",
    "decide",
    "default_rules",
]
