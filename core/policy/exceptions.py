"""
VELO Access Policy - Exceptions
===============================
Engine-internal errors raised while assembling a rule set.

These are configuration errors, NOT access outcomes. Access outcomes
always flow through a Decision; evaluation itself never raises.
"""

from __future__ import annotations


class AccessPolicyError(Exception):
    """Base error for access policy configuration."""
    pass


class DuplicateRuleError(AccessPolicyError):
    """Two rules in one rule set share a rule_id."""

    def __init__(self, rule_id: str):
        self.rule_id = rule_id
        super().__init__(f"Rule '{rule_id}' is already part of this rule set.")


class InvalidRuleOrderError(AccessPolicyError):
    """Two rules in one rule set claim the same evaluation slot."""

    def __init__(self, order: int, rule_ids: tuple[str, ...]):
        self.order = order
        self.rule_ids = rule_ids
        super().__init__(
            f"Rules {list(rule_ids)} share evaluation order {order}; "
            "first-match evaluation needs a strict order."
        )
