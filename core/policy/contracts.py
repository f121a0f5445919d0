"""
VELO Access Policy - Rule Contract
==================================
Abstract base class for all access rules.

Every rule must:
- Be pure (reads the EvaluationContext, nothing else)
- Be deterministic (same context -> same result)
- Return None when it does not apply, or a Decision when it fires
- Declare its position in the evaluation order
- Declare what happens if it raises (fail_closed / fail_open)

Contract validation enforced at class creation time:
- rule_id: "ACC-NNN"
- order: positive int
- on_error: fail_closed | fail_open
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import Optional

from core.policy.decisions import (
    Allow,
    AllowWithUpsell,
    Decision,
    Pending,
    Redirect,
    UpsellPayload,
)
from core.policy.inputs import EvaluationContext

RULE_ID_PATTERN = re.compile(r"^ACC-\d{3}$")


class OnError:
    """What the engine does when a rule raises."""
    FAIL_CLOSED = "fail_closed"
    FAIL_OPEN = "fail_open"

    ALL = frozenset({"fail_closed", "fail_open"})


class BaseAccessRule(ABC):
    """
    Abstract base for access rules.

    Subclasses must:
    - Set rule_id (e.g. 'ACC-007')
    - Set order (evaluation slot, lower runs first)
    - Set on_error (OnError.FAIL_CLOSED unless the rule is a
      non-security product affordance)
    - Implement evaluate()
    """

    rule_id: str = ""
    order: int = 0
    on_error: str = OnError.FAIL_CLOSED
    description: str = ""

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)

        if getattr(cls, "__abstractmethods__", None):
            return

        if not isinstance(cls.rule_id, str) or not RULE_ID_PATTERN.match(cls.rule_id):
            raise TypeError(
                f"Rule class {cls.__name__} must declare rule_id "
                f"in the form 'ACC-NNN'."
            )

        if (
            not isinstance(cls.order, int)
            or isinstance(cls.order, bool)
            or cls.order < 1
        ):
            raise TypeError(
                f"Rule class {cls.__name__} must declare order as a positive int."
            )

        if cls.on_error not in OnError.ALL:
            raise TypeError(
                f"Rule class {cls.__name__} on_error '{cls.on_error}' "
                f"must be one of: {sorted(OnError.ALL)}"
            )

    @abstractmethod
    def evaluate(self, ctx: EvaluationContext) -> Optional[Decision]:
        """Return a Decision if this rule fires, else None."""
        ...

    # ══════════════════════════════════════════════════════════
    # CONVENIENCE BUILDERS (for subclasses)
    # ══════════════════════════════════════════════════════════

    def pending(self, reason: str) -> Pending:
        return Pending(reason=reason, rule_id=self.rule_id)

    def redirect(
        self,
        target: str,
        reason: str,
        preserve_origin: Optional[str] = None,
    ) -> Redirect:
        return Redirect(
            target=target,
            reason=reason,
            preserve_origin=preserve_origin,
            rule_id=self.rule_id,
        )

    def allow(self) -> Allow:
        return Allow(rule_id=self.rule_id)

    def upsell(self, payload: UpsellPayload) -> AllowWithUpsell:
        return AllowWithUpsell(payload=payload, rule_id=self.rule_id)
