"""
VELO Routing - Route Request
============================
Immutable description of one navigation, as seen by the guard.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from core.routing.tables import normalize_path
from core.tenancy.models import PlanTier, Role


@dataclass(frozen=True)
class RouteRequest:
    path: str
    required_role: Optional[Role] = None
    admin_only: bool = False
    required_feature_key: Optional[str] = None
    required_plan: Optional[PlanTier] = None

    def __post_init__(self):
        if not isinstance(self.path, str):
            raise ValueError("path must be a string.")

        if self.required_role is not None and not isinstance(self.required_role, Role):
            raise ValueError("required_role must be Role or None.")

        if not isinstance(self.admin_only, bool):
            raise ValueError("admin_only must be a bool.")

        if self.required_feature_key is not None and (
            not isinstance(self.required_feature_key, str)
            or not self.required_feature_key
        ):
            raise ValueError("required_feature_key must be a non-empty string or None.")

        if self.required_plan is not None and not isinstance(
            self.required_plan, PlanTier
        ):
            raise ValueError("required_plan must be PlanTier or None.")

    @property
    def normalized_path(self) -> str:
        return normalize_path(self.path)
