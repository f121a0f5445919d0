"""
VELO Impersonation - Session Value
==================================
The impersonation session is a plain value threaded into every
access decision. There is no ambient "current impersonation" global.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class ImpersonationSession:
    """
    active=False is represented by the INACTIVE constant; every other
    field is then None.
    """

    active: bool
    actor_super_admin_id: Optional[str] = None
    target_tenant_id: Optional[str] = None
    target_user_id: Optional[str] = None
    business_name_snapshot: Optional[str] = None
    started_at: Optional[datetime] = None

    def __post_init__(self):
        if not self.active:
            if any(
                value is not None
                for value in (
                    self.actor_super_admin_id,
                    self.target_tenant_id,
                    self.target_user_id,
                    self.business_name_snapshot,
                    self.started_at,
                )
            ):
                raise ValueError("an inactive session carries no data.")
            return

        for name in ("actor_super_admin_id", "target_tenant_id", "target_user_id"):
            value = getattr(self, name)
            if not value or not isinstance(value, str):
                raise ValueError(f"{name} must be a non-empty string.")

        if self.started_at is None or self.started_at.tzinfo is None:
            raise ValueError("started_at must be a timezone-aware datetime.")

    def to_dict(self) -> dict[str, Any]:
        return {
            "active": self.active,
            "actor_super_admin_id": self.actor_super_admin_id,
            "target_tenant_id": self.target_tenant_id,
            "target_user_id": self.target_user_id,
            "business_name_snapshot": self.business_name_snapshot,
            "started_at": (
                None if self.started_at is None else self.started_at.isoformat()
            ),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ImpersonationSession":
        if not data.get("active"):
            return INACTIVE
        started_at = data.get("started_at")
        if isinstance(started_at, str):
            started_at = datetime.fromisoformat(started_at)
        return cls(
            active=True,
            actor_super_admin_id=data.get("actor_super_admin_id"),
            target_tenant_id=data.get("target_tenant_id"),
            target_user_id=data.get("target_user_id"),
            business_name_snapshot=data.get("business_name_snapshot"),
            started_at=started_at,
        )


INACTIVE = ImpersonationSession(active=False)
