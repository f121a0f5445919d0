"""
VELO Access - Settings
======================
Tunables for resolution caching, trials and impersonation storage.

Loaded from the VELO_ACCESS mapping in the Django settings module.
Unknown keys are rejected at load time so typos do not silently
fall back to defaults.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class AccessSettings:
    super_admin_cache_ttl_seconds: int = 300
    membership_cache_ttl_seconds: int = 60
    cache_max_size: int = 1000
    trial_length_days: int = 14
    impersonation_storage_key: str = "velo_impersonation"
    extra_global_routes: tuple[str, ...] = ()
    extra_public_route_prefixes: tuple[str, ...] = ()

    def __post_init__(self):
        for name in (
            "super_admin_cache_ttl_seconds",
            "membership_cache_ttl_seconds",
            "cache_max_size",
            "trial_length_days",
        ):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                raise ValueError(f"{name} must be an int >= 1.")

        if not self.impersonation_storage_key or not isinstance(
            self.impersonation_storage_key, str
        ):
            raise ValueError("impersonation_storage_key must be a non-empty string.")

        for name in ("extra_global_routes", "extra_public_route_prefixes"):
            value = getattr(self, name)
            if isinstance(value, list):
                value = tuple(value)
                object.__setattr__(self, name, value)
            if not isinstance(value, tuple):
                raise ValueError(f"{name} must be a tuple of paths.")
            for path in value:
                if not isinstance(path, str) or not path.startswith("/"):
                    raise ValueError(f"{name} entries must be absolute paths.")

    @classmethod
    def from_mapping(cls, raw: Optional[Mapping[str, Any]]) -> "AccessSettings":
        raw = dict(raw or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(raw) - known)
        if unknown:
            raise ValueError(f"Unknown VELO_ACCESS settings: {unknown}")
        return cls(**raw)


DEFAULT_SETTINGS = AccessSettings()
