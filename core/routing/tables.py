"""
VELO Routing - Static Route Tables
==================================
Every business type owns one exclusive path prefix. Legacy
un-prefixed paths from the single-vertical era are translated
through LEGACY_ROUTE_MAP before partitioning.

Paths not covered by the exemption sets are partitioned.
Paths are matched per segment: "/retail" covers "/retail" and
"/retail/pos", never "/retailer".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping, Optional
from urllib.parse import urlsplit

from core.tenancy.models import BusinessType, Role, Tenant

logger = logging.getLogger("velo.routing")


# ══════════════════════════════════════════════════════════════
# WELL-KNOWN TARGETS
# ══════════════════════════════════════════════════════════════

AUTH_ROUTE = "/auth"
ADMIN_ROUTE = "/admin"
ONBOARDING_ROUTE = "/onboarding"
ACCOUNT_SUSPENDED_ROUTE = "/account-suspended"
SUBSCRIPTION_REQUIRED_ROUTE = "/subscription-required"
ACCESS_DENIED_ROUTE = "/access-denied"
NO_ACCESS_ROUTE = "/no-access"


# ══════════════════════════════════════════════════════════════
# PER BUSINESS TYPE TABLES
# ══════════════════════════════════════════════════════════════

BUSINESS_TYPE_PREFIX: dict[BusinessType, str] = {
    BusinessType.RETAIL: "/retail",
    BusinessType.FNB: "/fnb",
    BusinessType.SERVICE: "/service",
    BusinessType.VENUE: "/venue",
}

CASHIER_ALLOWED_ROUTES: dict[BusinessType, tuple[str, ...]] = {
    BusinessType.RETAIL: ("/retail/pos", "/retail/products"),
    BusinessType.FNB: ("/fnb/cashier", "/fnb/menu", "/fnb/orders"),
    BusinessType.SERVICE: ("/service/pos", "/service/products"),
    BusinessType.VENUE: ("/venue/pos", "/venue/products"),
}

CASHIER_DEFAULT_ROUTE: dict[BusinessType, str] = {
    BusinessType.RETAIL: "/retail/pos",
    BusinessType.FNB: "/fnb/cashier",
    BusinessType.SERVICE: "/service/pos",
    BusinessType.VENUE: "/venue/pos",
}


# ══════════════════════════════════════════════════════════════
# LEGACY (PRE-PARTITION) PATHS
# ══════════════════════════════════════════════════════════════

_LEGACY_RETAIL_PAGES = (
    "/pos",
    "/products",
    "/categories",
    "/inventory",
    "/warehouses",
    "/transactions",
    "/expenses",
    "/reports",
    "/reports/advanced",
    "/suppliers",
    "/purchase-orders",
    "/audit-logs",
)

LEGACY_ROUTE_MAP: dict[str, str] = {
    "/": "/retail/dashboard",
    "/app": "/retail/dashboard",
    "/dashboard": "/retail/dashboard",
    **{page: f"/retail{page}" for page in _LEGACY_RETAIL_PAGES},
}


# ══════════════════════════════════════════════════════════════
# PARTITIONING EXEMPTIONS
# ══════════════════════════════════════════════════════════════

GLOBAL_ROUTES: frozenset[str] = frozenset({
    "/settings",
    "/users",
    "/subscription",
    "/activity",
    "/profile",
    ACCESS_DENIED_ROUTE,
    NO_ACCESS_ROUTE,
    ACCOUNT_SUSPENDED_ROUTE,
    SUBSCRIPTION_REQUIRED_ROUTE,
})

PUBLIC_ORDER_PREFIXES: frozenset[str] = frozenset({
    "/order",
    "/menu",
})


# ══════════════════════════════════════════════════════════════
# PATH HELPERS
# ══════════════════════════════════════════════════════════════

def normalize_path(path: Optional[str]) -> str:
    """Drop query/fragment, force a leading slash, drop a trailing one."""
    if not path or not isinstance(path, str):
        return "/"
    raw = urlsplit(path.strip()).path or "/"
    if not raw.startswith("/"):
        raw = "/" + raw
    while "//" in raw:
        raw = raw.replace("//", "/")
    if len(raw) > 1 and raw.endswith("/"):
        raw = raw.rstrip("/") or "/"
    return raw


def path_matches(path: str, prefix: str) -> bool:
    """Segment-aware prefix match. The root prefix matches only "/"."""
    if prefix == "/":
        return path == "/"
    return path == prefix or path.startswith(prefix + "/")


def business_type_for_routing(tenant: Optional[Tenant]) -> BusinessType:
    """Tenants with missing business_type route as retail (logged)."""
    if tenant is not None and tenant.business_type is not None:
        return tenant.business_type
    logger.warning(
        "Data quality: tenant "
        f"{tenant.tenant_id if tenant is not None else '<none>'} "
        "has no business_type; routing as retail."
    )
    return BusinessType.RETAIL


# ══════════════════════════════════════════════════════════════
# ROUTING TABLE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RoutingTable:
    """
    Immutable bundle of route tables consulted by the access rules.

    with_exemptions() returns a copy with extra global routes or
    public prefixes, e.g. those tagged in a RouteCatalog.
    """

    prefixes: Mapping[BusinessType, str] = field(
        default_factory=lambda: MappingProxyType(dict(BUSINESS_TYPE_PREFIX))
    )
    legacy_routes: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType(dict(LEGACY_ROUTE_MAP))
    )
    global_routes: frozenset[str] = GLOBAL_ROUTES
    public_prefixes: frozenset[str] = PUBLIC_ORDER_PREFIXES
    cashier_routes: Mapping[BusinessType, tuple[str, ...]] = field(
        default_factory=lambda: MappingProxyType(dict(CASHIER_ALLOWED_ROUTES))
    )
    cashier_defaults: Mapping[BusinessType, str] = field(
        default_factory=lambda: MappingProxyType(dict(CASHIER_DEFAULT_ROUTE))
    )

    def __post_init__(self):
        for business_type in BusinessType:
            if business_type not in self.prefixes:
                raise ValueError(f"No prefix for business type {business_type.value}.")
            if business_type not in self.cashier_defaults:
                raise ValueError(
                    f"No cashier default for business type {business_type.value}."
                )

    def with_exemptions(
        self,
        global_routes: tuple[str, ...] = (),
        public_prefixes: tuple[str, ...] = (),
    ) -> "RoutingTable":
        return replace(
            self,
            global_routes=self.global_routes | {normalize_path(p) for p in global_routes},
            public_prefixes=self.public_prefixes
            | {normalize_path(p) for p in public_prefixes},
        )

    # ── Lookups ───────────────────────────────────────────────

    def prefix_for(self, business_type: BusinessType) -> str:
        return self.prefixes[business_type]

    def landing_route_for(self, business_type: BusinessType) -> str:
        return f"{self.prefixes[business_type]}/dashboard"

    def cashier_default_route(self, business_type: BusinessType) -> str:
        return self.cashier_defaults[business_type]

    def role_default_route(self, role: Role, business_type: BusinessType) -> str:
        if role == Role.CASHIER:
            return self.cashier_default_route(business_type)
        return self.landing_route_for(business_type)

    def translate_legacy(self, path: str) -> str:
        """
        Map an un-prefixed legacy path to its partitioned form.

        The longest matching legacy entry wins; the remainder of the
        path is carried over ("/products/42" -> "/retail/products/42").
        Paths with no legacy entry are returned unchanged.
        """
        path = normalize_path(path)
        if path in self.legacy_routes:
            return self.legacy_routes[path]

        best: Optional[str] = None
        for old in self.legacy_routes:
            if old != "/" and path_matches(path, old):
                if best is None or len(old) > len(best):
                    best = old
        if best is None:
            return path
        return self.legacy_routes[best] + path[len(best):]

    def is_global_route(self, path: str) -> bool:
        path = normalize_path(path)
        return any(path_matches(path, route) for route in self.global_routes)

    def is_public_order_route(self, path: str) -> bool:
        path = normalize_path(path)
        return any(path_matches(path, prefix) for prefix in self.public_prefixes)

    def is_partition_exempt(self, path: str) -> bool:
        return self.is_global_route(path) or self.is_public_order_route(path)

    def owns_path(self, business_type: BusinessType, path: str) -> bool:
        return path_matches(normalize_path(path), self.prefixes[business_type])

    def is_cashier_allowed(self, business_type: BusinessType, path: str) -> bool:
        path = normalize_path(path)
        return any(
            path_matches(path, allowed)
            for allowed in self.cashier_routes.get(business_type, ())
        )


DEFAULT_ROUTING = RoutingTable()
