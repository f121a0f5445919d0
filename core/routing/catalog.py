"""
VELO Routing - Route Catalog
============================
Declarative list of the product's guarded routes and their guard
metadata. Routes tagged cross_type or public extend the routing
table's partitioning exemptions, so adding a route here is enough
to keep it out of tenant-type partitioning.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from core.routing.request import RouteRequest
from core.routing.tables import DEFAULT_ROUTING, RoutingTable, normalize_path
from core.tenancy.models import PlanTier, Role


@dataclass(frozen=True)
class RouteSpec:
    path: str
    required_role: Optional[Role] = None
    admin_only: bool = False
    feature_key: Optional[str] = None
    required_plan: Optional[PlanTier] = None
    cross_type: bool = False
    public: bool = False

    def __post_init__(self):
        if not self.path or not self.path.startswith("/"):
            raise ValueError("path must be an absolute path.")
        object.__setattr__(self, "path", normalize_path(self.path))

        if self.cross_type and self.public:
            raise ValueError("a route is either cross_type or public, not both.")

    def to_request(self, path: Optional[str] = None) -> RouteRequest:
        return RouteRequest(
            path=path if path is not None else self.path,
            required_role=self.required_role,
            admin_only=self.admin_only,
            required_feature_key=self.feature_key,
            required_plan=self.required_plan,
        )


class RouteCatalog:
    """
    Lookup of RouteSpec by exact path.

    Duplicate paths are rejected at construction. Unknown paths
    resolve to a bare RouteRequest (no role, feature or plan gate).
    """

    def __init__(self, specs: Iterable[RouteSpec] = ()):
        self._specs: dict[str, RouteSpec] = {}
        for spec in specs:
            if spec.path in self._specs:
                raise ValueError(f"Duplicate route '{spec.path}'.")
            self._specs[spec.path] = spec

    def __iter__(self):
        return iter(sorted(self._specs.values(), key=lambda s: s.path))

    def __len__(self) -> int:
        return len(self._specs)

    def get(self, path: str) -> Optional[RouteSpec]:
        return self._specs.get(normalize_path(path))

    def request_for(self, path: str) -> RouteRequest:
        spec = self.get(path)
        if spec is None:
            return RouteRequest(path=path)
        return spec.to_request(path)

    def cross_type_paths(self) -> tuple[str, ...]:
        return tuple(s.path for s in self if s.cross_type)

    def public_paths(self) -> tuple[str, ...]:
        return tuple(s.path for s in self if s.public)

    def routing_table(self, base: RoutingTable = DEFAULT_ROUTING) -> RoutingTable:
        return base.with_exemptions(
            global_routes=self.cross_type_paths(),
            public_prefixes=self.public_paths(),
        )


def _tenant_pages(prefix: str, cashier_pages: tuple[str, ...]) -> list[RouteSpec]:
    specs = [RouteSpec(f"{prefix}/dashboard")]
    for page in cashier_pages:
        specs.append(RouteSpec(f"{prefix}/{page}"))
    return specs


DEFAULT_CATALOG = RouteCatalog(
    [
        # ── Retail ────────────────────────────────────────────
        *_tenant_pages("/retail", ("pos", "products")),
        RouteSpec("/retail/categories", admin_only=True),
        RouteSpec("/retail/inventory", admin_only=True),
        RouteSpec("/retail/warehouses", admin_only=True, feature_key="multi_warehouse"),
        RouteSpec("/retail/transactions", admin_only=True),
        RouteSpec("/retail/expenses", admin_only=True, feature_key="expenses"),
        RouteSpec("/retail/reports", admin_only=True, feature_key="reports_basic"),
        RouteSpec(
            "/retail/reports/advanced", admin_only=True, feature_key="reports_advanced"
        ),
        RouteSpec("/retail/suppliers", admin_only=True),
        RouteSpec(
            "/retail/purchase-orders", admin_only=True, feature_key="purchase_orders"
        ),
        RouteSpec("/retail/audit-logs", admin_only=True, feature_key="audit_logs_full"),
        # ── F&B ───────────────────────────────────────────────
        *_tenant_pages("/fnb", ("cashier", "menu", "orders")),
        RouteSpec("/fnb/tables", admin_only=True),
        RouteSpec("/fnb/floor-plan", admin_only=True),
        RouteSpec("/fnb/kds"),
        RouteSpec("/fnb/inventory", admin_only=True),
        RouteSpec("/fnb/promo", admin_only=True),
        RouteSpec("/fnb/reports", admin_only=True, feature_key="reports_basic"),
        # ── Service / venue ───────────────────────────────────
        *_tenant_pages("/service", ("pos", "products")),
        *_tenant_pages("/venue", ("pos", "products")),
        # ── Cross-type ────────────────────────────────────────
        RouteSpec(
            "/settings", admin_only=True, required_role=Role.OWNER, cross_type=True
        ),
        RouteSpec("/users", required_role=Role.OWNER, cross_type=True),
        RouteSpec("/subscription", admin_only=True, cross_type=True),
        RouteSpec("/activity", admin_only=True, cross_type=True),
        RouteSpec("/integrations/api", admin_only=True, feature_key="api_access",
                  cross_type=True),
        # ── Public order taking ───────────────────────────────
        RouteSpec("/order", public=True),
        RouteSpec("/menu", public=True),
    ]
)
