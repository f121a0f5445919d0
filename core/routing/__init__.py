"""
VELO Routing - Public API
=========================
"""

from core.routing.catalog import DEFAULT_CATALOG, RouteCatalog, RouteSpec
from core.routing.request import RouteRequest
from core.routing.tables import (
    ACCESS_DENIED_ROUTE,
    ACCOUNT_SUSPENDED_ROUTE,
    ADMIN_ROUTE,
    AUTH_ROUTE,
    DEFAULT_ROUTING,
    NO_ACCESS_ROUTE,
    ONBOARDING_ROUTE,
    SUBSCRIPTION_REQUIRED_ROUTE,
    RoutingTable,
    business_type_for_routing,
    normalize_path,
    path_matches,
)

__all__ = [
    "ACCESS_DENIED_ROUTE",
    "ACCOUNT_SUSPENDED_ROUTE",
    "ADMIN_ROUTE",
    "AUTH_ROUTE",
    "DEFAULT_CATALOG",
    "DEFAULT_ROUTING",
    "NO_ACCESS_ROUTE",
    "ONBOARDING_ROUTE",
    "SUBSCRIPTION_REQUIRED_ROUTE",
    "RouteCatalog",
    "RouteRequest",
    "RouteSpec",
    "RoutingTable",
    "business_type_for_routing",
    "normalize_path",
    "path_matches",
]
