"""
VELO Django HTTP adapter.
Thin framework glue over the core access engine.
"""

from adapters.django_api.wiring import (
    DEV_FNB_OWNER_ID,
    DEV_FNB_TENANT_ID,
    DEV_RETAIL_CASHIER_ID,
    DEV_RETAIL_OWNER_ID,
    DEV_RETAIL_TENANT_ID,
    DEV_SUPER_ADMIN_ID,
    DEV_TRIAL_OWNER_ID,
    DEV_TRIAL_TENANT_ID,
    build_dependencies,
    create_dependencies,
    set_dependencies,
)

__all__ = [
    "DEV_FNB_OWNER_ID",
    "DEV_FNB_TENANT_ID",
    "DEV_RETAIL_CASHIER_ID",
    "DEV_RETAIL_OWNER_ID",
    "DEV_RETAIL_TENANT_ID",
    "DEV_SUPER_ADMIN_ID",
    "DEV_TRIAL_OWNER_ID",
    "DEV_TRIAL_TENANT_ID",
    "build_dependencies",
    "create_dependencies",
    "set_dependencies",
]
