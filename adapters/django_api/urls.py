"""
VELO Django adapter URL routing.
"""

from django.urls import path

from adapters.django_api import views
from core.routing.tables import (
    ACCESS_DENIED_ROUTE,
    ACCOUNT_SUSPENDED_ROUTE,
    AUTH_ROUTE,
    NO_ACCESS_ROUTE,
    ONBOARDING_ROUTE,
    SUBSCRIPTION_REQUIRED_ROUTE,
)

STATUS_PAGES = (
    AUTH_ROUTE,
    ONBOARDING_ROUTE,
    ACCESS_DENIED_ROUTE,
    NO_ACCESS_ROUTE,
    ACCOUNT_SUSPENDED_ROUTE,
    SUBSCRIPTION_REQUIRED_ROUTE,
)


urlpatterns = [
    path("v1/access/decision", views.access_decision_view),
    path("v1/auth/sign-out", views.sign_out_view),
    path("admin", views.admin_console_view),
    path("admin/", views.admin_console_view),
    path("admin/impersonation/start", views.impersonation_start_view),
    path("admin/impersonation/exit", views.impersonation_exit_view),
    path("admin/tenants/<str:tenant_id>/<str:action>", views.tenant_action_view),
    path("admin/<path:rest>", views.admin_page_view),
    *[path(page.lstrip("/"), views.status_page_view) for page in STATUS_PAGES],
    path("order", views.public_order_view),
    path("order/<path:rest>", views.public_order_view),
    path("menu", views.public_order_view),
    path("menu/<path:rest>", views.public_order_view),
    path("", views.page_view),
    path("<path:rest>", views.page_view),
]
