"""
VELO Audit Store - App Configuration
====================================
Persistent access audit trail (impersonation, denied console access,
tenant lifecycle actions).
"""

from django.apps import AppConfig


class CoreAuditStoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core.audit_store"
    label = "core_audit_store"
    verbose_name = "VELO Access Audit Store"
