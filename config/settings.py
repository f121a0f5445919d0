"""
VELO - Django Settings (Infrastructure Only)
============================================
Django serves as the framework container for the access layer.
Access rules live in core/; Django only carries sessions, the audit
store and the HTTP adapter.
"""

import os
from pathlib import Path

# ── Paths ─────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent

# ── Security ──────────────────────────────────────────────────
SECRET_KEY = os.environ.get("VELO_SECRET_KEY", "velo-dev-key-replace-before-deployment")

DEBUG = os.environ.get("VELO_DEBUG", "1") == "1"

ALLOWED_HOSTS = ["localhost", "127.0.0.1", "testserver"]

# ── Installed Apps ────────────────────────────────────────────
INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    # ── VELO Modules ──────────────────────────────────────
    "core.audit_store",
]

# ── Middleware ────────────────────────────────────────────────
MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
]

# ── URL ───────────────────────────────────────────────────────
ROOT_URLCONF = "config.urls"

# ── Database ──────────────────────────────────────────────────
# SQLite for development. Production DB configured separately.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "db.sqlite3",
    }
}

# ── Sessions ──────────────────────────────────────────────────
# Impersonation state lives in the session; it ends with the browser.
SESSION_ENGINE = "django.contrib.sessions.backends.db"
SESSION_EXPIRE_AT_BROWSER_CLOSE = True

# ── Internationalization ──────────────────────────────────────
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ── Access layer ──────────────────────────────────────────────
# Parsed into core.access.settings.AccessSettings; unknown keys fail.
VELO_ACCESS = {
    "super_admin_cache_ttl_seconds": 300,
    "membership_cache_ttl_seconds": 60,
    "trial_length_days": 14,
    "impersonation_storage_key": "velo_impersonation",
    "extra_global_routes": [],
    "extra_public_route_prefixes": [],
}

# ── Logging ───────────────────────────────────────────────────
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {
            "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "plain",
        },
    },
    "loggers": {
        "velo": {
            "handlers": ["console"],
            "level": os.environ.get("VELO_LOG_LEVEL", "INFO"),
            "propagate": True,
        },
    },
}
