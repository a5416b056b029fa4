"""
Django settings for the storefront.

Everything deployment-specific comes from the environment; the
STOREFRONT_* variables below, DATABASE_URL, and ENVIRONMENT/LOG_LEVEL for logging.
"""

import os
from pathlib import Path
from urllib.parse import unquote, urlparse

BASE_DIR = Path(__file__).resolve().parent.parent.parent


def env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def database_from_url(database_url: str) -> dict:
    """Translate a DATABASE_URL into a Django DATABASES entry."""
    u = urlparse(database_url)

    if u.scheme in {"postgres", "postgresql"}:
        return {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": (u.path or "").lstrip("/"),
            "USER": unquote(u.username or ""),
            "PASSWORD": unquote(u.password or ""),
            "HOST": u.hostname or "localhost",
            "PORT": str(u.port or 5432),
            "CONN_MAX_AGE": int(os.environ.get("STOREFRONT_CONN_MAX_AGE", "0")),
        }

    if u.scheme == "sqlite":
        # sqlite:///relative.db, sqlite:////absolute/path.db, sqlite:// for memory
        path = u.path[1:] if u.path.startswith("/") else u.path
        return {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": path or ":memory:",
        }

    raise ValueError(f"Unsupported DATABASE_URL scheme: {u.scheme!r}")


SECRET_KEY = os.environ.get("STOREFRONT_SECRET_KEY", "storefront-insecure-dev-key")
DEBUG = env_bool("STOREFRONT_DEBUG", False)
ALLOWED_HOSTS = [
    h.strip()
    for h in os.environ.get("STOREFRONT_ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",")
    if h.strip()
]

INSTALLED_APPS = [
    "storefront.apps.StorefrontConfig",
    "storefront.catalog",
    "storefront.accounts",
    "storefront.cart",
    "storefront.orders",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
    "storefront.middleware.RequestLogMiddleware",
]

ROOT_URLCONF = "storefront.urls"
WSGI_APPLICATION = "storefront.wsgi.application"
APPEND_SLASH = False

DATABASES = {
    "default": database_from_url(
        os.environ.get("DATABASE_URL", f"sqlite:///{BASE_DIR / 'storefront.sqlite3'}")
    )
}
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

TIME_ZONE = "UTC"
USE_TZ = True
USE_I18N = False

# Logging is configured by storefront.logs from StorefrontConfig.ready().
LOGGING_CONFIG = None

# Bearer tokens: seconds a token stays valid after issuance (7 days).
STOREFRONT_TOKEN_MAX_AGE = int(os.environ.get("STOREFRONT_TOKEN_MAX_AGE", str(7 * 24 * 3600)))

# Checkout: how long to wait for a customer's checkout lock, how many times a
# deadlocked or serialization-failed transaction is re-run, and the per
# transaction lock/statement timeout on PostgreSQL.
STOREFRONT_CHECKOUT_LOCK_TIMEOUT = float(os.environ.get("STOREFRONT_CHECKOUT_LOCK_TIMEOUT", "3.0"))
STOREFRONT_CHECKOUT_RETRIES = int(os.environ.get("STOREFRONT_CHECKOUT_RETRIES", "3"))
STOREFRONT_CHECKOUT_STATEMENT_TIMEOUT_MS = int(
    os.environ.get("STOREFRONT_CHECKOUT_STATEMENT_TIMEOUT_MS", "5000")
)
