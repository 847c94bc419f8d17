"""Base Django settings for the weather gateway."""
from __future__ import annotations

from pathlib import Path
import os

from django.core.exceptions import ImproperlyConfigured

BASE_DIR = Path(__file__).resolve().parent.parent


def env(name: str, default: str | None = None) -> str:
    """Fetch environment variables while allowing explicit defaults."""

    value = os.environ.get(name, default)
    if value is None:
        raise ImproperlyConfigured(f"Environment variable {name} is required")
    return value


def env_bool(name: str, default: bool) -> bool:
    return os.environ.get(name, "1" if default else "0").strip().lower() in ("1", "true", "yes", "on")


SECRET_KEY = env("DJANGO_SECRET_KEY")
DEBUG = os.environ.get("DJANGO_DEBUG", "0") == "1"
ALLOWED_HOSTS = os.environ.get("DJANGO_ALLOWED_HOSTS", "*").split(",")

INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "django.contrib.auth",
    "rest_framework",
    "wxapi.api",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

ROOT_URLCONF = "wxapi.urls"

WSGI_APPLICATION = "wxapi.wsgi.application"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.environ.get("DB_NAME", str(BASE_DIR / "db.sqlite3")),
    }
}

REDIS_URL = os.environ.get("REDIS_URL")
if REDIS_URL:
    CACHES = {
        "default": {
            "BACKEND": "django_redis.cache.RedisCache",
            "LOCATION": REDIS_URL,
            "OPTIONS": {
                "CLIENT_CLASS": "django_redis.client.DefaultClient",
                "SOCKET_CONNECT_TIMEOUT": 1.0,
                "SOCKET_TIMEOUT": 1.5,
            },
        }
    }
else:
    CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
            "LOCATION": "weather-local",
            "OPTIONS": {"MAX_ENTRIES": 10000},
        }
    }

WEATHER_CACHE_ALIAS = os.environ.get("WEATHER_CACHE_ALIAS", "default")
WEATHER_CACHE_TIMEOUT = int(os.environ.get("WEATHER_CACHE_TIMEOUT", "3600"))
WEATHER_STALE_TIMEOUT = int(os.environ.get("WEATHER_STALE_TIMEOUT", str(24 * 3600)))
WEATHER_GEOCODE_TIMEOUT = int(os.environ.get("WEATHER_GEOCODE_TIMEOUT", "3600"))
WEATHER_DEFAULT_PROVIDER = os.environ.get("WEATHER_DEFAULT_PROVIDER", "metno")
WEATHER_DEFAULT_TIMEZONE = os.environ.get("WEATHER_DEFAULT_TIMEZONE", "UTC")
WEATHER_DEFAULT_UNITS = os.environ.get("WEATHER_DEFAULT_UNITS", "metric")
WEATHER_FORECAST_DAYS = int(os.environ.get("WEATHER_FORECAST_DAYS", "7"))
WEATHER_HTTP_TIMEOUT = float(os.environ.get("WEATHER_HTTP_TIMEOUT", "5"))
WEATHER_HTTP_RETRIES = int(os.environ.get("WEATHER_HTTP_RETRIES", "1"))
WEATHER_USER_AGENT = os.environ.get("WEATHER_USER_AGENT", "wxgate/1.0")
WEATHER_KEY_PRECISION = int(os.environ.get("WEATHER_KEY_PRECISION", "4"))
WEATHER_KEY_BUCKET = float(os.environ.get("WEATHER_KEY_BUCKET", "0"))
WEATHER_GEO_PRECISION = int(os.environ.get("WEATHER_GEO_PRECISION", "3"))
WEATHER_RESOLVE_LOCATION = env_bool("WEATHER_RESOLVE_LOCATION", True)
WEATHER_GEOCODE_WAIT = float(os.environ.get("WEATHER_GEOCODE_WAIT", "2"))
WEATHER_MAX_WORKERS = int(os.environ.get("WEATHER_MAX_WORKERS", "8"))

REST_FRAMEWORK = {
    "DEFAULT_RENDERER_CLASSES": [
        "rest_framework.renderers.JSONRenderer",
    ],
    "DEFAULT_PARSER_CLASSES": [
        "rest_framework.parsers.JSONParser",
    ],
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.AllowAny",
    ],
    "UNAUTHENTICATED_USER": None,
}

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "plain"},
    },
    "root": {"handlers": ["console"], "level": os.environ.get("WEATHER_LOG_LEVEL", "INFO")},
}

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True
