# backend/settings.py
import os
from datetime import timedelta
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

load_dotenv(BASE_DIR / ".env")


def _getenv(name: str, default: str = "") -> str:
    return os.getenv(name, default).strip()


def _getbool(name: str, default: str = "0") -> bool:
    return _getenv(name, default).lower() in ("1", "true", "t", "yes", "y")


SECRET_KEY = _getenv("DJANGO_SECRET_KEY", "dev-only-insecure-key-change-me")
DEBUG = _getbool("DJANGO_DEBUG", "0")
ALLOWED_HOSTS = [h for h in _getenv("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1").split(",") if h]

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",

    "rest_framework",
    "django_filters",

    "commons",
    "users",
    "clients",
    "fleet",
    "files",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "backend.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "backend.wsgi.application"

# =========================
# Base de datos
# =========================
if _getenv("DB_ENGINE", "sqlite") == "postgres":
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": _getenv("DB_NAME", "dashboard"),
            "USER": _getenv("DB_USER", "postgres"),
            "PASSWORD": _getenv("DB_PASSWORD"),
            "HOST": _getenv("DB_HOST", "localhost"),
            "PORT": _getenv("DB_PORT", "5432"),
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / _getenv("DB_NAME", "db.sqlite3"),
        }
    }

AUTH_USER_MODEL = "users.User"

AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
]

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# subidas de hasta 10 MB se quedan en memoria
FILE_UPLOAD_MAX_MEMORY_SIZE = 10 * 1024 * 1024
DATA_UPLOAD_MAX_MEMORY_SIZE = 12 * 1024 * 1024

# =========================
# DRF / JWT
# =========================
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "rest_framework_simplejwt.authentication.JWTAuthentication",
        "rest_framework.authentication.SessionAuthentication",
    ],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.IsAuthenticated",
    ],
    "DEFAULT_FILTER_BACKENDS": [
        "django_filters.rest_framework.DjangoFilterBackend",
        "rest_framework.filters.SearchFilter",
        "rest_framework.filters.OrderingFilter",
    ],
    "DEFAULT_RENDERER_CLASSES": [
        "commons.renderers.EnvelopeJSONRenderer",
    ],
    "EXCEPTION_HANDLER": "commons.envelope.envelope_exception_handler",
}

SIMPLE_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(minutes=int(_getenv("JWT_ACCESS_MINUTES", "60"))),
    "REFRESH_TOKEN_LIFETIME": timedelta(days=int(_getenv("JWT_REFRESH_DAYS", "1"))),
    "AUTH_HEADER_TYPES": ("Bearer",),
}

# =========================
# Object storage (S3 compatible)
# =========================
STORAGE = {
    "ENDPOINT_URL": _getenv("STORAGE_ENDPOINT_URL") or None,
    "PUBLIC_URL": _getenv("STORAGE_PUBLIC_URL"),
    "ACCESS_KEY_ID": _getenv("AWS_ACCESS_KEY_ID"),
    "SECRET_ACCESS_KEY": _getenv("AWS_SECRET_ACCESS_KEY"),
    "REGION": _getenv("AWS_REGION", "us-east-1"),
    "BUCKETS": {
        "mission": _getenv("MISSION_BUCKET", "mission"),
        "image": _getenv("IMAGE_BUCKET", "image"),
        "pem": _getenv("PEM_BUCKET", "pemfile"),
    },
    "MAX_UPLOAD_SIZE": int(_getenv("MAX_UPLOAD_SIZE", str(10 * 1024 * 1024))),
    "PEM_MAX_SIZE": int(_getenv("PEM_MAX_SIZE", str(5 * 1024 * 1024))),
    "SIGNED_URL_TTL": int(_getenv("SIGNED_URL_TTL", "3600")),
}

# cache del detalle de cliente (segundos)
CLIENT_CACHE_TTL = int(_getenv("CLIENT_CACHE_TTL", "300"))

# =========================
# Logging
# =========================
LOG_LEVEL = _getenv("LOG_LEVEL", "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": LOG_LEVEL,
    },
    "loggers": {
        "django": {"handlers": ["console"], "level": "WARNING", "propagate": False},
        "botocore": {"handlers": ["console"], "level": "WARNING", "propagate": False},
    },
}
