"""
Django settings for the pastebin project.

Deployment values come from the environment; everything else is fixed here.
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get("PASTES_SECRET_KEY", "insecure-development-key")

DEBUG = os.environ.get("PASTES_DEBUG", "false").lower() in ("1", "true", "yes")

ALLOWED_HOSTS = [host for host in os.environ.get("PASTES_ALLOWED_HOSTS", "*").split(",") if host]

INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "django.contrib.auth",
    "rest_framework",
    "drf_spectacular",
    "pastes",
]

MIDDLEWARE = [
    "pastes.middleware.AccessLogMiddleware",
    "django.middleware.common.CommonMiddleware",
]

ROOT_URLCONF = "pastebin.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {},
    },
]

WSGI_APPLICATION = "pastebin.wsgi.application"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.environ.get("PASTES_DB_PATH", str(BASE_DIR / "data.db")),
        "OPTIONS": {
            # Seconds a writer waits for the database lock
            "timeout": 20,
        },
    }
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

USE_TZ = True
TIME_ZONE = "UTC"

# Request size limits are enforced by the pastes views
DATA_UPLOAD_MAX_MEMORY_SIZE = None

APPEND_SLASH = False

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": [],
    "UNAUTHENTICATED_USER": None,
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
    "TEST_REQUEST_DEFAULT_FORMAT": "multipart",
}

SPECTACULAR_SETTINGS = {
    "TITLE": "pastebin",
    "DESCRIPTION": "Share text under short names, with optional expiry and passwords.",
    "VERSION": "1.0.0",
}

PASTES = {
    "BUCKET": "files",
    "NAME_LENGTH": 3,
    "MAX_UPLOAD_SIZE": 2 << 20,
    "MAX_EDIT_SIZE": 10 << 20,
    "REAPER_INTERVAL": 60 * 60,
    "REAPER_GRACE": 4 * 60 * 60,
    "REAPER_AUTOSTART": os.environ.get("PASTES_REAPER", "true").lower() in ("1", "true", "yes"),
    "HELP_FILE": BASE_DIR / "README.md",
}

LOG_LEVEL = os.environ.get("PASTES_LOG_LEVEL", "INFO")
LOG_FILE = os.environ.get("PASTES_LOG_FILE")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "format": "{asctime} {levelname} {name}: {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
        },
    },
    "loggers": {
        "pastes": {
            "handlers": ["console"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
    },
}

if LOG_FILE:
    LOGGING["handlers"]["file"] = {
        "class": "logging.FileHandler",
        "filename": LOG_FILE,
        "formatter": "default",
    }
    LOGGING["loggers"]["pastes"]["handlers"].append("file")
