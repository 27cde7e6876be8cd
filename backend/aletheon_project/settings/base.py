"""Base Django settings for the Aletheon archaeological catalogue."""

from __future__ import annotations

import os

import dj_database_url

from .config import BASE_DIR, get_settings

settings = get_settings()

SECRET_KEY = settings.secret_key
DEBUG = settings.debug
ALLOWED_HOSTS: list[str] = settings.allowed_hosts

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    # Third-party
    "rest_framework",
    "corsheaders",
    # Project apps
    "apps.core",
    "apps.artifacts",
    "apps.teams",
    "apps.messaging",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "corsheaders.middleware.CorsMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "aletheon_project.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [BASE_DIR / "templates"],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    }
]

WSGI_APPLICATION = "aletheon_project.wsgi.application"
ASGI_APPLICATION = "aletheon_project.asgi.application"

if settings.database_url:
    DATABASES = {
        "default": dj_database_url.parse(
            settings.database_url,
            conn_max_age=settings.db_conn_max_age,
        )
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
        }
    }

REDIS_URL = settings.redis_url

if REDIS_URL:
    CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.redis.RedisCache",
            "LOCATION": REDIS_URL,
        }
    }
else:
    CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
            "LOCATION": "aletheon-catalog",
        }
    }

AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

MEDIA_URL = "/media/"
MEDIA_ROOT = BASE_DIR / "media"

ARTIFACT_MEDIA_ROOT = settings.artifact_media_root or str(MEDIA_ROOT / "artifacts")
ARTIFACT_MEDIA_URL = settings.artifact_media_url

# Uploaded specimen photographs live in their own bucket-like storage alias.
STORAGES = {
    "default": {
        "BACKEND": "django.core.files.storage.FileSystemStorage",
    },
    "staticfiles": {
        "BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage",
    },
    "artifacts": {
        "BACKEND": "django.core.files.storage.FileSystemStorage",
        "OPTIONS": {
            "location": ARTIFACT_MEDIA_ROOT,
            "base_url": ARTIFACT_MEDIA_URL,
        },
    },
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# Analysis payloads carry several base64 photographs.
DATA_UPLOAD_MAX_MEMORY_SIZE = 50 * 1024 * 1024

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "rest_framework.authentication.SessionAuthentication",
        "rest_framework.authentication.BasicAuthentication",
    ],
    "DEFAULT_PERMISSION_CLASSES": ["rest_framework.permissions.AllowAny"],
    "DEFAULT_RENDERER_CLASSES": [
        "rest_framework.renderers.JSONRenderer",
    ],
    "DEFAULT_PARSER_CLASSES": [
        "rest_framework.parsers.JSONParser",
    ],
}

CORS_ALLOWED_ORIGINS: list[str] = settings.cors_allowed_origins
CORS_ALLOW_CREDENTIALS = True

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "[{levelname}] {asctime} {name} {funcName}:{lineno} - {message}",
            "style": "{",
        },
        "simple": {
            "format": "[{levelname}] {name} - {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "simple",
        },
    },
    "loggers": {
        "django": {
            "handlers": ["console"],
            "level": "INFO",
            "propagate": False,
        },
        "apps.core": {
            "handlers": ["console"],
            "level": "INFO",
            "propagate": False,
        },
        "apps.artifacts": {
            "handlers": ["console"],
            "level": "INFO",
            "propagate": False,
        },
        "apps.messaging": {
            "handlers": ["console"],
            "level": "INFO",
            "propagate": False,
        },
        "apps.teams": {
            "handlers": ["console"],
            "level": "INFO",
            "propagate": False,
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "INFO",
    },
}

# Debug mode logging - enabled via DJANGO_DEBUG_STARTUP env var
if os.getenv("DJANGO_DEBUG_STARTUP") == "true":
    LOGGING["handlers"]["console"]["formatter"] = "verbose"
    LOGGING["loggers"]["django"]["level"] = "DEBUG"
    for _app_logger in ("apps.core", "apps.artifacts", "apps.messaging", "apps.teams"):
        LOGGING["loggers"][_app_logger]["level"] = "DEBUG"
    LOGGING["root"]["level"] = "DEBUG"

OPENROUTER_API_KEY = settings.openrouter_api_key
OPENROUTER_BASE_URL = settings.openrouter_base_url
OPENROUTER_VISION_MODEL = settings.openrouter_vision_model
OPENROUTER_REPORT_MODEL = settings.openrouter_report_model
OPENROUTER_ASSISTANT_MODEL = settings.openrouter_assistant_model
OPENROUTER_APP_URL = settings.openrouter_app_url
OPENROUTER_APP_TITLE = settings.openrouter_app_title

SMITHSONIAN_API_KEY = settings.smithsonian_api_key
SMITHSONIAN_BASE_URL = settings.smithsonian_base_url

CATALOG_CACHE_TIMEOUT = settings.catalog_cache_timeout

POSTHOG_PROJECT_API_KEY = settings.posthog_project_api_key
POSTHOG_HOST = settings.posthog_host
POSTHOG_DEBUG = settings.posthog_debug
POSTHOG_DISABLED = settings.posthog_disabled
