"""Production settings."""

from __future__ import annotations

import os
import re

from .base import *  # noqa: F401,F403

DEBUG = False

SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
SECURE_SSL_REDIRECT = True
SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
SECURE_HSTS_SECONDS = int(os.getenv("DJANGO_SECURE_HSTS_SECONDS", 3600))
SECURE_HSTS_INCLUDE_SUBDOMAINS = True
SECURE_CONTENT_TYPE_NOSNIFF = True
X_FRAME_OPTIONS = "DENY"

# Entries like ".aletheon.app" allow every field-station subdomain.
CORS_ALLOWED_ORIGIN_REGEXES = [
    r"https://[a-zA-Z0-9\-]+" + re.escape(origin)
    for origin in settings.cors_allowed_origins  # noqa: F405
    if origin.startswith(".")
]
CORS_ALLOWED_ORIGINS = [
    origin
    for origin in settings.cors_allowed_origins  # noqa: F405
    if not origin.startswith(".")
]
CORS_ALLOW_ALL_ORIGINS = False

if not SECRET_KEY or SECRET_KEY == "development-secret-key":  # noqa: F405
    raise RuntimeError("DJANGO_SECRET_KEY must be set in production environment")

if not ALLOWED_HOSTS:  # noqa: F405
    raise RuntimeError("DJANGO_ALLOWED_HOSTS must be configured for production")

# Stored image URLs are handed to browsers verbatim, so they must be absolute.
if not ARTIFACT_MEDIA_URL.startswith(("http://", "https://")):  # noqa: F405
    raise RuntimeError("DJANGO_ARTIFACT_MEDIA_URL must be an absolute URL in production")
