"""ASGI config for the Aletheon project."""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "aletheon_project.settings.production")

application = get_asgi_application()
