"""WSGI config for the Aletheon project."""

import os
from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "aletheon_project.settings.production")

application = get_wsgi_application()
