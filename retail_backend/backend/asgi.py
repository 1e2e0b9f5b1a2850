# backend/asgi.py
"""
PATH: backend/asgi.py

ASGI entrypoint for the retail inventory backend.
Falls back to dev settings when DJANGO_SETTINGS_MODULE is not exported;
deployments must point it at backend.settings.prod.
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "backend.settings.dev")

application = get_asgi_application()
