# backend/wsgi.py
"""
WSGI entrypoint for the retail inventory backend.

Deployments must export DJANGO_SETTINGS_MODULE=backend.settings.prod;
the ledger relies on PostgreSQL row locks there.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "backend.settings.dev")

application = get_wsgi_application()
