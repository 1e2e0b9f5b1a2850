# backend/settings/__init__.py
"""
PATH: backend/settings/__init__.py

Settings package entrypoint.

Nothing is imported here on purpose. Select a concrete module through
DJANGO_SETTINGS_MODULE:
- backend.settings.dev   (local development, SQLite by default)
- backend.settings.test  (test runs, in-memory SQLite)
- backend.settings.prod  (production, PostgreSQL only)
"""
