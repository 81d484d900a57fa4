"""
Root pytest configuration for the Django project.

Sets the environment the settings module needs before Django is loaded.
Django setup, setting overrides and fixtures live in app/conftest.py and in
each app's tests/conftest.py.
"""

import os

# Ensure Django settings are configured before any tests run
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
# SQLite unless a PostgreSQL DATABASE_URL is provided (CI, docker-compose)
os.environ.setdefault("DATABASE_URL", "sqlite:///test.sqlite3")
