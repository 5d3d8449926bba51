"""Test environment: in-memory SQLite and a fixed signing secret, set before app settings load."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-signing-secret")
os.environ.setdefault("APP_ENV", "dev")
