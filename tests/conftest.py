"""Test environment: in-memory SQLite and a fixed session secret, set before the app is imported."""

import os

os.environ["APP_ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SESSION_SECRET"] = "test-session-secret"
os.environ["AUTO_CREATE_TABLES"] = "false"
os.environ["STATIC_DIR"] = ""
os.environ.pop("NODE_ENV", None)
