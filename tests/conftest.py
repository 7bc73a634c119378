"""Test environment: in-memory SQLite, no Redis, no Gemini key."""
import os

os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["CACHE_ENABLED"] = "false"
os.environ["APP_ENV"] = "dev"
os.environ.pop("GEMINI_API_KEY", None)

import pytest

from app.database import init_db


@pytest.fixture(scope="session", autouse=True)
def database():
    init_db()
    yield
