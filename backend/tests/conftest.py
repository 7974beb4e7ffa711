"""Root conftest — shared test configuration."""

import os

# Ensure tests never reach a real database, authority, or background loop
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
os.environ.setdefault("ACCESS_STATUS_BASE_URL", "http://authority.test")
os.environ.setdefault("REAPER_ENABLED", "false")
os.environ.setdefault("LOG_FORMAT", "text")
