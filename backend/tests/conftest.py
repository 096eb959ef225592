"""Root conftest: shared test configuration."""

import os

# Ensure tests never point at a real database or admin
os.environ.setdefault("ADMIN_ADDRESS", "0xAdmin000000000000000000000000000000000001")
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///:memory:",
)
os.environ.setdefault("LOG_FORMAT", "text")
