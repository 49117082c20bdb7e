"""Root conftest — shared test configuration."""

import os

# Never touch a real database or run Alembic from tests
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("RUN_MIGRATIONS", "false")
os.environ.setdefault("LOG_FORMAT", "text")
