"""Schema Migrations — applies Alembic revisions once at process startup.

Invariants:
    - upgrade_to_head() is idempotent: an up-to-date database is left untouched
    - Runs before the HTTP server accepts traffic
    - Migration scripts ship inside the package (reviewhub/migrations), so a
      regular install finds env.py and versions/ next to the code

Design Decisions:
    - Executed in a worker thread from the lifespan: migrations/env.py drives
      its own event loop with asyncio.run(), which cannot nest inside uvicorn's loop
"""

import asyncio
import logging
from importlib import resources

from alembic import command
from alembic.config import Config

logger = logging.getLogger(__name__)

SCRIPT_LOCATION = resources.files("reviewhub") / "migrations"


def build_alembic_config(database_url: str) -> Config:
    config = Config()
    config.set_main_option("script_location", str(SCRIPT_LOCATION))
    config.attributes["database_url"] = database_url
    return config


def upgrade_to_head(database_url: str) -> None:
    command.upgrade(build_alembic_config(database_url), "head")
    logger.info("migrations applied")


async def run_migrations(database_url: str) -> None:
    await asyncio.to_thread(upgrade_to_head, database_url)
