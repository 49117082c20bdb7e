"""Route Dependencies — hand the lifespan-scoped resources to route handlers.

Invariants:
    - Resources live on app.state, set by the lifespan; no module-level singletons
    - A request arriving before startup completes fails loudly (RuntimeError → 500)
"""

from fastapi import Request

from reviewhub.infrastructure.database import DatabaseSessionManager
from reviewhub.services.assignment_engine import AssignmentEngine


def get_db_manager(request: Request) -> DatabaseSessionManager:
    db_manager = getattr(request.app.state, "db_manager", None)
    if db_manager is None:
        raise RuntimeError("Database not initialized")
    return db_manager


def get_engine(request: Request) -> AssignmentEngine:
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        raise RuntimeError("Assignment engine not initialized")
    return engine
