"""Entity store implementations."""

from app.config import settings
from app.repositories.base import Collection, EntityStore, Filter, Sort, eq
from app.repositories.memory_store import InMemoryStore


def get_store(backend: str = None) -> EntityStore:
    """
    Build the configured entity store.

    Args:
        backend: "sql" or "memory" (defaults to STORE_BACKEND)
    """
    backend = (backend or settings.STORE_BACKEND).lower()

    if backend == "memory":
        return InMemoryStore()
    if backend == "sql":
        from app.db.session import get_engine, get_session_factory
        from app.repositories.sql_store import SQLAlchemyStore

        return SQLAlchemyStore(get_session_factory(), engine=get_engine())
    raise ValueError(f"Unknown STORE_BACKEND: {backend}. Use 'sql' or 'memory'.")


__all__ = ["Collection", "EntityStore", "Filter", "Sort", "eq", "InMemoryStore", "get_store"]
