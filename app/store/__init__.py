import logging

from app.core.config import Settings
from app.core.exceptions import ValidationError
from app.store.base import EntityStore, UniqueViolation
from app.store.memory import MemoryStore
from app.store.sql import SqlStore

logger = logging.getLogger(__name__)


def build_store(settings: Settings) -> EntityStore:
    backend = settings.STORAGE_BACKEND.strip().lower()
    if backend == "memory":
        store: EntityStore = MemoryStore()
    elif backend == "sql":
        store = SqlStore(settings.DATABASE_URL)
    else:
        raise ValidationError(f"Unknown STORAGE_BACKEND {settings.STORAGE_BACKEND!r}")
    logger.info("Using %s entity store", store.backend_name)
    return store


__all__ = ["EntityStore", "MemoryStore", "SqlStore", "UniqueViolation", "build_store"]
