"""Account storage adapters.

The economy depends only on the ``AccountStore`` protocol, so backends can
be swapped freely:
- ``InMemoryAccountStore`` for tests and single-process use
- ``SQLiteAccountStore`` for a local persistent store
"""

from typing import Optional

from ..config import Settings, get_settings
from .memory_store import InMemoryAccountStore
from .sqlite_store import SQLiteAccountStore
from .store import COUNTER_FIELDS, AccountStore, AccountUpdate


def create_store(settings: Optional[Settings] = None) -> AccountStore:
    """Build the store selected by ``settings.storage_backend``."""
    settings = settings or get_settings()
    if settings.storage_backend == "memory":
        return InMemoryAccountStore()
    return SQLiteAccountStore(settings.db_path)


__all__ = [
    "COUNTER_FIELDS",
    "AccountStore",
    "AccountUpdate",
    "InMemoryAccountStore",
    "SQLiteAccountStore",
    "create_store",
]
