"""
Content store backends for AssignScore.

This package provides the store interface the evaluator reads from and
writes to, plus in-memory, SQLite and REST implementations.
"""

from typing import Optional

from .base import ContentStore
from .memory import MemoryContentStore
from .sqlite import SQLiteContentStore
from .rest import RestContentStore
from ..utils.config import Config
from ..utils.exceptions import ConfigurationError


def create_store(config: Optional[Config] = None) -> ContentStore:
    """
    Build the content store selected by ``store.backend``.

    Raises:
        ConfigurationError: If the backend is unknown or misconfigured
    """
    config = config or Config()
    store_config = config.get_store_config()
    backend = str(store_config.get("backend", "memory")).lower()

    if backend == "memory":
        return MemoryContentStore()
    if backend == "sqlite":
        return SQLiteContentStore(store_config.get("sqlite_path", "assignscore.db"))
    if backend == "rest":
        url = store_config.get("rest_url", "")
        key = store_config.get("rest_key", "")
        if not url or not key:
            raise ConfigurationError("REST store requires rest_url and rest_key", "store.rest_url")
        return RestContentStore(url, key, timeout=float(store_config.get("timeout_seconds", 10)))

    raise ConfigurationError("Unknown store backend", "store.backend", backend)


__all__ = [
    "ContentStore",
    "MemoryContentStore",
    "SQLiteContentStore",
    "RestContentStore",
    "create_store",
]
