"""Imperative Shell - I/O and side effects.

This module contains all code that interacts with external systems:
- Redis REST store (HTTP)
- Firestore store (database)
- Snapshot store (JSON file)
- Configuration loading (environment/files/Secret Manager)

Keep this layer thin and simple. All directory logic should be in core.
"""

from src.shell.store import EntryStore, fan_out_get_many
from src.shell.redis_rest_store import RedisRestConfig, RedisRestStore
from src.shell.firestore_store import FirestoreConfig, FirestoreStore
from src.shell.snapshot_store import SnapshotStore
from src.shell.config_loader import load_config, load_config_from_env

__all__ = [
    "EntryStore",
    "fan_out_get_many",
    "RedisRestConfig",
    "RedisRestStore",
    "FirestoreConfig",
    "FirestoreStore",
    "SnapshotStore",
    "load_config",
    "load_config_from_env",
]
