"""Snapshot Store - Imperative Shell.

Serves the directory from a static JSON file instead of a live store.
The file holds either a list of records or an object mapping slug to
record. List records without a usable text slug are keyed by position.
"""

import json
import logging
import os
import threading
from pathlib import Path
from typing import Any, Sequence

from src.shell.store import store_unavailable


logger = logging.getLogger(__name__)


BACKEND_NAME = "snapshot"


def _positional_key(index: int) -> str:
    return f"entry-{index}"


def index_snapshot(data: Any) -> dict[str, Any]:
    """Key the records of a decoded snapshot file.

    Args:
        data: Decoded JSON (list of records, or slug -> record object)

    Returns:
        Ordered mapping of key to raw record

    Raises:
        ValueError: If the snapshot is neither a list nor an object
    """
    if isinstance(data, dict):
        return dict(data)

    if not isinstance(data, list):
        raise ValueError(f"Snapshot must be a list or object, got {type(data).__name__}")

    records: dict[str, Any] = {}
    for index, record in enumerate(data):
        slug = record.get("slug") if isinstance(record, dict) else None
        if not isinstance(slug, str) or not slug.strip():
            slug = _positional_key(index)
        # Later records with the same slug win
        records[slug] = record
    return records


class SnapshotStore:
    """Directory store backed by a JSON file.

    The file is read once on first use. Writes update the in-memory copy
    and rewrite the file.
    """

    def __init__(self, path: str | Path) -> None:
        """Initialize snapshot store.

        Args:
            path: Path to the JSON snapshot
        """
        self.path = Path(path)
        self._records: dict[str, Any] | None = None
        self._lock = threading.Lock()

    @property
    def records(self) -> dict[str, Any]:
        """Lazy load of the snapshot file.

        Raises:
            StoreUnavailable: If the file cannot be read or decoded
        """
        if self._records is None:
            logger.info("Loading directory snapshot from %s", self.path)
            try:
                with open(self.path, "r", encoding="utf-8") as f:
                    self._records = index_snapshot(json.load(f))
            except (OSError, ValueError) as e:
                raise store_unavailable(BACKEND_NAME, e) from e
            logger.info("Loaded %d records from snapshot", len(self._records))
        return self._records

    def get_one(self, key: str) -> Any | None:
        return self.records.get(key)

    def list_keys(self) -> list[str]:
        return list(self.records)

    def get_many(self, keys: Sequence[str]) -> list[tuple[str, Any | None]]:
        records = self.records
        return [(key, records.get(key)) for key in keys]

    def set_one(self, key: str, value: Any) -> None:
        """Store a record and persist the whole snapshot.

        The file is always written back as a slug -> record object. The
        new file replaces the old one only once it is fully written, and
        the in-memory copy changes only after that.

        Raises:
            StoreUnavailable: If the record cannot be serialized or the
                file cannot be written
        """
        with self._lock:
            records = dict(self.records)
            records[key] = value
            try:
                text = json.dumps(records, indent=2, ensure_ascii=False)
            except (TypeError, ValueError) as e:
                raise store_unavailable(BACKEND_NAME, e) from e

            temp_path = self.path.with_name(f"{self.path.name}.tmp")
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with open(temp_path, "w", encoding="utf-8") as f:
                    f.write(text)
                os.replace(temp_path, self.path)
            except OSError as e:
                temp_path.unlink(missing_ok=True)
                raise store_unavailable(BACKEND_NAME, e) from e

            self._records = records

        logger.info("Stored snapshot record for %s", key)
