"""Firestore Store - Imperative Shell.

This module serves directory records from Google Cloud Firestore, one
document per slug. Uses batched document reads for the full listing.

All I/O is contained here; parsing is in the core module.
"""

import logging
from dataclasses import dataclass
from typing import Any, Sequence

from google.api_core import exceptions as google_exceptions
from google.cloud import firestore

from src.shell.store import chunked, store_unavailable


logger = logging.getLogger(__name__)


BACKEND_NAME = "firestore"

# Default collection holding one document per slug
DEFAULT_COLLECTION = "redirects"

# Default timeout for Firestore calls (seconds)
DEFAULT_TIMEOUT = 10.0

# Document references per batched read
DEFAULT_BATCH_SIZE = 500


@dataclass
class FirestoreConfig:
    """Configuration for Firestore store.

    Attributes:
        project_id: GCP project ID (None for default)
        database: Firestore database name (None for default database)
        collection: Firestore collection name
        timeout: Timeout for each call in seconds
        batch_size: Document references per batched read
    """
    project_id: str | None = None
    database: str | None = None
    collection: str = DEFAULT_COLLECTION
    timeout: float = DEFAULT_TIMEOUT
    batch_size: int = DEFAULT_BATCH_SIZE


class FirestoreStore:
    """Directory store backed by a Firestore collection.

    This is part of the imperative shell - it handles database I/O.

    Document structure (document ID is the slug):
    {
        "destinationUrl": "https://...",
        "devfestName": "...",
        ...
    }
    """

    def __init__(
        self,
        config: FirestoreConfig | None = None,
        client: firestore.Client | None = None,
    ) -> None:
        """Initialize Firestore store.

        Args:
            config: Firestore configuration
            client: Firestore client (created lazily if not provided)
        """
        self.config = config or FirestoreConfig()
        self._client = client

    @property
    def client(self) -> firestore.Client:
        """Lazy initialization of Firestore client."""
        if self._client is None:
            kwargs = {}
            if self.config.project_id:
                kwargs['project'] = self.config.project_id
            if self.config.database:
                kwargs['database'] = self.config.database
            self._client = firestore.Client(**kwargs)
        return self._client

    def _collection(self) -> Any:
        return self.client.collection(self.config.collection)

    def get_one(self, key: str) -> dict[str, Any] | None:
        """Fetch the document stored under a slug (None if missing).

        This method performs database I/O.
        """
        try:
            doc = self._collection().document(key).get(timeout=self.config.timeout)
        except google_exceptions.GoogleAPIError as e:
            raise store_unavailable(BACKEND_NAME, e) from e

        if not doc.exists:
            return None
        return doc.to_dict()

    def list_keys(self) -> list[str]:
        """List every document ID in the collection.

        The client pages through the collection internally.

        This method performs database I/O.
        """
        try:
            refs = self._collection().list_documents(timeout=self.config.timeout)
            keys = [ref.id for ref in refs]
        except google_exceptions.GoogleAPIError as e:
            raise store_unavailable(BACKEND_NAME, e) from e

        logger.info("Listed %d documents from Firestore", len(keys))
        return keys

    def get_many(self, keys: Sequence[str]) -> list[tuple[str, Any | None]]:
        """Fetch many documents with batched reads.

        Snapshots may arrive in any order; results follow the order of keys.

        This method performs database I/O.
        """
        if not keys:
            return []

        collection = self._collection()
        found: dict[str, dict[str, Any]] = {}
        batches = chunked(keys, self.config.batch_size)

        try:
            for batch in batches:
                refs = [collection.document(key) for key in batch]
                for snapshot in self.client.get_all(refs, timeout=self.config.timeout):
                    if snapshot.exists:
                        found[snapshot.id] = snapshot.to_dict()
        except google_exceptions.GoogleAPIError as e:
            raise store_unavailable(BACKEND_NAME, e) from e

        logger.info("Fetched %d documents from Firestore in %d batches", len(found), len(batches))
        return [(key, found.get(key)) for key in keys]

    def set_one(self, key: str, value: dict[str, Any]) -> None:
        """Write the document for a slug, replacing any previous content.

        This method performs database I/O.
        """
        try:
            self._collection().document(key).set(value, timeout=self.config.timeout)
        except google_exceptions.GoogleAPIError as e:
            raise store_unavailable(BACKEND_NAME, e) from e

        logger.info("Stored document for %s", key)
