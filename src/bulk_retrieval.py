"""Bulk Retrieval - Wires store I/O to record assembly.

Fetches the whole directory in a bounded number of store calls: one key
listing, one batched multi-get, then pure assembly in the core.
"""

import logging

from src.core.retrieval import RetrievalResult, assemble_entries
from src.shell.store import EntryStore


logger = logging.getLogger(__name__)


class BulkRetriever:
    """Produces the complete, validated entry list from a store.

    A StoreUnavailable from the store aborts the fetch; there are no
    partial results. Malformed records never abort it.
    """

    def __init__(self, store: EntryStore) -> None:
        self.store = store

    def fetch_all(self) -> RetrievalResult:
        """Fetch and assemble every entry in the store.

        This method performs store I/O.

        Returns:
            RetrievalResult with valid entries and drop counts

        Raises:
            StoreUnavailable: If the store cannot be reached
        """
        keys = self.store.list_keys()

        if not keys:
            logger.info("Store has no keys")
            return RetrievalResult()

        pairs = self.store.get_many(keys)
        result = assemble_entries(pairs)

        if result.malformed_count:
            logger.warning("Dropped %d malformed records", result.malformed_count)

        logger.info("Retrieved directory: %s", result.summary)
        return result
