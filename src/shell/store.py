"""Store Adapter interface - Imperative Shell.

Any backing store (key-value store, document database, flat file) that
provides these four capabilities can serve the directory. Values are
returned raw; parsing happens in the core.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Protocol, Sequence

from src.core.errors import StoreUnavailable


logger = logging.getLogger(__name__)


# Default cap on concurrent per-key fetches
DEFAULT_MAX_WORKERS = 16


class EntryStore(Protocol):
    """Capabilities the directory needs from a backing store.

    get_one returns None for a missing key. Every method raises
    StoreUnavailable when the backend cannot be reached or times out.
    """

    def get_one(self, key: str) -> Any | None:
        ...

    def list_keys(self) -> list[str]:
        ...

    def get_many(self, keys: Sequence[str]) -> list[tuple[str, Any | None]]:
        ...

    def set_one(self, key: str, value: Any) -> None:
        ...


def chunked(keys: Sequence[str], size: int) -> list[list[str]]:
    """Split keys into consecutive batches of at most size keys."""
    if size <= 0:
        raise ValueError(f"Batch size must be positive, got {size}")
    return [list(keys[i:i + size]) for i in range(0, len(keys), size)]


def fan_out_get_many(
    fetch_one: Callable[[str], Any | None],
    keys: Sequence[str],
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> list[tuple[str, Any | None]]:
    """Fetch keys concurrently with a bounded worker pool.

    For backends without a multi-get. Waits for every fetch before
    returning; if any fetch raises StoreUnavailable the whole call fails.

    Args:
        fetch_one: Single-key fetch (must apply its own timeout)
        keys: Keys to fetch
        max_workers: Maximum concurrent fetches

    Returns:
        (key, value or None) pairs in the order of keys

    Raises:
        StoreUnavailable: If any fetch fails
    """
    if not keys:
        return []

    workers = max(1, min(max_workers, len(keys)))
    logger.debug("Fanning out %d fetches over %d workers", len(keys), workers)

    with ThreadPoolExecutor(max_workers=workers) as executor:
        values = list(executor.map(fetch_one, keys))

    return list(zip(keys, values))


def store_unavailable(backend: str, error: Exception) -> StoreUnavailable:
    """Build the StoreUnavailable raised for a failed backend call."""
    logger.error("%s store unavailable: %s", backend, str(error))
    return StoreUnavailable(f"{backend} store unavailable: {error}", backend=backend)
