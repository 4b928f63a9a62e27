"""Redis REST Store - Imperative Shell.

This module talks to a Redis REST endpoint (Upstash style) over HTTP.
Each stored value is the JSON text of one directory record, keyed by slug.
All I/O is contained here; parsing is in the core module.

Wire protocol:
    POST {url}            ["GET", "key"]             -> {"result": ...}
    POST {url}/pipeline   [["MGET", ...], [...]]     -> [{"result": ...}, ...]
    Errors come back as {"error": "..."}.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Sequence

import requests

from src.core.errors import StoreUnavailable
from src.shell.store import (
    DEFAULT_MAX_WORKERS,
    chunked,
    fan_out_get_many,
    store_unavailable,
)


logger = logging.getLogger(__name__)


BACKEND_NAME = "redis"

# Default timeout for REST requests (seconds)
DEFAULT_TIMEOUT = 10

# Keys per MGET command
DEFAULT_BATCH_SIZE = 500

# Keys requested per SCAN page
DEFAULT_SCAN_COUNT = 1000


@dataclass
class RedisRestConfig:
    """Configuration for the Redis REST store.

    Attributes:
        url: REST endpoint base URL
        token: Bearer token
        key_pattern: SCAN match pattern for directory keys
        timeout: Request timeout in seconds
        batch_size: Keys per MGET command
        scan_count: COUNT hint per SCAN page
        max_workers: Concurrency cap for per-key fallback fetches
        use_pipeline: Send every MGET batch in one pipelined request
    """
    url: str
    token: str = ""
    key_pattern: str = "*"
    timeout: float = DEFAULT_TIMEOUT
    batch_size: int = DEFAULT_BATCH_SIZE
    scan_count: int = DEFAULT_SCAN_COUNT
    max_workers: int = DEFAULT_MAX_WORKERS
    use_pipeline: bool = True


class RedisRestStore:
    """Directory store backed by a Redis REST endpoint.

    This is part of the imperative shell - it handles HTTP I/O.
    """

    def __init__(
        self,
        config: RedisRestConfig,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize Redis REST store.

        Args:
            config: Endpoint configuration
            session: HTTP session (created if not provided)
        """
        self.config = config
        self.session = session or requests.Session()
        if config.token:
            self.session.headers["Authorization"] = f"Bearer {config.token}"

    @property
    def base_url(self) -> str:
        return self.config.url.rstrip("/")

    def _post(self, path: str, payload: Any) -> Any:
        """POST a command payload and return the decoded JSON body.

        Raises:
            StoreUnavailable: On transport errors, timeouts, error
                statuses or non-JSON replies
        """
        url = f"{self.base_url}{path}"

        try:
            response = self.session.post(url, json=payload, timeout=self.config.timeout)
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as e:
            raise store_unavailable(BACKEND_NAME, e) from e

    @staticmethod
    def _unwrap(reply: Any) -> Any:
        """Extract the result of a single command reply."""
        if not isinstance(reply, dict):
            raise StoreUnavailable(f"Unexpected reply: {reply!r}", backend=BACKEND_NAME)
        if "error" in reply:
            raise StoreUnavailable(f"Command failed: {reply['error']}", backend=BACKEND_NAME)
        return reply.get("result")

    def _command(self, *args: Any) -> Any:
        return self._unwrap(self._post("", list(args)))

    def _pipeline(self, commands: list[list[Any]]) -> list[Any]:
        replies = self._post("/pipeline", commands)
        if not isinstance(replies, list) or len(replies) != len(commands):
            raise StoreUnavailable("Pipeline reply does not match commands", backend=BACKEND_NAME)
        return [self._unwrap(r) for r in replies]

    def get_one(self, key: str) -> Any | None:
        """Fetch the raw value stored under key (None if missing).

        This method performs HTTP I/O.
        """
        return self._command("GET", key)

    def list_keys(self) -> list[str]:
        """List every key matching the configured pattern.

        Walks the SCAN cursor until it returns to zero. SCAN may repeat
        keys, so the result is de-duplicated in first-seen order.

        This method performs HTTP I/O.
        """
        cursor = "0"
        keys: dict[str, None] = {}
        pages = 0

        while True:
            result = self._command(
                "SCAN", cursor,
                "MATCH", self.config.key_pattern,
                "COUNT", self.config.scan_count,
            )
            try:
                cursor, page = str(result[0]), result[1]
            except (TypeError, IndexError, KeyError) as e:
                raise StoreUnavailable(f"Unexpected SCAN reply: {result!r}", backend=BACKEND_NAME) from e

            keys.update(dict.fromkeys(page))
            pages += 1

            if cursor == "0":
                break

        logger.info("Listed %d keys from Redis in %d SCAN pages", len(keys), pages)
        return list(keys)

    def get_many(self, keys: Sequence[str]) -> list[tuple[str, Any | None]]:
        """Fetch values for many keys.

        With pipelining every MGET batch travels in one request. Without
        it, single-key GETs fan out over a bounded worker pool.

        This method performs HTTP I/O.
        """
        if not keys:
            return []

        if not self.config.use_pipeline:
            return fan_out_get_many(self.get_one, keys, self.config.max_workers)

        batches = chunked(keys, self.config.batch_size)
        results = self._pipeline([["MGET", *batch] for batch in batches])

        pairs: list[tuple[str, Any | None]] = []
        for batch, values in zip(batches, results):
            if not isinstance(values, list) or len(values) != len(batch):
                raise StoreUnavailable("MGET reply does not match requested keys", backend=BACKEND_NAME)
            pairs.extend(zip(batch, values))

        logger.info("Fetched %d values from Redis in %d MGET batches", len(pairs), len(batches))
        return pairs

    def set_one(self, key: str, value: Any) -> None:
        """Store a record under key.

        Mappings are stored as their JSON text; strings are stored as-is.

        This method performs HTTP I/O.
        """
        payload = value if isinstance(value, str) else json.dumps(value)
        self._command("SET", key, payload)
        logger.info("Stored record for %s", key)
