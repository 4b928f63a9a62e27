"""Directory Service - Wires Functional Core and Imperative Shell.

This module answers the directory's queries: resolve a slug, list the
directory for the table view, and rank or center events for the map.
It's the "glue" between the pure core and the store adapters.
"""

import logging
from dataclasses import dataclass, field

from src.bulk_retrieval import BulkRetriever
from src.core.config import StoreConfig
from src.core.directory import filter_by_country, filter_entries, sort_entries
from src.core.entry import Entry, entry_to_dict, parse_entry
from src.core.geo import (
    DEFAULT_NEAREST_COUNT,
    BoundingBox,
    Coordinate,
    RankedEntry,
    bounding_center,
    bounds_for_entries,
    located_entries,
    rank_nearest,
)
from src.core.retrieval import RetrievalResult
from src.shell.firestore_store import FirestoreConfig, FirestoreStore
from src.shell.redis_rest_store import RedisRestConfig, RedisRestStore
from src.shell.snapshot_store import SnapshotStore
from src.shell.store import EntryStore


logger = logging.getLogger(__name__)


@dataclass
class MapView:
    """What the map needs to render.

    Attributes:
        center: Where to center the map (None if nothing is located)
        entries: Located entries to place as markers
        nearest: Nearest events to the observer (empty without one)
        bounds: Box around the markers (None if nothing is located)
        observer: The observer coordinate, if one was given
    """
    center: Coordinate | None
    entries: list[Entry] = field(default_factory=list)
    nearest: list[RankedEntry] = field(default_factory=list)
    bounds: BoundingBox | None = None
    observer: Coordinate | None = None


def build_store(config: StoreConfig) -> EntryStore:
    """Create the store adapter selected by configuration.

    Raises:
        ValueError: If the backend is unknown
    """
    if config.backend == "redis":
        return RedisRestStore(RedisRestConfig(
            url=config.redis_url,
            token=config.redis_token,
            key_pattern=config.key_pattern,
            timeout=config.timeout_seconds,
            batch_size=config.batch_size,
            max_workers=config.max_workers,
            use_pipeline=config.use_pipeline,
        ))

    if config.backend == "firestore":
        return FirestoreStore(FirestoreConfig(
            project_id=config.firestore_project,
            database=config.firestore_database,
            collection=config.firestore_collection,
            timeout=config.timeout_seconds,
            batch_size=config.batch_size,
        ))

    if config.backend == "snapshot":
        return SnapshotStore(config.snapshot_path)

    raise ValueError(f"Unknown store backend: {config.backend}")


class DirectoryService:
    """Query interface used by the redirect handler, listing API and UI.

    Holds no state between calls; every query goes to the store.
    """

    def __init__(
        self,
        store: EntryStore,
        retriever: BulkRetriever | None = None,
    ) -> None:
        """Initialize directory service.

        Args:
            store: Backing store adapter
            retriever: Bulk retriever (created if not provided)
        """
        self.store = store
        self.retriever = retriever or BulkRetriever(store)

    def resolve(self, slug: str) -> str | None:
        """Resolve a slug to its destination URL.

        One store round trip. A missing slug, or a stored record without a
        usable destination URL, resolves to None.

        Raises:
            StoreUnavailable: If the store cannot be reached
        """
        raw = self.store.get_one(slug)
        if raw is None:
            logger.info("No entry for slug %s", slug)
            return None

        entry = parse_entry(raw, slug)
        if entry is None:
            logger.warning("Entry for slug %s is malformed", slug)
            return None

        return entry.destination_url

    def fetch_directory(self) -> RetrievalResult:
        """Fetch every valid entry along with drop counts.

        Raises:
            StoreUnavailable: If the store cannot be reached
        """
        return self.retriever.fetch_all()

    def list_all(
        self,
        query: str | None = None,
        sort: str | None = None,
        direction: str = "asc",
        country: str | None = None,
        entries: list[Entry] | None = None,
    ) -> list[Entry]:
        """List the directory, optionally filtered and sorted.

        Args:
            query: Case-insensitive search over city, chapter, name, slug, country
            sort: "date", "location", or None for store order
            direction: "asc" or "desc"
            country: Exact country name facet
            entries: Entries to list (the whole directory if not given)

        Returns:
            Matching entries

        Raises:
            StoreUnavailable: If entries are not given and the store cannot be reached
            ValueError: If sort or direction is not recognised
        """
        if entries is None:
            entries = self.fetch_directory().entries
        entries = filter_entries(entries, query)
        entries = filter_by_country(entries, country)
        return sort_entries(entries, sort, direction)

    def nearest(
        self,
        observer: Coordinate,
        k: int = DEFAULT_NEAREST_COUNT,
        entries: list[Entry] | None = None,
    ) -> list[RankedEntry]:
        """The k located entries closest to an observer, nearest first.

        Raises:
            StoreUnavailable: If entries are not given and the store cannot be reached
        """
        if entries is None:
            entries = self.fetch_directory().entries
        return rank_nearest(observer, entries, k)

    def bounding_center(self, entries: list[Entry] | None = None) -> Coordinate | None:
        """Mean coordinate of the located entries (whole directory by default).

        Raises:
            StoreUnavailable: If entries are not given and the store cannot be reached
        """
        if entries is None:
            entries = self.fetch_directory().entries
        return bounding_center(entries)

    def map_view(
        self,
        observer: Coordinate | None = None,
        k: int = DEFAULT_NEAREST_COUNT,
        country: str | None = None,
        entries: list[Entry] | None = None,
    ) -> MapView:
        """Assemble the map view.

        With an observer the map centers on it and lists the nearest
        events; otherwise it centers on the mean of the markers.

        Raises:
            StoreUnavailable: If entries are not given and the store cannot be reached
        """
        if entries is None:
            entries = self.fetch_directory().entries

        markers = located_entries(filter_by_country(entries, country))

        if observer is not None:
            return MapView(
                center=observer,
                entries=markers,
                nearest=rank_nearest(observer, markers, k),
                bounds=bounds_for_entries(markers),
                observer=observer,
            )

        return MapView(
            center=bounding_center(markers),
            entries=markers,
            bounds=bounds_for_entries(markers),
        )

    def save(self, entry: Entry) -> None:
        """Pass an entry through to the store under its slug.

        Used by the seeding tool; no validation is performed here.

        Raises:
            StoreUnavailable: If the store cannot be reached
        """
        self.store.set_one(entry.slug, entry_to_dict(entry))
