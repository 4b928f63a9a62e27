"""Functional Core - Pure functions with no side effects.

This module contains all directory logic as pure functions:
- Entry parsing and derived values
- Record assembly for bulk retrieval
- Geo/distance calculations and proximity ranking
- Directory search, country facet and sorting

All functions here are deterministic and have no I/O.
"""

from src.core.entry import Entry, display_name, is_located, parse_entry, entry_to_dict
from src.core.errors import DirectoryError, StoreUnavailable
from src.core.geo import (
    Coordinate,
    RankedEntry,
    bounding_center,
    calculate_distance,
    rank_nearest,
)
from src.core.directory import filter_entries, filter_by_country, sort_entries
from src.core.retrieval import RetrievalResult, assemble_entries

__all__ = [
    # Entry
    "Entry",
    "display_name",
    "is_located",
    "parse_entry",
    "entry_to_dict",
    # Errors
    "DirectoryError",
    "StoreUnavailable",
    # Geo
    "Coordinate",
    "RankedEntry",
    "bounding_center",
    "calculate_distance",
    "rank_nearest",
    # Directory
    "filter_entries",
    "filter_by_country",
    "sort_entries",
    # Retrieval
    "RetrievalResult",
    "assemble_entries",
]
