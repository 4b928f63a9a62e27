"""Geographic calculations - Pure functions.

This module provides distance calculations, proximity ranking and map
centering for directory entries.
All functions are pure with no side effects.
"""

import math
from dataclasses import dataclass
from typing import Iterable

from src.core.entry import Entry, is_located


# Earth's radius in kilometers
EARTH_RADIUS_KM = 6371.0

# Number of nearest events shown around an observer
DEFAULT_NEAREST_COUNT = 5


@dataclass(frozen=True)
class Coordinate:
    """A point on the globe in WGS-84 degrees."""
    latitude: float
    longitude: float


@dataclass(frozen=True)
class BoundingBox:
    """Geographic bounding box.

    Attributes:
        min_latitude: Southern boundary
        max_latitude: Northern boundary
        min_longitude: Western boundary
        max_longitude: Eastern boundary
    """
    min_latitude: float
    max_latitude: float
    min_longitude: float
    max_longitude: float


@dataclass(frozen=True)
class RankedEntry:
    """An entry with its distance from an observer.

    Attributes:
        entry: The directory entry
        distance_km: Great-circle distance from the observer
    """
    entry: Entry
    distance_km: float


def calculate_distance(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
) -> float:
    """Calculate distance between two points using Haversine formula.

    Pure function.

    Args:
        lat1: Latitude of first point
        lon1: Longitude of first point
        lat2: Latitude of second point
        lon2: Longitude of second point

    Returns:
        Distance in kilometers
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def located_entries(entries: Iterable[Entry]) -> list[Entry]:
    """Keep only entries that can be placed on a map."""
    return [e for e in entries if is_located(e)]


def distance_to_entry(observer: Coordinate, entry: Entry) -> float:
    """Distance in km from an observer to a located entry."""
    latitude, longitude = entry.coordinates
    return calculate_distance(observer.latitude, observer.longitude, latitude, longitude)


def rank_nearest(
    observer: Coordinate,
    entries: Iterable[Entry],
    k: int = DEFAULT_NEAREST_COUNT,
) -> list[RankedEntry]:
    """Rank located entries by distance from an observer.

    Pure function. Unlocated entries are skipped. Equal distances keep
    their input order.

    Args:
        observer: Point to measure from
        entries: Candidate entries
        k: Maximum number of results

    Returns:
        Up to k entries, nearest first, each with its distance
    """
    if k <= 0:
        return []

    ranked = [
        RankedEntry(entry=e, distance_km=distance_to_entry(observer, e))
        for e in located_entries(entries)
    ]
    ranked.sort(key=lambda r: r.distance_km)

    return ranked[:k]


def bounding_center(entries: Iterable[Entry]) -> Coordinate | None:
    """Arithmetic mean of the coordinates of located entries.

    Pure function. Used to center a map when there is no observer.

    Returns:
        Center coordinate, or None if no entry is located
    """
    located = located_entries(entries)
    if not located:
        return None

    return Coordinate(
        latitude=sum(e.latitude for e in located) / len(located),
        longitude=sum(e.longitude for e in located) / len(located),
    )


def bounds_for_entries(entries: Iterable[Entry]) -> BoundingBox | None:
    """Smallest bounding box containing every located entry.

    Pure function.

    Returns:
        Bounding box, or None if no entry is located
    """
    located = located_entries(entries)
    if not located:
        return None

    latitudes = [e.coordinates[0] for e in located]
    longitudes = [e.coordinates[1] for e in located]

    return BoundingBox(
        min_latitude=min(latitudes),
        max_latitude=max(latitudes),
        min_longitude=min(longitudes),
        max_longitude=max(longitudes),
    )
