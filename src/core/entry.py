"""Directory entry model and parsing - Pure functions.

This module handles parsing stored redirect records into typed Entry
objects. Stored values may arrive as already-structured mappings or as
their JSON text encoding; both are accepted.
All functions are pure with no side effects.
"""

import json
import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any


# Wire (camelCase) name for each Entry attribute
WIRE_FIELDS: dict[str, str] = {
    "slug": "slug",
    "destination_url": "destinationUrl",
    "devfest_name": "devfestName",
    "devfest_date": "devfestDate",
    "city": "city",
    "country_name": "countryName",
    "country_code": "countryCode",
    "latitude": "latitude",
    "longitude": "longitude",
    "gdg_chapter": "gdgChapter",
    "gdg_url": "gdgUrl",
    "updated_by": "updatedBy",
    "updated_at": "updatedAt",
}

MAX_LATITUDE = 90.0
MAX_LONGITUDE = 180.0

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

# A value that still decodes to a string after this many passes is rejected
MAX_DECODE_DEPTH = 2


@dataclass(frozen=True)
class Entry:
    """Immutable directory entry for one DevFest.

    Attributes:
        slug: Short identifier, also the store key
        destination_url: Absolute URL the slug redirects to
        devfest_name: Display name (optional)
        devfest_date: ISO-like event date string (optional)
        city: City label (optional)
        country_name: Country label (optional)
        country_code: ISO 3166-1 alpha-2 code (optional)
        latitude: WGS-84 latitude in degrees (optional)
        longitude: WGS-84 longitude in degrees (optional)
        gdg_chapter: Organizing chapter name (optional)
        gdg_url: Organizing chapter URL (optional)
        updated_by: Who last updated the record (optional)
        updated_at: When the record was last updated (optional)
    """
    slug: str
    destination_url: str
    devfest_name: str | None = None
    devfest_date: str | None = None
    city: str | None = None
    country_name: str | None = None
    country_code: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    gdg_chapter: str | None = None
    gdg_url: str | None = None
    updated_by: str | None = None
    updated_at: str | None = None

    @property
    def coordinates(self) -> tuple[float, float] | None:
        """Return (latitude, longitude) tuple, or None if unlocated."""
        if not is_located(self):
            return None
        return (self.latitude, self.longitude)


def display_name(entry: Entry) -> str:
    """Name shown for an entry.

    Falls back to "DevFest <city>" and then "DevFest <slug>".
    """
    if entry.devfest_name:
        return entry.devfest_name
    return f"DevFest {entry.city or entry.slug}"


def is_located(entry: Entry) -> bool:
    """True if the entry has both coordinates."""
    return entry.latitude is not None and entry.longitude is not None


def coerce_coordinate(value: Any, limit: float) -> float | None:
    """Coerce a stored coordinate to float degrees.

    Pure function. Out-of-range or non-numeric values degrade to None so
    the entry is treated as unlocated.

    Args:
        value: Raw stored value (number or numeric string)
        limit: Absolute bound (90 for latitude, 180 for longitude)

    Returns:
        Coordinate in degrees, or None if absent or invalid
    """
    if value is None or isinstance(value, bool):
        return None

    try:
        number = float(value)
    except (TypeError, ValueError):
        return None

    if not math.isfinite(number) or abs(number) > limit:
        return None

    return number


def _optional_text(value: Any) -> str | None:
    """Normalize an optional text field; empty strings become None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _required_text(value: Any) -> str | None:
    """Text of a required field; anything but a non-blank string is None."""
    if not isinstance(value, str):
        return None
    return value.strip() or None


def decode_record(raw: Any) -> dict[str, Any] | None:
    """Decode a stored value into a record mapping.

    Accepts a mapping, or str/bytes holding its JSON encoding. A JSON
    string that decodes to another JSON string (a record serialized twice)
    is decoded once more.

    Args:
        raw: Stored value as returned by the store

    Returns:
        Record dict, or None if the value cannot be decoded to a mapping
    """
    value = raw

    for _ in range(MAX_DECODE_DEPTH):
        if isinstance(value, bytes):
            try:
                value = value.decode("utf-8")
            except UnicodeDecodeError:
                return None

        if not isinstance(value, str):
            break

        try:
            value = json.loads(value)
        except ValueError:
            return None

    if isinstance(value, dict):
        return value
    return None


def parse_entry(raw: Any, key: str | None = None) -> Entry | None:
    """Parse a stored value into an Entry.

    Pure function: takes the raw value, returns a typed Entry or None if
    the record is malformed.

    Args:
        raw: Stored value (mapping, or JSON text of one)
        key: Store key the value was retrieved under; used as the slug
            when the record does not carry one

    Returns:
        Entry, or None if the record is malformed or has no destination URL
    """
    record = decode_record(raw)
    if record is None:
        return None

    destination_url = _required_text(record.get("destinationUrl"))
    if destination_url is None:
        return None

    slug = _required_text(record.get("slug")) or _required_text(key)
    if slug is None:
        return None

    return Entry(
        slug=slug,
        destination_url=destination_url,
        devfest_name=_optional_text(record.get("devfestName")),
        devfest_date=_optional_text(record.get("devfestDate")),
        city=_optional_text(record.get("city")),
        country_name=_optional_text(record.get("countryName")),
        country_code=_optional_text(record.get("countryCode")),
        latitude=coerce_coordinate(record.get("latitude"), MAX_LATITUDE),
        longitude=coerce_coordinate(record.get("longitude"), MAX_LONGITUDE),
        gdg_chapter=_optional_text(record.get("gdgChapter")),
        gdg_url=_optional_text(record.get("gdgUrl")),
        updated_by=_optional_text(record.get("updatedBy")),
        updated_at=_optional_text(record.get("updatedAt")),
    )


def entry_to_dict(entry: Entry) -> dict[str, Any]:
    """Convert an Entry to its stored wire format, omitting absent fields."""
    return {
        wire: getattr(entry, attr)
        for attr, wire in WIRE_FIELDS.items()
        if getattr(entry, attr) is not None
    }


def parse_date(value: str | None) -> date | None:
    """Parse an ISO-like date string ("2024-10-12", "2024-10-12T09:00:00Z").

    Returns:
        The calendar date, or None if missing or unparseable
    """
    if not value:
        return None

    text = value.strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        pass

    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def format_date(value: str | None) -> str:
    """Format an event date for display, e.g. "12 October 2024".

    Unparseable values are returned unchanged.
    """
    if not value:
        return ""

    parsed = parse_date(value)
    if parsed is None:
        return value

    return f"{parsed.day} {MONTH_NAMES[parsed.month - 1]} {parsed.year}"


def country_flag(country_code: str | None) -> str:
    """Flag emoji for a two-letter country code ("" if not a valid code)."""
    if not country_code:
        return ""

    code = country_code.strip().upper()
    if len(code) != 2 or not code.isascii() or not code.isalpha():
        return ""

    # Regional indicator symbols start at U+1F1E6 for "A"
    return "".join(chr(0x1F1E6 + ord(c) - ord("A")) for c in code)
