"""Directory filtering and sorting - Pure functions.

Search, country facet and sort orders used by the table view.
All functions are pure with no side effects.
"""

from datetime import date

from src.core.entry import Entry, parse_date


SORT_KEYS = ("date", "location")
SORT_DIRECTIONS = ("asc", "desc")


def _searchable_fields(entry: Entry) -> tuple[str | None, ...]:
    return (
        entry.city,
        entry.gdg_chapter,
        entry.devfest_name,
        entry.slug,
        entry.country_name,
    )


def matches_query(entry: Entry, query: str) -> bool:
    """Case-insensitive substring match against the searchable fields."""
    needle = query.casefold()
    return any(
        value and needle in value.casefold()
        for value in _searchable_fields(entry)
    )


def filter_entries(entries: list[Entry], query: str | None = None) -> list[Entry]:
    """Filter entries by free-text search.

    Pure function. Matches city, chapter, event name, slug and country.

    Args:
        entries: Entries to filter
        query: Search text; None or blank keeps everything

    Returns:
        Matching entries in their original order
    """
    if query is None or not query.strip():
        return list(entries)

    needle = query.strip()
    return [e for e in entries if matches_query(e, needle)]


def filter_by_country(entries: list[Entry], country: str | None = None) -> list[Entry]:
    """Keep entries whose country name equals the selected country."""
    if not country:
        return list(entries)
    return [e for e in entries if e.country_name == country]


def list_countries(entries: list[Entry]) -> list[str]:
    """Sorted distinct country names, for the country facet."""
    return sorted({e.country_name for e in entries if e.country_name})


def _date_key(entry: Entry) -> date:
    # Missing or invalid dates sort as the lowest value
    return parse_date(entry.devfest_date) or date.min


def _location_key(entry: Entry) -> str:
    return (entry.city or "").casefold()


def sort_entries(
    entries: list[Entry],
    key: str | None = None,
    direction: str = "asc",
) -> list[Entry]:
    """Sort entries by date or location.

    Pure function. Sorting is stable.

    Args:
        entries: Entries to sort
        key: "date", "location", or None to keep the current order
        direction: "asc" or "desc"

    Returns:
        Sorted copy of the entries

    Raises:
        ValueError: If key or direction is not recognised
    """
    if key is None:
        return list(entries)

    if key not in SORT_KEYS:
        raise ValueError(f"Unknown sort key: {key!r} (expected one of {SORT_KEYS})")

    if direction not in SORT_DIRECTIONS:
        raise ValueError(f"Unknown sort direction: {direction!r}")

    sort_key = _date_key if key == "date" else _location_key
    return sorted(entries, key=sort_key, reverse=direction == "desc")
