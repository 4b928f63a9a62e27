"""Bulk record assembly - Pure functions.

Turns the raw (key, value) pairs fetched from a store into validated
entries. Record-level problems are counted, never raised.

Note: fetching the pairs is handled by the imperative shell (store
adapters). This module only contains the pure logic.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable

from src.core.entry import Entry, parse_entry


@dataclass(frozen=True)
class RetrievalResult:
    """Outcome of assembling a directory from stored values.

    Attributes:
        entries: Valid entries, in store enumeration order
        malformed_count: Records dropped because they failed parsing or
            required-field validation
        missing_count: Keys whose value vanished between listing and fetch
    """
    entries: list[Entry] = field(default_factory=list)
    malformed_count: int = 0
    missing_count: int = 0

    @property
    def slugs(self) -> set[str]:
        """Slugs of all valid entries."""
        return {e.slug for e in self.entries}

    @property
    def summary(self) -> str:
        """Human-readable summary of the assembly."""
        return (
            f"{len(self.entries)} entries, "
            f"{self.malformed_count} malformed, "
            f"{self.missing_count} missing"
        )


def assemble_entries(pairs: Iterable[tuple[str, Any]]) -> RetrievalResult:
    """Parse fetched (key, raw value) pairs into entries.

    Pure function. Absent values are dropped, malformed records are
    dropped and counted, missing slugs are backfilled from the key.
    Duplicates are not removed.

    Args:
        pairs: (store key, raw value or None) pairs

    Returns:
        RetrievalResult with the surviving entries and drop counts
    """
    entries: list[Entry] = []
    malformed = 0
    missing = 0

    for key, raw in pairs:
        if raw is None:
            missing += 1
            continue

        entry = parse_entry(raw, key)
        if entry is None:
            malformed += 1
            continue

        entries.append(entry)

    return RetrievalResult(
        entries=entries,
        malformed_count=malformed,
        missing_count=missing,
    )
