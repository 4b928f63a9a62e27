"""Shared test doubles.

InMemoryStore implements the store capabilities over a dict and records
every call, so tests can assert how many round trips a query makes.
"""

from collections import Counter

import pytest

from src.core.errors import StoreUnavailable


class InMemoryStore:
    """Dict-backed store double that counts calls per capability."""

    def __init__(self, data=None, fail_on=()):
        self.data = dict(data or {})
        self.fail_on = set(fail_on)
        self.calls = Counter()

    def _record(self, name):
        self.calls[name] += 1
        if name in self.fail_on:
            raise StoreUnavailable(f"{name} failed", backend="memory")

    def get_one(self, key):
        self._record("get_one")
        return self.data.get(key)

    def list_keys(self):
        self._record("list_keys")
        return list(self.data)

    def get_many(self, keys):
        self._record("get_many")
        return [(key, self.data.get(key)) for key in keys]

    def set_one(self, key, value):
        self._record("set_one")
        self.data[key] = value


@pytest.fixture
def make_store():
    """Factory for InMemoryStore doubles."""
    return InMemoryStore


@pytest.fixture
def sample_records():
    """Stored values as a live store would hold them."""
    return {
        "london": {
            "slug": "london",
            "destinationUrl": "https://example.com/london",
            "devfestName": "DevFest London",
            "devfestDate": "2024-11-16",
            "city": "London",
            "countryName": "United Kingdom",
            "countryCode": "GB",
            "latitude": 51.5074,
            "longitude": -0.1278,
        },
        "paris": (
            '{"destinationUrl": "https://example.com/paris", "devfestDate": "2024-10-19", '
            '"city": "Paris", "countryName": "France", "countryCode": "FR", '
            '"latitude": 48.8566, "longitude": 2.3522}'
        ),
        "lagos": {
            "destinationUrl": "https://example.com/lagos",
            "devfestName": "DevFest Lagos",
            "devfestDate": "2024-11-30",
            "city": "Lagos",
            "countryName": "Nigeria",
            "countryCode": "NG",
            "latitude": 6.5244,
            "longitude": 3.3792,
        },
        "online": {
            "destinationUrl": "https://example.com/online",
            "devfestName": "DevFest Online",
        },
        "broken": {
            "devfestName": "DevFest Without A Link",
            "destinationUrl": "",
        },
    }
