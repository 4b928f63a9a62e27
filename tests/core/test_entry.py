"""Unit tests for entry parsing and derived values.

Pure function tests - no mocks needed, fast execution.
"""

import json
from datetime import date

import pytest

from src.core.entry import (
    Entry,
    coerce_coordinate,
    country_flag,
    decode_record,
    display_name,
    entry_to_dict,
    format_date,
    is_located,
    parse_date,
    parse_entry,
)


@pytest.fixture
def sample_record():
    """A complete stored record in wire format."""
    return {
        "slug": "bangalore",
        "destinationUrl": "https://gdg.community.dev/events/devfest-bangalore/",
        "devfestName": "DevFest Bangalore 2024",
        "devfestDate": "2024-11-23",
        "gdgChapter": "GDG Bangalore",
        "gdgUrl": "https://gdg.community.dev/gdg-bangalore/",
        "city": "Bangalore",
        "countryName": "India",
        "countryCode": "IN",
        "latitude": 12.9716,
        "longitude": 77.5946,
        "updatedBy": "seed",
        "updatedAt": "2024-09-01T10:00:00Z",
    }


class TestParseEntry:
    """Tests for parse_entry()."""

    def test_parses_structured_record(self, sample_record):
        """A mapping parses into a fully populated Entry."""
        entry = parse_entry(sample_record, "bangalore")

        assert entry is not None
        assert entry.slug == "bangalore"
        assert entry.destination_url == "https://gdg.community.dev/events/devfest-bangalore/"
        assert entry.devfest_name == "DevFest Bangalore 2024"
        assert entry.gdg_chapter == "GDG Bangalore"
        assert entry.country_code == "IN"
        assert entry.latitude == pytest.approx(12.9716)
        assert entry.longitude == pytest.approx(77.5946)
        assert entry.updated_by == "seed"

    def test_parses_json_text(self, sample_record):
        """The JSON text of a record parses the same as the mapping."""
        from_text = parse_entry(json.dumps(sample_record), "bangalore")
        from_dict = parse_entry(sample_record, "bangalore")

        assert from_text == from_dict

    def test_parses_json_bytes(self, sample_record):
        """UTF-8 bytes are decoded before parsing."""
        entry = parse_entry(json.dumps(sample_record).encode("utf-8"), "bangalore")
        assert entry is not None
        assert entry.city == "Bangalore"

    def test_parses_double_encoded_json(self, sample_record):
        """A record serialized twice is still accepted."""
        double = json.dumps(json.dumps(sample_record))
        entry = parse_entry(double, "bangalore")

        assert entry is not None
        assert entry.devfest_name == "DevFest Bangalore 2024"

    def test_backfills_slug_from_key(self, sample_record):
        """A record without slug takes the key it was stored under."""
        del sample_record["slug"]
        entry = parse_entry(sample_record, "bangalore")

        assert entry is not None
        assert entry.slug == "bangalore"

    def test_blank_slug_is_backfilled(self, sample_record):
        """An empty slug counts as absent."""
        sample_record["slug"] = "  "
        entry = parse_entry(sample_record, "bangalore")
        assert entry.slug == "bangalore"

    def test_stored_slug_wins_over_key(self, sample_record):
        """A slug present in the payload is kept."""
        entry = parse_entry(sample_record, "other-key")
        assert entry.slug == "bangalore"

    def test_missing_destination_url_is_malformed(self, sample_record):
        """Records without destinationUrl are rejected."""
        del sample_record["destinationUrl"]
        assert parse_entry(sample_record, "bangalore") is None

    def test_empty_destination_url_is_malformed(self, sample_record):
        """Records with an empty destinationUrl are rejected."""
        sample_record["destinationUrl"] = ""
        assert parse_entry(sample_record, "bangalore") is None

    @pytest.mark.parametrize("url", [True, 42, {"href": "https://x"}, ["https://x"]])
    def test_non_text_destination_url_is_malformed(self, sample_record, url):
        """Only a string can be a destination."""
        sample_record["destinationUrl"] = url
        assert parse_entry(sample_record, "bangalore") is None

    @pytest.mark.parametrize("slug", [["oops"], 5, {"a": 1}])
    def test_non_text_slug_falls_back_to_key(self, sample_record, slug):
        sample_record["slug"] = slug
        entry = parse_entry(sample_record, "bangalore")
        assert entry.slug == "bangalore"

    def test_non_text_slug_without_key_is_malformed(self, sample_record):
        sample_record["slug"] = 5
        assert parse_entry(sample_record) is None

    def test_record_without_slug_or_key_is_malformed(self, sample_record):
        """With no slug and no key there is no identity."""
        del sample_record["slug"]
        assert parse_entry(sample_record) is None

    def test_minimal_record(self):
        """Only destinationUrl is required."""
        entry = parse_entry({"destinationUrl": "https://example.com/x"}, "x")

        assert entry == Entry(slug="x", destination_url="https://example.com/x")

    @pytest.mark.parametrize("raw", [
        "not json",
        "[1, 2, 3]",
        "42",
        42,
        None,
        ["destinationUrl"],
        b"\xff\xfe",
    ])
    def test_undecodable_values_are_malformed(self, raw):
        """Anything that is not a record returns None."""
        assert parse_entry(raw, "key") is None

    def test_empty_optional_fields_become_none(self, sample_record):
        """Empty optional strings are normalized to None."""
        sample_record["devfestName"] = ""
        sample_record["city"] = ""
        entry = parse_entry(sample_record, "bangalore")

        assert entry.devfest_name is None
        assert entry.city is None


class TestDecodeRecord:
    """Tests for decode_record()."""

    def test_mapping_passes_through(self):
        assert decode_record({"a": 1}) == {"a": 1}

    def test_triple_encoded_is_rejected(self):
        """Decoding stops after two passes."""
        triple = json.dumps(json.dumps(json.dumps({"a": 1})))
        assert decode_record(triple) is None


class TestCoordinates:
    """Tests for coordinate coercion and is_located()."""

    def test_numeric_string_is_accepted(self):
        assert coerce_coordinate("51.5", 90) == pytest.approx(51.5)

    def test_zero_is_a_valid_coordinate(self):
        """Zero is a real position, not a missing one."""
        assert coerce_coordinate(0, 90) == 0.0

    @pytest.mark.parametrize("value", [None, "north", True, float("nan"), float("inf"), 91, -90.5])
    def test_invalid_latitude_degrades_to_none(self, value):
        assert coerce_coordinate(value, 90) is None

    def test_longitude_limit(self):
        assert coerce_coordinate(-180, 180) == -180.0
        assert coerce_coordinate(180.1, 180) is None

    def test_out_of_range_entry_is_unlocated(self, sample_record):
        """An entry with an invalid coordinate stays listed but unlocated."""
        sample_record["latitude"] = 123.0
        entry = parse_entry(sample_record, "bangalore")

        assert entry is not None
        assert entry.latitude is None
        assert is_located(entry) is False

    def test_located_requires_both(self):
        entry = Entry(slug="a", destination_url="https://a", latitude=10.0)
        assert is_located(entry) is False

    def test_located_entry(self):
        entry = Entry(slug="a", destination_url="https://a", latitude=0.0, longitude=0.0)
        assert is_located(entry) is True
        assert entry.coordinates == (0.0, 0.0)


class TestDisplayName:
    """Tests for display_name()."""

    def test_uses_devfest_name(self):
        entry = Entry(slug="x", destination_url="https://x", devfest_name="DevFest Lagos", city="Ikeja")
        assert display_name(entry) == "DevFest Lagos"

    def test_falls_back_to_city(self):
        entry = Entry(slug="x", destination_url="https://x", city="Lagos")
        assert display_name(entry) == "DevFest Lagos"

    def test_falls_back_to_slug(self):
        entry = Entry(slug="lagos-2024", destination_url="https://x")
        assert display_name(entry) == "DevFest lagos-2024"


class TestEntryToDict:
    """Tests for entry_to_dict()."""

    def test_uses_wire_names_and_omits_absent(self):
        entry = Entry(
            slug="x",
            destination_url="https://x",
            country_name="Kenya",
            latitude=-1.29,
        )

        assert entry_to_dict(entry) == {
            "slug": "x",
            "destinationUrl": "https://x",
            "countryName": "Kenya",
            "latitude": -1.29,
        }

    def test_wire_dict_parses_back(self, sample_record):
        entry = parse_entry(sample_record, "bangalore")
        assert parse_entry(entry_to_dict(entry)) == entry


class TestDates:
    """Tests for parse_date() and format_date()."""

    def test_parse_plain_date(self):
        assert parse_date("2024-10-12") == date(2024, 10, 12)

    def test_parse_timestamp(self):
        assert parse_date("2024-10-12T09:30:00Z") == date(2024, 10, 12)

    def test_parse_invalid(self):
        assert parse_date("sometime in autumn") is None
        assert parse_date(None) is None
        assert parse_date("") is None

    def test_format_long_form(self):
        assert format_date("2024-10-05") == "5 October 2024"

    def test_format_keeps_unparseable_text(self):
        assert format_date("TBA") == "TBA"

    def test_format_empty(self):
        assert format_date(None) == ""


class TestCountryFlag:
    """Tests for country_flag()."""

    def test_two_letter_code(self):
        assert country_flag("in") == "\U0001F1EE\U0001F1F3"

    @pytest.mark.parametrize("code", [None, "", "IND", "1A", "É"])
    def test_invalid_codes(self, code):
        assert country_flag(code) == ""
