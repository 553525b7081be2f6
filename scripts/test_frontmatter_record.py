#!/usr/bin/env python3
"""
Tests for frontmatter_record.py - record model and document parsing.

Test coverage:
- MISSING vs None vs value for optional fields
- Unknown keys preserved and written back after known fields
- Frontmatter splitting edge cases (none, empty, malformed YAML, non-mapping)
- Timestamp parsing and ISO rendering
- Render/parse of whole documents
"""

import unittest
from datetime import date, datetime, timedelta, timezone

import pytest

from frontmatter_record import (
    MISSING,
    FrontmatterParseError,
    FrontmatterRecord,
    load_document,
    parse_document,
    parse_timestamp,
    render_document,
    split_frontmatter,
    to_iso_string,
)


class TestFrontmatterRecord(unittest.TestCase):
    """Test FrontmatterRecord construction and serialization."""

    def test_absent_fields_are_missing(self):
        record = FrontmatterRecord.from_mapping({"source": "react"})
        self.assertEqual(record.source, "react")
        self.assertIs(record.tags, MISSING)
        self.assertIs(record.version, MISSING)

    def test_null_fields_are_none(self):
        record = FrontmatterRecord.from_mapping({"source": "react", "version": None})
        self.assertIsNone(record.version)
        self.assertIsNot(record.version, MISSING)

    def test_lists_become_tuples(self):
        record = FrontmatterRecord.from_mapping({"tags": ["a", "b"], "breadcrumb": ["Docs"]})
        self.assertEqual(record.tags, ("a", "b"))
        self.assertEqual(record.breadcrumb, ("Docs",))

    def test_yaml_names_map_to_attributes(self):
        captured = datetime(2024, 1, 1, tzinfo=timezone.utc)
        record = FrontmatterRecord.from_mapping({"capturedAt": captured, "lastModified": "2023-12-01"})
        self.assertEqual(record.captured_at, captured)
        self.assertEqual(record.last_modified, "2023-12-01")
        self.assertEqual(record.get("capturedAt"), captured)

    def test_unknown_keys_kept_in_extra(self):
        record = FrontmatterRecord.from_mapping({"author": "Ada", "source": "x", "weight": 3})
        self.assertEqual(record.extra, {"author": "Ada", "weight": 3})
        self.assertEqual(record.get("author"), "Ada")
        self.assertIs(record.get("nothing"), MISSING)

    def test_to_mapping_orders_known_fields_first(self):
        record = FrontmatterRecord.from_mapping({
            "author": "Ada",
            "tags": ["a"],
            "title": "T",
            "source": "x",
        })
        self.assertEqual(list(record.to_mapping()), ["source", "title", "tags", "author"])
        self.assertEqual(record.to_mapping()["tags"], ["a"])

    def test_to_mapping_keeps_explicit_null(self):
        record = FrontmatterRecord.from_mapping({"source": "x", "version": None})
        self.assertEqual(record.to_mapping(), {"source": "x", "version": None})

    def test_non_mapping_raises(self):
        with self.assertRaises(FrontmatterParseError):
            FrontmatterRecord.from_mapping(["a", "b"])
        with self.assertRaises(FrontmatterParseError):
            FrontmatterRecord.from_mapping("just a string")

    def test_none_is_empty_record(self):
        record = FrontmatterRecord.from_mapping(None)
        self.assertTrue(record.is_empty())

    def test_missing_is_falsy_singleton(self):
        self.assertFalse(MISSING)
        self.assertEqual(repr(MISSING), "MISSING")


# ============================================================================
# split_frontmatter / parse_document
# ============================================================================

def test_split_frontmatter_basic():
    block, body = split_frontmatter("---\nsource: x\n---\n\n# Title\n")
    assert block == "source: x\n"
    assert body == "\n# Title\n"


def test_split_frontmatter_none():
    block, body = split_frontmatter("# Just a body\n")
    assert block is None
    assert body == "# Just a body\n"


def test_split_frontmatter_empty_block():
    block, body = split_frontmatter("---\n---\nBody")
    assert block == ""
    assert body == "Body"


def test_split_frontmatter_requires_leading_marker():
    block, _ = split_frontmatter("\n---\nsource: x\n---\n")
    assert block is None


def test_parse_document_segments_and_body():
    doc = parse_document("react/hooks/use-state.md", "---\nsource: react\ntitle: useState\n---\nBody text\n")
    assert doc.path_segments == ("react", "hooks", "use-state.md")
    assert doc.record.title == "useState"
    assert doc.body == "Body text\n"
    assert doc.has_frontmatter is True


def test_parse_document_unquoted_date_is_native():
    doc = parse_document("x/a.md", "---\ncapturedAt: 2024-03-01\n---\n")
    assert doc.record.captured_at == date(2024, 3, 1)


def test_parse_document_without_frontmatter():
    doc = parse_document("x/a.md", "# Title\n")
    assert doc.has_frontmatter is False
    assert doc.record.is_empty()


def test_parse_document_invalid_yaml():
    with pytest.raises(FrontmatterParseError):
        parse_document("x/a.md", "---\ntitle: [unclosed\n---\n")


@pytest.mark.parametrize("line", ["capturedAt: 2024-02-30", "lastModified: 2024-13-01"])
def test_parse_document_impossible_date(line):
    """Date literals that are not real dates are parse failures."""
    with pytest.raises(FrontmatterParseError):
        parse_document("react/a.md", f"---\nsource: react\n{line}\n---\nBody\n")


def test_parse_document_non_mapping_yaml():
    with pytest.raises(FrontmatterParseError):
        parse_document("x/a.md", "---\n- a\n- b\n---\n")


def test_load_document_uses_relative_identifier(tmp_path):
    sources = tmp_path / "sources"
    (sources / "react").mkdir(parents=True)
    path = sources / "react" / "intro.md"
    path.write_text("---\nsource: react\n---\nHello\n", encoding="utf-8")

    doc = load_document(sources, path)
    assert doc.identifier == "react/intro.md"
    assert doc.record.source == "react"


# ============================================================================
# Timestamps
# ============================================================================

def test_parse_timestamp_zulu_string():
    assert parse_timestamp("2024-01-01T00:00:00Z") == datetime(2024, 1, 1, tzinfo=timezone.utc)


def test_parse_timestamp_offset_is_converted_to_utc():
    assert parse_timestamp("2024-01-01T02:00:00+02:00") == datetime(2024, 1, 1, tzinfo=timezone.utc)


def test_parse_timestamp_date_only_string():
    assert parse_timestamp("2024-01-01") == datetime(2024, 1, 1, tzinfo=timezone.utc)


def test_parse_timestamp_fraction_digits():
    expected = datetime(2024, 1, 1, 0, 0, 0, 120000, tzinfo=timezone.utc)
    assert parse_timestamp("2024-01-01T00:00:00.12Z") == expected
    assert parse_timestamp("2024-01-01T00:00:00.1200000Z") == expected
    assert parse_timestamp("2024-01-01T00:00:00.120Z") == expected


def test_parse_timestamp_compact_offset():
    assert parse_timestamp("2024-01-01T02:00:00+0200") == datetime(2024, 1, 1, tzinfo=timezone.utc)


def test_parse_timestamp_native_values():
    assert parse_timestamp(date(2024, 1, 1)) == datetime(2024, 1, 1, tzinfo=timezone.utc)
    naive = datetime(2024, 1, 1, 12, 30)
    assert parse_timestamp(naive) == datetime(2024, 1, 1, 12, 30, tzinfo=timezone.utc)
    east = timezone(timedelta(hours=5))
    assert parse_timestamp(datetime(2024, 1, 1, 5, tzinfo=east)) == datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.mark.parametrize("value", [None, MISSING, "", "yesterday", 12, ["2024-01-01"]])
def test_parse_timestamp_rejects_non_timestamps(value):
    assert parse_timestamp(value) is None


def test_to_iso_string():
    assert to_iso_string(date(2024, 1, 1)) == "2024-01-01T00:00:00.000Z"
    assert to_iso_string(datetime(2024, 1, 1, 10, 5, 3, 123456)) == "2024-01-01T10:05:03.123Z"


def test_to_iso_string_rejects_garbage():
    with pytest.raises(ValueError):
        to_iso_string("nope")


# ============================================================================
# render_document
# ============================================================================

def test_render_document_round_trips_record():
    record = FrontmatterRecord.from_mapping({
        "source": "react",
        "capturedAt": "2024-01-01T00:00:00.000Z",
        "tags": ["hooks"],
    })
    text = render_document(record, "\n# Hooks\n")
    assert text.startswith("---\nsource: react\n")
    assert text.endswith("---\n\n# Hooks\n")

    doc = parse_document("react/hooks.md", text)
    # ISO strings stay strings after a round trip
    assert doc.record == record
    assert doc.body == "\n# Hooks\n"


def test_render_document_adds_final_newline():
    text = render_document(FrontmatterRecord(source="x"), "Body")
    assert text == "---\nsource: x\n---\nBody\n"
