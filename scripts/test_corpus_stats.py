#!/usr/bin/env python3
"""
Tests for corpus_stats.py - per-source statistics fold.
"""

from datetime import datetime, timezone

from corpus_stats import CorpusSummary, SourceStats, summarize
from frontmatter_record import parse_document


DOCS = [
    parse_document("react/a.md", "---\nversion: '18'\nlanguage: en\ncapturedAt: '2024-01-01T00:00:00.000Z'\n---\n"),
    parse_document("vue/b.md", "---\nversion: '3'\n---\n"),
    parse_document("react/c.md", "---\nversion: '17'\ncapturedAt: '2024-03-01T00:00:00.000Z'\n---\n"),
    parse_document("react/d.md", "# no frontmatter\n"),
]


def test_summarize_counts_per_source():
    summary = summarize(DOCS)

    assert [name for name, _ in summary.sources] == ["react", "vue"]
    assert summary.total_documents == 4
    assert summary.get("react").document_count == 3
    assert summary.get("vue").document_count == 1
    assert summary.get("svelte") is None


def test_summarize_collects_versions_languages_and_latest_capture():
    react = summarize(DOCS).get("react")

    assert react.versions == frozenset({"18", "17"})
    assert react.languages == frozenset({"en"})
    assert react.last_captured_at == datetime(2024, 3, 1, tzinfo=timezone.utc)


def test_summarize_empty():
    summary = summarize([])
    assert summary == CorpusSummary()
    assert summary.total_documents == 0
    assert summary.to_dict() == {}


def test_add_does_not_mutate():
    empty = SourceStats()
    stats = empty.add(DOCS[0])
    assert empty.document_count == 0
    assert stats.document_count == 1


def test_to_dict():
    data = summarize(DOCS).to_dict()
    assert data["react"] == {
        "documentCount": 3,
        "lastCapturedAt": "2024-03-01T00:00:00.000Z",
        "versions": ["17", "18"],
        "languages": ["en"],
    }
    assert data["vue"]["lastCapturedAt"] is None
