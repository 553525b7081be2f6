#!/usr/bin/env python3
"""
Test suite for markdown_parser module.

Tests AST parsing and caching, readable text extraction and content length
measurement used by the short content warning.
"""

import pytest
from markdown_parser import (
    MarkdownParser,
    content_length,
    extract_text,
    parse_markdown,
)


# ============================================================================
# AST Parser Tests
# ============================================================================

def test_parse_markdown_simple():
    """Test parsing simple markdown document."""
    text = "# Title\n\nParagraph text."
    tokens = parse_markdown(text)
    assert len(tokens) > 0
    assert tokens[0].type == "heading_open"


def test_parse_markdown_empty():
    """Test parsing empty document."""
    assert parse_markdown("") == []


def test_parse_markdown_caching():
    """Test that AST caching works."""
    text = "# Title\n\nParagraph."
    parser = MarkdownParser()

    tokens1 = parser.parse_markdown(text, cache_key="test")
    tokens2 = parser.parse_markdown(text, cache_key="test")

    assert tokens1 is tokens2


def test_parse_markdown_cache_clear():
    """Test clearing AST cache."""
    text = "# Title\n\nParagraph."
    parser = MarkdownParser()

    tokens1 = parser.parse_markdown(text, cache_key="test")
    parser.clear_cache()
    tokens2 = parser.parse_markdown(text, cache_key="test")

    assert tokens1 is not tokens2


def test_parse_markdown_without_key_is_not_cached():
    parser = MarkdownParser()
    assert parser.parse_markdown("text") is not parser.parse_markdown("text")


# ============================================================================
# Text Extraction Tests
# ============================================================================

def test_extract_text_drops_markup():
    text = "# Title\n\nSee **the** [docs](https://example.com/very/long/link)."
    assert extract_text(parse_markdown(text)) == "Title\nSee the docs."


def test_extract_text_keeps_inline_code():
    assert extract_text(parse_markdown("Call `useState()` first.")) == "Call useState() first."


def test_extract_text_keeps_code_blocks():
    text = "Intro\n\n```js\nconst x = 1;\n```\n"
    assert extract_text(parse_markdown(text)) == "Intro\nconst x = 1;"


def test_extract_text_softbreak_becomes_space():
    assert extract_text(parse_markdown("line one\nline two")) == "line one line two"


def test_extract_text_lists():
    text = "- first\n- second\n"
    assert extract_text(parse_markdown(text)) == "first\nsecond"


def test_extract_text_ignores_html_blocks():
    assert extract_text(parse_markdown("<div>\n</div>\n")) == ""


# ============================================================================
# Content Length Tests
# ============================================================================

def test_content_length_counts_readable_text():
    assert content_length("# Hi\n\nHello world") == len("Hi\nHello world")


def test_content_length_empty_body():
    assert content_length("") == 0
    assert content_length("\n\n   \n") == 0


def test_content_length_link_targets_do_not_count():
    body = "[a](https://example.com/" + "x" * 200 + ")"
    assert content_length(body) == 1


@pytest.mark.parametrize("body,expected", [
    ("abc", 3),
    ("  abc  ", 3),
    ("*abc*", 3),
])
def test_content_length_simple(body, expected):
    assert content_length(body) == expected
