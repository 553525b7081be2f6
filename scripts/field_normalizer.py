#!/usr/bin/env python3
"""
Field Normalizer

Rewrites a FrontmatterRecord into canonical form through a fixed, ordered
pipeline of named rules. Each rule is a predicate/transform pair: the
predicate inspects the record as left by the previous rules, the transform
returns the corrected record plus a description of the fix.

Rules, in order:
 1. capturedAt / lastModified date values -> ISO-8601 strings
 2. trailing slashes removed from url
 3. query string and fragment removed from url
 4. breadcrumb string split into a list of segments
 5. missing source derived from the first path segment
 6. empty or null version set to "latest"
 7. empty lastModified / tags / language / breadcrumb removed
 8. whitespace trimmed from title
 9. tags lowercased and slugified
10. lastModified date value -> ISO-8601 string

Every rule's predicate is false once its transform has run, so one pass is
enough and normalize(normalize(r).record) reports no fixes.
"""

import re
from dataclasses import dataclass, replace
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from frontmatter_record import (
    MISSING,
    Document,
    FrontmatterRecord,
    is_native_timestamp,
    to_iso_string,
)
from url_canonicalizer import has_query_or_fragment, strip_query_and_fragment


BREADCRUMB_DELIMITERS = re.compile(r'[>→|/]')
TAG_INVALID_CHARS = re.compile(r'[^a-z0-9-]+')
TAG_REPEATED_HYPHENS = re.compile(r'-{2,}')

DEFAULT_VERSION = 'latest'


@dataclass(frozen=True)
class RuleContext:
    """
    Auxiliary input for rules that need more than the record.

    Attributes:
        path_segments: Storage path of the document relative to the sources
            directory, or None when unknown
    """
    path_segments: Optional[Tuple[str, ...]] = None


@dataclass(frozen=True)
class NormalizationRule:
    """A named predicate/transform pair."""
    name: str
    applies: Callable[[FrontmatterRecord, RuleContext], bool]
    transform: Callable[[FrontmatterRecord, RuleContext], Tuple[FrontmatterRecord, str]]


@dataclass(frozen=True)
class NormalizationResult:
    record: FrontmatterRecord
    fixes: Tuple[str, ...]

    @property
    def changed(self) -> bool:
        return bool(self.fixes)


# ============================================================================
# Rule 1 / 10: timestamps
# ============================================================================

def _timestamp_rule(name: str, attribute: str, label: str) -> NormalizationRule:
    def applies(record, ctx):
        return is_native_timestamp(getattr(record, attribute))

    def transform(record, ctx):
        value = to_iso_string(getattr(record, attribute))
        return replace(record, **{attribute: value}), f"Converted {label} to ISO string"

    return NormalizationRule(name, applies, transform)


# ============================================================================
# Rules 2 and 3: url
# ============================================================================

def _url_has_trailing_slash(record, ctx):
    return isinstance(record.url, str) and record.url.endswith('/')


def _strip_trailing_slash(record, ctx):
    return replace(record, url=record.url.rstrip('/')), "Removed trailing slash from URL"


def _url_has_query_or_fragment(record, ctx):
    if not isinstance(record.url, str) or not has_query_or_fragment(record.url):
        return False
    return strip_query_and_fragment(record.url) != record.url


def _strip_query_and_fragment(record, ctx):
    url = strip_query_and_fragment(record.url)
    return replace(record, url=url), "Normalized URL (removed query/hash)"


# ============================================================================
# Rule 4: breadcrumb
# ============================================================================

def split_breadcrumb(text: str) -> Tuple[str, ...]:
    """
    Split a delimited breadcrumb string into trimmed, non-empty segments.

    Example:
        >>> split_breadcrumb("Docs > Hooks | useState")
        ('Docs', 'Hooks', 'useState')
    """
    segments = (segment.strip() for segment in BREADCRUMB_DELIMITERS.split(text))
    return tuple(segment for segment in segments if segment)


def _breadcrumb_is_string(record, ctx):
    return isinstance(record.breadcrumb, str)


def _split_breadcrumb(record, ctx):
    return replace(record, breadcrumb=split_breadcrumb(record.breadcrumb)), "Converted breadcrumb to list"


# ============================================================================
# Rule 5: source
# ============================================================================

def _source_missing(record, ctx):
    return not record.source and bool(ctx.path_segments)


def _add_source(record, ctx):
    source = ctx.path_segments[0]
    return replace(record, source=source), f"Added source: {source}"


# ============================================================================
# Rule 6: version
# ============================================================================

def _version_empty(record, ctx):
    return record.version is None or record.version == ''


def _set_default_version(record, ctx):
    return replace(record, version=DEFAULT_VERSION), f'Set version to "{DEFAULT_VERSION}"'


# ============================================================================
# Rule 7: empty optional fields
# ============================================================================

def _empty_field_rule(key: str, attribute: str) -> NormalizationRule:
    def applies(record, ctx):
        value = getattr(record, attribute)
        if value is MISSING:
            return False
        return value is None or value == '' or (isinstance(value, tuple) and not value)

    def transform(record, ctx):
        value = getattr(record, attribute)
        suffix = " list" if isinstance(value, tuple) else ""
        return replace(record, **{attribute: MISSING}), f"Removed empty {key}{suffix}"

    return NormalizationRule(f"remove_empty_{attribute}", applies, transform)


# ============================================================================
# Rule 8: title
# ============================================================================

def _title_untrimmed(record, ctx):
    return isinstance(record.title, str) and record.title != record.title.strip()


def _trim_title(record, ctx):
    return replace(record, title=record.title.strip()), "Trimmed whitespace from title"


# ============================================================================
# Rule 9: tags
# ============================================================================

def normalize_tag(tag: object) -> str:
    """
    Lowercase a tag and reduce it to [a-z0-9-] without repeated hyphens.

    Example:
        >>> normalize_tag("Web  Dev")
        'web-dev'
    """
    text = TAG_INVALID_CHARS.sub('-', str(tag).lower())
    return TAG_REPEATED_HYPHENS.sub('-', text)


def _tags_unnormalized(record, ctx):
    if not isinstance(record.tags, tuple):
        return False
    return tuple(normalize_tag(tag) for tag in record.tags) != record.tags


def _normalize_tags(record, ctx):
    tags = tuple(normalize_tag(tag) for tag in record.tags)
    return replace(record, tags=tags), "Normalized tags to lowercase"


RULES: Tuple[NormalizationRule, ...] = (
    _timestamp_rule("iso_captured_at", "captured_at", "capturedAt"),
    _timestamp_rule("iso_last_modified", "last_modified", "lastModified"),
    NormalizationRule("url_trailing_slash", _url_has_trailing_slash, _strip_trailing_slash),
    NormalizationRule("url_query_fragment", _url_has_query_or_fragment, _strip_query_and_fragment),
    NormalizationRule("breadcrumb_list", _breadcrumb_is_string, _split_breadcrumb),
    NormalizationRule("source_from_path", _source_missing, _add_source),
    NormalizationRule("default_version", _version_empty, _set_default_version),
    _empty_field_rule("lastModified", "last_modified"),
    _empty_field_rule("tags", "tags"),
    _empty_field_rule("language", "language"),
    _empty_field_rule("breadcrumb", "breadcrumb"),
    NormalizationRule("trim_title", _title_untrimmed, _trim_title),
    NormalizationRule("normalize_tags", _tags_unnormalized, _normalize_tags),
    _timestamp_rule("iso_last_modified_final", "last_modified", "lastModified"),
)


def normalize(
    record: FrontmatterRecord,
    path_segments: Optional[Sequence[str]] = None,
    rules: Iterable[NormalizationRule] = RULES,
) -> NormalizationResult:
    """
    Apply the normalization rules to a record.

    Args:
        record: Record to normalize
        path_segments: Storage path of the document, used to derive a
            missing source
        rules: Rule pipeline (defaults to RULES)

    Returns:
        NormalizationResult with the corrected record and the fixes applied,
        in rule order

    Example:
        >>> result = normalize(FrontmatterRecord(source="x", url="https://x.com/a/"))
        >>> result.record.url, result.fixes
        ('https://x.com/a', ('Removed trailing slash from URL',))
    """
    ctx = RuleContext(tuple(path_segments) if path_segments else None)
    fixes: List[str] = []

    for rule in rules:
        if rule.applies(record, ctx):
            record, description = rule.transform(record, ctx)
            fixes.append(description)

    return NormalizationResult(record=record, fixes=tuple(fixes))


def normalize_corpus(documents: Iterable[Document]) -> List[Tuple[Document, NormalizationResult]]:
    """
    Normalize every document and keep the ones that changed.

    Returns:
        (document, result) pairs, in input order, for documents with fixes
    """
    changed = []
    for document in documents:
        result = normalize(document.record, document.path_segments)
        if result.changed:
            changed.append((document, result))
    return changed
