#!/usr/bin/env python3
"""
Frontmatter Record - data model and document (de)serialization.

A corpus document is a markdown file with a YAML frontmatter block:

    ---
    source: react
    url: https://react.dev/learn
    title: Quick Start
    capturedAt: '2024-05-01T10:00:00.000Z'
    tags:
      - getting-started
    ---

    # Quick Start
    ...

Key Features:
- FrontmatterRecord: one attribute per known field, MISSING when absent
- Unknown keys preserved in order and written back after known fields
- Timestamp helpers shared by the normalizer and the staleness classifier
- Split/parse/render of whole documents via PyYAML
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml


class _Missing:
    """Marker for a frontmatter key that is not present at all."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


# Known fields in the order they are written back
FIELD_ORDER = (
    'source',
    'url',
    'title',
    'version',
    'capturedAt',
    'lastModified',
    'breadcrumb',
    'tags',
    'language',
)

_ATTRIBUTES = {
    'source': 'source',
    'url': 'url',
    'title': 'title',
    'version': 'version',
    'capturedAt': 'captured_at',
    'lastModified': 'last_modified',
    'breadcrumb': 'breadcrumb',
    'tags': 'tags',
    'language': 'language',
}

FRONTMATTER_PATTERN = re.compile(
    r'\A---[ \t]*\r?\n(.*?)^---[ \t]*(?:\r?\n|\Z)',
    re.DOTALL | re.MULTILINE,
)

# datetime.fromisoformat on 3.10 takes only 3 or 6 fraction digits and +HH:MM offsets
ISO_FRACTION = re.compile(r'\.(\d+)')
ISO_COMPACT_OFFSET = re.compile(r'([+-]\d{2})(\d{2})$')


class FrontmatterParseError(Exception):
    """Raised when a document's frontmatter is not a readable YAML mapping."""
    pass


@dataclass(frozen=True)
class FrontmatterRecord:
    """
    Metadata of one document.

    Every optional field has three states: MISSING (key absent), None
    (key present with a null value) and a value. Sequences are tuples.

    Attributes:
        source: Name of the owning source collection
        url: Identity anchor of the document
        title: Document title
        version: Documented product version; absent reads as "latest"
        captured_at: When the document was captured (str, date or datetime)
        last_modified: Upstream modification time (str, date or datetime)
        breadcrumb: Navigation path, a tuple of segments or a delimited string
        tags: Tag tuple
        language: Language code
        extra: Unknown frontmatter keys, in original order
    """
    source: Any = MISSING
    url: Any = MISSING
    title: Any = MISSING
    version: Any = MISSING
    captured_at: Any = MISSING
    last_modified: Any = MISSING
    breadcrumb: Any = MISSING
    tags: Any = MISSING
    language: Any = MISSING
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Any) -> "FrontmatterRecord":
        """
        Build a record from a parsed frontmatter mapping.

        Args:
            data: Result of yaml.safe_load on the frontmatter block

        Returns:
            FrontmatterRecord

        Raises:
            FrontmatterParseError: If data is not a mapping
        """
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise FrontmatterParseError(
                f"Frontmatter must be a mapping, got {type(data).__name__}"
            )

        values = {}
        extra = {}
        for key, value in data.items():
            attribute = _ATTRIBUTES.get(key)
            if attribute is None:
                extra[str(key)] = value
                continue
            if isinstance(value, list):
                value = tuple(value)
            values[attribute] = value

        return cls(extra=extra, **values)

    def get(self, key: str) -> Any:
        """Value of a frontmatter key (by its YAML name), MISSING if absent."""
        attribute = _ATTRIBUTES.get(key)
        if attribute is None:
            return self.extra.get(key, MISSING)
        return getattr(self, attribute)

    def to_mapping(self) -> Dict[str, Any]:
        """Frontmatter mapping ready for yaml.safe_dump."""
        data = {}
        for key in FIELD_ORDER:
            value = getattr(self, _ATTRIBUTES[key])
            if value is MISSING:
                continue
            if isinstance(value, tuple):
                value = list(value)
            data[key] = value
        data.update(self.extra)
        return data

    def is_empty(self) -> bool:
        return not self.to_mapping()


@dataclass(frozen=True)
class Document:
    """
    One corpus document.

    Attributes:
        identifier: Path relative to the sources directory, '/' separated
        path_segments: identifier split into segments
        record: Parsed frontmatter
        body: Markdown content following the frontmatter block
        has_frontmatter: Whether a frontmatter block was present
    """
    identifier: str
    path_segments: Tuple[str, ...]
    record: FrontmatterRecord
    body: str
    has_frontmatter: bool = True


# ============================================================================
# Timestamps
# ============================================================================

def _fromisoformat_compatible(text: str) -> str:
    """Pad the fraction to microseconds and add the colon to a +HHMM offset."""
    date_part, sep, time_part = text.partition('T')
    if not sep:
        return text
    time_part = ISO_FRACTION.sub(lambda m: '.' + m.group(1)[:6].ljust(6, '0'), time_part)
    time_part = ISO_COMPACT_OFFSET.sub(r'\1:\2', time_part)
    return f"{date_part}T{time_part}"


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Read a frontmatter timestamp as an aware UTC datetime.

    Args:
        value: ISO-8601 string, datetime or date

    Returns:
        Aware datetime, or None if value is absent or not a timestamp

    Example:
        >>> parse_timestamp("2024-01-01T00:00:00Z")
        datetime.datetime(2024, 1, 1, 0, 0, tzinfo=datetime.timezone.utc)
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith(('Z', 'z')):
            text = text[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(_fromisoformat_compatible(text))
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def to_iso_string(value: Any) -> str:
    """
    Render a date or datetime as a UTC ISO-8601 string with milliseconds.

    Example:
        >>> to_iso_string(date(2024, 1, 1))
        '2024-01-01T00:00:00.000Z'
    """
    moment = parse_timestamp(value)
    if moment is None:
        raise ValueError(f"Not a timestamp: {value!r}")
    millis = moment.microsecond // 1000
    return moment.strftime('%Y-%m-%dT%H:%M:%S') + f".{millis:03d}Z"


def is_native_timestamp(value: Any) -> bool:
    """True for date/datetime values (as opposed to strings)."""
    return isinstance(value, (date, datetime))


# ============================================================================
# Documents
# ============================================================================

def split_frontmatter(content: str) -> Tuple[Optional[str], str]:
    """
    Split document text into frontmatter block and body.

    Args:
        content: Full document text

    Returns:
        (yaml_block, body); yaml_block is None when the document has no
        frontmatter, in which case body is the whole content
    """
    match = FRONTMATTER_PATTERN.match(content)
    if not match:
        return None, content
    return match.group(1), content[match.end():]


def parse_document(identifier: str, content: str) -> Document:
    """
    Parse document text.

    Args:
        identifier: Path relative to the sources directory
        content: Full document text

    Returns:
        Document

    Raises:
        FrontmatterParseError: If the frontmatter is not valid YAML or not a mapping
    """
    yaml_block, body = split_frontmatter(content)

    data = None
    if yaml_block is not None:
        try:
            data = yaml.safe_load(yaml_block)
        except (yaml.YAMLError, ValueError) as e:
            # Timestamp literals such as 2024-02-30 fail with a plain ValueError
            raise FrontmatterParseError(f"Failed to parse YAML: {e}") from e

    record = FrontmatterRecord.from_mapping(data)
    segments = tuple(part for part in identifier.split('/') if part)

    return Document(
        identifier=identifier,
        path_segments=segments,
        record=record,
        body=body,
        has_frontmatter=yaml_block is not None,
    )


def load_document(sources_dir: Path, file_path: Path) -> Document:
    """Read and parse a document below sources_dir."""
    identifier = file_path.relative_to(sources_dir).as_posix()
    content = file_path.read_text(encoding='utf-8')
    return parse_document(identifier, content)


def render_document(record: FrontmatterRecord, body: str) -> str:
    """
    Serialize a record and body back to document text.

    Example:
        >>> render_document(FrontmatterRecord(source="react"), "\\n# Hi\\n")
        '---\\nsource: react\\n---\\n\\n# Hi\\n'
    """
    yaml_text = yaml.safe_dump(
        record.to_mapping(),
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    )
    if not body.endswith('\n'):
        body = body + '\n'
    return f"---\n{yaml_text}---\n{body}"
