#!/usr/bin/env python3
"""
Duplicate Clusterer

Groups documents by canonical URL and version:

- exact duplicates: same canonical URL and same version in two or more
  documents. These are errors.
- multi-version groups: one canonical URL captured for two or more versions.
  These are informational.

A URL group can appear in both lists. All member lists keep first-seen order
so reports are reproducible.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, NamedTuple, Tuple

from findings import INVALID_URL, ValidationError
from frontmatter_record import MISSING, Document
from url_canonicalizer import InvalidURLError, canonicalize


DEFAULT_VERSION = 'latest'


class ClusterEntry(NamedTuple):
    identifier: str
    url: Any
    version: Any = MISSING


@dataclass(frozen=True)
class DuplicateGroup:
    url: str
    version: Any
    identifiers: Tuple[str, ...]


@dataclass(frozen=True)
class MultiVersionGroup:
    url: str
    versions: Tuple[Any, ...]
    count: int


@dataclass(frozen=True)
class ClusterReport:
    """
    Result of clustering a collection.

    Attributes:
        exact_duplicates: Same URL + same version groups (errors)
        multi_version_groups: Same URL, several versions (informational)
        warnings: Entries excluded because their URL does not parse
        unique_urls: Number of distinct canonical URLs seen
    """
    exact_duplicates: Tuple[DuplicateGroup, ...]
    multi_version_groups: Tuple[MultiVersionGroup, ...]
    warnings: Tuple[ValidationError, ...]
    unique_urls: int

    @property
    def has_duplicates(self) -> bool:
        return bool(self.exact_duplicates)


def effective_version(version: Any) -> Any:
    """Version used for grouping: absent, null and empty read as "latest"."""
    if version is MISSING or version is None or version == '':
        return DEFAULT_VERSION
    try:
        hash(version)
    except TypeError:
        return repr(version)
    return version


def cluster(entries: Iterable[ClusterEntry]) -> ClusterReport:
    """
    Cluster entries by (canonical URL, version).

    Args:
        entries: (identifier, url, version) tuples; entries without a url
            are ignored

    Returns:
        ClusterReport

    Example:
        >>> report = cluster([
        ...     ClusterEntry("a.md", "https://x.com/u", "1"),
        ...     ClusterEntry("b.md", "https://x.com/u/", "1"),
        ... ])
        >>> report.exact_duplicates[0].identifiers
        ('a.md', 'b.md')
    """
    # canonical url -> [(identifier, version)], dicts keep first-seen order
    url_index: Dict[str, List[Tuple[str, Any]]] = {}
    warnings = []

    for entry in entries:
        if entry.url is MISSING or entry.url is None or entry.url == '':
            continue

        try:
            key = canonicalize(entry.url)
        except InvalidURLError as e:
            warnings.append(ValidationError(
                file_path=entry.identifier,
                rule_violated=INVALID_URL,
                detail=f"Invalid URL, excluded from duplicate check: {e}",
                field="url",
                severity="warn",
            ))
            continue

        url_index.setdefault(key, []).append((entry.identifier, effective_version(entry.version)))

    duplicates = []
    multi_version = []

    for url, members in url_index.items():
        by_version: Dict[Any, List[str]] = {}
        for identifier, version in members:
            by_version.setdefault(version, []).append(identifier)

        for version, identifiers in by_version.items():
            if len(identifiers) > 1:
                duplicates.append(DuplicateGroup(url, version, tuple(identifiers)))

        if len(by_version) > 1:
            multi_version.append(MultiVersionGroup(url, tuple(by_version), len(members)))

    return ClusterReport(
        exact_duplicates=tuple(duplicates),
        multi_version_groups=tuple(multi_version),
        warnings=tuple(warnings),
        unique_urls=len(url_index),
    )


def cluster_documents(documents: Iterable[Document]) -> ClusterReport:
    """Cluster loaded documents."""
    return cluster(
        ClusterEntry(doc.identifier, doc.record.url, doc.record.version)
        for doc in documents
    )
