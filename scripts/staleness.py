#!/usr/bin/env python3
"""
Staleness Classifier

A document is stale when it was captured strictly before
now - threshold_days. Documents without a readable capturedAt are not
classified at all: a missing capture time is not evidence of staleness.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional

from frontmatter_record import Document, parse_timestamp


DEFAULT_THRESHOLD_DAYS = 180


@dataclass(frozen=True)
class Staleness:
    stale: bool
    age_days: int


@dataclass(frozen=True)
class StaleDocument:
    """
    A stale document, as listed in reports.

    Attributes:
        identifier: Path relative to the sources directory
        source: Owning source (frontmatter source, else first path segment)
        title: Document title, or None
        url: Document URL, or None
        captured_at: Parsed capture time
        age_days: Whole days since capture
    """
    identifier: str
    source: str
    title: Optional[str]
    url: Optional[str]
    captured_at: datetime
    age_days: int


def classify(captured_at: datetime, now: datetime, threshold_days: int) -> Staleness:
    """
    Classify a capture time against a staleness threshold.

    Args:
        captured_at: Capture time; assumed not to be in the future (future
            timestamps are reported by the frontmatter validator)
        now: Reference time
        threshold_days: Age in days beyond which a document is stale

    Returns:
        Staleness with stale flag and floor of the age in whole days

    Example:
        >>> now = datetime(2024, 7, 1)
        >>> classify(now - timedelta(days=181), now, 180)
        Staleness(stale=True, age_days=181)
        >>> classify(now - timedelta(days=180), now, 180)
        Staleness(stale=False, age_days=180)
    """
    age = now - captured_at
    age_days = age // timedelta(days=1)
    stale = captured_at < now - timedelta(days=threshold_days)
    return Staleness(stale=stale, age_days=age_days)


def _text_or_none(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def find_stale(documents: Iterable[Document], now: datetime, threshold_days: int) -> List[StaleDocument]:
    """
    Collect the stale documents of a collection.

    Documents without a capturedAt, or with one that is not a timestamp, are
    skipped.

    Args:
        documents: Loaded documents
        now: Aware reference time
        threshold_days: Staleness threshold in days

    Returns:
        Stale documents, oldest first
    """
    stale = []

    for doc in documents:
        captured_at = parse_timestamp(doc.record.captured_at)
        if captured_at is None:
            continue

        result = classify(captured_at, now, threshold_days)
        if not result.stale:
            continue

        source = doc.record.source if isinstance(doc.record.source, str) and doc.record.source else doc.path_segments[0]
        stale.append(StaleDocument(
            identifier=doc.identifier,
            source=source,
            title=_text_or_none(doc.record.title),
            url=_text_or_none(doc.record.url),
            captured_at=captured_at,
            age_days=result.age_days,
        ))

    # Stable sort keeps encounter order among equally old documents
    stale.sort(key=lambda item: item.age_days, reverse=True)
    return stale


def group_by_source(stale: Iterable[StaleDocument]) -> Dict[str, List[StaleDocument]]:
    """
    Group stale documents by source, each group oldest first.

    Sources appear in order of their first (oldest) document.
    """
    groups: Dict[str, List[StaleDocument]] = {}
    for item in stale:
        groups.setdefault(item.source, []).append(item)
    for items in groups.values():
        items.sort(key=lambda item: item.age_days, reverse=True)
    return groups
