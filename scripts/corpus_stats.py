#!/usr/bin/env python3
"""
Corpus statistics.

Per-source statistics are computed as a fold of documents into an immutable
CorpusSummary: each step returns a new summary, nothing is accumulated in
place.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from functools import reduce
from typing import Any, Dict, FrozenSet, Iterable, Optional, Tuple

from frontmatter_record import Document, parse_timestamp, to_iso_string


@dataclass(frozen=True)
class SourceStats:
    document_count: int = 0
    last_captured_at: Optional[datetime] = None
    versions: FrozenSet[str] = frozenset()
    languages: FrozenSet[str] = frozenset()

    def add(self, document: Document) -> "SourceStats":
        """Statistics with one more document folded in."""
        record = document.record
        captured_at = parse_timestamp(record.captured_at)
        last = self.last_captured_at
        if captured_at is not None and (last is None or captured_at > last):
            last = captured_at

        versions = self.versions
        if record.version:
            versions = versions | {str(record.version)}

        languages = self.languages
        if isinstance(record.language, str) and record.language:
            languages = languages | {record.language}

        return replace(
            self,
            document_count=self.document_count + 1,
            last_captured_at=last,
            versions=versions,
            languages=languages,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'documentCount': self.document_count,
            'lastCapturedAt': to_iso_string(self.last_captured_at) if self.last_captured_at else None,
            'versions': sorted(self.versions),
            'languages': sorted(self.languages),
        }


@dataclass(frozen=True)
class CorpusSummary:
    """Statistics per source, sources in order of first appearance."""
    sources: Tuple[Tuple[str, SourceStats], ...] = ()

    @property
    def total_documents(self) -> int:
        return sum(stats.document_count for _, stats in self.sources)

    def get(self, source: str) -> Optional[SourceStats]:
        for name, stats in self.sources:
            if name == source:
                return stats
        return None

    def add(self, document: Document) -> "CorpusSummary":
        """Summary with one more document folded in."""
        source = document.path_segments[0]
        updated = []
        found = False
        for name, stats in self.sources:
            if name == source:
                stats = stats.add(document)
                found = True
            updated.append((name, stats))
        if not found:
            updated.append((source, SourceStats().add(document)))
        return CorpusSummary(sources=tuple(updated))

    def to_dict(self) -> Dict[str, Any]:
        return {name: stats.to_dict() for name, stats in self.sources}


def summarize(documents: Iterable[Document]) -> CorpusSummary:
    """
    Fold documents into per-source statistics.

    Documents are attributed to the source directory they are stored in.
    """
    return reduce(lambda summary, document: summary.add(document), documents, CorpusSummary())
