#!/usr/bin/env python3
"""
Source Registry Check

Cross-checks the sources/ tree and document frontmatter against the source
registry (.doclib/sources.yaml):

    sources:
      react:
        name: React
    domainMapping:
      react.dev: react

Errors: source directories missing from the registry.
Warnings: directories without .source.yaml, registered sources without a
directory, frontmatter source different from the directory, URL hosts that
the domain mapping assigns to another source.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Tuple
from urllib.parse import urlsplit

from findings import ValidationError, ValidationReport
from frontmatter_record import Document
from url_canonicalizer import is_valid_url


SOURCE_MANIFEST = '.source.yaml'


@dataclass(frozen=True)
class SourceRegistry:
    """
    Registered sources.

    Attributes:
        sources: Registered source names, in registry order
        domain_mapping: URL hostname -> expected source
    """
    sources: Tuple[str, ...]
    domain_mapping: Dict[str, str]

    @classmethod
    def from_mapping(cls, data: Any) -> "SourceRegistry":
        """
        Build a registry from parsed sources.yaml content.

        Raises:
            ValueError: If the content is not a mapping or its sections have
                the wrong shape
        """
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError("sources registry must be a mapping")

        sources = data.get('sources') or {}
        mapping = data.get('domainMapping') or {}
        if not isinstance(sources, dict):
            raise ValueError("'sources' must be a mapping of source name to settings")
        if not isinstance(mapping, dict):
            raise ValueError("'domainMapping' must be a mapping of hostname to source")

        return cls(
            sources=tuple(str(name) for name in sources),
            domain_mapping={str(host).lower(): str(source) for host, source in mapping.items()},
        )


def list_source_dirs(sources_dir: Path) -> List[str]:
    """Names of the source directories, sorted."""
    if not sources_dir.is_dir():
        return []
    return sorted(entry.name for entry in sources_dir.iterdir() if entry.is_dir())


def check_directories(registry: SourceRegistry, sources_dir: Path) -> List[ValidationError]:
    """Check source directories against the registry."""
    findings = []
    registered = set(registry.sources)
    directories = list_source_dirs(sources_dir)

    for name in directories:
        location = f"sources/{name}"
        if name not in registered:
            findings.append(ValidationError(
                file_path=location,
                rule_violated="unregistered_directory",
                detail=f'Directory "{location}" is not registered in sources.yaml',
            ))
        if not (sources_dir / name / SOURCE_MANIFEST).exists():
            findings.append(ValidationError(
                file_path=location,
                rule_violated="missing_source_yaml",
                detail=f'Directory "{location}" is missing {SOURCE_MANIFEST}',
                severity="warn",
            ))

    present = set(directories)
    for name in registry.sources:
        if name not in present:
            findings.append(ValidationError(
                file_path=f"sources/{name}",
                rule_violated="missing_directory",
                detail=f'Registered source "{name}" has no directory',
                severity="warn",
            ))

    return findings


def check_document(registry: SourceRegistry, document: Document) -> List[ValidationError]:
    """Check one document's source field and URL host against its directory."""
    findings = []
    record = document.record
    directory = document.path_segments[0]

    if isinstance(record.source, str) and record.source and record.source != directory:
        findings.append(ValidationError(
            file_path=document.identifier,
            rule_violated="source_mismatch",
            detail=f'Source field "{record.source}" doesn\'t match directory "{directory}"',
            field="source",
            severity="warn",
        ))

    # Invalid URLs are reported by frontmatter validation
    if is_valid_url(record.url):
        hostname = urlsplit(record.url).hostname
        expected = registry.domain_mapping.get(hostname)
        if expected and expected != directory:
            findings.append(ValidationError(
                file_path=document.identifier,
                rule_violated="domain_mismatch",
                detail=f'URL domain "{hostname}" maps to "{expected}" but file is in "{directory}"',
                field="url",
                severity="warn",
            ))

    return findings


def check_sources(
    registry: SourceRegistry,
    sources_dir: Path,
    documents: Iterable[Document],
) -> ValidationReport:
    """
    Run all registry checks.

    Args:
        registry: Parsed source registry
        sources_dir: The sources/ directory
        documents: Loaded documents below sources_dir

    Returns:
        ValidationReport
    """
    findings = check_directories(registry, sources_dir)
    for document in documents:
        findings.extend(check_document(registry, document))
    return ValidationReport.from_findings(findings)
