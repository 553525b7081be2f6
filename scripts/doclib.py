#!/usr/bin/env python3
"""Integrity checks for the documentation library."""

import argparse
import json
import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from corpus_stats import summarize
from doclib_config import ConfigError, DoclibConfig, load_config, read_yaml_file
from duplicate_clusterer import cluster_documents
from field_normalizer import normalize_corpus
from findings import PARSE_FAILURE, ValidationError, ValidationReport
from frontmatter_record import Document, FrontmatterParseError, load_document, render_document
from frontmatter_validator import FrontmatterValidator, SchemaLoadError, load_schema, validate_documents
from path_validator import validate_path
from source_registry import SourceRegistry, check_sources
from staleness import find_stale, group_by_source


SUMMARY_RULE = "-" * 50

# Stale documents listed per source before eliding the rest
STALE_LISTING_LIMIT = 10


def discover_docs(sources_dir: Path) -> List[Path]:
    """Find all corpus documents, excluding README.md files."""
    if not sources_dir.is_dir():
        return []
    return sorted(
        doc for doc in sources_dir.glob('**/*.md')
        if doc.is_file() and doc.name != 'README.md'
    )


def load_documents(sources_dir: Path) -> Tuple[List[Document], List[ValidationError]]:
    """Load all documents.

    Args:
        sources_dir: The sources/ directory

    Returns:
        (documents, failures): documents that parsed, and one parse_failure
        error for each document that did not
    """
    documents = []
    failures = []

    for doc_path in discover_docs(sources_dir):
        identifier = doc_path.relative_to(sources_dir).as_posix()
        try:
            documents.append(load_document(sources_dir, doc_path))
        except (FrontmatterParseError, UnicodeDecodeError) as e:
            failures.append(ValidationError(
                file_path=identifier,
                rule_violated=PARSE_FAILURE,
                detail=f"Failed to parse: {e}",
            ))

    return documents, failures


def print_report(report: ValidationReport) -> None:
    """Print errors and warnings to stderr."""
    for error in report.errors:
        print(error.format_error(), file=sys.stderr)
    for warning in report.warnings:
        print(warning.format_error(), file=sys.stderr)


def print_summary(*lines: str) -> None:
    print(SUMMARY_RULE)
    for line in lines:
        print(line)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def auto_fix(args) -> int:
    """Normalize frontmatter of all documents and write fixes back.

    Args:
        args: Command-line arguments from argparse

    Returns:
        Exit code: always 0, documents that cannot be parsed are skipped
    """
    config: DoclibConfig = args.config
    documents, failures = load_documents(config.sources_dir)

    if not documents and not failures:
        print("No documents found to process")
        return 0

    print(f"Scanning {len(documents) + len(failures)} documents for fixable issues...\n")

    for failure in failures:
        print(f"[WARN] Could not process {failure.file_path}: {failure.detail}", file=sys.stderr)

    changed = normalize_corpus(documents)
    total_fixes = 0

    for document, result in changed:
        total_fixes += len(result.fixes)
        if not args.dry_run:
            target = config.sources_dir / document.identifier
            target.write_text(render_document(result.record, document.body), encoding='utf-8')
        verb = "Would fix" if args.dry_run else "Fixed"
        print(f"  {verb}: {document.identifier}")
        for fix in result.fixes:
            print(f"    - {fix}")

    print()
    print_summary(
        f"Files processed: {len(documents) + len(failures)}",
        f"Files fixed: {len(changed)}",
        f"Total fixes: {total_fixes}",
    )

    if total_fixes and args.dry_run:
        print(f"\n{total_fixes} fixes pending in {len(changed)} files (dry run)")
    elif total_fixes:
        print(f"\nApplied {total_fixes} fixes to {len(changed)} files")
    else:
        print("\nNo fixes needed")
    return 0


def check_duplicates(args) -> int:
    """Report documents sharing a canonical URL and version.

    Args:
        args: Command-line arguments from argparse

    Returns:
        Exit code: 1 if exact duplicates exist (or, with
        --fail-on-multi-version, if any URL has several versions), else 0
    """
    config: DoclibConfig = args.config
    documents, failures = load_documents(config.sources_dir)

    if not documents and not failures:
        print("No documents found to check")
        return 0

    print(f"Checking {len(documents) + len(failures)} documents for duplicates...\n")

    report = cluster_documents(documents)
    warnings = [
        ValidationError(f.file_path, f.rule_violated, f.detail, f.field, severity="warn")
        for f in failures
    ]
    print_report(ValidationReport(warnings=tuple(warnings) + report.warnings))

    if report.exact_duplicates:
        print("[ERROR] Duplicate documents found (same URL + same version):\n", file=sys.stderr)
        for group in report.exact_duplicates:
            print(f"  URL: {group.url}", file=sys.stderr)
            print(f"  Version: {group.version}", file=sys.stderr)
            print("  Files:", file=sys.stderr)
            for identifier in group.identifiers:
                print(f"    - {identifier}", file=sys.stderr)
            print(file=sys.stderr)

    if report.multi_version_groups:
        print("[INFO] Documents with multiple versions:\n")
        for group in report.multi_version_groups:
            print(f"  URL: {group.url}")
            print(f"  Versions: {', '.join(str(v) for v in group.versions)}")
            print(f"  Documents: {group.count}")
            print()

    print_summary(
        f"Documents checked: {len(documents) + len(failures)}",
        f"Unique URLs: {report.unique_urls}",
        f"Duplicates (errors): {len(report.exact_duplicates)}",
        f"Multi-version URLs: {len(report.multi_version_groups)}",
    )

    if report.has_duplicates:
        return 1
    if args.fail_on_multi_version and report.multi_version_groups:
        print("\n[ERROR] Multi-version URLs found and --fail-on-multi-version is set", file=sys.stderr)
        return 1

    print("\nNo duplicates found")
    return 0


def find_stale_docs(args) -> int:
    """List documents captured longer ago than the stale threshold.

    Args:
        args: Command-line arguments from argparse

    Returns:
        Exit code: always 0 (informational)
    """
    config: DoclibConfig = args.config
    threshold_days = args.days if args.days is not None else config.stale_threshold_days
    now = _now()

    print(f"Finding documents older than {threshold_days} days...")
    print(f"Threshold date: {(now - timedelta(days=threshold_days)).date().isoformat()}\n")

    documents, failures = load_documents(config.sources_dir)
    stale = find_stale(documents, now, threshold_days)

    if stale:
        print(f"Found {len(stale)} stale documents:")
        for source, items in group_by_source(stale).items():
            print(f"\n## {source} ({len(items)} documents)\n")
            for item in items[:STALE_LISTING_LIMIT]:
                print(f"  - {item.identifier}")
                print(f"    Title: {item.title or 'N/A'}")
                print(f"    Captured: {item.captured_at.date().isoformat()} ({item.age_days} days ago)")
            if len(items) > STALE_LISTING_LIMIT:
                print(f"  ... and {len(items) - STALE_LISTING_LIMIT} more")
        print()
    else:
        print("No stale documents found\n")

    print_summary(
        f"Documents checked: {len(documents) + len(failures)}",
        f"Stale documents: {len(stale)}",
        f"Threshold: {threshold_days} days",
    )
    return 0


def validate_paths(args) -> int:
    """Validate document paths against naming conventions.

    Args:
        args: Command-line arguments from argparse

    Returns:
        Exit code: 0 on success, 1 on errors
    """
    config: DoclibConfig = args.config
    docs = discover_docs(config.sources_dir)

    if not docs:
        print("No documents found to validate")
        return 0

    print(f"Validating paths for {len(docs)} documents...\n")

    findings = []
    for doc_path in docs:
        relative = doc_path.relative_to(config.sources_dir).as_posix()
        findings.extend(validate_path(
            relative,
            slug_pattern=config.slug_pattern,
            max_depth=config.max_depth,
            reserved=config.reserved,
        ))

    report = ValidationReport.from_findings(findings)
    print_report(report)

    print_summary(
        f"Paths checked: {len(docs)}",
        f"Errors: {len(report.errors)}",
        f"Warnings: {len(report.warnings)}",
    )

    if report.errors:
        print(f"\n[ERROR] {len(report.errors)} path errors found", file=sys.stderr)
        return 1

    print("\nAll paths are valid")
    return 0


def validate_frontmatter(args) -> int:
    """Validate document frontmatter against the schema.

    Args:
        args: Command-line arguments from argparse

    Returns:
        Exit code: 0 on success, 1 on errors
    """
    config: DoclibConfig = args.config

    try:
        schema = load_schema(config.schema_path)
    except SchemaLoadError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1

    documents, failures = load_documents(config.sources_dir)

    if not documents and not failures:
        print("No documents found to validate")
        return 0

    count = len(documents) + len(failures)
    print(f"Validating {count} documents...\n")

    validator = FrontmatterValidator(schema, min_content_length=config.min_content_length)
    report = ValidationReport(errors=tuple(failures)).merge(
        validate_documents(documents, _now(), validator)
    )
    print_report(report)

    print_summary(
        f"Documents scanned: {count}",
        f"Errors: {len(report.errors)}",
        f"Warnings: {len(report.warnings)}",
    )

    if report.errors:
        print(f"\n[ERROR] {len(report.errors)} errors found", file=sys.stderr)
        return 1

    print(f"\nAll {count} documents passed validation")
    return 0


def check_source_registry(args) -> int:
    """Verify all documents belong to registered sources.

    Args:
        args: Command-line arguments from argparse

    Returns:
        Exit code: 0 on success, 1 on errors
    """
    config: DoclibConfig = args.config

    if not config.registry_path.exists():
        print(f"[ERROR] Sources registry not found: {config.registry_path}", file=sys.stderr)
        return 1

    try:
        registry = SourceRegistry.from_mapping(read_yaml_file(config.registry_path))
    except (ConfigError, ValueError) as e:
        print(f"[ERROR] {config.registry_path}: {e}", file=sys.stderr)
        return 1

    documents, _ = load_documents(config.sources_dir)
    report = check_sources(registry, config.sources_dir, documents)

    print(f"Registered sources: {', '.join(registry.sources)}\n")
    print_report(report)

    print_summary(
        f"Registered sources: {len(registry.sources)}",
        f"Documents checked: {len(documents)}",
        f"Errors: {len(report.errors)}",
        f"Warnings: {len(report.warnings)}",
    )

    if report.errors:
        print(f"\n[ERROR] {len(report.errors)} source registration errors found", file=sys.stderr)
        return 1

    print("\nAll sources are properly registered")
    return 0


def show_stats(args) -> int:
    """Print per-source statistics.

    Args:
        args: Command-line arguments from argparse

    Returns:
        Exit code: always 0
    """
    config: DoclibConfig = args.config
    documents, _ = load_documents(config.sources_dir)
    summary = summarize(documents)

    if args.json:
        print(json.dumps(summary.to_dict(), indent=2))
        return 0

    print(f"Total documents: {summary.total_documents}")
    print("\nBy source:")
    for source, stats in summary.sources:
        print(f"  {source}: {stats.document_count} docs")
        if stats.versions:
            print(f"    Versions: {', '.join(sorted(stats.versions))}")
        if stats.languages:
            print(f"    Languages: {', '.join(sorted(stats.languages))}")
        if stats.last_captured_at:
            print(f"    Last captured: {stats.last_captured_at.date().isoformat()}")
    return 0


def validate_all(args) -> int:
    """Run all validators in sequence.

    Args:
        args: Command-line arguments from argparse

    Returns:
        Exit code: 0 if all validators pass, first non-zero exit code otherwise

    Execution order:
        1. Frontmatter validation
        2. Path validation
        3. Duplicate check
        4. Source registry check
        5. Stale documents (informational only)
    """
    validators = [
        ('Frontmatter', validate_frontmatter),
        ('Paths', validate_paths),
        ('Duplicates', check_duplicates),
        ('Sources', check_source_registry),
    ]

    results = {}
    print("=" * 60)

    for name, validator in validators:
        print(f"\nRunning {name} validation...")
        print("-" * 60)
        results[name] = validator(args)

    print("\n" + "=" * 60)
    print("VALIDATION SUMMARY")
    print("=" * 60)

    for name, exit_code in results.items():
        status = "PASSED" if exit_code == 0 else "FAILED"
        print(f"{name}: {status}")

    print("\n" + "=" * 60)
    print("Stale Documents (informational)")
    print("=" * 60)
    find_stale_docs(args)

    for exit_code in results.values():
        if exit_code != 0:
            return exit_code
    return 0


def default_workspace() -> Path:
    return Path(os.environ.get('GITHUB_WORKSPACE') or Path.cwd())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='doclib',
        description="Check and normalize the documentation library",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s auto-fix --dry-run
  %(prog)s check-duplicates
  %(prog)s find-stale --days 90
  %(prog)s validate-all
        """
    )
    parser.add_argument(
        '--workspace',
        type=Path,
        default=None,
        help='Workspace root containing sources/ and .doclib/ (default: $GITHUB_WORKSPACE or cwd)'
    )

    subparsers = parser.add_subparsers(
        dest='command',
        required=True,
        help='Command to run'
    )

    parser_fix = subparsers.add_parser(
        'auto-fix',
        help='Normalize frontmatter and write fixes back'
    )
    parser_fix.add_argument(
        '--dry-run',
        action='store_true',
        help='Report fixes without writing files'
    )

    parser_duplicates = subparsers.add_parser(
        'check-duplicates',
        help='Detect documents with the same URL and version'
    )
    parser_duplicates.add_argument(
        '--fail-on-multi-version',
        action='store_true',
        help='Also fail when one URL is captured for several versions'
    )

    parser_stale = subparsers.add_parser(
        'find-stale',
        help='List documents older than the stale threshold'
    )
    parser_stale.add_argument(
        '--days',
        type=int,
        default=None,
        help='Stale threshold in days (default: from config)'
    )

    subparsers.add_parser(
        'validate-paths',
        help='Validate document paths against naming conventions'
    )

    subparsers.add_parser(
        'validate-frontmatter',
        help='Validate frontmatter against the schema'
    )

    subparsers.add_parser(
        'check-sources',
        help='Verify documents belong to registered sources'
    )

    parser_stats = subparsers.add_parser(
        'stats',
        help='Show per-source statistics'
    )
    parser_stats.add_argument(
        '--json',
        action='store_true',
        help='Print statistics as JSON'
    )

    parser_all = subparsers.add_parser(
        'validate-all',
        help='Run all checks'
    )
    parser_all.add_argument(
        '--fail-on-multi-version',
        action='store_true',
        help='Also fail when one URL is captured for several versions'
    )

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the doclib tool."""
    parser = build_parser()
    args = parser.parse_args(argv)

    workspace = args.workspace if args.workspace is not None else default_workspace()
    try:
        args.config = load_config(workspace)
    except ConfigError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1

    # validate-all runs find-stale with the configured threshold
    if not hasattr(args, 'days'):
        args.days = None

    handlers: Dict[str, Callable] = {
        'auto-fix': auto_fix,
        'check-duplicates': check_duplicates,
        'find-stale': find_stale_docs,
        'validate-paths': validate_paths,
        'validate-frontmatter': validate_frontmatter,
        'check-sources': check_source_registry,
        'stats': show_stats,
        'validate-all': validate_all,
    }

    handler = handlers.get(args.command)
    if handler is None:
        print(f"Error: Unknown command '{args.command}'", file=sys.stderr)
        return 1

    return handler(args)


if __name__ == "__main__":
    sys.exit(main())
