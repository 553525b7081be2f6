#!/usr/bin/env python3
"""
Path Validator

Checks a document's storage path (relative to the sources directory)
against the corpus naming conventions:

- depth: at most max_depth directories above the file
- filename slug (without .md) must fully match the slug pattern
- every directory except the first (the source name) must match it too
- no segment may be a reserved name
- the path must be lowercase
- only lowercase letters, digits, hyphens, slashes and one dot are allowed
- consecutive hyphens are a warning
"""

import re
from typing import List, Pattern, Sequence, Union

from findings import ValidationError


DEFAULT_SLUG_PATTERN = r'^[a-z0-9]+(?:-[a-z0-9]+)*$'
DEFAULT_MAX_DEPTH = 6
DEFAULT_RESERVED = ('.source.yaml', '.git', 'node_modules', 'README.md')

INVALID_PATH_CHARS = re.compile(r'[^a-z0-9\-/.]')


def validate_path(
    path: Union[str, Sequence[str]],
    slug_pattern: Union[str, Pattern] = DEFAULT_SLUG_PATTERN,
    max_depth: int = DEFAULT_MAX_DEPTH,
    reserved: Sequence[str] = DEFAULT_RESERVED,
) -> List[ValidationError]:
    """
    Validate a document path.

    Args:
        path: '/' separated path or its segments, filename last
        slug_pattern: Regular expression every slug must fully match
        max_depth: Maximum number of directory segments
        reserved: Names no segment may use

    Returns:
        Violations in check order; warnings have severity "warn"

    Example:
        >>> [v.rule_violated for v in validate_path("react/Hooks/use-state.md")]
        ['path_directory_slug', 'path_uppercase', 'path_characters']
    """
    if isinstance(path, str):
        segments = [part for part in path.split('/') if part]
    else:
        segments = list(path)
    file_path = '/'.join(segments)

    slug_regex = re.compile(slug_pattern) if isinstance(slug_pattern, str) else slug_pattern
    pattern_text = slug_regex.pattern

    violations = []

    def add(rule: str, detail: str, severity: str = "error") -> None:
        violations.append(ValidationError(
            file_path=file_path,
            rule_violated=rule,
            detail=detail,
            severity=severity,
        ))

    if not segments:
        add("path_empty", "Path has no segments")
        return violations

    filename = segments[-1]
    directories = segments[:-1]

    if len(directories) > max_depth:
        add("path_depth", f"Path too deep ({len(directories)} levels, max {max_depth})")

    slug = filename[:-3] if filename.endswith('.md') else filename
    if not slug_regex.fullmatch(slug):
        add("path_filename_slug", f'Invalid filename slug "{slug}" - must match pattern {pattern_text}')

    # The first directory is the source name and keeps its registered spelling
    for directory in directories[1:]:
        if not slug_regex.fullmatch(directory):
            add("path_directory_slug", f'Invalid directory name "{directory}" - must match pattern {pattern_text}')

    for part in segments:
        if part in reserved:
            add("path_reserved", f'Reserved name "{part}" cannot be used')

    if file_path != file_path.lower():
        add("path_uppercase", "Path contains uppercase letters - all paths must be lowercase")

    if INVALID_PATH_CHARS.search(file_path) or file_path.count('.') > 1:
        add(
            "path_characters",
            "Path contains invalid characters - only lowercase letters, numbers, "
            "hyphens and a single dot before the extension are allowed",
        )

    if '--' in file_path:
        add("path_consecutive_hyphens", "Path contains consecutive hyphens", severity="warn")

    return violations
