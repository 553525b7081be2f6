#!/usr/bin/env python3
"""
Findings - typed error values shared by every integrity check.

Checks never raise on a single document's problem. Each problem becomes a
ValidationError value and the values for a batch are collected in an
immutable ValidationReport that callers merge and finally map to an exit code.
"""

from dataclasses import dataclass
from typing import Iterable, Tuple


# Error kinds
PARSE_FAILURE = "parse_failure"
INVALID_URL = "invalid_url"
FUTURE_TIMESTAMP = "future_timestamp"
SCHEMA_VIOLATION = "schema_violation"


@dataclass(frozen=True)
class ValidationError:
    """
    Structured validation error with detailed information.

    Attributes:
        file_path: Document identifier (path relative to the sources directory)
        rule_violated: Kind of problem, e.g. "schema_violation" or "path_depth"
        detail: Human readable description of the problem
        field: Frontmatter field the problem refers to (empty if file-level)
        severity: Error severity level ("error" or "warn")
    """
    file_path: str
    rule_violated: str
    detail: str
    field: str = ""
    severity: str = "error"

    def format_error(self) -> str:
        """
        Format validation error for console output.

        Returns:
            Formatted error string

        Example:
            [ERROR] react/hooks/use-state.md: schema_violation
              Field: tags/0
              Detail: 'C++' does not match '^[a-z0-9-]+$'
        """
        severity_tag = f"[{self.severity.upper()}]"
        header = f"{severity_tag} {self.file_path}: {self.rule_violated}"

        parts = [header]
        if self.field:
            parts.append(f"  Field: {self.field}")
        if self.detail:
            parts.append(f"  Detail: {self.detail}")

        return "\n".join(parts)


@dataclass(frozen=True)
class ValidationReport:
    """Errors and warnings accumulated over a batch of documents."""
    errors: Tuple[ValidationError, ...] = ()
    warnings: Tuple[ValidationError, ...] = ()

    @classmethod
    def from_findings(cls, findings: Iterable[ValidationError]) -> "ValidationReport":
        """Split findings into errors and warnings by severity."""
        errors = []
        warnings = []
        for finding in findings:
            if finding.severity == "error":
                errors.append(finding)
            else:
                warnings.append(finding)
        return cls(errors=tuple(errors), warnings=tuple(warnings))

    def merge(self, other: "ValidationReport") -> "ValidationReport":
        return ValidationReport(
            errors=self.errors + other.errors,
            warnings=self.warnings + other.warnings,
        )

    @property
    def ok(self) -> bool:
        return not self.errors
