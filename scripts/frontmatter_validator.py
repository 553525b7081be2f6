#!/usr/bin/env python3
"""
Frontmatter Validator

Validates document frontmatter against a JSON Schema (Draft 7) and runs the
checks a schema cannot express:

- documents without frontmatter
- capturedAt in the future
- url that does not parse as a URL
- bodies with very little readable content (warning)

All violations of a document are collected; a problem in one document never
stops validation of the others.
"""

import json
import re
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from jsonschema import Draft7Validator
from jsonschema.exceptions import SchemaError

from findings import (
    FUTURE_TIMESTAMP,
    INVALID_URL,
    SCHEMA_VIOLATION,
    ValidationError,
    ValidationReport,
)
from frontmatter_record import MISSING, Document, parse_timestamp
from markdown_parser import content_length
from url_canonicalizer import is_valid_url


MISSING_FRONTMATTER = "missing_frontmatter"
SHORT_CONTENT = "short_content"

DEFAULT_MIN_CONTENT_LENGTH = 100

ISO_TIMESTAMP_PATTERN = (
    r'^\d{4}-\d{2}-\d{2}'
    r'(T\d{2}:\d{2}(:\d{2}(\.\d+)?)?(Z|[+-]\d{2}:?\d{2})?)?$'
)

FRONTMATTER_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "Document frontmatter",
    "type": "object",
    "required": ["source"],
    "properties": {
        "source": {"type": "string", "minLength": 1},
        "url": {"type": "string", "minLength": 1},
        "title": {"type": "string", "minLength": 1},
        "version": {"type": ["string", "number"], "minLength": 1},
        "capturedAt": {"type": "string", "pattern": ISO_TIMESTAMP_PATTERN},
        "lastModified": {"type": "string", "pattern": ISO_TIMESTAMP_PATTERN},
        "breadcrumb": {
            "type": "array",
            "minItems": 1,
            "items": {"type": "string", "minLength": 1},
        },
        "tags": {
            "type": "array",
            "minItems": 1,
            "items": {"type": "string", "pattern": r"^(?!.*--)[a-z0-9-]+$"},
        },
        "language": {"type": "string", "minLength": 1},
    },
    "additionalProperties": True,
}

_REQUIRED_PROPERTY = re.compile(r"^'(.+)' is a required property")


class SchemaLoadError(Exception):
    """Raised when a schema file cannot be read or is not a valid schema."""
    pass


def load_schema(schema_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load the frontmatter schema.

    Args:
        schema_path: Optional JSON schema file overriding the built-in schema

    Returns:
        Schema dictionary, checked against the Draft 7 meta-schema

    Raises:
        SchemaLoadError: If the file is unreadable, not JSON, or not a schema
    """
    if schema_path is None or not schema_path.exists():
        return FRONTMATTER_SCHEMA

    try:
        schema = json.loads(schema_path.read_text(encoding='utf-8'))
    except (OSError, ValueError) as e:
        raise SchemaLoadError(f"Cannot load schema {schema_path}: {e}") from e

    try:
        Draft7Validator.check_schema(schema)
    except SchemaError as e:
        raise SchemaLoadError(f"Invalid schema {schema_path}: {e.message}") from e

    return schema


def _schema_field(error) -> str:
    field = "/".join(str(part) for part in error.absolute_path)
    if error.validator == "required":
        match = _REQUIRED_PROPERTY.match(error.message)
        if match:
            missing = match.group(1)
            field = f"{field}/{missing}" if field else missing
    return field


class FrontmatterValidator:
    """
    Validates documents against a frontmatter schema.

    Attributes:
        schema: JSON schema in use
        min_content_length: Readable characters below which a warning is issued
    """

    def __init__(self, schema: Optional[Dict[str, Any]] = None, min_content_length: int = DEFAULT_MIN_CONTENT_LENGTH):
        self.schema = schema if schema is not None else FRONTMATTER_SCHEMA
        self.min_content_length = min_content_length
        self._validator = Draft7Validator(self.schema)

    def validate(self, document: Document, now: datetime) -> List[ValidationError]:
        """
        Validate one document.

        Args:
            document: Loaded document
            now: Aware reference time for the future-timestamp check

        Returns:
            All violations found, errors and warnings alike
        """
        identifier = document.identifier
        record = document.record

        if not document.has_frontmatter or record.is_empty():
            return [ValidationError(
                file_path=identifier,
                rule_violated=MISSING_FRONTMATTER,
                detail="No frontmatter found",
            )]

        findings = []

        for error in self._validator.iter_errors(record.to_mapping()):
            findings.append(ValidationError(
                file_path=identifier,
                rule_violated=SCHEMA_VIOLATION,
                detail=error.message,
                field=_schema_field(error),
            ))

        length = content_length(document.body)
        if length < self.min_content_length:
            findings.append(ValidationError(
                file_path=identifier,
                rule_violated=SHORT_CONTENT,
                detail=f"Content is very short ({length} characters, minimum {self.min_content_length})",
                severity="warn",
            ))

        captured_at = parse_timestamp(record.captured_at)
        if captured_at is not None and captured_at > now:
            findings.append(ValidationError(
                file_path=identifier,
                rule_violated=FUTURE_TIMESTAMP,
                detail="capturedAt date is in the future",
                field="capturedAt",
            ))

        if record.url is not MISSING and record.url is not None and not is_valid_url(record.url):
            findings.append(ValidationError(
                file_path=identifier,
                rule_violated=INVALID_URL,
                detail="Invalid URL format",
                field="url",
            ))

        return findings


def validate_documents(
    documents: Iterable[Document],
    now: datetime,
    validator: Optional[FrontmatterValidator] = None,
) -> ValidationReport:
    """
    Validate a collection of documents.

    Args:
        documents: Loaded documents
        now: Aware reference time
        validator: Validator to use (default schema if omitted)

    Returns:
        ValidationReport with every error and warning
    """
    if validator is None:
        validator = FrontmatterValidator()

    findings = []
    for document in documents:
        findings.extend(validator.validate(document, now))
    return ValidationReport.from_findings(findings)
