#!/usr/bin/env python3
"""
Configuration for the documentation library checks.

Settings live in .doclib/config.yaml below the workspace:

    quality:
      staleThresholdDays: 180
      minContentLength: 100
    paths:
      maxDepth: 6
      slugPattern: '^[a-z0-9]+(?:-[a-z0-9]+)*$'
      reserved: ['.source.yaml', '.git', 'node_modules', 'README.md']

Values missing from the file fall back to DEFAULT_CONFIG. The stale
threshold falls back to the STALE_DAYS environment variable before the
built-in default.
"""

import copy
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Pattern, Tuple

import yaml

from path_validator import DEFAULT_MAX_DEPTH, DEFAULT_RESERVED, DEFAULT_SLUG_PATTERN
from staleness import DEFAULT_THRESHOLD_DAYS


CONFIG_DIR = '.doclib'
CONFIG_FILE = 'config.yaml'
SOURCES_REGISTRY_FILE = 'sources.yaml'
SCHEMA_FILE = Path('schemas') / 'frontmatter.schema.json'
SOURCES_DIR = 'sources'

DEFAULT_CONFIG: Dict[str, Any] = {
    'quality': {
        'staleThresholdDays': DEFAULT_THRESHOLD_DAYS,
        'minContentLength': 100,
    },
    'paths': {
        'maxDepth': DEFAULT_MAX_DEPTH,
        'slugPattern': DEFAULT_SLUG_PATTERN,
        'reserved': list(DEFAULT_RESERVED),
    },
}


class ConfigError(Exception):
    """Raised when configuration cannot be loaded or is invalid."""
    pass


@dataclass(frozen=True)
class DoclibConfig:
    """
    Effective configuration.

    Attributes:
        workspace: Workspace root
        stale_threshold_days: Age in days after which a document is stale
        min_content_length: Readable characters below which a body is short
        max_depth: Maximum directory depth below sources/
        slug_pattern: Compiled slug regex
        reserved: Names no path segment may use
    """
    workspace: Path
    stale_threshold_days: int
    min_content_length: int
    max_depth: int
    slug_pattern: Pattern
    reserved: Tuple[str, ...]

    @property
    def sources_dir(self) -> Path:
        return self.workspace / SOURCES_DIR

    @property
    def registry_path(self) -> Path:
        return self.workspace / CONFIG_DIR / SOURCES_REGISTRY_FILE

    @property
    def schema_path(self) -> Path:
        return self.workspace / CONFIG_DIR / SCHEMA_FILE


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge override into a copy of base, recursing into nested mappings."""
    merged = copy.deepcopy(dict(base))
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def read_yaml_file(path: Path) -> Any:
    """Parse a YAML file, raising ConfigError on failure."""
    try:
        return yaml.safe_load(path.read_text(encoding='utf-8'))
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e
    except (yaml.YAMLError, ValueError) as e:
        raise ConfigError(f"Failed to parse YAML in {path}: {e}") from e


def _int_setting(settings: Mapping[str, Any], key: str, section: str) -> int:
    value = settings.get(key)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigError(f"{section}.{key} must be a non-negative integer, got {value!r}")
    return value


def _env_stale_days(environ: Mapping[str, str]) -> int:
    raw = environ.get('STALE_DAYS')
    if raw is None:
        return DEFAULT_THRESHOLD_DAYS
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"STALE_DAYS must be an integer, got {raw!r}")


def load_config(workspace: Path, environ: Optional[Mapping[str, str]] = None) -> DoclibConfig:
    """
    Load the effective configuration for a workspace.

    Args:
        workspace: Workspace root containing sources/ and .doclib/
        environ: Environment mapping (defaults to os.environ)

    Returns:
        DoclibConfig

    Raises:
        ConfigError: If the config file is unreadable, not a mapping, or holds
            invalid values
    """
    if environ is None:
        environ = os.environ

    defaults = deep_merge(DEFAULT_CONFIG, {
        'quality': {'staleThresholdDays': _env_stale_days(environ)},
    })

    config_path = workspace / CONFIG_DIR / CONFIG_FILE
    data: Dict[str, Any] = {}
    if config_path.exists():
        loaded = read_yaml_file(config_path)
        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigError(f"{config_path} must contain a mapping")
        data = loaded

    sections = {}
    for section in ('quality', 'paths'):
        value = data.get(section) or {}
        if not isinstance(value, dict):
            raise ConfigError(f"{section} in {config_path} must be a mapping")
        sections[section] = deep_merge(defaults[section], value)
    quality = sections['quality']
    paths = sections['paths']

    slug_text = paths.get('slugPattern')
    try:
        slug_pattern = re.compile(slug_text)
    except (re.error, TypeError) as e:
        raise ConfigError(f"Invalid paths.slugPattern {slug_text!r}: {e}") from e

    reserved = paths.get('reserved') or []
    if not isinstance(reserved, list):
        raise ConfigError("paths.reserved must be a list")

    return DoclibConfig(
        workspace=workspace,
        stale_threshold_days=_int_setting(quality, 'staleThresholdDays', 'quality'),
        min_content_length=_int_setting(quality, 'minContentLength', 'quality'),
        max_depth=_int_setting(paths, 'maxDepth', 'paths'),
        slug_pattern=slug_pattern,
        reserved=tuple(str(name) for name in reserved),
    )
