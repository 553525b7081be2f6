#!/usr/bin/env python3
"""
Tests for doclib_config.py - configuration loading and precedence.
"""

import pytest

from doclib_config import DEFAULT_CONFIG, ConfigError, deep_merge, load_config


def write_config(workspace, text):
    config_dir = workspace / ".doclib"
    config_dir.mkdir(exist_ok=True)
    (config_dir / "config.yaml").write_text(text, encoding="utf-8")


def test_defaults_without_config_file(tmp_path):
    config = load_config(tmp_path, environ={})

    assert config.stale_threshold_days == 180
    assert config.min_content_length == 100
    assert config.max_depth == 6
    assert config.slug_pattern.pattern == DEFAULT_CONFIG["paths"]["slugPattern"]
    assert "node_modules" in config.reserved
    assert config.sources_dir == tmp_path / "sources"
    assert config.registry_path == tmp_path / ".doclib" / "sources.yaml"
    assert config.schema_path == tmp_path / ".doclib" / "schemas" / "frontmatter.schema.json"


def test_environment_overrides_default(tmp_path):
    assert load_config(tmp_path, environ={"STALE_DAYS": "30"}).stale_threshold_days == 30


def test_config_file_overrides_environment(tmp_path):
    write_config(tmp_path, "quality:\n  staleThresholdDays: 90\n")
    assert load_config(tmp_path, environ={"STALE_DAYS": "30"}).stale_threshold_days == 90


def test_partial_config_keeps_other_defaults(tmp_path):
    write_config(tmp_path, "paths:\n  maxDepth: 3\n")
    config = load_config(tmp_path, environ={})
    assert config.max_depth == 3
    assert config.min_content_length == 100
    assert config.slug_pattern.pattern == DEFAULT_CONFIG["paths"]["slugPattern"]


def test_empty_file_and_empty_sections(tmp_path):
    write_config(tmp_path, "")
    assert load_config(tmp_path, environ={}).max_depth == 6
    write_config(tmp_path, "quality:\npaths:\n")
    assert load_config(tmp_path, environ={}).max_depth == 6


@pytest.mark.parametrize("text", [
    "- a list\n",
    "quality: 5\n",
    "quality:\n  minContentLength: lots\n",
    "quality:\n  staleThresholdDays: -1\n",
    "paths:\n  slugPattern: '['\n",
    "paths:\n  reserved: node_modules\n",
    "paths: [unclosed\n",
    "quality:\n  since: 2024-02-30\n",
])
def test_invalid_config_raises(tmp_path, text):
    write_config(tmp_path, text)
    with pytest.raises(ConfigError):
        load_config(tmp_path, environ={})


def test_invalid_environment_value(tmp_path):
    with pytest.raises(ConfigError):
        load_config(tmp_path, environ={"STALE_DAYS": "soon"})


def test_deep_merge():
    base = {"a": {"b": 1, "c": 2}, "d": 3}
    merged = deep_merge(base, {"a": {"b": 10}})
    assert merged == {"a": {"b": 10, "c": 2}, "d": 3}
    assert base["a"]["b"] == 1
