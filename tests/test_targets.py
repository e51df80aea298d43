"""Tests for docdrift.targets."""

from __future__ import annotations

import json

import pytest

from docdrift.models import DocTarget
from docdrift.targets import (
    DEFAULT_TARGETS,
    fallback_dir_for,
    is_readme_target,
    parse_doc_targets,
    resolve_enabled_targets,
)


@pytest.mark.parametrize("raw", [None, "", "   ", []])
def test_absent_settings_use_default_readme_target(raw) -> None:
    assert parse_doc_targets(raw).kind == "absent"
    assert resolve_enabled_targets(raw) == list(DEFAULT_TARGETS)


def test_json_string_is_parsed_into_targets() -> None:
    raw = json.dumps(
        [
            {"type": "README", "paths": ["README.md"], "enabled": True},
            {"type": "API Reference", "paths": "docs/api/**/*.md"},
        ]
    )

    parsed = parse_doc_targets(raw)

    assert parsed.kind == "string"
    assert parsed.targets == (
        DocTarget(type="README", paths=("README.md",), enabled=True),
        DocTarget(type="API Reference", paths=("docs/api/**/*.md",), enabled=True),
    )


def test_invalid_json_string_is_configured_with_no_targets() -> None:
    parsed = parse_doc_targets("{not json")

    assert parsed.kind == "string"
    assert parsed.configured
    assert resolve_enabled_targets("{not json") == []


def test_array_entries_are_normalized() -> None:
    parsed = parse_doc_targets(
        [
            {"paths": ["docs\\guide.md", ""]},
            "not-a-mapping",
            {"type": "Tutorial", "paths": [], "enabled": False},
        ]
    )

    assert parsed.kind == "array"
    assert parsed.targets == (
        DocTarget(type="Other", paths=("docs/guide.md",), enabled=True),
        DocTarget(type="Tutorial", paths=(), enabled=False),
    )


def test_configured_targets_keep_only_enabled_entries() -> None:
    raw = [
        {"type": "README", "paths": ["README.md"], "enabled": False},
        {"type": "Architecture", "paths": ["docs/architecture.md"], "enabled": None},
    ]

    assert resolve_enabled_targets(raw) == [
        DocTarget(type="Architecture", paths=("docs/architecture.md",), enabled=True)
    ]


def test_all_disabled_targets_yield_empty_list() -> None:
    assert resolve_enabled_targets([{"type": "README", "enabled": False}]) == []


@pytest.mark.parametrize(
    ("target_type", "expected"),
    [
        ("API Reference", "docs/api"),
        ("Architecture", "docs/architecture"),
        ("Tutorial", "docs/tutorials"),
        ("User Guide", "docs/guides"),
        ("Operations guide", "docs/guides"),
        ("Changelog", "docs"),
        ("", "docs"),
    ],
)
def test_fallback_dir_for(target_type: str, expected: str) -> None:
    assert fallback_dir_for(target_type) == expected


def test_is_readme_target_by_type_or_path() -> None:
    assert is_readme_target(DocTarget(type="README", paths=("docs/index.md",)))
    assert is_readme_target(DocTarget(type="Overview", paths=("packages/web/README.md",)))
    assert not is_readme_target(DocTarget(type="Architecture", paths=("docs/architecture/overview.md",)))


def test_globbed_target_is_not_readme() -> None:
    # The inferred output path for this glob is docs/architecture/README.md.
    assert not is_readme_target(DocTarget(type="Architecture", paths=("docs/architecture/**/*.md",)))
    assert not is_readme_target(DocTarget(type="Guide", paths=()))
