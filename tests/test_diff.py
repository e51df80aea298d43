"""Tests for docdrift.diff."""

from __future__ import annotations

from docdrift.diff import NO_NEWLINE_MARKER, build_proposal, build_proposals, unified_diff
from docdrift.models import DocTarget, GeneratedDocument

TARGET = DocTarget("README", ("README.md",))


def _document(existing, content, path="README.md") -> GeneratedDocument:
    return GeneratedDocument(TARGET, path, existing, content, "template")


def test_identical_content_produces_no_proposal() -> None:
    assert build_proposals([_document("# Same\n", "# Same\n")]) == []


def test_blank_content_produces_no_proposal() -> None:
    assert build_proposal(_document(None, "  \n")) is None


def test_update_proposal_carries_before_after_and_diff() -> None:
    proposal = build_proposal(_document("# Old\n", "# New\n"))

    assert proposal is not None
    assert proposal.operation == "update"
    assert proposal.before == "# Old\n"
    assert proposal.after == "# New\n"
    assert proposal.diff.startswith("--- README.md\n+++ README.md\n")
    assert "-# Old\n" in proposal.diff
    assert "+# New\n" in proposal.diff
    assert proposal.to_dict()["outputPath"] == "README.md"


def test_missing_file_is_a_create() -> None:
    proposal = build_proposal(_document(None, "# Guide\n", "docs/guides/README.md"))

    assert proposal is not None
    assert proposal.operation == "create"
    assert proposal.before is None
    assert "+++ docs/guides/README.md" in proposal.diff


def test_empty_existing_file_is_a_create_without_before() -> None:
    proposal = build_proposal(_document("", "# Guide\n", "docs/guides/README.md"))

    assert proposal is not None
    assert proposal.operation == "create"
    assert proposal.before is None
    assert proposal.to_dict()["before"] is None


def test_missing_trailing_newline_is_marked() -> None:
    diff = unified_diff("README.md", "# Old", "# Old\n## Added\n")

    assert f"-# Old\n{NO_NEWLINE_MARKER}\n" in diff
    assert diff.endswith("+## Added\n")


def test_build_proposals_keeps_order_and_drops_noops() -> None:
    documents = [
        _document("a\n", "b\n", "a.md"),
        _document("same\n", "same\n", "b.md"),
        _document(None, "c\n", "c.md"),
    ]

    assert [proposal.output_path for proposal in build_proposals(documents)] == ["a.md", "c.md"]
