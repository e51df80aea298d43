"""Turns generated documents into create/update proposals with unified diffs."""

from __future__ import annotations

import difflib
from typing import Iterable, List, Optional

from .models import GeneratedDocument, ProposalFile

NO_NEWLINE_MARKER = "\\ No newline at end of file"


def unified_diff(path: str, before: Optional[str], after: str) -> str:
    """Unified diff of two file bodies, labelled with ``path`` on both sides."""
    old_lines = (before or "").splitlines(keepends=True)
    new_lines = after.splitlines(keepends=True)
    lines: List[str] = []
    for line in difflib.unified_diff(old_lines, new_lines, fromfile=path, tofile=path):
        if line.endswith("\n"):
            lines.append(line)
        else:
            lines.append(line + "\n")
            lines.append(NO_NEWLINE_MARKER + "\n")
    return "".join(lines)


def build_proposal(document: GeneratedDocument) -> Optional[ProposalFile]:
    """Return a proposal, or ``None`` when the document is unchanged or empty."""
    before = document.existing
    after = document.content
    if not after or not after.strip():
        return None
    if before is not None and before == after:
        return None
    operation = "update" if before else "create"
    return ProposalFile(
        output_path=document.output_path,
        operation=operation,
        before=before if operation == "update" else None,
        after=after,
        diff=unified_diff(document.output_path, before, after),
    )


def build_proposals(documents: Iterable[GeneratedDocument]) -> List[ProposalFile]:
    proposals = []
    for document in documents:
        proposal = build_proposal(document)
        if proposal is not None:
            proposals.append(proposal)
    return proposals


__all__ = ["NO_NEWLINE_MARKER", "build_proposal", "build_proposals", "unified_diff"]
