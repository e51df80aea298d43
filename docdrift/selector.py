"""Ranks listed files into the bounded read set."""

from __future__ import annotations

import re
from typing import List, Sequence

from .models import CandidateFile, RepoFile
from .paths import is_doc_like, is_ignored_path, is_probably_text_file, to_posix_path

_PREFERRED_PATHS = {
    "package.json",
    "README.md",
    "readme.md",
    "next.config.js",
    "next.config.mjs",
    "src/app/api",
    "src/pages/api",
    "prisma/schema.prisma",
}

ROUTE_HANDLER_PATTERN = re.compile(
    r"^(?:src/)?app/api/(?:(?P<rel>.+)/)?route\.(?:js|jsx|mjs|ts|tsx)$"
)

PREFERRED_BONUS = 100
MANIFEST_BONUS = 120
README_BONUS = 110
ROUTE_HANDLER_BONUS = 80
SRC_BONUS = 20
APP_BONUS = 10
DOC_BONUS = 5


def score_path(path: str) -> int:
    """Return the heuristic priority of a single path."""
    normalized = to_posix_path(path)
    score = 0
    if normalized in _PREFERRED_PATHS:
        score += PREFERRED_BONUS
    if ROUTE_HANDLER_PATTERN.match(normalized):
        score += ROUTE_HANDLER_BONUS
    if normalized == "package.json":
        score += MANIFEST_BONUS
    if normalized.lower() == "readme.md":
        score += README_BONUS
    if normalized.startswith("src/"):
        score += SRC_BONUS
    if normalized.startswith("app/"):
        score += APP_BONUS
    if is_doc_like(normalized):
        score += DOC_BONUS
    return score


class CandidateSelector:
    """Filters and ranks files so the highest-signal ones are read first."""

    def __init__(self, max_file_bytes: int = 200_000) -> None:
        self.max_file_bytes = max_file_bytes

    def rank(self, files: Sequence[RepoFile]) -> List[CandidateFile]:
        """Return every eligible file, best first; ties keep discovery order."""
        scored = [
            CandidateFile(
                path=to_posix_path(item.path),
                size=item.size,
                content_handle=item.content_handle,
                score=score_path(item.path),
            )
            for item in files
            if self._eligible(item)
        ]
        # sorted() is stable, which keeps discovery order among equal scores.
        return sorted(scored, key=lambda candidate: candidate.score, reverse=True)

    def select(self, files: Sequence[RepoFile], max_files: int) -> List[CandidateFile]:
        """Return the read set: the first ``max_files`` ranked candidates."""
        if max_files <= 0:
            return []
        return self.rank(files)[:max_files]

    def _eligible(self, item: RepoFile) -> bool:
        if is_ignored_path(item.path):
            return False
        if not is_probably_text_file(item.path):
            return False
        if item.size is not None and item.size > self.max_file_bytes:
            return False
        return True


__all__ = ["CandidateSelector", "ROUTE_HANDLER_PATTERN", "score_path"]
