"""Budget-aware retrieval of blob content for the read set."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Dict, Sequence

from .hosting.client import RepositoryHost
from .logging import get_logger
from .models import CandidateFile, RepoRef, ScanPhase
from .progress import NullProgressSink, ProgressSink, emit, interpolate, raise_if_cancelled

READ_PROGRESS_START = 10
READ_PROGRESS_END = 55


@dataclass
class FetchResult:
    """Decoded contents keyed by path, in fetch order."""

    contents: Dict[str, str] = field(default_factory=dict)
    truncated: Dict[str, int] = field(default_factory=dict)
    remaining_chars: int = 0

    @property
    def total_chars(self) -> int:
        return sum(len(text) for text in self.contents.values())


class ContentFetcher:
    """Fetches candidates one at a time against a global character budget.

    Earlier files get their full text; the file that crosses the budget is cut
    to whatever remains, and nothing after it is fetched.
    """

    def __init__(self, host: RepositoryHost) -> None:
        self.host = host
        self.logger = get_logger("fetcher")

    def fetch(
        self,
        repo_ref: RepoRef,
        candidates: Sequence[CandidateFile],
        max_total_chars: int,
        *,
        progress: ProgressSink | None = None,
        cancel: threading.Event | None = None,
    ) -> FetchResult:
        sink = progress or NullProgressSink()
        result = FetchResult(remaining_chars=max(0, max_total_chars))
        total = len(candidates) or 1

        for candidate in candidates:
            if not candidate.content_handle:
                continue
            if result.remaining_chars <= 0:
                self.logger.debug("Character budget exhausted; skipping remaining files")
                break
            index = len(result.contents)
            emit(
                sink,
                ScanPhase.READ_FILES,
                interpolate(READ_PROGRESS_START, READ_PROGRESS_END, index, total),
                f"Reading {candidate.path}",
                {"path": candidate.path, "index": index + 1, "total": total},
            )
            raise_if_cancelled(cancel)
            raw = self.host.get_blob(repo_ref.owner, repo_ref.repo, candidate.content_handle)
            text = raw.decode("utf-8", errors="replace")
            if len(text) > result.remaining_chars:
                result.truncated[candidate.path] = len(text)
                text = text[: result.remaining_chars]
            result.contents[candidate.path] = text
            result.remaining_chars -= len(text)

        self.logger.debug(
            "Fetched %d files (%d chars, %d truncated)",
            len(result.contents),
            result.total_chars,
            len(result.truncated),
        )
        return result


__all__ = ["ContentFetcher", "FetchResult", "READ_PROGRESS_END", "READ_PROGRESS_START"]
