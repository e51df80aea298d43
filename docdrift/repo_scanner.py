"""Repository listing through the hosting API."""

from __future__ import annotations

import threading
from typing import List

from .hosting.client import RepositoryHost
from .logging import get_logger
from .models import RepoFile, RepoRef, ScanPhase
from .progress import NullProgressSink, ProgressSink, emit, raise_if_cancelled


class RepoLister:
    """Enumerates every blob at a ref.

    Hosting failures propagate unchanged: a scan cannot continue without a tree.
    """

    def __init__(self, host: RepositoryHost) -> None:
        self.host = host
        self.logger = get_logger("repo_scanner")

    def list_files(
        self,
        repo_ref: RepoRef,
        *,
        progress: ProgressSink | None = None,
        cancel: threading.Event | None = None,
    ) -> List[RepoFile]:
        sink = progress or NullProgressSink()
        emit(
            sink,
            ScanPhase.TREE,
            5,
            "Listing repository files",
            {"owner": repo_ref.owner, "repo": repo_ref.repo, "ref": repo_ref.ref},
        )
        raise_if_cancelled(cancel)
        files = self.host.list_tree(repo_ref.owner, repo_ref.repo, repo_ref.ref)
        self.logger.debug("Listed %d blobs in %s@%s", len(files), repo_ref.repo_id, repo_ref.ref)
        return files


__all__ = ["RepoLister"]
