"""Tests for docdrift.fetcher."""

from __future__ import annotations

import threading

import pytest

from docdrift.fetcher import ContentFetcher
from docdrift.models import CandidateFile, ProgressEvent, ScanPhase
from docdrift.progress import ScanCancelled


class _RecordingSink:
    def __init__(self) -> None:
        self.events: list[ProgressEvent] = []

    def report(self, event: ProgressEvent) -> None:
        self.events.append(event)


def _candidates(host, paths):
    return [CandidateFile(path=path, size=None, content_handle=host.sha_for(path)) for path in paths]


def test_fetch_respects_total_character_budget(make_host, repo_ref) -> None:
    host = make_host({"a.md": "a" * 40, "b.md": "b" * 40, "c.md": "c" * 40})
    fetcher = ContentFetcher(host)

    result = fetcher.fetch(repo_ref, _candidates(host, ["a.md", "b.md", "c.md"]), max_total_chars=60)

    assert result.contents == {"a.md": "a" * 40, "b.md": "b" * 20}
    assert result.total_chars <= 60
    assert result.truncated == {"b.md": 40}
    assert result.remaining_chars == 0
    assert host.blob_reads == ["a.md", "b.md"]


@pytest.mark.parametrize("budget", [0, 1, 7, 33, 1_000])
def test_fetch_never_exceeds_budget(make_host, repo_ref, budget: int) -> None:
    files = {f"file_{index}.ts": "x" * (index * 5 + 1) for index in range(8)}
    host = make_host(files)

    result = ContentFetcher(host).fetch(repo_ref, _candidates(host, list(files)), max_total_chars=budget)

    assert result.total_chars <= budget


def test_fetch_skips_candidates_without_handle(make_host, repo_ref) -> None:
    host = make_host({"a.md": "alpha"})
    candidates = [CandidateFile(path="ghost.md", size=None, content_handle=None)] + _candidates(host, ["a.md"])

    result = ContentFetcher(host).fetch(repo_ref, candidates, max_total_chars=100)

    assert list(result.contents) == ["a.md"]


def test_fetch_reports_read_progress(make_host, repo_ref) -> None:
    host = make_host({"a.md": "a", "b.md": "b"})
    sink = _RecordingSink()

    ContentFetcher(host).fetch(repo_ref, _candidates(host, ["a.md", "b.md"]), 100, progress=sink)

    assert [event.phase for event in sink.events] == [ScanPhase.READ_FILES, ScanPhase.READ_FILES]
    assert [event.percent for event in sink.events] == [10, 33]
    assert sink.events[0].message == "Reading a.md"
    assert sink.events[1].meta == {"path": "b.md", "index": 2, "total": 2}


def test_fetch_stops_when_cancelled(make_host, repo_ref) -> None:
    host = make_host({"a.md": "a"})
    cancel = threading.Event()
    cancel.set()

    with pytest.raises(ScanCancelled):
        ContentFetcher(host).fetch(repo_ref, _candidates(host, ["a.md"]), 100, cancel=cancel)

    assert host.blob_reads == []
