"""Scan pipeline: list, select, fetch, summarize, digest, generate and diff."""

from __future__ import annotations

import threading
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from .config import EngineConfig, load_config
from .diff import build_proposals
from .digest import DigestGenerator
from .fetcher import ContentFetcher
from .generator import DocumentGenerator, GenerationContext
from .hosting.client import RepositoryHost, create_hosting_client
from .llm.runner import LLMRunner, resolve_llm_runner
from .logging import scan_logger
from .manifest import parse_manifest
from .models import FileLookup, ProgressEvent, RepoRef, ScanPhase, ScanResult
from .progress import NullProgressSink, ProgressReporter, ProgressSink, emit
from .repo_scanner import RepoLister
from .selector import CandidateSelector
from .summarizer import build_repo_summary, extract_api_routes
from .targets import resolve_enabled_targets

BUILT_IN_LABEL = "Built-in generator"
DOCS_PATHS_KEY = "docsPaths"
PROPOSAL_PROGRESS = 88

HostFactory = Callable[[RepoRef], RepositoryHost]
ProgressArg = Union[ProgressSink, Callable[[ProgressEvent], Any], None]

_AUTO = object()


class Orchestrator:
    """Runs one scan at a time per call; no state is shared between scans."""

    def __init__(
        self,
        config: EngineConfig | None = None,
        *,
        host_factory: HostFactory | None = None,
        llm_runner: Any = _AUTO,
    ) -> None:
        self.config = config if config is not None else load_config()
        self._host_factory = host_factory or self._default_host_factory
        self.llm_runner: Optional[LLMRunner] = (
            resolve_llm_runner(self.config) if llm_runner is _AUTO else llm_runner
        )

    def scan(
        self,
        repo_ref: RepoRef,
        project_config: Any = None,
        constraints: Sequence[str] | None = None,
        progress: ProgressArg = None,
        *,
        cancel: threading.Event | None = None,
    ) -> ScanResult:
        """Scan ``repo_ref`` and return documentation proposals.

        Hosting failures propagate after a ``failed`` progress event; model
        failures only lower the quality of the generated documents.
        """
        sink = self._resolve_sink(progress)
        try:
            result = self._scan(repo_ref, project_config, list(constraints or ()), sink, cancel)
        except Exception as exc:
            scan_logger("orchestrator", repo_ref.repo_id, repo_ref.ref).error("Scan failed: %s", exc)
            emit(sink, ScanPhase.FAILED, 100, str(exc) or type(exc).__name__)
            raise
        return result

    def file_exists(self, repo_ref: RepoRef, path: str) -> FileLookup:
        """Look up a single file at the scanned ref."""
        host = self._host_factory(repo_ref)
        return host.get_file_at_ref(repo_ref.owner, repo_ref.repo, path, repo_ref.ref)

    def _scan(
        self,
        repo_ref: RepoRef,
        project_config: Any,
        constraints: List[str],
        sink: ProgressSink,
        cancel: threading.Event | None,
    ) -> ScanResult:
        limits = self.config.limits
        host = self._host_factory(repo_ref)
        log = scan_logger("orchestrator", repo_ref.repo_id, repo_ref.ref)
        log.info("Scan started")

        files = RepoLister(host).list_files(repo_ref, progress=sink, cancel=cancel)
        repo_summary = build_repo_summary(repo_ref.repo_id, repo_ref.ref, files)
        enabled_targets = resolve_enabled_targets(docs_paths_setting(project_config))
        if not enabled_targets:
            log.warning("No documentation targets are enabled")

        read_set = CandidateSelector(limits.max_file_bytes).select(files, limits.max_files_to_read)
        fetched = ContentFetcher(host).fetch(
            repo_ref,
            read_set,
            limits.max_total_chars,
            progress=sink,
            cancel=cancel,
        )

        manifest = parse_manifest(fetched.contents)
        api_routes = extract_api_routes(read_set, fetched.contents)

        digest = DigestGenerator(self.llm_runner).generate(
            repo_summary,
            manifest,
            api_routes,
            fetched.contents,
            progress=sink,
            cancel=cancel,
        )
        model_label = self.llm_runner.label if digest is not None and self.llm_runner else BUILT_IN_LABEL

        context = GenerationContext(
            repo_summary=repo_summary,
            manifest=manifest,
            api_routes=api_routes,
            file_paths=[item.path for item in files],
            constraints=constraints,
            digest=digest,
        )
        documents = DocumentGenerator(host, self.llm_runner, limits).generate_all(
            repo_ref,
            enabled_targets,
            context,
            progress=sink,
            cancel=cancel,
        )

        emit(sink, ScanPhase.PROPOSAL, PROPOSAL_PROGRESS, "Building proposals")
        proposals = build_proposals(documents)

        metadata: Dict[str, Any] = {
            "repo": repo_ref.repo_id,
            "ref": repo_ref.ref,
            "filesScanned": len(read_set),
            "topLevel": [entry.to_dict() for entry in repo_summary.top_level],
            "docTargets": [target.to_dict() for target in enabled_targets],
            "apiRoutesCount": len(api_routes),
            "models": self.llm_runner.models if model_label != BUILT_IN_LABEL and self.llm_runner else None,
            "modelLabel": model_label,
            "digest": digest.to_dict() if digest is not None else None,
            "targets": [
                {"type": doc.target.type, "outputPath": doc.output_path, "strategy": doc.strategy}
                for doc in documents
            ],
        }

        done_message = "Completed" if proposals else "Completed - No documentation changes detected"
        emit(sink, ScanPhase.DONE, 100, done_message, {"proposals": len(proposals)})
        log.info("Scan produced %d proposal(s) from %d file(s)", len(proposals), len(read_set))
        return ScanResult(
            repo_summary=repo_summary,
            enabled_targets=enabled_targets,
            files_scanned=len(read_set),
            proposals=proposals,
            model_label=model_label,
            generation_metadata=metadata,
        )

    def _resolve_sink(self, progress: ProgressArg) -> ProgressSink:
        if progress is None:
            return NullProgressSink()
        if hasattr(progress, "report"):
            return progress  # type: ignore[return-value]
        return ProgressReporter(progress, min_interval=self.config.progress_interval)

    def _default_host_factory(self, repo_ref: RepoRef) -> RepositoryHost:
        return create_hosting_client(repo_ref.provider, token=repo_ref.token, config=self.config.hosting)


def docs_paths_setting(project_config: Any) -> Any:
    """Extract the raw ``docsPaths`` value from a project settings mapping."""
    if isinstance(project_config, Mapping):
        return project_config.get(DOCS_PATHS_KEY)
    return project_config


def scan(
    repo_ref: RepoRef,
    project_config: Any = None,
    constraints: Sequence[str] | None = None,
    progress: ProgressArg = None,
    *,
    config: EngineConfig | None = None,
    cancel: threading.Event | None = None,
) -> ScanResult:
    """Convenience wrapper building a one-off ``Orchestrator``."""
    return Orchestrator(config).scan(repo_ref, project_config, constraints, progress, cancel=cancel)


def file_exists(repo_ref: RepoRef, path: str, *, config: EngineConfig | None = None) -> FileLookup:
    return Orchestrator(config).file_exists(repo_ref, path)


__all__ = [
    "BUILT_IN_LABEL",
    "Orchestrator",
    "docs_paths_setting",
    "file_exists",
    "scan",
]
