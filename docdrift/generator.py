"""Per-target Markdown generation with a content-preserving fallback policy."""

from __future__ import annotations

import re
import threading
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Sequence

from .config import ScanLimits
from .failsafe import build_readme_template, build_target_stub, normalize_constraints
from .globs import infer_output_path_from_glob
from .hosting.client import RepositoryHost
from .llm.runner import LLMError, LLMRunner
from .logging import get_logger
from .models import ApiRoute, DocTarget, GeneratedDocument, RepoDigest, RepoRef, RepoSummary, ScanPhase
from .progress import NullProgressSink, ProgressSink, emit, interpolate, raise_if_cancelled
from .prompting.builder import build_document_request
from .targets import fallback_dir_for, is_readme_target

GENERATE_PROGRESS_START = 65
GENERATE_PROGRESS_END = 85

STRATEGY_LLM = "llm"
STRATEGY_TEMPLATE = "template"
STRATEGY_EXISTING = "existing"

_FENCED = re.compile(r"^```[\w-]*\n(?P<body>.*)\n```$", re.DOTALL)


@dataclass
class GenerationContext:
    """Scan-wide facts every target is generated from."""

    repo_summary: RepoSummary
    manifest: Optional[Mapping[str, Any]] = None
    api_routes: Sequence[ApiRoute] = ()
    file_paths: Sequence[str] = ()
    constraints: Sequence[str] = field(default_factory=list)
    digest: Optional[RepoDigest] = None


def resolve_output_path(target: DocTarget) -> str:
    """Concrete file path for a target, derived from its first usable glob."""
    pattern = next((path for path in target.paths if path and path.strip()), None)
    return infer_output_path_from_glob(pattern, fallback_dir_for(target.type))


class DocumentGenerator:
    """Generates one document per enabled target, sequentially.

    With a digest and a model available the existing file is rewritten by the
    model. Otherwise README targets are rebuilt from the template, and other
    targets keep their existing content or, when absent, get a skeleton.
    """

    def __init__(
        self,
        host: RepositoryHost,
        runner: Optional[LLMRunner] = None,
        limits: ScanLimits | None = None,
    ) -> None:
        self.host = host
        self.runner = runner
        self.limits = limits or ScanLimits()
        self.logger = get_logger("generator")

    def generate_all(
        self,
        repo_ref: RepoRef,
        targets: Sequence[DocTarget],
        context: GenerationContext,
        *,
        progress: ProgressSink | None = None,
        cancel: threading.Event | None = None,
    ) -> List[GeneratedDocument]:
        sink = progress or NullProgressSink()
        total = len(targets)
        documents: List[GeneratedDocument] = []
        for index, target in enumerate(targets):
            emit(
                sink,
                ScanPhase.GENERATE_DOCS,
                interpolate(GENERATE_PROGRESS_START, GENERATE_PROGRESS_END, index, total),
                f"Generating {target.type or 'documentation'}",
                {"index": index + 1, "total": total, "targetType": target.type or "Documentation"},
            )
            documents.append(self.generate(repo_ref, target, context, cancel=cancel))
        return documents

    def generate(
        self,
        repo_ref: RepoRef,
        target: DocTarget,
        context: GenerationContext,
        *,
        cancel: threading.Event | None = None,
    ) -> GeneratedDocument:
        output_path = resolve_output_path(target)
        raise_if_cancelled(cancel)
        existing = self._lookup_existing(repo_ref, output_path)
        readme = is_readme_target(target)

        if context.digest is not None and self.runner is not None:
            raise_if_cancelled(cancel)
            rewritten = self._rewrite(self.runner, context.digest, target, output_path, readme, existing, context)
            if rewritten is not None:
                return GeneratedDocument(target, output_path, existing, rewritten, STRATEGY_LLM)

        if readme:
            content = build_readme_template(
                context.repo_summary,
                context.manifest,
                context.api_routes,
                context.constraints,
                context.file_paths,
            )
            return GeneratedDocument(target, output_path, existing, content, STRATEGY_TEMPLATE)
        if existing and existing.strip():
            return GeneratedDocument(target, output_path, existing, existing, STRATEGY_EXISTING)
        content = build_target_stub(
            target.type,
            context.repo_summary,
            context.manifest,
            context.api_routes,
            context.constraints,
        )
        return GeneratedDocument(target, output_path, existing, content, STRATEGY_TEMPLATE)

    def _lookup_existing(self, repo_ref: RepoRef, output_path: str) -> Optional[str]:
        try:
            lookup = self.host.get_file_at_ref(repo_ref.owner, repo_ref.repo, output_path, repo_ref.ref)
        except Exception as exc:
            self.logger.warning("Could not read existing %s; treating it as missing: %s", output_path, exc)
            return None
        return lookup.content if lookup.exists else None

    def _rewrite(
        self,
        runner: LLMRunner,
        digest: RepoDigest,
        target: DocTarget,
        output_path: str,
        readme: bool,
        existing: Optional[str],
        context: GenerationContext,
    ) -> Optional[str]:
        request = build_document_request(
            target_type=target.type,
            output_path=output_path,
            readme=readme,
            existing_markdown=(existing or "")[: self.limits.max_existing_chars],
            constraints=normalize_constraints(context.constraints),
            repo_summary=context.repo_summary,
            manifest=context.manifest,
            api_routes=context.api_routes,
            digest=digest,
        )
        try:
            text = runner.complete_text(request.system, request.payload)
        except LLMError as exc:
            self.logger.warning("Model rewrite failed for %s; using fallback: %s", output_path, exc)
            return None
        if not text or not text.strip():
            self.logger.info("Model returned no content for %s; using fallback", output_path)
            return None
        return clean_model_markdown(text, existing)


def clean_model_markdown(text: str, existing: Optional[str]) -> str:
    """Unwrap a fenced reply and keep the existing file when nothing changed."""
    body = text.strip()
    fenced = _FENCED.match(body)
    if fenced:
        body = fenced.group("body").strip()
    if existing is not None and body == existing.strip():
        return existing
    return body + "\n"


__all__ = [
    "DocumentGenerator",
    "GenerationContext",
    "STRATEGY_EXISTING",
    "STRATEGY_LLM",
    "STRATEGY_TEMPLATE",
    "clean_model_markdown",
    "resolve_output_path",
]
