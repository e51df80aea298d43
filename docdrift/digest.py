"""Optional LLM digest of the repository used to ground document generation."""

from __future__ import annotations

import threading
from typing import Any, Mapping, Optional, Sequence

from .config import DigestLimits
from .llm.runner import LLMError, LLMRunner
from .logging import get_logger
from .models import ApiRoute, RepoDigest, RepoSummary, ScanPhase
from .progress import NullProgressSink, ProgressSink, emit, raise_if_cancelled
from .prompting.builder import build_digest_request, select_digest_excerpts

DIGEST_PROGRESS = 60


class DigestGenerator:
    """Produces a ``RepoDigest`` or ``None``; failures never abort a scan."""

    def __init__(self, runner: Optional[LLMRunner], limits: DigestLimits | None = None) -> None:
        self.runner = runner
        self.limits = limits or (runner.config.digest if runner is not None else DigestLimits())
        self.logger = get_logger("digest")

    def generate(
        self,
        repo_summary: RepoSummary,
        manifest: Optional[Mapping[str, Any]],
        api_routes: Sequence[ApiRoute],
        contents: Mapping[str, str],
        *,
        progress: ProgressSink | None = None,
        cancel: threading.Event | None = None,
    ) -> Optional[RepoDigest]:
        runner = self.runner
        if runner is None:
            return None

        sink = progress or NullProgressSink()
        excerpts = select_digest_excerpts(contents, self.limits)
        emit(
            sink,
            ScanPhase.AI_DIGEST,
            DIGEST_PROGRESS,
            "Building repository digest",
            {"files": len(excerpts)},
        )
        request = build_digest_request(repo_summary, manifest, api_routes, excerpts)

        raise_if_cancelled(cancel)
        try:
            payload = runner.complete_structured(
                request.system, request.payload, max_tokens=self.limits.max_output_tokens
            )
        except LLMError as exc:
            if not exc.is_request_too_large:
                self.logger.warning("Digest request failed: %s", exc)
                return None
            retry_tokens = self.limits.retry_output_tokens
            self.logger.info("Digest request too large; retrying once with max_tokens=%d", retry_tokens)
            raise_if_cancelled(cancel)
            try:
                payload = runner.complete_structured(request.system, request.payload, max_tokens=retry_tokens)
            except LLMError as retry_exc:
                self.logger.warning("Digest retry failed: %s", retry_exc)
                return None

        if payload is None:
            self.logger.warning("Digest response was not a JSON object; continuing without digest")
            return None
        return RepoDigest.from_payload(payload)


__all__ = ["DIGEST_PROGRESS", "DigestGenerator"]
