"""Builds the system prompts and JSON payloads sent to the model."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from ..config import DigestLimits
from ..manifest import manifest_scripts
from ..models import ApiRoute, RepoDigest, RepoSummary
from ..paths import to_posix_path
from .constants import (
    DEFAULT_RULES,
    DIGEST_INSTRUCTIONS,
    DIGEST_PRIORITY_PATHS,
    DIGEST_SCHEMA,
    DIGEST_SYSTEM_PROMPT,
    README_RULES,
    README_STYLE_GUIDE,
    WRITER_INTRO,
)


@dataclass(frozen=True)
class FileExcerpt:
    path: str
    excerpt: str

    def to_dict(self) -> Dict[str, str]:
        return {"path": self.path, "excerpt": self.excerpt}


@dataclass(frozen=True)
class PromptRequest:
    """A system prompt plus the JSON-serialisable user payload."""

    system: str
    payload: Dict[str, Any]


def select_digest_excerpts(
    contents: Mapping[str, str],
    limits: DigestLimits,
) -> List[FileExcerpt]:
    """Pick file excerpts for the digest prompt.

    Priority files come first, then the rest in fetch order. Each excerpt is cut
    to the per-file cap and the running total never passes the overall budget.
    At least one file is included whenever any content exists.
    """
    entries: List[Tuple[str, str]] = [(to_posix_path(path), text or "") for path, text in contents.items()]
    by_path = dict(entries)
    ordered: List[Tuple[str, str]] = []
    seen = set()
    for path in DIGEST_PRIORITY_PATHS:
        if path in by_path and path not in seen:
            ordered.append((path, by_path[path]))
            seen.add(path)
    for path, text in entries:
        if path not in seen:
            ordered.append((path, text))
            seen.add(path)

    excerpts: List[FileExcerpt] = []
    used = 0
    for path, text in ordered:
        if used >= limits.max_total_excerpt_chars:
            break
        remaining = limits.max_total_excerpt_chars - used
        excerpt = text[: min(limits.max_excerpt_chars_per_file, remaining)]
        if not excerpt:
            continue
        excerpts.append(FileExcerpt(path=path, excerpt=excerpt))
        used += len(excerpt)

    if not excerpts and ordered:
        path, text = ordered[0]
        excerpts.append(FileExcerpt(path=path, excerpt=text[: limits.max_excerpt_chars_per_file]))
    return excerpts


def build_digest_request(
    repo_summary: RepoSummary,
    manifest: Optional[Mapping[str, Any]],
    api_routes: Sequence[ApiRoute],
    excerpts: Sequence[FileExcerpt],
) -> PromptRequest:
    payload = {
        "instructions": DIGEST_INSTRUCTIONS,
        "schema": DIGEST_SCHEMA,
        "repoSummary": repo_summary.to_dict(),
        "packageScripts": [list(pair) for pair in manifest_scripts(manifest)],
        "apiRoutes": [route.to_dict() for route in api_routes],
        "files": [excerpt.to_dict() for excerpt in excerpts],
    }
    return PromptRequest(system=DIGEST_SYSTEM_PROMPT, payload=payload)


def build_document_request(
    *,
    target_type: str,
    output_path: str,
    readme: bool,
    existing_markdown: str,
    constraints: Sequence[str],
    repo_summary: RepoSummary,
    manifest: Optional[Mapping[str, Any]],
    api_routes: Sequence[ApiRoute],
    digest: RepoDigest,
) -> PromptRequest:
    """Prompt for rewriting one document; README targets get the style guide."""
    system_parts = [WRITER_INTRO, ""]
    if readme:
        system_parts.extend([README_STYLE_GUIDE, ""])
    system_parts.append(README_RULES if readme else DEFAULT_RULES)

    payload = {
        "targetType": target_type or "Documentation",
        "outputPath": output_path,
        "operation": "update" if existing_markdown.strip() else "create",
        "existingMarkdown": existing_markdown,
        "constraints": list(constraints),
        "repoSummary": repo_summary.to_dict(),
        "packageJson": dict(manifest) if manifest else None,
        "apiRoutes": [route.to_dict() for route in api_routes],
        "digest": digest.to_dict(),
    }
    return PromptRequest(system="\n".join(system_parts), payload=payload)


__all__ = [
    "FileExcerpt",
    "PromptRequest",
    "build_digest_request",
    "build_document_request",
    "select_digest_excerpts",
]
