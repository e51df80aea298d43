"""Lightweight structural summary of a repository."""

from __future__ import annotations

from collections import Counter
from typing import Dict, List, Mapping, Sequence

from .models import ApiRoute, RepoFile, RepoSummary, TopLevelEntry
from .paths import to_posix_path
from .selector import ROUTE_HANDLER_PATTERN

TOP_LEVEL_LIMIT = 12
HTTP_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE")


def build_repo_summary(repo_id: str, ref: str, files: Sequence[RepoFile]) -> RepoSummary:
    """Count files per top-level segment and keep the busiest entries."""
    counts: Counter[str] = Counter()
    for item in files:
        first = to_posix_path(item.path).split("/", 1)[0]
        if first:
            counts[first] += 1
    # Counter preserves first-seen order, and sorted() is stable, so ties stay in discovery order.
    ranked = sorted(counts.items(), key=lambda entry: entry[1], reverse=True)[:TOP_LEVEL_LIMIT]
    return RepoSummary(
        repo_id=repo_id,
        ref=ref,
        total_files=len(files),
        top_level=tuple(TopLevelEntry(name=name, count=count) for name, count in ranked),
    )


def extract_api_routes(
    files: Sequence[RepoFile],
    contents: Mapping[str, str],
) -> List[ApiRoute]:
    """Find route handler files and the HTTP methods they export.

    Paths follow the ``app/api/<segments>/route.<ext>`` convention; dynamic
    ``[param]`` segments become ``:param``. Files declaring no recognised
    method are reported as GET.
    """
    methods_by_path: Dict[str, List[str]] = {}
    for item in files:
        path = to_posix_path(item.path)
        match = ROUTE_HANDLER_PATTERN.match(path)
        if not match:
            continue
        rel = match.group("rel") or ""
        api_path = (f"/api/{rel}" if rel else "/api").replace("[", ":").replace("]", "")
        declared = _declared_methods(contents.get(path, "")) or ["GET"]
        merged = methods_by_path.setdefault(api_path, [])
        for method in declared:
            if method not in merged:
                merged.append(method)

    routes = [
        ApiRoute(
            api_path=api_path,
            methods=tuple(method for method in HTTP_METHODS if method in methods),
        )
        for api_path, methods in methods_by_path.items()
    ]
    return sorted(routes, key=lambda route: route.api_path)


def _declared_methods(content: str) -> List[str]:
    declared = []
    for method in HTTP_METHODS:
        needles = (
            f"export async function {method}",
            f"export function {method}",
            f"export const {method} ",
            f"export const {method}=",
        )
        if any(needle in content for needle in needles):
            declared.append(method)
    return declared


__all__ = ["HTTP_METHODS", "TOP_LEVEL_LIMIT", "build_repo_summary", "extract_api_routes"]
