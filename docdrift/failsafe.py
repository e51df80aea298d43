"""Deterministic Markdown used when no model output is available."""

from __future__ import annotations

import re
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from jinja2 import Environment, FileSystemLoader

from .manifest import infer_env_vars, infer_tech_stack, manifest_scripts, uses_any
from .models import ApiRoute, RepoSummary

README_TEMPLATE = "readme.md.j2"
TARGET_TEMPLATE = "target.md.j2"
SCRIPT_LIMIT = 10

_TOPIC_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("api", ("api",)),
    ("architecture", ("architecture",)),
    ("tutorial", ("tutorial",)),
    ("guide", ("user guide", "guide")),
)
_BLANK_RUNS = re.compile(r"\n{3,}")


def build_readme_template(
    repo_summary: RepoSummary,
    manifest: Mapping[str, Any] | None,
    api_routes: Sequence[ApiRoute],
    constraints: Sequence[str],
    file_paths: Sequence[str],
) -> str:
    """Render a full README inferred from the manifest and the file list."""
    manifest = manifest or {}
    lowered_paths = [path.lower() for path in file_paths]
    scripts = manifest_scripts(manifest)
    script_names = {name for name, _ in scripts}
    uses_prisma = uses_any(manifest, "prisma", "@prisma/client")
    has_mock_mode = any("mock-adapter" in path for path in lowered_paths)

    features: List[str] = []
    if uses_any(manifest, "next-auth", "@auth/core"):
        features.append("**Authentication**: NextAuth-powered sign-in flows")
    if uses_prisma:
        features.append("**Database**: Prisma-backed persistence layer")
    if api_routes:
        features.append("**API**: Server routes under `/api/*`")
    if has_mock_mode:
        features.append("**Mock Mode**: Local fixtures for UI development")
    if not features:
        features.append("**Features**: Add project-specific feature highlights")

    run_command = None
    if "dev" in script_names:
        run_command = "npm run dev"
    elif "start" in script_names:
        run_command = "npm start"

    context = {
        "project_name": _project_name(repo_summary, manifest),
        "tagline": _as_text(manifest.get("description")) or "Repository documentation",
        "ref": repo_summary.ref,
        "features": features,
        "tech_stack": infer_tech_stack(manifest),
        "node_requirement": _node_requirement(manifest),
        "package_manager": _package_manager(manifest),
        "run_command": run_command,
        "env_vars": infer_env_vars(manifest) or ["EXAMPLE_VAR"],
        "uses_prisma": uses_prisma,
        "has_mock_mode": has_mock_mode,
        "top_level": repo_summary.top_level,
        "api_routes": list(api_routes),
        "route_groups": _group_routes(api_routes),
        "scripts": scripts[:SCRIPT_LIMIT],
        "has_dockerfile": any(path == "dockerfile" for path in lowered_paths),
        "has_compose": any("docker-compose" in path for path in lowered_paths),
        "has_cron": any(route.api_path.startswith("/api/cron") for route in api_routes),
        "constraints": normalize_constraints(constraints),
    }
    return _render(README_TEMPLATE, context)


def build_target_stub(
    target_type: str,
    repo_summary: RepoSummary,
    manifest: Mapping[str, Any] | None,
    api_routes: Sequence[ApiRoute],
    constraints: Sequence[str],
) -> str:
    """Render a minimal skeleton for a non-README target with no existing file."""
    context = {
        "repo_id": repo_summary.repo_id,
        "target_type": target_type,
        "ref": repo_summary.ref,
        "topics": target_topics(target_type),
        "api_routes": list(api_routes),
        "top_level": repo_summary.top_level,
        "scripts": manifest_scripts(manifest)[:SCRIPT_LIMIT],
        "constraints": normalize_constraints(constraints),
    }
    return _render(TARGET_TEMPLATE, context)


def target_topics(target_type: str) -> List[str]:
    """Skeleton sections implied by keywords in the target type."""
    lowered = (target_type or "").lower()
    return [topic for topic, keywords in _TOPIC_KEYWORDS if any(word in lowered for word in keywords)]


def normalize_constraints(constraints: Sequence[Any] | None) -> List[str]:
    return [text for text in (str(item or "").strip() for item in constraints or ()) if text]


@lru_cache(maxsize=1)
def _environment() -> Environment:
    loader = FileSystemLoader(str(Path(__file__).with_name("templates")))
    return Environment(loader=loader, autoescape=False, trim_blocks=True, lstrip_blocks=True)


def _render(template_name: str, context: Dict[str, Any]) -> str:
    rendered = _environment().get_template(template_name).render(**context)
    return _BLANK_RUNS.sub("\n\n", rendered).strip() + "\n"


def _project_name(repo_summary: RepoSummary, manifest: Mapping[str, Any]) -> str:
    name = _as_text(manifest.get("name"))
    if name:
        return name
    repo_id = repo_summary.repo_id or ""
    _, _, repo = repo_id.partition("/")
    return repo or repo_id or "Project"


def _node_requirement(manifest: Mapping[str, Any]) -> str:
    engines = manifest.get("engines")
    node = engines.get("node") if isinstance(engines, dict) else None
    if node:
        return f"Node.js {node}"
    return "Node.js (see `package.json` engines if specified)"


def _package_manager(manifest: Mapping[str, Any]) -> str:
    declared = _as_text(manifest.get("packageManager"))
    if "pnpm" in declared:
        return "pnpm"
    if "yarn" in declared:
        return "yarn"
    return "npm"


def _group_routes(api_routes: Sequence[ApiRoute]) -> List[Tuple[str, List[ApiRoute]]]:
    grouped: Dict[str, List[ApiRoute]] = {}
    for route in api_routes:
        segments = route.api_path.split("/")
        group = segments[2] if len(segments) > 2 and segments[2] else "other"
        grouped.setdefault(group[:1].upper() + group[1:], []).append(route)
    return list(grouped.items())


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else ""


__all__ = [
    "build_readme_template",
    "build_target_stub",
    "normalize_constraints",
    "target_topics",
]
