"""Facts inferred from a parsed ``package.json`` manifest."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple

from .logging import get_logger

_LOGGER = get_logger("manifest")

MANIFEST_PATH = "package.json"

# (label, dependency names that imply it)
_TECH_STACK_RULES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("Next.js", ("next",)),
    ("React", ("react",)),
    ("TypeScript", ("typescript",)),
    ("Tailwind CSS", ("tailwindcss",)),
    ("TanStack Query", ("@tanstack/react-query", "react-query")),
    ("react-hook-form", ("react-hook-form",)),
    ("zod", ("zod",)),
    ("Prisma", ("prisma", "@prisma/client")),
    ("NextAuth", ("next-auth", "@auth/core")),
    ("OpenAI SDK", ("openai",)),
)

_ENV_VAR_RULES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("DATABASE_URL", ("prisma", "@prisma/client")),
    ("AUTH_SECRET", ("next-auth", "@auth/core")),
    ("OPENAI_API_KEY", ("openai",)),
    ("GITHUB_TOKEN", ("@octokit/rest", "@octokit/core")),
)


def parse_manifest(contents: Mapping[str, str]) -> Optional[Dict[str, Any]]:
    """Decode ``package.json`` from fetched contents; anything unparseable is ``None``."""
    raw = contents.get(MANIFEST_PATH)
    if not raw:
        return None
    try:
        decoded = json.loads(raw)
    except json.JSONDecodeError:
        _LOGGER.debug("package.json could not be parsed (possibly truncated)")
        return None
    return decoded if isinstance(decoded, dict) else None


def dependency_set(manifest: Mapping[str, Any] | None) -> Set[str]:
    if not manifest:
        return set()
    names: Set[str] = set()
    for key in ("dependencies", "devDependencies"):
        section = manifest.get(key)
        if isinstance(section, dict):
            names.update(str(name).lower() for name in section)
    return names


def infer_tech_stack(manifest: Mapping[str, Any] | None) -> List[str]:
    deps = dependency_set(manifest)
    return [label for label, names in _TECH_STACK_RULES if deps.intersection(names)]


def infer_env_vars(manifest: Mapping[str, Any] | None) -> List[str]:
    deps = dependency_set(manifest)
    return [name for name, packages in _ENV_VAR_RULES if deps.intersection(packages)]


def manifest_scripts(manifest: Mapping[str, Any] | None) -> List[Tuple[str, str]]:
    """Return ``(name, command)`` pairs in declaration order."""
    if not manifest:
        return []
    scripts = manifest.get("scripts")
    if not isinstance(scripts, dict):
        return []
    return [(str(name), str(command)) for name, command in scripts.items()]


def uses_any(manifest: Mapping[str, Any] | None, *packages: str) -> bool:
    return bool(dependency_set(manifest).intersection(packages))


__all__ = [
    "MANIFEST_PATH",
    "dependency_set",
    "infer_env_vars",
    "infer_tech_stack",
    "manifest_scripts",
    "parse_manifest",
    "uses_any",
]
