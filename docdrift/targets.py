"""Normalization of caller-supplied documentation target settings."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, List, Mapping, Sequence, Tuple

from .logging import get_logger
from .models import DocTarget
from .paths import to_posix_path

_LOGGER = get_logger("targets")

DEFAULT_TARGETS: Tuple[DocTarget, ...] = (
    DocTarget(type="README", paths=("README.md",), enabled=True),
)

# Fallback output directories keyed by a substring of the lower-cased target type.
# Order matters: "user guide" must be checked before the generic "guide".
_FALLBACK_DIRS: Tuple[Tuple[str, str], ...] = (
    ("api", "docs/api"),
    ("architecture", "docs/architecture"),
    ("tutorial", "docs/tutorials"),
    ("user guide", "docs/guides"),
    ("guide", "docs/guides"),
)


@dataclass(frozen=True)
class DocTargetsInput:
    """Tagged result of parsing the raw ``docsPaths`` setting.

    ``kind`` is one of ``"absent"``, ``"string"`` or ``"array"``.
    """

    kind: str
    targets: Tuple[DocTarget, ...]

    @property
    def configured(self) -> bool:
        return self.kind != "absent"


def parse_doc_targets(raw: Any) -> DocTargetsInput:
    """Classify and normalize the external target setting."""
    if raw is None:
        return DocTargetsInput(kind="absent", targets=())
    if isinstance(raw, str):
        if not raw.strip():
            return DocTargetsInput(kind="absent", targets=())
        try:
            decoded = json.loads(raw)
        except json.JSONDecodeError:
            _LOGGER.warning("docsPaths is not valid JSON; treating as no targets")
            return DocTargetsInput(kind="string", targets=())
        entries = decoded if isinstance(decoded, list) else []
        return DocTargetsInput(kind="string", targets=_normalize_entries(entries))
    if isinstance(raw, (list, tuple)):
        if not raw:
            return DocTargetsInput(kind="absent", targets=())
        return DocTargetsInput(kind="array", targets=_normalize_entries(raw))
    _LOGGER.warning("Unsupported docsPaths type %s; treating as absent", type(raw).__name__)
    return DocTargetsInput(kind="absent", targets=())


def resolve_enabled_targets(raw: Any) -> List[DocTarget]:
    """Return the targets a scan should process.

    Unconfigured settings fall back to the README default; configured settings
    yield only their enabled entries, which may be an empty list.
    """
    parsed = parse_doc_targets(raw)
    if not parsed.configured:
        return list(DEFAULT_TARGETS)
    return [target for target in parsed.targets if target.enabled]


def fallback_dir_for(target_type: str) -> str:
    lowered = (target_type or "").lower()
    for needle, directory in _FALLBACK_DIRS:
        if needle in lowered:
            return directory
    return "docs"


def is_readme_target(target: DocTarget) -> bool:
    """True when the type names a README or the first configured path is one.

    The inferred output path is not consulted: it ends in ``README.md`` for
    every globbed target.
    """
    configured = target.paths[0] if target.paths else ""
    return "readme" in (target.type or "").lower() or configured.lower().endswith("readme.md")


def _normalize_entries(entries: Sequence[Any]) -> Tuple[DocTarget, ...]:
    targets: List[DocTarget] = []
    for entry in entries:
        if not isinstance(entry, Mapping):
            continue
        targets.append(
            DocTarget(
                type=str(entry.get("type") or "Other"),
                paths=_normalize_paths(entry.get("paths")),
                enabled=entry.get("enabled") is not False,
            )
        )
    return tuple(targets)


def _normalize_paths(value: Any) -> Tuple[str, ...]:
    if isinstance(value, (list, tuple)):
        return tuple(to_posix_path(item) for item in value if item)
    normalized = to_posix_path(value) if isinstance(value, str) else ""
    return (normalized,) if normalized else ()


__all__ = [
    "DEFAULT_TARGETS",
    "DocTargetsInput",
    "fallback_dir_for",
    "is_readme_target",
    "parse_doc_targets",
    "resolve_enabled_targets",
]
