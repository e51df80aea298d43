"""Minimal glob matching for forward-slash repository paths.

Supported tokens:

* ``*``   any run of characters inside one path segment
* ``**/`` zero or more whole directories
* ``**``  anything, separators included
* ``?``   exactly one character inside a segment

Everything else matches literally. A pattern that fails to compile never
matches instead of raising.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterable, List, Optional, Pattern, Sequence

from .paths import to_posix_path


def glob_to_regex(pattern: str) -> str:
    """Translate a glob into an anchored regular expression string."""
    pat = to_posix_path(pattern).strip()
    parts: List[str] = []
    index = 0
    while index < len(pat):
        char = pat[index]
        if char == "*":
            if pat.startswith("**/", index):
                parts.append("(?:.*/)?")
                index += 3
            elif pat.startswith("**", index):
                parts.append(".*")
                index += 2
            else:
                parts.append("[^/]*")
                index += 1
            continue
        if char == "?":
            parts.append("[^/]")
            index += 1
            continue
        parts.append(re.escape(char))
        index += 1
    return "^" + "".join(parts) + "$"


@lru_cache(maxsize=256)
def compile_glob(pattern: str) -> Optional[Pattern[str]]:
    """Return the compiled matcher for ``pattern`` or ``None`` when it cannot compile."""
    try:
        return re.compile(glob_to_regex(pattern))
    except re.error:
        return None


def glob_matches(pattern: str, path: str) -> bool:
    matcher = compile_glob(pattern)
    if matcher is None:
        return False
    return matcher.match(to_posix_path(path)) is not None


def any_glob_matches(patterns: Sequence[str] | None, path: str) -> bool:
    """True when at least one of ``patterns`` matches ``path``."""
    if not patterns:
        return False
    return any(glob_matches(pattern, path) for pattern in patterns if pattern)


def match_paths_by_globs(paths: Iterable[str], globs: Sequence[str] | None) -> List[str]:
    """Filter ``paths`` down to those matched by any of ``globs``."""
    patterns = [pattern for pattern in (globs or ()) if pattern]
    return [path for path in paths if any_glob_matches(patterns, path)]


def infer_output_path_from_glob(
    pattern: str | None,
    fallback_dir: str,
    fallback_file: str = "README.md",
) -> str:
    """Derive a concrete file path from a possibly globbed pattern.

    A glob-free ``.md`` pattern is used verbatim. Otherwise the text before the
    first glob token is treated as a directory and ``fallback_file`` is appended;
    an empty prefix falls back to ``fallback_dir/fallback_file``.
    """
    pat = to_posix_path(pattern).strip()
    if not pat:
        return f"{fallback_dir}/{fallback_file}"

    cut_points = [position for position in (pat.find("*"), pat.find("?")) if position >= 0]
    if not cut_points:
        if pat.lower().endswith(".md"):
            return pat
        directory = pat[:-1] if pat.endswith("/") else pat
        return f"{directory}/{fallback_file}"

    prefix = pat[: min(cut_points)]
    directory = prefix[:-1] if prefix.endswith("/") else prefix
    if not directory:
        return f"{fallback_dir}/{fallback_file}"
    return f"{directory}/{fallback_file}"


__all__ = [
    "any_glob_matches",
    "compile_glob",
    "glob_matches",
    "glob_to_regex",
    "infer_output_path_from_glob",
    "match_paths_by_globs",
]
