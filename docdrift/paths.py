"""Path classification helpers: ignorable paths, binaries and doc-like files."""

from __future__ import annotations

_IGNORED_PREFIXES: tuple[str, ...] = (
    ".git/",
    ".github/",
    ".next/",
    ".vercel/",
    "node_modules/",
    "dist/",
    "build/",
    "coverage/",
    "out/",
    "vendor/",
    ".turbo/",
    ".cache/",
)

_IGNORED_BASENAMES = {
    "package-lock.json",
    "pnpm-lock.yaml",
    "yarn.lock",
    ".DS_Store",
}

_BINARY_EXTENSIONS = {
    ".png",
    ".jpg",
    ".jpeg",
    ".gif",
    ".webp",
    ".ico",
    ".pdf",
    ".zip",
    ".gz",
    ".tar",
    ".tgz",
    ".7z",
    ".exe",
    ".dll",
    ".so",
    ".dylib",
    ".woff",
    ".woff2",
    ".ttf",
    ".eot",
    ".mp3",
    ".mp4",
    ".mov",
    ".avi",
    ".mkv",
}

_DOC_EXTENSIONS = (".md", ".mdx")


def to_posix_path(path: str | None) -> str:
    """Return the path with forward slashes; ``None`` becomes an empty string."""
    return str(path or "").replace("\\", "/")


def basename(path: str) -> str:
    normalized = to_posix_path(path)
    return normalized.rsplit("/", 1)[-1]


def extname(path: str) -> str:
    """Return the lower-cased extension of the basename, dot included."""
    name = basename(path)
    dot = name.rfind(".")
    return name[dot:].lower() if dot >= 0 else ""


def is_ignored_path(path: str) -> bool:
    """True for lockfiles, OS metadata and build/dependency/VCS directories."""
    normalized = to_posix_path(path)
    if not normalized:
        return True
    if basename(normalized) in _IGNORED_BASENAMES:
        return True
    return normalized.startswith(_IGNORED_PREFIXES)


def is_probably_text_file(path: str) -> bool:
    """False only for known binary extensions; extensionless files count as text."""
    ext = extname(path)
    if not ext:
        return True
    return ext not in _BINARY_EXTENSIONS


def is_doc_like(path: str) -> bool:
    return to_posix_path(path).endswith(_DOC_EXTENSIONS)


__all__ = [
    "basename",
    "extname",
    "is_doc_like",
    "is_ignored_path",
    "is_probably_text_file",
    "to_posix_path",
]
