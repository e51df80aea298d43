"""Prompt assembly for digest and document requests."""

from .builder import (
    FileExcerpt,
    PromptRequest,
    build_digest_request,
    build_document_request,
    select_digest_excerpts,
)

__all__ = [
    "FileExcerpt",
    "PromptRequest",
    "build_digest_request",
    "build_document_request",
    "select_digest_excerpts",
]
