"""LLM runner adapters."""

from .runner import LLMError, LLMRequest, LLMRunner, resolve_llm_runner

__all__ = ["LLMError", "LLMRequest", "LLMRunner", "resolve_llm_runner"]
