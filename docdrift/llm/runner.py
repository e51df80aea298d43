"""Adapter around an OpenAI-compatible chat completions endpoint."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional
from http.client import HTTPException
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from ..config import EngineConfig, LLMConfig

_TOO_LARGE_MARKERS = ("request too large", "tokens per min")


class LLMError(RuntimeError):
    """Raised when a completion request fails or returns nothing usable."""

    def __init__(self, message: str, *, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status

    @property
    def is_request_too_large(self) -> bool:
        """True for rate limits caused by the size of the request itself."""
        lowered = str(self).lower()
        return self.status == 429 and any(marker in lowered for marker in _TOO_LARGE_MARKERS)


@dataclass
class LLMRequest:
    """Represents a single chat completion request."""

    system: Optional[str]
    prompt: str
    model: str
    temperature: Optional[float]
    max_tokens: Optional[int]
    json_mode: bool
    base_url: str
    api_key: Optional[str] = field(default=None, repr=False)
    request_timeout: Optional[float] = None


class LLMRunner:
    """Executes prompts against the configured model endpoint."""

    def __init__(
        self,
        config: LLMConfig,
        *,
        runner: Callable[[LLMRequest], str] | None = None,
    ) -> None:
        self.config = config
        self._runner = runner or self._http_runner

    @property
    def label(self) -> str:
        return self.config.label

    @property
    def models(self) -> Dict[str, str]:
        return self.config.models

    def complete_structured(
        self,
        system: str,
        payload: Any,
        *,
        max_tokens: Optional[int] = None,
    ) -> Optional[Dict[str, Any]]:
        """Request a JSON object using the read model.

        Transport failures raise ``LLMError``; a reply that is not a JSON object
        returns ``None``.
        """
        text = self._run(
            system,
            payload,
            model=self.config.read_model,
            temperature=self.config.digest_temperature,
            max_tokens=max_tokens,
            json_mode=True,
        )
        try:
            decoded = json.loads(text)
        except json.JSONDecodeError:
            return None
        return decoded if isinstance(decoded, dict) else None

    def complete_text(self, system: str, payload: Any) -> Optional[str]:
        """Request free-form Markdown using the write model."""
        text = self._run(
            system,
            payload,
            model=self.config.write_model,
            temperature=self.config.write_temperature,
            max_tokens=None,
            json_mode=False,
        )
        return text or None

    def _run(
        self,
        system: str,
        payload: Any,
        *,
        model: str,
        temperature: Optional[float],
        max_tokens: Optional[int],
        json_mode: bool,
    ) -> str:
        prompt = payload if isinstance(payload, str) else json.dumps(payload, indent=2)
        request = LLMRequest(
            system=system,
            prompt=prompt,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            json_mode=json_mode,
            base_url=self.config.base_url,
            api_key=self.config.api_key,
            request_timeout=self.config.request_timeout,
        )
        return (self._runner(request) or "").strip()

    @staticmethod
    def _http_runner(request: LLMRequest) -> str:
        endpoint = f"{request.base_url.rstrip('/')}/chat/completions"
        body: Dict[str, object] = {
            "model": request.model,
            "messages": LLMRunner._build_messages(request.system, request.prompt),
        }
        if request.temperature is not None:
            body["temperature"] = request.temperature
        if request.max_tokens is not None:
            body["max_tokens"] = request.max_tokens
        if request.json_mode:
            body["response_format"] = {"type": "json_object"}

        data = json.dumps(body).encode("utf-8")
        headers = {"Content-Type": "application/json"}
        if request.api_key:
            headers["Authorization"] = f"Bearer {request.api_key}"

        http_request = Request(endpoint, data=data, headers=headers, method="POST")
        timeout = request.request_timeout or 120.0

        try:
            with urlopen(http_request, timeout=timeout) as response:  # type: ignore[arg-type]
                raw = response.read()
        except HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="ignore") if hasattr(exc, "read") else ""
            message = _error_detail(detail) or str(exc.reason)
            raise LLMError(f"LLM request failed with status {exc.code}: {message}", status=exc.code) from exc
        except URLError as exc:
            raise LLMError(f"LLM request failed: {exc.reason}") from exc
        except (OSError, HTTPException) as exc:
            raise LLMError(f"LLM request failed: {exc or type(exc).__name__}") from exc

        try:
            response_payload = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise LLMError("LLM endpoint returned invalid JSON") from exc

        return LLMRunner._extract_content(response_payload)

    @staticmethod
    def _build_messages(system: str | None, prompt: str) -> list[dict[str, str]]:
        messages: list[dict[str, str]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        return messages

    @staticmethod
    def _extract_content(payload: Any) -> str:
        if not isinstance(payload, dict):
            return ""
        choices = payload.get("choices")
        if not isinstance(choices, list) or not choices:
            return ""
        first = choices[0]
        if not isinstance(first, dict):
            return ""
        message = first.get("message")
        if isinstance(message, dict):
            content = message.get("content")
            if isinstance(content, str):
                return content
        text = first.get("text")
        if isinstance(text, str):
            return text
        return ""


def resolve_llm_runner(config: EngineConfig) -> Optional[LLMRunner]:
    """Return a runner when an API key is configured, otherwise ``None``."""
    if config.llm is None or not config.llm.api_key:
        return None
    return LLMRunner(config.llm)


def _error_detail(detail: str) -> str:
    if not detail.strip():
        return ""
    try:
        payload = json.loads(detail)
    except json.JSONDecodeError:
        return detail.strip()
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
        if isinstance(payload.get("message"), str):
            return payload["message"]
    return detail.strip()


__all__ = ["LLMError", "LLMRequest", "LLMRunner", "resolve_llm_runner"]
