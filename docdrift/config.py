"""Configuration loading for docdrift (.docdrift.yml plus environment overrides)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

CONFIG_FILENAME = ".docdrift.yml"

GITHUB_API_BASE = "https://api.github.com"
OPENAI_BASE_URL = "https://api.openai.com/v1"
DEFAULT_READ_MODEL = "gpt-4o"
DEFAULT_WRITE_MODEL = "gpt-5.1"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class ScanLimits:
    """Hard budgets applied while selecting and fetching files."""

    max_files_to_read: int = 40
    max_file_bytes: int = 200_000
    max_total_chars: int = 220_000
    max_existing_chars: int = 80_000


@dataclass
class DigestLimits:
    """Prompt budgets for the repository digest request."""

    max_total_excerpt_chars: int = 90_000
    max_excerpt_chars_per_file: int = 2_500
    max_output_tokens: int = 900

    @property
    def retry_output_tokens(self) -> int:
        return max(400, int(self.max_output_tokens * 0.7))


@dataclass
class LLMConfig:
    """Settings for the optional OpenAI-compatible model endpoint."""

    api_key: str
    base_url: str = OPENAI_BASE_URL
    read_model: str = DEFAULT_READ_MODEL
    write_model: str = DEFAULT_WRITE_MODEL
    digest_temperature: Optional[float] = 0.2
    write_temperature: Optional[float] = 0.35
    request_timeout: Optional[float] = 120.0
    digest: DigestLimits = field(default_factory=DigestLimits)

    @property
    def models(self) -> Dict[str, str]:
        return {"readModel": self.read_model, "writeModel": self.write_model}

    @property
    def label(self) -> str:
        return f"OpenAI (read: {self.read_model}, write: {self.write_model})"


@dataclass
class HostingConfig:
    """Git hosting endpoints; the token travels with each ``RepoRef``."""

    github_api_base: str = GITHUB_API_BASE
    gitea_api_base: Optional[str] = None
    request_timeout: Optional[float] = 30.0


@dataclass
class EngineConfig:
    """Represents the engine-level settings defined in .docdrift.yml."""

    limits: ScanLimits = field(default_factory=ScanLimits)
    llm: Optional[LLMConfig] = None
    hosting: HostingConfig = field(default_factory=HostingConfig)
    progress_interval: float = 0.6


def load_config(
    config_path: Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> EngineConfig:
    """Load configuration from disk and apply environment overrides."""
    env = os.environ if environ is None else environ
    data: Dict[str, Any] = {}
    if config_path is not None:
        config_file = _resolve_config_path(config_path)
        if config_file.exists():
            data = _read_config(config_file)

    limits_data = _as_dict(data.get("limits"))
    limits = ScanLimits(
        max_files_to_read=_as_int(limits_data.get("max_files_to_read")) or ScanLimits.max_files_to_read,
        max_file_bytes=_as_int(limits_data.get("max_file_bytes")) or ScanLimits.max_file_bytes,
        max_total_chars=_as_int(limits_data.get("max_total_chars")) or ScanLimits.max_total_chars,
        max_existing_chars=_as_int(limits_data.get("max_existing_chars")) or ScanLimits.max_existing_chars,
    )

    hosting_data = _as_dict(data.get("hosting"))
    hosting = HostingConfig(
        github_api_base=_as_str(hosting_data.get("github_api_base")) or GITHUB_API_BASE,
        gitea_api_base=normalize_gitea_api_base(
            env.get("GITEA_API_BASE")
            or env.get("GITEA_BASE_URL")
            or _as_str(hosting_data.get("gitea_api_base"))
        ),
        request_timeout=_as_float(hosting_data.get("request_timeout")) or HostingConfig.request_timeout,
    )

    llm = _load_llm_config(_as_dict(data.get("llm")), env)

    progress_interval = _as_float(data.get("progress_interval"))
    return EngineConfig(
        limits=limits,
        llm=llm,
        hosting=hosting,
        progress_interval=progress_interval if progress_interval is not None else 0.6,
    )


def normalize_gitea_api_base(raw: str | None) -> Optional[str]:
    """Return ``<instance>/api/v1`` for an instance or API base URL."""
    base = (raw or "").strip().rstrip("/")
    if not base:
        return None
    if base.lower().endswith("/api/v1"):
        return base
    return f"{base}/api/v1"


def _load_llm_config(llm_data: Dict[str, Any], env: Mapping[str, str]) -> Optional[LLMConfig]:
    api_key = env.get("OPENAI_API_KEY") or _as_str(llm_data.get("api_key"))
    if not api_key:
        return None

    digest_data = _as_dict(llm_data.get("digest"))
    digest = DigestLimits(
        max_total_excerpt_chars=_first_int(
            env.get("OPENAI_DIGEST_MAX_TOTAL_EXCERPT_CHARS"),
            digest_data.get("max_total_excerpt_chars"),
            default=DigestLimits.max_total_excerpt_chars,
        ),
        max_excerpt_chars_per_file=_first_int(
            env.get("OPENAI_DIGEST_MAX_EXCERPT_CHARS_PER_FILE"),
            digest_data.get("max_excerpt_chars_per_file"),
            default=DigestLimits.max_excerpt_chars_per_file,
        ),
        max_output_tokens=_first_int(
            env.get("OPENAI_DIGEST_MAX_OUTPUT_TOKENS"),
            digest_data.get("max_output_tokens"),
            default=DigestLimits.max_output_tokens,
        ),
    )

    return LLMConfig(
        api_key=api_key,
        base_url=(
            env.get("OPENAI_BASE_URL") or _as_str(llm_data.get("base_url")) or OPENAI_BASE_URL
        ).rstrip("/"),
        read_model=env.get("OPENAI_READ_MODEL") or _as_str(llm_data.get("read_model")) or DEFAULT_READ_MODEL,
        write_model=env.get("OPENAI_WRITE_MODEL") or _as_str(llm_data.get("write_model")) or DEFAULT_WRITE_MODEL,
        digest_temperature=_as_float(llm_data.get("digest_temperature"), default=0.2),
        write_temperature=_as_float(llm_data.get("write_temperature"), default=0.35),
        request_timeout=_as_float(llm_data.get("request_timeout"), default=120.0),
        digest=digest,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{path.name} must contain a mapping at the root")
    return loaded


def _first_int(*candidates: Any, default: int) -> int:
    for candidate in candidates:
        value = _as_int(candidate)
        if value is not None and value > 0:
            return value
    return default


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_float(value: Any, default: Optional[float] = None) -> Optional[float]:
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return default
    return default


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "DigestLimits",
    "EngineConfig",
    "HostingConfig",
    "LLMConfig",
    "ScanLimits",
    "load_config",
    "normalize_gitea_api_base",
]
