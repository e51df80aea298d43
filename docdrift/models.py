"""Core data models shared across docdrift components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple


@dataclass(frozen=True)
class RepoRef:
    """Identifies a repository, the ref to scan and the credentials to use."""

    owner: str
    repo: str
    ref: str = "main"
    provider: str = "github"
    token: Optional[str] = field(default=None, repr=False)

    @property
    def repo_id(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True)
class RepoFile:
    """A blob listed from the repository tree."""

    path: str
    size: Optional[int]
    content_handle: Optional[str]


@dataclass(frozen=True)
class CandidateFile(RepoFile):
    """A listed file with the score the selector assigned to it."""

    score: int = 0


@dataclass(frozen=True)
class ApiRoute:
    """An HTTP route discovered from a route handler file."""

    api_path: str
    methods: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {"apiPath": self.api_path, "methods": list(self.methods)}


@dataclass(frozen=True)
class TopLevelEntry:
    name: str
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "count": self.count}


@dataclass(frozen=True)
class RepoSummary:
    """Structural summary derived once per scan from the full file list."""

    repo_id: str
    ref: str
    total_files: int
    top_level: Tuple[TopLevelEntry, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "repo": self.repo_id,
            "ref": self.ref,
            "totalFiles": self.total_files,
            "topLevel": [entry.to_dict() for entry in self.top_level],
        }


@dataclass(frozen=True)
class DocTarget:
    """A configured documentation artifact with candidate output globs."""

    type: str
    paths: Tuple[str, ...]
    enabled: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "paths": list(self.paths), "enabled": self.enabled}


@dataclass
class RepoDigest:
    """Structured repository summary produced by the LLM."""

    repo_purpose: str = ""
    setup: str = ""
    env_vars: List[Any] = field(default_factory=list)
    key_modules: List[Any] = field(default_factory=list)
    api_routes: List[Any] = field(default_factory=list)
    data_models: List[Any] = field(default_factory=list)
    gotchas: List[Any] = field(default_factory=list)
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "RepoDigest":
        """Build a digest from decoded JSON, tolerating missing or oddly typed keys."""
        setup = payload.get("setup")
        if isinstance(setup, list):
            setup = "\n".join(str(step) for step in setup)
        return cls(
            repo_purpose=_as_text(payload.get("repoPurpose")),
            setup=_as_text(setup),
            env_vars=_as_list(payload.get("envVars")),
            key_modules=_as_list(payload.get("keyModules")),
            api_routes=_as_list(payload.get("apiRoutes")),
            data_models=_as_list(payload.get("dataModels")),
            gotchas=_as_list(payload.get("gotchas")),
            raw=dict(payload),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "repoPurpose": self.repo_purpose,
            "setup": self.setup,
            "envVars": list(self.env_vars),
            "keyModules": list(self.key_modules),
            "apiRoutes": list(self.api_routes),
            "dataModels": list(self.data_models),
            "gotchas": list(self.gotchas),
        }


@dataclass(frozen=True)
class FileLookup:
    """Result of looking up a single file at a ref."""

    exists: bool
    content: Optional[str] = None
    sha: Optional[str] = None
    error: Optional[Exception] = field(default=None, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"exists": self.exists, "content": self.content, "sha": self.sha}


@dataclass(frozen=True)
class GeneratedDocument:
    """Generator output for one target, before diffing."""

    target: DocTarget
    output_path: str
    existing: Optional[str]
    content: str
    strategy: str


@dataclass(frozen=True)
class ProposalFile:
    """A file-level create/update suggestion."""

    output_path: str
    operation: str
    before: Optional[str]
    after: str
    diff: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "outputPath": self.output_path,
            "operation": self.operation,
            "before": self.before,
            "after": self.after,
            "diff": self.diff,
        }


@dataclass
class ScanResult:
    """Everything a scan produced; the caller owns persistence."""

    repo_summary: RepoSummary
    enabled_targets: Sequence[DocTarget]
    files_scanned: int
    proposals: List[ProposalFile]
    model_label: str
    generation_metadata: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "repoSummary": self.repo_summary.to_dict(),
            "enabledTargets": [target.to_dict() for target in self.enabled_targets],
            "filesScanned": self.files_scanned,
            "proposals": [proposal.to_dict() for proposal in self.proposals],
            "modelLabel": self.model_label,
            "generationMetadata": self.generation_metadata,
        }


class ScanPhase(str, Enum):
    """Phases reported through the progress protocol."""

    TREE = "tree"
    READ_FILES = "read_files"
    AI_DIGEST = "ai_digest"
    GENERATE_DOCS = "generate_docs"
    PROPOSAL = "proposal"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ScanPhase.DONE, ScanPhase.FAILED)


@dataclass(frozen=True)
class ProgressEvent:
    """Transient progress update for a running scan."""

    phase: ScanPhase
    percent: int
    message: Optional[str] = None
    meta: Dict[str, Any] = field(default_factory=dict, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "phase": self.phase.value,
            "percent": self.percent,
            "message": self.message,
        }
        if self.meta:
            payload["meta"] = dict(self.meta)
        return payload


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _as_list(value: Any) -> List[Any]:
    return list(value) if isinstance(value, list) else []
