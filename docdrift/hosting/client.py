"""REST clients for Git hosting providers (GitHub, Gitea)."""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass, field
from http.client import HTTPException
from typing import Any, Callable, Dict, List, Optional, Protocol
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from ..config import HostingConfig
from ..logging import get_logger
from ..models import FileLookup, RepoFile
from ..paths import to_posix_path

_LOGGER = get_logger("hosting")


class HostingError(RuntimeError):
    """Raised when the hosting API rejects a request or cannot be reached."""

    def __init__(self, message: str, *, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status

    @property
    def is_not_found(self) -> bool:
        return self.status == 404 or "not found" in str(self).lower()


@dataclass
class HostingRequest:
    """Represents a single GET against the hosting API."""

    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    timeout: Optional[float] = None
    provider: str = "GitHub"


class RepositoryHost(Protocol):
    """The narrow interface the scan engine consumes."""

    def list_tree(self, owner: str, repo: str, ref: str) -> List[RepoFile]:
        ...

    def get_blob(self, owner: str, repo: str, handle: str) -> bytes:
        ...

    def get_file_at_ref(self, owner: str, repo: str, path: str, ref: str) -> FileLookup:
        ...


class HostingClient:
    """Shared tree/blob/contents implementation over a JSON REST API."""

    PROVIDER = "GitHub"
    TREE_RECURSIVE_PARAM = "recursive=1"

    def __init__(
        self,
        api_base: str,
        *,
        token: str | None = None,
        request_timeout: Optional[float] = 30.0,
        runner: Callable[[HostingRequest], Any] | None = None,
    ) -> None:
        self.api_base = api_base.rstrip("/")
        self.token = token
        self.request_timeout = request_timeout
        self._runner = runner or self._http_runner

    def list_tree(self, owner: str, repo: str, ref: str) -> List[RepoFile]:
        """Return every blob in the recursive tree at ``ref``."""
        endpoint = f"/repos/{owner}/{repo}/git/trees/{quote(ref, safe='')}?{self.TREE_RECURSIVE_PARAM}"
        data = self.request(endpoint)
        return _blobs_from_tree(data)

    def get_blob(self, owner: str, repo: str, handle: str) -> bytes:
        """Return the decoded bytes of a blob; non-base64 payloads decode to empty."""
        data = self.request(f"/repos/{owner}/{repo}/git/blobs/{handle}")
        if not isinstance(data, dict) or not data.get("content"):
            return b""
        if (data.get("encoding") or "base64") != "base64":
            return b""
        return _decode_base64(str(data["content"]))

    def get_file_at_ref(self, owner: str, repo: str, path: str, ref: str) -> FileLookup:
        """Look up a file through the contents endpoint; missing files are not errors."""
        normalized = to_posix_path(path).lstrip("/")
        encoded = "/".join(quote(segment, safe="") for segment in normalized.split("/"))
        endpoint = f"/repos/{owner}/{repo}/contents/{encoded}?ref={quote(ref, safe='')}"
        try:
            data = self.request(endpoint)
        except HostingError as exc:
            if exc.is_not_found:
                return FileLookup(exists=False)
            _LOGGER.warning("Failed to look up %s at %s: %s", normalized, ref, exc)
            return FileLookup(exists=False, error=exc)
        if not isinstance(data, dict) or not data.get("content"):
            return FileLookup(exists=False)
        content = _decode_base64(str(data["content"])).decode("utf-8", errors="replace")
        return FileLookup(exists=True, content=content, sha=data.get("sha"))

    def request(self, endpoint: str) -> Any:
        request = HostingRequest(
            url=f"{self.api_base}{endpoint}",
            headers=self._headers(),
            timeout=self.request_timeout,
            provider=self.PROVIDER,
        )
        _LOGGER.debug("GET %s", request.url)
        return self._runner(request)

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    @staticmethod
    def _http_runner(request: HostingRequest) -> Any:
        http_request = Request(request.url, headers=request.headers, method="GET")
        timeout = request.timeout or 30.0
        try:
            with urlopen(http_request, timeout=timeout) as response:  # type: ignore[arg-type]
                raw = response.read()
        except HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="ignore") if hasattr(exc, "read") else ""
            raise HostingError(
                _error_message(detail) or f"{request.provider} API error: {exc.code}",
                status=exc.code,
            ) from exc
        except URLError as exc:
            raise HostingError(f"{request.provider} API request failed: {exc.reason}") from exc
        except (OSError, HTTPException) as exc:
            raise HostingError(f"{request.provider} API request failed: {exc or type(exc).__name__}") from exc

        try:
            return json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise HostingError(f"{request.provider} API returned invalid JSON") from exc


class GitHubClient(HostingClient):
    PROVIDER = "GitHub"

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers


class GiteaClient(HostingClient):
    PROVIDER = "Gitea"
    TREE_RECURSIVE_PARAM = "recursive=true"

    def list_tree(self, owner: str, repo: str, ref: str) -> List[RepoFile]:
        """Gitea pages large trees; keep requesting until ``truncated`` clears."""
        files: List[RepoFile] = []
        page = 1
        while True:
            endpoint = (
                f"/repos/{owner}/{repo}/git/trees/{quote(ref, safe='')}"
                f"?{self.TREE_RECURSIVE_PARAM}&page={page}"
            )
            data = self.request(endpoint)
            files.extend(_blobs_from_tree(data))
            if not (isinstance(data, dict) and data.get("truncated")):
                return files
            page += 1

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"token {self.token}"
        return headers


def create_hosting_client(
    provider: str | None,
    *,
    token: str | None = None,
    config: HostingConfig | None = None,
    runner: Callable[[HostingRequest], Any] | None = None,
) -> HostingClient:
    """Return the client for ``provider`` ("github" or "gitea")."""
    settings = config or HostingConfig()
    name = (provider or "github").lower()
    if name == "github":
        return GitHubClient(
            settings.github_api_base,
            token=token,
            request_timeout=settings.request_timeout,
            runner=runner,
        )
    if name == "gitea":
        if not settings.gitea_api_base:
            raise ValueError(
                "Gitea is not configured. Set GITEA_BASE_URL (e.g. https://gitea.example.com) "
                "or GITEA_API_BASE (e.g. https://gitea.example.com/api/v1)."
            )
        return GiteaClient(
            settings.gitea_api_base,
            token=token,
            request_timeout=settings.request_timeout,
            runner=runner,
        )
    raise ValueError(f"Unsupported git provider: {provider}")


def _blobs_from_tree(data: Any) -> List[RepoFile]:
    tree = data.get("tree") if isinstance(data, dict) else None
    if not isinstance(tree, list):
        return []
    files: List[RepoFile] = []
    for item in tree:
        if not isinstance(item, dict) or item.get("type") != "blob" or not item.get("path"):
            continue
        size = item.get("size")
        files.append(
            RepoFile(
                path=to_posix_path(item["path"]),
                size=size if isinstance(size, int) and not isinstance(size, bool) else None,
                content_handle=item.get("sha"),
            )
        )
    return files


def _decode_base64(content: str) -> bytes:
    try:
        return base64.b64decode(content.replace("\n", ""))
    except (binascii.Error, ValueError):
        return b""


def _error_message(detail: str) -> str:
    if not detail.strip():
        return ""
    try:
        payload = json.loads(detail)
    except json.JSONDecodeError:
        return ""
    if isinstance(payload, dict) and isinstance(payload.get("message"), str):
        return payload["message"]
    return ""


__all__ = [
    "GitHubClient",
    "GiteaClient",
    "HostingClient",
    "HostingError",
    "HostingRequest",
    "RepositoryHost",
    "create_hosting_client",
]
