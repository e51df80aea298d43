"""Git hosting collaborators."""

from .client import (
    GitHubClient,
    GiteaClient,
    HostingClient,
    HostingError,
    HostingRequest,
    RepositoryHost,
    create_hosting_client,
)

__all__ = [
    "GitHubClient",
    "GiteaClient",
    "HostingClient",
    "HostingError",
    "HostingRequest",
    "RepositoryHost",
    "create_hosting_client",
]
