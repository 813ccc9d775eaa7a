"""Repository sources: where observed configuration files come from."""

from dotgithubindexer.engines.source.base import RepositorySource
from dotgithubindexer.engines.source.github import GitHubRepositorySource
from dotgithubindexer.engines.source.github_client import GitHubClient, RateLimitError
from dotgithubindexer.engines.source.local import LocalDirectorySource
from dotgithubindexer.engines.source.models import ObservedFile, Repository

__all__ = [
    "GitHubClient",
    "GitHubRepositorySource",
    "LocalDirectorySource",
    "ObservedFile",
    "RateLimitError",
    "Repository",
    "RepositorySource",
]
