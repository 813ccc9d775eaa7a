"""Interface every repository source must satisfy."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from dotgithubindexer.engines.source.models import ObservedFile, Repository


@runtime_checkable
class RepositorySource(Protocol):
    """Yields repositories and the raw bytes of their tracked files.

    ``fetch_files`` raises :class:`~dotgithubindexer.exceptions.SourceError`
    when a repository cannot be read; absence of files is an empty list.
    """

    organization: str

    async def list_repositories(self) -> list[Repository]: ...

    async def fetch_files(self, repository: Repository) -> list[ObservedFile]: ...
