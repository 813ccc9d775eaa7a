"""Repository source reading checked-out repositories from a directory."""

from __future__ import annotations

from pathlib import Path

import structlog

from dotgithubindexer.engines.source.models import (
    DEPENDABOT_NAMES,
    WORKFLOWS_DIR,
    ObservedFile,
    Repository,
    is_root_dotfile,
    is_workflow_file,
)
from dotgithubindexer.exceptions import SourceError
from dotgithubindexer.registry.keys import CollectionType

log = structlog.get_logger("dotgithubindexer.source")


class LocalDirectorySource:
    """Every sub-directory of *path* is one repository, named after it."""

    def __init__(self, path: Path, organization: str) -> None:
        self._path = path
        self.organization = organization

    async def list_repositories(self) -> list[Repository]:
        if not self._path.is_dir():
            raise SourceError(f"{self._path} is not a directory")
        repos = [
            Repository(name=entry.name)
            for entry in sorted(self._path.iterdir())
            if entry.is_dir() and not entry.name.startswith(".")
        ]
        log.info("source.repositories_listed", organization=self.organization, count=len(repos))
        return repos

    async def fetch_files(self, repository: Repository) -> list[ObservedFile]:
        repo_path = self._path / repository.name
        if not repo_path.is_dir():
            raise SourceError(f"repository directory {repo_path} is missing")

        candidates: list[tuple[CollectionType, Path]] = []
        workflows_dir = repo_path / WORKFLOWS_DIR
        if workflows_dir.is_dir():
            for entry in sorted(workflows_dir.iterdir()):
                if entry.is_file() and is_workflow_file(entry.name):
                    candidates.append((CollectionType.WORKFLOWS, entry))

        for name in DEPENDABOT_NAMES:
            dependabot = repo_path / ".github" / name
            if dependabot.is_file():
                candidates.append((CollectionType.DEPENDABOT, dependabot))
                break

        for entry in sorted(repo_path.iterdir()):
            if entry.is_file() and is_root_dotfile(entry.name):
                candidates.append((CollectionType.FILES, entry))

        files: list[ObservedFile] = []
        for collection, file_path in candidates:
            rel = file_path.relative_to(repo_path).as_posix()
            try:
                content = file_path.read_bytes()
            except OSError as exc:
                raise SourceError(f"cannot read {repository.name}/{rel}: {exc}") from exc
            if not content:
                log.info("source.empty_file", repository=repository.name, path=rel)
                continue
            files.append(
                ObservedFile(
                    repository=repository.name,
                    collection=collection,
                    name=file_path.name,
                    path=rel,
                    content=content,
                )
            )
        return files
