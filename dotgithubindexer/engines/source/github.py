"""Repository source backed by the GitHub REST API."""

from __future__ import annotations

import httpx
import structlog

from dotgithubindexer.engines.source.github_client import GitHubClient, RateLimitError
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


class GitHubRepositorySource:
    """Lists an organization's repositories and reads their tracked files
    from the default branch."""

    def __init__(
        self,
        client: GitHubClient,
        organization: str,
        *,
        include_public: bool = True,
        include_private: bool = False,
        include_archived: bool = False,
    ) -> None:
        self._client = client
        self.organization = organization
        self._include_public = include_public
        self._include_private = include_private
        self._include_archived = include_archived

    def _wanted(self, repo: Repository) -> bool:
        if repo.archived and not self._include_archived:
            return False
        if repo.visibility == "public":
            return self._include_public
        # "private" and "internal" are both non-public.
        return self._include_private

    async def list_repositories(self) -> list[Repository]:
        repos: list[Repository] = []
        async for item in self._client.get_paginated(
            f"/orgs/{self.organization}/repos", {"type": "all"}
        ):
            if not isinstance(item, dict) or not item.get("name"):
                continue
            visibility = item.get("visibility") or ("private" if item.get("private") else "public")
            repo = Repository(
                name=item["name"],
                default_branch=item.get("default_branch") or "main",
                visibility=visibility,
                archived=bool(item.get("archived")),
            )
            if self._wanted(repo):
                repos.append(repo)
            else:
                log.debug(
                    "source.repository_filtered", repository=repo.name, visibility=visibility
                )
        log.info("source.repositories_listed", organization=self.organization, count=len(repos))
        return repos

    async def fetch_files(self, repository: Repository) -> list[ObservedFile]:
        try:
            return await self._fetch_files(repository)
        except (httpx.HTTPError, RateLimitError, ValueError) as exc:
            full_name = f"{self.organization}/{repository.name}"
            raise SourceError(f"cannot read {full_name}: {exc}") from exc

    async def _fetch_files(self, repository: Repository) -> list[ObservedFile]:
        owner, name, ref = self.organization, repository.name, repository.default_branch
        wanted: list[tuple[CollectionType, dict]] = []

        workflows = await self._client.list_directory(owner, name, WORKFLOWS_DIR, ref)
        for entry in _files_sorted(workflows):
            if is_workflow_file(entry["name"]):
                wanted.append((CollectionType.WORKFLOWS, entry))

        github_files = await self._client.list_directory(owner, name, ".github", ref)
        github_dir = {e["name"]: e for e in _files_sorted(github_files)}
        for candidate in DEPENDABOT_NAMES:
            if candidate in github_dir:
                wanted.append((CollectionType.DEPENDABOT, github_dir[candidate]))
                break

        for entry in _files_sorted(await self._client.list_directory(owner, name, "", ref)):
            if is_root_dotfile(entry["name"]):
                wanted.append((CollectionType.FILES, entry))

        files: list[ObservedFile] = []
        for collection, entry in wanted:
            observed = await self._read(repository, collection, entry)
            if observed is not None:
                files.append(observed)
        return files

    async def _read(
        self, repository: Repository, collection: CollectionType, entry: dict
    ) -> ObservedFile | None:
        path = entry.get("path") or entry["name"]
        content = await self._client.get_file_content(
            self.organization, repository.name, path, repository.default_branch
        )
        if not content:
            log.info("source.empty_file", repository=repository.name, path=path)
            return None
        return ObservedFile(
            repository=repository.name,
            collection=collection,
            name=entry["name"],
            path=path,
            content=content,
        )


def _files_sorted(entries: list[dict]) -> list[dict]:
    """Plain-file entries of a contents listing, by name."""
    files = [e for e in entries if e.get("type") == "file" and e.get("name")]
    return sorted(files, key=lambda e: e["name"])
