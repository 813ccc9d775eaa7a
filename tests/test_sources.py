"""Tests for repository sources and the GitHub REST client (network mocked)."""

from __future__ import annotations

import base64
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from dotgithubindexer.engines.source.github import GitHubRepositorySource
from dotgithubindexer.engines.source.github_client import GitHubClient, RateLimitError
from dotgithubindexer.engines.source.local import LocalDirectorySource
from dotgithubindexer.engines.source.models import Repository, is_root_dotfile, is_workflow_file
from dotgithubindexer.exceptions import SourceError
from dotgithubindexer.registry.keys import CollectionType

# ── Helpers ───────────────────────────────────────────────────────────────


class TestFileFilters:
    def test_workflow_suffixes(self):
        assert is_workflow_file("ci.yml")
        assert is_workflow_file("ci.yaml")
        assert not is_workflow_file("README.md")

    def test_root_dotfile(self):
        assert is_root_dotfile(".gitignore")
        assert not is_root_dotfile("setup.py")


# ── LocalDirectorySource ──────────────────────────────────────────────────


class TestLocalDirectorySource:
    @pytest.mark.anyio
    async def test_lists_sub_directories(self, checkouts, make_repo):
        make_repo("web", {})
        make_repo("api", {})
        make_repo(".hidden", {})
        (checkouts / "notes.txt").write_text("not a repo")

        repos = await LocalDirectorySource(checkouts, "acme").list_repositories()

        assert [r.name for r in repos] == ["api", "web"]

    @pytest.mark.anyio
    async def test_fetch_files(self, checkouts, make_repo):
        make_repo(
            "web",
            {
                ".github/workflows/ci.yml": "jobs: {}\n",
                ".github/workflows/notes.md": "ignored",
                ".github/dependabot.yml": "version: 2\n",
                ".gitignore": "*.pyc\n",
                ".empty": "",
                "setup.py": "ignored",
            },
        )
        source = LocalDirectorySource(checkouts, "acme")

        files = await source.fetch_files(Repository("web"))

        assert [(f.collection, f.name, f.path) for f in files] == [
            (CollectionType.WORKFLOWS, "ci.yml", ".github/workflows/ci.yml"),
            (CollectionType.DEPENDABOT, "dependabot.yml", ".github/dependabot.yml"),
            (CollectionType.FILES, ".gitignore", ".gitignore"),
        ]
        assert files[2].content == b"*.pyc\n"

    @pytest.mark.anyio
    async def test_dependabot_yaml_suffix(self, checkouts, make_repo):
        make_repo("web", {".github/dependabot.yaml": "version: 2\n"})
        files = await LocalDirectorySource(checkouts, "acme").fetch_files(Repository("web"))
        assert [f.name for f in files] == ["dependabot.yaml"]

    @pytest.mark.anyio
    async def test_missing_repository(self, checkouts, make_repo):
        make_repo("web", {})
        with pytest.raises(SourceError):
            await LocalDirectorySource(checkouts, "acme").fetch_files(Repository("gone"))

    @pytest.mark.anyio
    async def test_missing_root(self, tmp_path):
        with pytest.raises(SourceError):
            await LocalDirectorySource(tmp_path / "nope", "acme").list_repositories()


# ── GitHubClient ──────────────────────────────────────────────────────────


def _response(status_code=200, json_data=None, headers=None):
    resp = MagicMock(spec=httpx.Response)
    resp.status_code = status_code
    resp.headers = headers or {}
    resp.json.return_value = json_data
    resp.raise_for_status = MagicMock()
    resp.request = MagicMock()
    return resp


def _client():
    client = GitHubClient.__new__(GitHubClient)
    client._client = AsyncMock()
    return client


class TestGitHubClient:
    def test_parse_next_link(self):
        header = (
            '<https://api.github.com/orgs/acme/repos?page=2>; rel="next", '
            '<https://api.github.com/orgs/acme/repos?page=5>; rel="last"'
        )
        url = "https://api.github.com/orgs/acme/repos?page=2"
        assert GitHubClient._parse_next_link(header) == url

    def test_parse_next_link_empty(self):
        assert GitHubClient._parse_next_link("") is None

    def test_auth_header_from_env(self):
        with patch.dict("os.environ", {"GITHUB_TOKEN": "env-token"}):
            client = GitHubClient()
        assert client._client.headers["Authorization"] == "Bearer env-token"

    def test_rate_limit_wait_retry_after(self):
        resp = _response(headers={"Retry-After": "7"})
        assert GitHubClient._get_rate_limit_wait(resp) == 7

    def test_rate_limit_wait_default(self):
        assert GitHubClient._get_rate_limit_wait(_response()) == 60

    @pytest.mark.anyio
    async def test_paginates(self):
        client = _client()
        page1 = _response(
            json_data=[{"name": "a"}],
            headers={"Link": '<https://api.github.com/orgs/acme/repos?page=2>; rel="next"'},
        )
        page2 = _response(json_data=[{"name": "b"}])
        client._client.get = AsyncMock(side_effect=[page1, page2])

        items = [item async for item in client.get_paginated("/orgs/acme/repos")]

        assert items == [{"name": "a"}, {"name": "b"}]
        first_call, second_call = client._client.get.call_args_list
        assert first_call.kwargs["params"] == {"per_page": 100}
        assert second_call.kwargs["params"] is None

    @pytest.mark.anyio
    async def test_retry_on_server_error(self):
        client = _client()
        client._client.get = AsyncMock(side_effect=[_response(502), _response(200)])

        with patch("asyncio.sleep", new_callable=AsyncMock):
            result = await client._request_with_retry("/test")

        assert result.status_code == 200
        assert client._client.get.call_count == 2

    @pytest.mark.anyio
    async def test_retry_exhausted(self):
        client = _client()
        client._client.get = AsyncMock(return_value=_response(503))

        with patch("asyncio.sleep", new_callable=AsyncMock):
            with pytest.raises(httpx.HTTPStatusError):
                await client._request_with_retry("/test")
        assert client._client.get.call_count == 3

    @pytest.mark.anyio
    async def test_rate_limited_then_exhausted(self):
        client = _client()
        limited = _response(403, headers={"X-RateLimit-Remaining": "0", "Retry-After": "1"})
        client._client.get = AsyncMock(return_value=limited)

        with patch("asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            with pytest.raises(RateLimitError):
                await client._request_with_retry("/test")
        mock_sleep.assert_any_call(1)

    @pytest.mark.anyio
    async def test_get_optional_404(self):
        client = _client()
        not_found = _response(404)
        not_found.raise_for_status = MagicMock(
            side_effect=httpx.HTTPStatusError("404", request=MagicMock(), response=not_found)
        )
        client._client.get = AsyncMock(return_value=not_found)

        assert await client.get_optional("/repos/acme/web/contents/.github") is None

    @pytest.mark.anyio
    async def test_get_file_content_decodes(self):
        client = _client()
        encoded = base64.b64encode(b"version: 2\n").decode()
        payload = {"type": "file", "encoding": "base64", "content": encoded}
        client._client.get = AsyncMock(return_value=_response(json_data=payload))

        content = await client.get_file_content("acme", "web", ".github/dependabot.yml", "main")

        assert content == b"version: 2\n"

    @pytest.mark.anyio
    async def test_list_directory_non_list(self):
        client = _client()
        client._client.get = AsyncMock(return_value=_response(json_data={"type": "file"}))
        assert await client.list_directory("acme", "web", ".github", "main") == []


# ── GitHubRepositorySource ────────────────────────────────────────────────


def _entry(name, path=None):
    return {"type": "file", "name": name, "path": path or name}


class _FakeClient:
    """Stands in for GitHubClient with canned listings and contents."""

    def __init__(self, repos, listings=None, contents=None):
        self.repos = repos
        self.listings = listings or {}
        self.contents = contents or {}

    async def get_paginated(self, path, params=None):
        for repo in self.repos:
            yield repo

    async def list_directory(self, owner, repo, path, ref):
        return self.listings.get((repo, path), [])

    async def get_file_content(self, owner, repo, path, ref):
        return self.contents.get((repo, path))


class TestGitHubRepositorySource:
    @pytest.mark.anyio
    async def test_visibility_filters(self):
        client = _FakeClient(
            [
                {"name": "pub", "visibility": "public"},
                {"name": "priv", "visibility": "private"},
                {"name": "old", "visibility": "public", "archived": True},
                {"name": "legacy", "private": True},
            ]
        )
        source = GitHubRepositorySource(client, "acme")
        assert [r.name for r in await source.list_repositories()] == ["pub"]

        source = GitHubRepositorySource(
            client, "acme", include_public=False, include_private=True, include_archived=True
        )
        assert [r.name for r in await source.list_repositories()] == ["priv", "legacy"]

    @pytest.mark.anyio
    async def test_fetch_files(self):
        client = _FakeClient(
            [],
            listings={
                ("web", ".github/workflows"): [
                    _entry("release.yml", ".github/workflows/release.yml"),
                    _entry("ci.yml", ".github/workflows/ci.yml"),
                    _entry("README.md", ".github/workflows/README.md"),
                ],
                ("web", ".github"): [_entry("dependabot.yml", ".github/dependabot.yml")],
                ("web", ""): [
                    _entry(".gitignore"),
                    _entry(".editorconfig"),
                    {"type": "dir", "name": ".github", "path": ".github"},
                    _entry("setup.py"),
                ],
            },
            contents={
                ("web", ".github/workflows/ci.yml"): b"jobs: {}\n",
                ("web", ".github/workflows/release.yml"): b"jobs: {}\n",
                ("web", ".github/dependabot.yml"): b"version: 2\n",
                ("web", ".gitignore"): b"*.pyc\n",
                ("web", ".editorconfig"): b"",
            },
        )
        source = GitHubRepositorySource(client, "acme")

        files = await source.fetch_files(Repository("web"))

        assert [f.path for f in files] == [
            ".github/workflows/ci.yml",
            ".github/workflows/release.yml",
            ".github/dependabot.yml",
            ".gitignore",
        ]

    @pytest.mark.anyio
    async def test_http_error_wrapped(self):
        client = _FakeClient([])
        client.list_directory = AsyncMock(side_effect=httpx.ConnectError("boom"))
        source = GitHubRepositorySource(client, "acme")

        with pytest.raises(SourceError, match="acme/web"):
            await source.fetch_files(Repository("web"))
