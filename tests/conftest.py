"""Shared fixtures for dotgithubindexer tests (filesystem only, no network)."""

import errno
from contextlib import contextmanager
from pathlib import Path
from unittest.mock import patch

import pytest

from dotgithubindexer.registry.store import Registry


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture
def registry(tmp_path):
    reg = Registry(tmp_path / "db")
    reg.initialize("acme")
    return reg


@pytest.fixture
def checkouts(tmp_path):
    """Directory of fake repository checkouts for LocalDirectorySource."""
    return tmp_path / "checkouts"


@pytest.fixture
def make_repo(checkouts):
    """Create ``checkouts/<name>`` holding ``{relative path: text}`` files."""

    def _make(name, files):
        repo = checkouts / name
        repo.mkdir(parents=True, exist_ok=True)
        for rel, text in files.items():
            path = repo / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        return repo

    return _make


@pytest.fixture
def unreadable():
    """Context manager making one path fail with EACCES on stat and read."""

    @contextmanager
    def _deny(target):
        real_stat = Path.stat
        real_read_text = Path.read_text

        def _check(path):
            if path == target:
                raise PermissionError(errno.EACCES, "Permission denied", str(path))

        def stat(self, *args, **kwargs):
            _check(self)
            return real_stat(self, *args, **kwargs)

        def read_text(self, *args, **kwargs):
            _check(self)
            return real_read_text(self, *args, **kwargs)

        with patch.object(Path, "stat", stat), patch.object(Path, "read_text", read_text):
            yield

    return _deny
