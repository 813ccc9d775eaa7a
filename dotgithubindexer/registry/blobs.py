"""Content blob store: immutable blobs named by their SHA-256 digest."""

from __future__ import annotations

import hashlib
from pathlib import Path

import structlog

from dotgithubindexer.exceptions import BlobWriteError
from dotgithubindexer.registry.fsutil import atomic_write_bytes
from dotgithubindexer.registry.keys import CollectionKey, is_digest

log = structlog.get_logger("dotgithubindexer.registry")


def compute_digest(content: bytes) -> str:
    """Lowercase hex SHA-256 of *content*."""
    return hashlib.sha256(content).hexdigest()


class BlobStore:
    """Blobs live at ``<root>/<collection key>/<digest>``.

    Blobs are insert-if-absent: an existing digest is never rewritten.
    """

    def __init__(self, root: Path) -> None:
        self._root = root

    def path_for(self, key: CollectionKey, digest: str) -> Path:
        return self._root / key.relative_path / digest

    def put(self, key: CollectionKey, content: bytes) -> str:
        """Store *content* under *key* and return its digest.

        Raises :class:`BlobWriteError` if the blob cannot be written.
        """
        digest = compute_digest(content)
        path = self.path_for(key, digest)
        try:
            if path.is_file():
                log.debug("registry.blob_exists", key=str(key), digest=digest)
                return digest
            atomic_write_bytes(path, content)
        except (OSError, ValueError) as exc:
            # ValueError: the OS rejected the path itself (e.g. an embedded NUL).
            raise BlobWriteError(key, digest, str(exc)) from exc
        log.info("registry.blob_stored", key=str(key), digest=digest, size=len(content))
        return digest

    def exists(self, key: CollectionKey, digest: str) -> bool:
        return self.path_for(key, digest).is_file()

    def read(self, key: CollectionKey, digest: str) -> bytes:
        path = self.path_for(key, digest)
        if not path.is_file():
            raise FileNotFoundError(f"blob not found: {key}/{digest}")
        return path.read_bytes()

    def list_digests(self, key: CollectionKey) -> list[str]:
        """Digests physically present under *key*, sorted.

        Only regular files named like a digest count; index files,
        READMEs and leftover temp files are not blobs.
        """
        directory = self._root / key.relative_path
        if not directory.is_dir():
            return []
        return sorted(
            entry.name
            for entry in directory.iterdir()
            if entry.is_file() and is_digest(entry.name)
        )

    def delete(self, key: CollectionKey, digest: str) -> None:
        if not is_digest(digest):
            raise ValueError(f"not a blob digest: {digest!r}")
        self.path_for(key, digest).unlink()
        log.info("registry.blob_deleted", key=str(key), digest=digest)
