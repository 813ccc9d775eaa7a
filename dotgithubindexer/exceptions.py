"""Custom exceptions for dotgithubindexer."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from dotgithubindexer.registry.keys import CollectionKey


class IndexerError(Exception):
    """Base exception for all indexer errors."""


class RegistryRootError(IndexerError):
    """Raised when the registry root cannot be created or accessed.

    This is the only error that aborts a whole run.
    """


class BlobWriteError(IndexerError):
    """Raised when a single blob cannot be written."""

    def __init__(self, key: CollectionKey, digest: str, reason: str):
        self.key = key
        self.digest = digest
        self.reason = reason
        super().__init__(f"cannot store blob {digest} under '{key}': {reason}")


class IndexCorruptError(IndexerError):
    """Raised when a collection index cannot be read or parsed."""

    def __init__(self, key: CollectionKey, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"index for '{key}' is unreadable: {reason}")


class SourceError(IndexerError):
    """Raised when a repository source cannot deliver a repository's files."""
