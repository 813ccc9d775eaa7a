"""dotgithubindexer: content-addressed audit of GitHub configuration files."""

__version__ = "0.1.0"

from dotgithubindexer.exceptions import (
    BlobWriteError,
    IndexCorruptError,
    IndexerError,
    RegistryRootError,
    SourceError,
)
from dotgithubindexer.registry.keys import CollectionKey, CollectionType
from dotgithubindexer.registry.store import Registry

__all__ = [
    "BlobWriteError",
    "CollectionKey",
    "CollectionType",
    "IndexCorruptError",
    "IndexerError",
    "Registry",
    "RegistryRootError",
    "SourceError",
]
