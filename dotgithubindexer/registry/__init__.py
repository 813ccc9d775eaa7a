"""Content-addressable registry: blobs, collection indexes, manifest, GC."""

from dotgithubindexer.registry.blobs import BlobStore, compute_digest
from dotgithubindexer.registry.gc import GarbageCollector, GCResult, GCSummary
from dotgithubindexer.registry.index import IndexStore, serialize_index, upsert
from dotgithubindexer.registry.keys import CollectionKey, CollectionType
from dotgithubindexer.registry.manifest import ManifestStore, RepositoryManifest
from dotgithubindexer.registry.store import Registry

__all__ = [
    "BlobStore",
    "CollectionKey",
    "CollectionType",
    "GCResult",
    "GCSummary",
    "GarbageCollector",
    "IndexStore",
    "ManifestStore",
    "Registry",
    "RepositoryManifest",
    "compute_digest",
    "serialize_index",
    "upsert",
]
