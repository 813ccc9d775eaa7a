"""Registry: the single object that owns all persisted state under one root."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import structlog

from dotgithubindexer.exceptions import RegistryRootError
from dotgithubindexer.registry.blobs import BlobStore
from dotgithubindexer.registry.index import IndexStore, upsert
from dotgithubindexer.registry.keys import CollectionKey, CollectionType
from dotgithubindexer.registry.manifest import ManifestStore, RepositoryManifest

log = structlog.get_logger("dotgithubindexer.registry")


class Registry:
    """Content-addressed registry rooted at one directory.

    Every path is derived from :attr:`root`; callers pass the registry
    explicitly instead of sharing path globals.
    """

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)
        self.blobs = BlobStore(self.root)
        self.indexes = IndexStore(self.root)
        self.manifests = ManifestStore(self.root)

    # ── lifecycle ──────────────────────────────────────────────────────────

    def initialize(self, organization: str | None = None) -> RepositoryManifest:
        """Create the root and the manifest if needed; return the manifest.

        Raises :class:`RegistryRootError` if the root is unusable.
        """
        try:
            if self.root.exists() and not self.root.is_dir():
                raise RegistryRootError(f"registry root {self.root} is not a directory")
            created = not self.root.exists()
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise RegistryRootError(f"cannot create registry root {self.root}: {exc}") from exc
        if created:
            log.info("registry.created", root=str(self.root))

        manifest = self.manifests.load()
        dirty = not self.manifests.exists()
        if organization and manifest.organization != organization:
            if manifest.organization:
                log.warning(
                    "registry.organization_changed",
                    previous=manifest.organization,
                    current=organization,
                )
            manifest.organization = organization
            dirty = True
        if dirty:
            self.manifests.save(manifest)
        return manifest

    # ── paths ──────────────────────────────────────────────────────────────

    def key_dir(self, key: CollectionKey) -> Path:
        return self.root / key.relative_path

    # ── blobs + indexes ────────────────────────────────────────────────────

    def put_blob(self, key: CollectionKey, content: bytes) -> str:
        return self.blobs.put(key, content)

    def load_index(self, key: CollectionKey) -> dict[str, str]:
        return self.indexes.load(key)

    def save_index(self, key: CollectionKey, mapping: dict[str, str]) -> None:
        self.indexes.save(key, mapping)

    def record(self, key: CollectionKey, owner: str, digest: str) -> dict[str, str]:
        """Load, upsert and save in one step; return the new mapping."""
        mapping = upsert(self.load_index(key), owner, digest)
        self.save_index(key, mapping)
        return mapping

    def list_keys(self, collection: CollectionType | None = None) -> list[CollectionKey]:
        """Collection keys that have an index file, sorted.

        Directories without an index are not keys; their contents are
        never garbage collected.
        """
        collections = [collection] if collection is not None else list(CollectionType)
        keys: list[CollectionKey] = []
        for coll in collections:
            base = self.root / coll.value
            if not base.is_dir():
                continue
            for parts in _walk_dirs(base, coll.depth):
                try:
                    key = CollectionKey(coll, parts)
                except ValueError:
                    continue
                if self.indexes.exists(key):
                    keys.append(key)
        return sorted(keys)


def _walk_dirs(base: Path, depth: int) -> Iterator[tuple[str, ...]]:
    for entry in sorted(base.iterdir()):
        if not entry.is_dir():
            continue
        if depth == 1:
            yield (entry.name,)
        else:
            for rest in _walk_dirs(entry, depth - 1):
                yield (entry.name, *rest)
