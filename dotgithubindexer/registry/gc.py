"""Garbage collection of blobs no longer referenced by their collection index."""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog

from dotgithubindexer.exceptions import IndexCorruptError
from dotgithubindexer.registry.keys import CollectionKey
from dotgithubindexer.registry.store import Registry

log = structlog.get_logger("dotgithubindexer.gc")


@dataclass
class GCResult:
    """Outcome of collecting one key."""

    key: CollectionKey
    referenced: int = 0
    deleted: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    skipped: bool = False
    error: str | None = None


@dataclass
class GCSummary:
    results: list[GCResult] = field(default_factory=list)

    @property
    def deleted_count(self) -> int:
        return sum(len(r.deleted) for r in self.results)

    @property
    def failed_count(self) -> int:
        return sum(len(r.failed) for r in self.results)

    @property
    def skipped_keys(self) -> list[CollectionKey]:
        return [r.key for r in self.results if r.skipped]


class GarbageCollector:
    """Deletes blobs whose digest no owner in the key's index points at."""

    def __init__(self, registry: Registry, *, dry_run: bool = False) -> None:
        self._registry = registry
        self._dry_run = dry_run

    def collect(self, key: CollectionKey) -> GCResult:
        """Reconcile the blobs stored under *key* against its index.

        A key without an index is left alone: a missing index means
        "unknown", not "nothing referenced".
        """
        result = GCResult(key=key)
        if not self._registry.indexes.exists(key):
            log.info("gc.no_index", key=str(key))
            result.skipped = True
            return result

        try:
            mapping = self._registry.load_index(key)
        except IndexCorruptError as exc:
            log.error("gc.index_corrupt", key=str(key), error=exc.reason)
            result.skipped = True
            result.error = exc.reason
            return result

        in_use = set(mapping.values())
        result.referenced = len(in_use)

        for digest in self._registry.blobs.list_digests(key):
            if digest in in_use:
                continue
            if self._dry_run:
                log.info("gc.would_delete", key=str(key), digest=digest)
                result.deleted.append(digest)
                continue
            try:
                self._registry.blobs.delete(key, digest)
            except OSError as exc:
                log.warning("gc.delete_failed", key=str(key), digest=digest, error=str(exc))
                result.failed.append(digest)
                continue
            result.deleted.append(digest)
        return result

    def collect_all(self) -> GCSummary:
        summary = GCSummary()
        for key in self._registry.list_keys():
            summary.results.append(self.collect(key))
        log.info(
            "gc.completed",
            keys=len(summary.results),
            deleted=summary.deleted_count,
            failed=summary.failed_count,
            dry_run=self._dry_run,
        )
        return summary
