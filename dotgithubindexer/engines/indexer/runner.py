"""IndexerRunner: drives one audit run from a repository source into the registry."""

from __future__ import annotations

import structlog

from dotgithubindexer.engines.aggregation.summarizer import (
    load_indexes,
    summarize,
    summarize_usage,
)
from dotgithubindexer.engines.classifier import classify
from dotgithubindexer.engines.indexer.models import RunResult
from dotgithubindexer.engines.references.extractor import extract_action_uses
from dotgithubindexer.engines.references.locator import CommentLocator, TextualCommentLocator
from dotgithubindexer.engines.references.models import UsageIndex
from dotgithubindexer.engines.reporting.writer import write_reports
from dotgithubindexer.engines.source.base import RepositorySource
from dotgithubindexer.engines.source.models import ObservedFile, Repository
from dotgithubindexer.exceptions import BlobWriteError, IndexCorruptError, SourceError
from dotgithubindexer.registry.gc import GarbageCollector
from dotgithubindexer.registry.index import upsert
from dotgithubindexer.registry.keys import CollectionKey, CollectionType
from dotgithubindexer.registry.manifest import RepositoryManifest
from dotgithubindexer.registry.store import Registry

log = structlog.get_logger("dotgithubindexer.engine")


def collection_key_for(observed: ObservedFile) -> CollectionKey:
    """Workflows are keyed by file name; dependabot configs by category;
    root files by (file name, category)."""
    if observed.collection is CollectionType.WORKFLOWS:
        return CollectionKey.workflow(observed.name)
    category = classify(observed.content)
    if observed.collection is CollectionType.DEPENDABOT:
        return CollectionKey.dependabot(category)
    return CollectionKey.root_file(observed.name, category)


class IndexerRunner:
    """Sequential single-writer run: one repository is fully processed
    before the next one starts.

    Failures are scoped: a file, a collection key or a repository is
    skipped and recorded in the :class:`RunResult`. Only
    :class:`~dotgithubindexer.exceptions.RegistryRootError` aborts the run.
    """

    def __init__(
        self,
        registry: Registry,
        source: RepositorySource,
        *,
        collect_garbage: bool = True,
        render_reports: bool = True,
        locator: CommentLocator | None = None,
    ) -> None:
        self._registry = registry
        self._source = source
        self._collect_garbage = collect_garbage
        self._render_reports = render_reports
        self._locator = locator or TextualCommentLocator()
        self._indexes: dict[CollectionKey, dict[str, str]] = {}
        self._skipped: set[CollectionKey] = set()

    async def run(self) -> RunResult:
        organization = self._source.organization
        manifest = self._registry.initialize(organization)
        result = RunResult(organization=organization)
        usage = UsageIndex()
        self._indexes.clear()
        self._skipped.clear()

        repositories = await self._source.list_repositories()
        for repository in repositories:
            log.info("indexer.repository_started", repository=repository.name)
            await self._process_repository(repository, manifest, usage, result)
            result.repositories += 1

        result.skipped_keys = sorted(self._skipped)
        self._garbage_collect(result)
        self._report(result, usage)
        log.info(
            "indexer.run_completed",
            organization=organization,
            repositories=result.repositories,
            files=result.files_indexed,
            errors=len(result.errors),
            skipped_keys=len(result.skipped_keys),
        )
        return result

    # ── ingestion ──────────────────────────────────────────────────────────

    async def _process_repository(
        self,
        repository: Repository,
        manifest: RepositoryManifest,
        usage: UsageIndex,
        result: RunResult,
    ) -> None:
        if manifest.add(repository.name):
            self._registry.manifests.save(manifest)
            log.info("indexer.repository_added", repository=repository.name)

        try:
            files = await self._source.fetch_files(repository)
        except SourceError as exc:
            log.error("indexer.fetch_failed", repository=repository.name, error=str(exc))
            result.failed_repositories.append(repository.name)
            return

        if not files:
            log.info("indexer.no_files", repository=repository.name)
        for observed in files:
            self.ingest(observed, usage, result)

    def ingest(self, observed: ObservedFile, usage: UsageIndex, result: RunResult) -> None:
        """Store one observed file; errors are recorded, never raised."""
        where = f"{observed.repository}/{observed.path}"
        try:
            key = collection_key_for(observed)
        except ValueError as exc:
            log.error("indexer.invalid_key", file=where, error=str(exc))
            result.errors.append(f"{where}: {exc}")
            return

        if key in self._skipped:
            log.debug("indexer.key_skipped", key=str(key), file=where)
            return

        try:
            current = self._load_index(key)
        except IndexCorruptError as exc:
            log.error("indexer.index_corrupt", key=str(key), error=exc.reason)
            self._skipped.add(key)
            result.errors.append(str(exc))
            return

        try:
            digest = self._registry.put_blob(key, observed.content)
        except BlobWriteError as exc:
            log.error("indexer.blob_write_failed", key=str(key), file=where, error=exc.reason)
            result.errors.append(str(exc))
            return

        updated = upsert(current, observed.repository, digest)
        if updated != current:
            try:
                self._registry.save_index(key, updated)
            except OSError as exc:
                log.error("indexer.index_write_failed", key=str(key), error=str(exc))
                result.errors.append(f"{key}: cannot write index: {exc}")
                return
            self._indexes[key] = updated
            result.indexes_updated += 1
        result.files_indexed += 1
        log.debug("indexer.file_indexed", key=str(key), file=where, digest=digest)

        if observed.collection is CollectionType.WORKFLOWS:
            text = observed.content.decode("utf-8", errors="replace")
            usage.extend(
                extract_action_uses(
                    text, observed.repository, observed.path, locator=self._locator
                )
            )

    def _load_index(self, key: CollectionKey) -> dict[str, str]:
        if key not in self._indexes:
            self._indexes[key] = self._registry.load_index(key)
        return self._indexes[key]

    # ── post-processing ────────────────────────────────────────────────────

    def _garbage_collect(self, result: RunResult) -> None:
        if not self._collect_garbage:
            return
        try:
            result.gc = GarbageCollector(self._registry).collect_all()
        except Exception as exc:
            log.exception("indexer.gc_failed")
            result.errors.append(f"garbage collection failed: {exc}")

    def _report(self, result: RunResult, usage: UsageIndex) -> None:
        try:
            indexes, skipped = load_indexes(self._registry)
            result.report = summarize(indexes, skipped)
            result.usage = summarize_usage(usage)
            if self._render_reports:
                result.reports_written = write_reports(
                    self._registry, result.report, result.usage, result.organization
                )
        except Exception as exc:
            log.exception("indexer.report_failed")
            result.errors.append(f"reporting failed: {exc}")
