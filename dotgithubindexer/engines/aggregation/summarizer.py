"""Aggregation engine: reverse mappings and usage summaries.

Every ordering here is total, so an unchanged registry always produces
identical reports.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

import structlog

from dotgithubindexer.engines.aggregation.models import (
    ActionSummary,
    IndexSummary,
    Occurrence,
    RegistryReport,
    UsageReport,
    Variant,
    VersionUsage,
)
from dotgithubindexer.engines.references.extractor import extract_action_uses
from dotgithubindexer.engines.references.models import UsageIndex
from dotgithubindexer.exceptions import IndexCorruptError
from dotgithubindexer.registry.keys import CollectionKey, CollectionType
from dotgithubindexer.registry.store import Registry

log = structlog.get_logger("dotgithubindexer.engine")


def reverse_index(mapping: Mapping[str, str]) -> dict[str, list[str]]:
    """``owner -> digest`` into ``digest -> sorted owners``, digests ascending."""
    grouped: dict[str, list[str]] = {}
    for owner, digest in mapping.items():
        grouped.setdefault(digest, []).append(owner)
    return {digest: sorted(grouped[digest]) for digest in sorted(grouped)}


def summarize_index(key: CollectionKey, mapping: Mapping[str, str]) -> IndexSummary:
    """Most widely shared variant first; ties broken by digest."""
    variants = [
        Variant(digest=digest, owners=tuple(owners))
        for digest, owners in reverse_index(mapping).items()
    ]
    variants.sort(key=lambda v: (-v.count, v.digest))
    return IndexSummary(
        key=key,
        variants=variants,
        unique_digests=len(variants),
        total_owners=len(mapping),
    )


def summarize(
    indexes: Mapping[CollectionKey, Mapping[str, str]],
    skipped: Iterable[CollectionKey] = (),
) -> RegistryReport:
    return RegistryReport(
        indexes=[summarize_index(key, indexes[key]) for key in sorted(indexes)],
        skipped=sorted(set(skipped)),
    )


def load_indexes(
    registry: Registry,
) -> tuple[dict[CollectionKey, dict[str, str]], list[CollectionKey]]:
    """Read every index in *registry*; corrupt ones are returned as skipped."""
    indexes: dict[CollectionKey, dict[str, str]] = {}
    skipped: list[CollectionKey] = []
    for key in registry.list_keys():
        try:
            indexes[key] = registry.load_index(key)
        except IndexCorruptError as exc:
            log.error("aggregation.index_corrupt", key=str(key), error=exc.reason)
            skipped.append(key)
    return indexes, skipped


def summarize_registry(registry: Registry) -> RegistryReport:
    indexes, skipped = load_indexes(registry)
    return summarize(indexes, skipped)


def summarize_usage(usage: UsageIndex) -> UsageReport:
    """Actions ascending, versions ascending (unpinned ``""`` first),
    occurrences by ``(repository, path)``."""
    actions: list[ActionSummary] = []
    for action in sorted(usage.entries):
        versions = usage.entries[action]
        actions.append(
            ActionSummary(
                action=action,
                versions=[
                    VersionUsage(
                        version=version,
                        occurrences=[
                            Occurrence(repo, path) for repo, path in sorted(versions[version])
                        ],
                    )
                    for version in sorted(versions)
                ],
            )
        )
    return UsageReport(actions=actions)


def usage_from_registry(registry: Registry) -> UsageIndex:
    """Rebuild the usage index from stored workflow blobs.

    Used by offline reporting, where no ingestion run has populated a
    transient usage index.
    """
    usage = UsageIndex()
    for key in registry.list_keys(CollectionType.WORKFLOWS):
        try:
            mapping = registry.load_index(key)
        except IndexCorruptError as exc:
            log.error("aggregation.index_corrupt", key=str(key), error=exc.reason)
            continue
        path = f".github/workflows/{key.parts[0]}"
        for owner in sorted(mapping):
            try:
                content = registry.blobs.read(key, mapping[owner])
            except OSError as exc:
                log.warning("aggregation.blob_missing", key=str(key), owner=owner, error=str(exc))
                continue
            text = content.decode("utf-8", errors="replace")
            usage.extend(extract_action_uses(text, owner, path))
    return usage
