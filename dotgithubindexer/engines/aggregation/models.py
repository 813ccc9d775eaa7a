"""Report models derived from collection indexes and the usage index."""

from __future__ import annotations

from dataclasses import dataclass, field

from dotgithubindexer.registry.keys import CollectionKey, CollectionType


@dataclass(frozen=True)
class Variant:
    """One distinct content version and the owners holding it."""

    digest: str
    owners: tuple[str, ...]

    @property
    def count(self) -> int:
        return len(self.owners)


@dataclass
class IndexSummary:
    key: CollectionKey
    variants: list[Variant]
    unique_digests: int
    total_owners: int

    @property
    def drifted(self) -> bool:
        return self.unique_digests > 1


@dataclass
class RegistryReport:
    indexes: list[IndexSummary] = field(default_factory=list)
    skipped: list[CollectionKey] = field(default_factory=list)

    def for_collection(self, collection: CollectionType) -> list[IndexSummary]:
        return [s for s in self.indexes if s.key.collection is collection]


@dataclass(frozen=True, order=True)
class Occurrence:
    repository: str
    path: str


@dataclass
class VersionUsage:
    version: str
    occurrences: list[Occurrence]

    @property
    def count(self) -> int:
        return len(self.occurrences)


@dataclass
class ActionSummary:
    action: str
    versions: list[VersionUsage]

    @property
    def total(self) -> int:
        return sum(v.count for v in self.versions)


@dataclass
class UsageReport:
    actions: list[ActionSummary] = field(default_factory=list)

    @property
    def total_occurrences(self) -> int:
        return sum(a.total for a in self.actions)
