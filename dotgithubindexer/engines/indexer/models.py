"""Data models for the indexer runner."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from dotgithubindexer.engines.aggregation.models import RegistryReport, UsageReport
from dotgithubindexer.registry.gc import GCSummary
from dotgithubindexer.registry.keys import CollectionKey


@dataclass
class RunResult:
    """Summary of a single audit run."""

    organization: str
    repositories: int = 0
    files_indexed: int = 0
    indexes_updated: int = 0
    failed_repositories: list[str] = field(default_factory=list)
    skipped_keys: list[CollectionKey] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    gc: GCSummary | None = None
    report: RegistryReport | None = None
    usage: UsageReport | None = None
    reports_written: list[Path] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors and not self.failed_repositories
