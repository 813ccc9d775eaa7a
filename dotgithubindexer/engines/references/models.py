"""Data models for action reference extraction."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field


@dataclass(frozen=True, order=True)
class ActionUse:
    """One ``uses:`` reference found in a workflow file."""

    action: str  # reference name, e.g. "actions/checkout"
    version: str  # version token plus optional "# comment"; "" if unpinned
    repository: str  # owner of the workflow
    path: str  # workflow location inside the repository


@dataclass
class UsageIndex:
    """Organization-wide ``action -> version -> {(repository, path)}``.

    Rebuilt from scratch on every run; never persisted.
    """

    entries: dict[str, dict[str, set[tuple[str, str]]]] = field(default_factory=dict)

    def add(self, use: ActionUse) -> None:
        versions = self.entries.setdefault(use.action, {})
        versions.setdefault(use.version, set()).add((use.repository, use.path))

    def extend(self, uses: Iterable[ActionUse]) -> None:
        for use in uses:
            self.add(use)

    def __len__(self) -> int:
        return len(self.entries)

    def __bool__(self) -> bool:
        return bool(self.entries)
