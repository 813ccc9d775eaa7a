"""Collection types and keys, and how they map onto registry paths."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import PurePosixPath

DIGEST_RE = re.compile(r"^[0-9a-f]{64}$")
_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")


class CollectionType(str, Enum):
    """Top-level grouping of tracked files; also the first path segment."""

    WORKFLOWS = "workflows"
    DEPENDABOT = "dependabot"
    FILES = "files"

    @property
    def depth(self) -> int:
        """Number of path segments below the collection directory."""
        return 2 if self is CollectionType.FILES else 1


def safe_segment(value: str) -> str:
    """Make *value* usable as one directory name.

    Separators are replaced; names that would escape or alias their
    parent, or that carry control characters, are rejected.
    """
    segment = value.strip().replace("/", "_").replace("\\", "_")
    if segment in ("", ".", "..") or _CONTROL_RE.search(segment):
        raise ValueError(f"invalid collection key segment: {value!r}")
    return segment


@dataclass(frozen=True, order=True)
class CollectionKey:
    """Identity of one collection index.

    * workflows:  ``(file name,)``
    * dependabot: ``(category,)``
    * files:      ``(root file name, category)``
    """

    collection: CollectionType
    parts: tuple[str, ...]

    def __post_init__(self) -> None:
        if len(self.parts) != self.collection.depth:
            raise ValueError(
                f"{self.collection.value} keys need {self.collection.depth} part(s), "
                f"got {self.parts!r}"
            )
        object.__setattr__(self, "parts", tuple(safe_segment(p) for p in self.parts))

    @classmethod
    def workflow(cls, file_name: str) -> CollectionKey:
        return cls(CollectionType.WORKFLOWS, (file_name,))

    @classmethod
    def dependabot(cls, category: str) -> CollectionKey:
        return cls(CollectionType.DEPENDABOT, (category,))

    @classmethod
    def root_file(cls, file_name: str, category: str) -> CollectionKey:
        return cls(CollectionType.FILES, (file_name, category))

    @property
    def relative_path(self) -> PurePosixPath:
        return PurePosixPath(self.collection.value, *self.parts)

    @property
    def name(self) -> str:
        """Human-readable name used as report heading."""
        return " / ".join(self.parts)

    def __str__(self) -> str:
        return str(self.relative_path)


def is_digest(name: str) -> bool:
    return DIGEST_RE.match(name) is not None
