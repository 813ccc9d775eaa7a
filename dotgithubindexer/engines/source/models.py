"""Data models exchanged between repository sources and the indexer."""

from __future__ import annotations

from dataclasses import dataclass

from dotgithubindexer.registry.keys import CollectionType

WORKFLOWS_DIR = ".github/workflows"
WORKFLOW_SUFFIXES = (".yml", ".yaml")
DEPENDABOT_NAMES = ("dependabot.yml", "dependabot.yaml")


@dataclass(frozen=True)
class Repository:
    name: str
    default_branch: str = "main"
    visibility: str = "public"
    archived: bool = False


@dataclass(frozen=True)
class ObservedFile:
    """Raw content of one tracked file in one repository."""

    repository: str
    collection: CollectionType
    name: str  # file name, e.g. "build.yml" or ".gitignore"
    path: str  # path inside the repository
    content: bytes


def is_workflow_file(name: str) -> bool:
    return name.endswith(WORKFLOW_SUFFIXES)


def is_root_dotfile(name: str) -> bool:
    return name.startswith(".") and name not in (".", "..")
