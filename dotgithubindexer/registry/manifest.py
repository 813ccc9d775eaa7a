"""Repository manifest: every owner ever observed, sorted, append-only."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import structlog
import yaml

from dotgithubindexer.exceptions import RegistryRootError
from dotgithubindexer.registry.fsutil import atomic_write_text

log = structlog.get_logger("dotgithubindexer.registry")

MANIFEST_FILE = "repositories.yaml"


@dataclass
class RepositoryManifest:
    organization: str = ""
    repositories: list[str] = field(default_factory=list)

    def add(self, name: str) -> bool:
        """Record *name*; return False if it was already present."""
        if name in self.repositories:
            return False
        self.repositories.append(name)
        self.repositories.sort()
        return True

    def to_yaml(self) -> str:
        return yaml.safe_dump(
            {
                "organization": self.organization,
                "repositories": sorted(set(self.repositories)),
            },
            default_flow_style=False,
            sort_keys=True,
            allow_unicode=True,
        )


class ManifestStore:
    """Reads and writes ``<root>/repositories.yaml``."""

    def __init__(self, root: Path) -> None:
        self._path = root / MANIFEST_FILE

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    def load(self) -> RepositoryManifest:
        """Load the manifest; a missing file yields an empty manifest.

        The manifest lives at the registry root, so an unreadable one is
        treated as root-fatal.
        """
        try:
            data = yaml.safe_load(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return RepositoryManifest()
        except (OSError, UnicodeDecodeError, yaml.YAMLError) as exc:
            raise RegistryRootError(f"cannot read {self._path}: {exc}") from exc
        if data is None:
            return RepositoryManifest()
        if not isinstance(data, dict):
            raise RegistryRootError(f"{self._path} is not a mapping")

        repositories = data.get("repositories") or []
        if not isinstance(repositories, list) or not all(
            isinstance(name, str) for name in repositories
        ):
            raise RegistryRootError(f"{self._path}: 'repositories' must be a list of names")
        organization = data.get("organization") or ""
        return RepositoryManifest(
            organization=str(organization),
            repositories=sorted(set(repositories)),
        )

    def save(self, manifest: RepositoryManifest) -> None:
        try:
            atomic_write_text(self._path, manifest.to_yaml())
        except OSError as exc:
            raise RegistryRootError(f"cannot write {self._path}: {exc}") from exc
