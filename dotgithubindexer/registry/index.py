"""Collection index: owner -> digest mapping persisted per collection key."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

import structlog
import yaml

from dotgithubindexer.exceptions import IndexCorruptError
from dotgithubindexer.registry.fsutil import atomic_write_text
from dotgithubindexer.registry.keys import CollectionKey, is_digest

log = structlog.get_logger("dotgithubindexer.registry")

INDEX_FILE = "index.yaml"


def upsert(mapping: Mapping[str, str], owner: str, digest: str) -> dict[str, str]:
    """Return a copy of *mapping* with *owner* pointing at *digest*."""
    updated = dict(mapping)
    updated[owner] = digest
    return updated


def serialize_index(mapping: Mapping[str, str]) -> str:
    """Render *mapping* as YAML with owners sorted ascending."""
    ordered = {owner: mapping[owner] for owner in sorted(mapping)}
    return yaml.safe_dump(
        {"repositories": ordered},
        default_flow_style=False,
        sort_keys=True,
        allow_unicode=True,
    )


def parse_index(key: CollectionKey, text: str) -> dict[str, str]:
    """Parse index YAML, validating that every entry maps owner to digest.

    Raises :class:`IndexCorruptError` on anything else.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise IndexCorruptError(key, f"invalid YAML: {exc}") from exc

    if not isinstance(data, dict):
        raise IndexCorruptError(key, "top level is not a mapping")
    repositories = data.get("repositories")
    if repositories is None:
        return {}
    if not isinstance(repositories, dict):
        raise IndexCorruptError(key, "'repositories' is not a mapping")

    result: dict[str, str] = {}
    for owner, digest in repositories.items():
        if not isinstance(owner, str) or not isinstance(digest, str):
            raise IndexCorruptError(key, f"non-string entry {owner!r}: {digest!r}")
        if not is_digest(digest):
            raise IndexCorruptError(key, f"entry {owner!r} is not a SHA-256 digest")
        result[owner] = digest
    return result


class IndexStore:
    """Loads and saves ``<root>/<collection key>/index.yaml``."""

    def __init__(self, root: Path) -> None:
        self._root = root

    def path_for(self, key: CollectionKey) -> Path:
        return self._root / key.relative_path / INDEX_FILE

    def exists(self, key: CollectionKey) -> bool:
        """True if an index file is present, even one that cannot be read.

        An index that cannot be stat'ed still counts: :meth:`load` then
        reports it as corrupt, so callers skip the key instead of treating
        it as empty.
        """
        try:
            return self.path_for(key).is_file()
        except OSError:
            return True

    def load(self, key: CollectionKey) -> dict[str, str]:
        """Return the persisted mapping, or an empty one if none exists.

        Any other read failure raises :class:`IndexCorruptError`.
        """
        try:
            text = self.path_for(key).read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except (OSError, UnicodeDecodeError) as exc:
            raise IndexCorruptError(key, str(exc)) from exc
        return parse_index(key, text)

    def save(self, key: CollectionKey, mapping: Mapping[str, str]) -> None:
        atomic_write_text(self.path_for(key), serialize_index(mapping))
        log.debug("registry.index_saved", key=str(key), owners=len(mapping))
