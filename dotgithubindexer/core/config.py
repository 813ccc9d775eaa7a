"""Runtime settings read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

_DEFAULT_DB_PATH = "./db"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


def _env_bool(key: str, default: bool) -> bool:
    raw = os.environ.get(key)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ValueError(f"{key} must be a boolean, got {raw!r}")


@dataclass
class Settings:
    """Options for one audit run; CLI flags override these."""

    organization: str | None = None
    token: str | None = None
    db_path: Path = Path(_DEFAULT_DB_PATH)
    include_public: bool = True
    include_private: bool = False
    include_archived: bool = False

    @classmethod
    def from_env(cls) -> Settings:
        """Build settings from ``DOTGITHUBINDEXER_*`` and ``GITHUB_TOKEN``."""
        return cls(
            organization=os.environ.get("DOTGITHUBINDEXER_ORG") or None,
            token=os.environ.get("GITHUB_TOKEN") or os.environ.get("GH_TOKEN") or None,
            db_path=Path(os.environ.get("DOTGITHUBINDEXER_DB", _DEFAULT_DB_PATH)),
            include_public=_env_bool("DOTGITHUBINDEXER_PUBLIC", True),
            include_private=_env_bool("DOTGITHUBINDEXER_PRIVATE", False),
            include_archived=_env_bool("DOTGITHUBINDEXER_ARCHIVED", False),
        )
