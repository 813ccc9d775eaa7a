"""Filesystem helpers shared by the registry stores."""

from __future__ import annotations

import os
import uuid
from contextlib import suppress
from pathlib import Path


def atomic_write_bytes(path: Path, data: bytes) -> None:
    """Write *data* to *path* through a temp file and ``os.replace``.

    Readers never observe a partially written file; on failure the temp
    file is removed and the exception propagates.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = path.with_name(f"{path.name}.part.{uuid.uuid4().hex}")
    replaced = False
    try:
        with temp_path.open("wb") as handle:
            handle.write(data)
        os.replace(temp_path, path)
        replaced = True
    finally:
        if not replaced:
            with suppress(FileNotFoundError):
                temp_path.unlink()


def atomic_write_text(path: Path, text: str) -> None:
    atomic_write_bytes(path, text.encode("utf-8"))
