"""Category classifier: read a grouping key from a marker comment."""

from __future__ import annotations

CATEGORY_MARKER = "# dotgithubindexer:"
DEFAULT_CATEGORY = "Default"


def classify(content: str | bytes) -> str:
    """Return the category declared in *content*, or ``"Default"``.

    The first line that, once stripped, starts with the marker and has a
    non-empty payload wins; a marker with an empty payload is ignored and
    the scan continues.
    """
    if isinstance(content, bytes):
        content = content.decode("utf-8", errors="replace")

    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line.startswith(CATEGORY_MARKER):
            continue
        category = line[len(CATEGORY_MARKER) :].strip()
        if category:
            return category
    return DEFAULT_CATEGORY
