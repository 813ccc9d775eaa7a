"""Locate the inline comment that annotates a ``uses:`` line.

YAML parsing drops comments, so the version annotation in

    - uses: actions/checkout@de0fac2e4500dabe0009e67214ff5f5447ce83dd # v6.0.2

has to be recovered from the raw text. :class:`TextualCommentLocator`
re-scans the text for the line; a locator that tracks source positions
can be swapped in through the :class:`CommentLocator` protocol.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class CommentLocator(Protocol):
    def find_comment(self, uses: str, text: str) -> str | None:
        """Return the trimmed comment trailing *uses* in *text*, if any."""
        ...


class TextualCommentLocator:
    """First line containing both ``uses:`` and the uses string wins.

    Known limitation: if the same uses string appears on several lines,
    or is a prefix of another uses string on an earlier line, the comment
    of the first such line is attributed to every occurrence.
    """

    def find_comment(self, uses: str, text: str) -> str | None:
        for line in text.splitlines():
            if "uses:" not in line:
                continue
            idx = line.find(uses)
            if idx == -1:
                continue
            tail = line[idx + len(uses) :]
            hash_idx = tail.find("#")
            if hash_idx == -1:
                return None
            comment = tail[hash_idx + 1 :].strip()
            return comment or None
        return None
