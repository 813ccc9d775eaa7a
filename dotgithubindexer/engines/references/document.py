"""Failure-tolerant view over a parsed YAML document.

Workflow files are untyped nested mappings. The node classes here let the
extractor walk ``jobs -> steps -> uses`` without type checks at every level:
every accessor returns :data:`ABSENT` (or an empty iteration) instead of
raising when the shape is not what was asked for.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import yaml


class WorkflowLoader(yaml.SafeLoader):
    """SafeLoader that keeps ``on``/``off``/``yes``/``no`` as strings."""


WorkflowLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != "tag:yaml.org,2002:bool"]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


class Node:
    kind = "node"

    @property
    def present(self) -> bool:
        return True

    def get(self, key: Any) -> Node:
        return ABSENT

    def items(self) -> Iterator[tuple[Any, Node]]:
        return iter(())

    def __iter__(self) -> Iterator[Node]:
        return iter(())

    def as_str(self) -> str | None:
        return None


class AbsentNode(Node):
    kind = "absent"

    @property
    def present(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT = AbsentNode()


class ScalarNode(Node):
    kind = "scalar"

    def __init__(self, value: Any) -> None:
        self.value = value

    def as_str(self) -> str | None:
        return self.value if isinstance(self.value, str) else None

    def __repr__(self) -> str:
        return f"ScalarNode({self.value!r})"


class MappingNode(Node):
    """Children are wrapped on access, so recursive aliases are harmless."""

    kind = "mapping"

    def __init__(self, raw: dict) -> None:
        self._raw = raw

    def get(self, key: Any) -> Node:
        if key not in self._raw:
            return ABSENT
        return wrap(self._raw[key])

    def items(self) -> Iterator[tuple[Any, Node]]:
        for key, value in self._raw.items():
            yield key, wrap(value)

    def __len__(self) -> int:
        return len(self._raw)


class SequenceNode(Node):
    kind = "sequence"

    def __init__(self, raw: list) -> None:
        self._raw = raw

    def __iter__(self) -> Iterator[Node]:
        for value in self._raw:
            yield wrap(value)

    def __len__(self) -> int:
        return len(self._raw)


def wrap(value: Any) -> Node:
    if isinstance(value, dict):
        return MappingNode(value)
    if isinstance(value, list):
        return SequenceNode(value)
    if value is None:
        return ABSENT
    return ScalarNode(value)


def parse_document(text: str) -> Node:
    """Parse *text* as YAML; raises ``yaml.YAMLError`` on syntax errors."""
    return wrap(yaml.load(text, Loader=WorkflowLoader))
