"""Reference extractor: action usages declared in workflow files."""

from dotgithubindexer.engines.references.extractor import (
    extract_action_uses,
    parse_uses,
    split_uses,
)
from dotgithubindexer.engines.references.locator import CommentLocator, TextualCommentLocator
from dotgithubindexer.engines.references.models import ActionUse, UsageIndex

__all__ = [
    "ActionUse",
    "CommentLocator",
    "TextualCommentLocator",
    "UsageIndex",
    "extract_action_uses",
    "parse_uses",
    "split_uses",
]
