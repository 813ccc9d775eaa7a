"""Extract action references from GitHub Actions workflow files."""

from __future__ import annotations

import structlog
import yaml

from dotgithubindexer.engines.references.document import Node, parse_document
from dotgithubindexer.engines.references.locator import CommentLocator, TextualCommentLocator
from dotgithubindexer.engines.references.models import ActionUse

log = structlog.get_logger("dotgithubindexer.engine")

_DEFAULT_LOCATOR = TextualCommentLocator()


def split_uses(uses: str) -> tuple[str, str]:
    """Split ``name@version`` on the first ``@``; no ``@`` gives version ``""``."""
    name, sep, version = uses.partition("@")
    if not sep:
        return uses, ""
    return name, version


def parse_uses(
    uses: str,
    text: str,
    locator: CommentLocator = _DEFAULT_LOCATOR,
) -> tuple[str, str]:
    """Return ``(action, version)`` for a uses string found in *text*.

    A comment trailing the uses string on its line is appended to the
    version as ``"<version> # <comment>"``.
    """
    action, version = split_uses(uses)
    comment = locator.find_comment(uses, text)
    if comment:
        version = f"{version} # {comment}" if version else f"# {comment}"
    return action, version


def _uses_values(document: Node) -> list[str]:
    """All string ``uses`` values in document order, job level first per job."""
    found: list[str] = []
    for _job_id, job in document.get("jobs").items():
        job_uses = (job.get("uses").as_str() or "").strip()
        if job_uses:
            found.append(job_uses)
        for step in job.get("steps"):
            step_uses = (step.get("uses").as_str() or "").strip()
            if step_uses:
                found.append(step_uses)
    return found


def extract_action_uses(
    text: str,
    repository: str,
    path: str,
    *,
    locator: CommentLocator = _DEFAULT_LOCATOR,
) -> list[ActionUse]:
    """Parse a workflow and return one :class:`ActionUse` per ``uses:``.

    Covers step-level actions and job-level reusable workflow calls.
    Malformed YAML or an unexpected shape yields ``[]``; this never raises
    for bad input.
    """
    try:
        document = parse_document(text)
    except yaml.YAMLError as exc:
        log.warning("references.parse_failed", repository=repository, path=path, error=str(exc))
        return []
    except RecursionError:
        log.warning("references.parse_failed", repository=repository, path=path, error="recursion")
        return []

    uses_list: list[ActionUse] = []
    for uses in _uses_values(document):
        action, version = parse_uses(uses, text, locator)
        uses_list.append(
            ActionUse(action=action, version=version, repository=repository, path=path)
        )
    return uses_list
