"""Markdown rendering of registry and usage reports."""

from __future__ import annotations

from dotgithubindexer.engines.aggregation.models import (
    ActionSummary,
    IndexSummary,
    RegistryReport,
    UsageReport,
)
from dotgithubindexer.registry.keys import CollectionKey, CollectionType

_GITHUB = "https://github.com"


def source_path(key: CollectionKey) -> str:
    """Where the tracked file lives inside each owner repository.

    Dependabot configs may be named ``dependabot.yml`` or ``dependabot.yaml``
    and the index does not record which, so their path is the ``.github``
    directory.
    """
    if key.collection is CollectionType.WORKFLOWS:
        return f".github/workflows/{key.parts[0]}"
    if key.collection is CollectionType.DEPENDABOT:
        return ".github"
    return key.parts[0]


def _repo_link(organization: str, repository: str, path: str, kind: str = "blob") -> str:
    if not organization:
        return repository
    return f"[{repository}]({_GITHUB}/{organization}/{repository}/{kind}/HEAD/{path})"


def _esc(text: str) -> str:
    return text.replace("|", "\\|")


def render_index_readme(summary: IndexSummary, organization: str) -> str:
    key = summary.key
    path = source_path(key)
    kind = "tree" if key.collection is CollectionType.DEPENDABOT else "blob"
    lines = [
        f"# {key.name}",
        "",
        f"Collection `{key.collection.value}`: {summary.total_owners} repositories, "
        f"{summary.unique_digests} distinct version(s).",
        "",
    ]
    for variant in summary.variants:
        lines.append(f"## [{variant.digest}]({variant.digest})")
        lines.append("")
        for owner in variant.owners:
            lines.append(f"- {_repo_link(organization, owner, path, kind)}")
        lines.append("")
    return "\n".join(lines)


def _render_action(action: ActionSummary, organization: str) -> list[str]:
    lines = [f"## {action.action}", ""]
    for usage in action.versions:
        label = usage.version or "(no version)"
        lines.append(f"### `{label}` ({usage.count})")
        lines.append("")
        for occ in usage.occurrences:
            lines.append(f"- {_repo_link(organization, occ.repository, occ.path)} `{occ.path}`")
        lines.append("")
    return lines


def render_usage_readme(usage: UsageReport, organization: str) -> str:
    lines = [
        "# GitHub Actions usage",
        "",
        f"{len(usage.actions)} actions referenced {usage.total_occurrences} times.",
        "",
        "Counts include step `uses:` entries and job-level reusable workflow calls.",
        "",
    ]
    if usage.actions:
        lines.append("| Action | Versions | Uses |")
        lines.append("| --- | ---: | ---: |")
        for action in usage.actions:
            lines.append(f"| {_esc(action.action)} | {len(action.versions)} | {action.total} |")
        lines.append("")
    for action in usage.actions:
        lines.extend(_render_action(action, organization))
    return "\n".join(lines)


def render_overview(report: RegistryReport) -> str:
    """Top-level table of every collection key and how far it has drifted."""
    lines = ["# Overview", ""]
    for collection in CollectionType:
        summaries = report.for_collection(collection)
        if not summaries:
            continue
        lines.append(f"## {collection.value}")
        lines.append("")
        lines.append("| Key | Repositories | Versions |")
        lines.append("| --- | ---: | ---: |")
        for s in summaries:
            link = f"[{_esc(s.key.name)}]({s.key.relative_path}/README.md)"
            lines.append(f"| {link} | {s.total_owners} | {s.unique_digests} |")
        lines.append("")
    if report.skipped:
        lines.append("## Skipped")
        lines.append("")
        for key in report.skipped:
            lines.append(f"- `{key}` (index unreadable)")
        lines.append("")
    return "\n".join(lines)
