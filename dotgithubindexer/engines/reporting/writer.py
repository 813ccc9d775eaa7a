"""Write rendered reports into the registry tree."""

from __future__ import annotations

from pathlib import Path

import structlog

from dotgithubindexer.engines.aggregation.models import RegistryReport, UsageReport
from dotgithubindexer.engines.reporting.markdown import (
    render_index_readme,
    render_overview,
    render_usage_readme,
)
from dotgithubindexer.registry.fsutil import atomic_write_text
from dotgithubindexer.registry.store import Registry

log = structlog.get_logger("dotgithubindexer.reporting")

README_FILE = "README.md"
USAGE_DIR = "actions"


def _write_if_changed(path: Path, text: str) -> bool:
    if path.is_file() and path.read_text(encoding="utf-8") == text:
        return False
    atomic_write_text(path, text)
    return True


def write_reports(
    registry: Registry,
    report: RegistryReport,
    usage: UsageReport | None,
    organization: str,
) -> list[Path]:
    """Write README files; return the paths whose content changed.

    A failure on one README is logged and does not stop the others.
    """
    targets: list[tuple[Path, str]] = [(registry.root / README_FILE, render_overview(report))]
    for summary in report.indexes:
        readme = registry.key_dir(summary.key) / README_FILE
        targets.append((readme, render_index_readme(summary, organization)))
    if usage is not None:
        targets.append(
            (registry.root / USAGE_DIR / README_FILE, render_usage_readme(usage, organization))
        )

    changed: list[Path] = []
    for path, text in targets:
        try:
            if _write_if_changed(path, text):
                changed.append(path)
        except OSError as exc:
            log.warning("reporting.write_failed", path=str(path), error=str(exc))
    log.info("reporting.written", files=len(targets), changed=len(changed))
    return changed
