"""Report writer: Markdown READMEs rendered from aggregation models."""

from dotgithubindexer.engines.reporting.markdown import (
    render_index_readme,
    render_overview,
    render_usage_readme,
    source_path,
)
from dotgithubindexer.engines.reporting.writer import write_reports

__all__ = [
    "render_index_readme",
    "render_overview",
    "render_usage_readme",
    "source_path",
    "write_reports",
]
