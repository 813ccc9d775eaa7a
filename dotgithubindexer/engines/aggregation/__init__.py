"""Aggregation engine: per-index variant groupings and action usage summaries."""

from dotgithubindexer.engines.aggregation.models import (
    ActionSummary,
    IndexSummary,
    Occurrence,
    RegistryReport,
    UsageReport,
    Variant,
    VersionUsage,
)
from dotgithubindexer.engines.aggregation.summarizer import (
    load_indexes,
    reverse_index,
    summarize,
    summarize_index,
    summarize_registry,
    summarize_usage,
    usage_from_registry,
)

__all__ = [
    "ActionSummary",
    "IndexSummary",
    "Occurrence",
    "RegistryReport",
    "UsageReport",
    "Variant",
    "VersionUsage",
    "load_indexes",
    "reverse_index",
    "summarize",
    "summarize_index",
    "summarize_registry",
    "summarize_usage",
    "usage_from_registry",
]
