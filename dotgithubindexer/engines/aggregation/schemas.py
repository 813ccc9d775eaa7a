"""JSON response schemas for report consumers."""

from __future__ import annotations

from pydantic import BaseModel

from dotgithubindexer.engines.aggregation.models import (
    IndexSummary,
    RegistryReport,
    UsageReport,
)


class VariantSchema(BaseModel):
    digest: str
    owners: list[str]
    count: int


class IndexSummarySchema(BaseModel):
    collection: str
    key: str
    unique_digests: int
    total_owners: int
    variants: list[VariantSchema]


class OccurrenceSchema(BaseModel):
    repository: str
    path: str


class VersionUsageSchema(BaseModel):
    version: str
    count: int
    occurrences: list[OccurrenceSchema]


class ActionSummarySchema(BaseModel):
    action: str
    total: int
    versions: list[VersionUsageSchema]


class ReportResponse(BaseModel):
    organization: str
    indexes: list[IndexSummarySchema]
    skipped: list[str]
    actions: list[ActionSummarySchema] | None = None


def _index_schema(summary: IndexSummary) -> IndexSummarySchema:
    return IndexSummarySchema(
        collection=summary.key.collection.value,
        key=str(summary.key),
        unique_digests=summary.unique_digests,
        total_owners=summary.total_owners,
        variants=[
            VariantSchema(digest=v.digest, owners=list(v.owners), count=v.count)
            for v in summary.variants
        ],
    )


def build_response(
    organization: str,
    report: RegistryReport,
    usage: UsageReport | None = None,
) -> ReportResponse:
    actions = None
    if usage is not None:
        actions = [
            ActionSummarySchema(
                action=a.action,
                total=a.total,
                versions=[
                    VersionUsageSchema(
                        version=v.version,
                        count=v.count,
                        occurrences=[
                            OccurrenceSchema(repository=o.repository, path=o.path)
                            for o in v.occurrences
                        ],
                    )
                    for v in a.versions
                ],
            )
            for a in usage.actions
        ]
    return ReportResponse(
        organization=organization,
        indexes=[_index_schema(s) for s in report.indexes],
        skipped=[str(k) for k in report.skipped],
        actions=actions,
    )
