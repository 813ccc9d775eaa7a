"""CLI entry point: dotgithubindexer.

Subcommands:
    dotgithubindexer audit --org my-org --token $GITHUB_TOKEN --db ./db
    dotgithubindexer audit --org my-org --source-dir ./checkouts   # offline
    dotgithubindexer gc --db ./db [--dry-run]
    dotgithubindexer report --db ./db [--json]
"""

from __future__ import annotations

import asyncio
import sys
import time
from pathlib import Path

import click
import httpx

from dotgithubindexer.core.config import Settings
from dotgithubindexer.core.logging import setup_logging
from dotgithubindexer.engines.aggregation.schemas import build_response
from dotgithubindexer.engines.aggregation.summarizer import (
    summarize_registry,
    summarize_usage,
    usage_from_registry,
)
from dotgithubindexer.engines.indexer.models import RunResult
from dotgithubindexer.engines.indexer.runner import IndexerRunner
from dotgithubindexer.engines.reporting.writer import write_reports
from dotgithubindexer.engines.source.github import GitHubRepositorySource
from dotgithubindexer.engines.source.github_client import GitHubClient, RateLimitError
from dotgithubindexer.engines.source.local import LocalDirectorySource
from dotgithubindexer.exceptions import IndexerError, RegistryRootError
from dotgithubindexer.registry.gc import GarbageCollector
from dotgithubindexer.registry.store import Registry


def _settings() -> Settings:
    try:
        return Settings.from_env()
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _open_existing(db: str | None) -> Registry:
    root = Path(db) if db else _settings().db_path
    if not root.is_dir():
        click.echo(f"Error: registry {root} does not exist", err=True)
        sys.exit(1)
    return Registry(root)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
@click.option("--log-format", type=click.Choice(["console", "json"]), default=None)
def main(verbose: bool, log_format: str | None) -> None:
    """dotgithubindexer: track .github configuration drift across an organization."""
    try:
        setup_logging(level="DEBUG" if verbose else None, log_format=log_format)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command("audit")
@click.option("--org", "organization", default=None, help="GitHub organization")
@click.option("--token", default=None, help="GitHub API token (default: $GITHUB_TOKEN)")
@click.option("--db", default=None, help="Registry directory (default: ./db)")
@click.option("--public/--no-public", "include_public", default=None, help="Public repositories")
@click.option(
    "--private/--no-private", "include_private", default=None, help="Private repositories"
)
@click.option(
    "--include-archived/--exclude-archived", default=None, help="Archived repositories"
)
@click.option(
    "--source-dir",
    type=click.Path(exists=True, file_okay=False),
    default=None,
    help="Read repositories from sub-directories here instead of GitHub",
)
@click.option("--no-gc", is_flag=True, help="Skip garbage collection")
@click.option("--no-reports", is_flag=True, help="Skip README generation")
def audit(
    organization: str | None,
    token: str | None,
    db: str | None,
    include_public: bool | None,
    include_private: bool | None,
    include_archived: bool | None,
    source_dir: str | None,
    no_gc: bool,
    no_reports: bool,
) -> None:
    """Index workflow, dependabot and dot-files of every repository."""
    settings = _settings()
    organization = organization or settings.organization
    if not organization:
        click.echo("Error: --org (or DOTGITHUBINDEXER_ORG) is required", err=True)
        sys.exit(1)
    registry = Registry(Path(db) if db else settings.db_path)

    started = time.monotonic()
    try:
        if source_dir:
            source = LocalDirectorySource(Path(source_dir), organization)
            result = asyncio.run(_run(registry, source, no_gc, no_reports))
        else:
            result = asyncio.run(
                _run_github(
                    registry,
                    organization,
                    token or settings.token,
                    include_public=settings.include_public
                    if include_public is None
                    else include_public,
                    include_private=settings.include_private
                    if include_private is None
                    else include_private,
                    include_archived=settings.include_archived
                    if include_archived is None
                    else include_archived,
                    no_gc=no_gc,
                    no_reports=no_reports,
                )
            )
    except RegistryRootError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except (IndexerError, httpx.HTTPError, RateLimitError) as e:
        click.echo(f"Audit failed: {e}", err=True)
        sys.exit(1)

    _print_result(result, time.monotonic() - started)


async def _run(registry: Registry, source, no_gc: bool, no_reports: bool) -> RunResult:
    runner = IndexerRunner(
        registry, source, collect_garbage=not no_gc, render_reports=not no_reports
    )
    return await runner.run()


async def _run_github(
    registry: Registry,
    organization: str,
    token: str | None,
    *,
    include_public: bool,
    include_private: bool,
    include_archived: bool,
    no_gc: bool,
    no_reports: bool,
) -> RunResult:
    async with GitHubClient(token) as client:
        source = GitHubRepositorySource(
            client,
            organization,
            include_public=include_public,
            include_private=include_private,
            include_archived=include_archived,
        )
        return await _run(registry, source, no_gc, no_reports)


def _print_result(result: RunResult, elapsed: float) -> None:
    click.echo(f"\nAudit of '{result.organization}' completed in {elapsed:.1f}s:")
    click.echo(f"  Repositories: {result.repositories}")
    click.echo(f"  Files indexed: {result.files_indexed}")
    click.echo(f"  Indexes updated: {result.indexes_updated}")
    if result.gc is not None:
        click.echo(f"  Blobs collected: {result.gc.deleted_count}")
    if result.usage is not None:
        click.echo(f"  Actions referenced: {len(result.usage.actions)}")
    if result.failed_repositories:
        click.echo(f"  Failed repositories: {', '.join(result.failed_repositories)}")
    if result.skipped_keys:
        click.echo("  Skipped (unreadable index): " + ", ".join(map(str, result.skipped_keys)))
    for error in result.errors:
        click.echo(f"  ! {error}", err=True)


@main.command("gc")
@click.option("--db", default=None, help="Registry directory (default: ./db)")
@click.option("--dry-run", is_flag=True, help="Only list blobs that would be deleted")
def gc(db: str | None, dry_run: bool) -> None:
    """Delete blobs no longer referenced by their collection index."""
    registry = _open_existing(db)
    summary = GarbageCollector(registry, dry_run=dry_run).collect_all()

    verb = "Would delete" if dry_run else "Deleted"
    for result in summary.results:
        for digest in result.deleted:
            click.echo(f"{verb} {result.key}/{digest}")
        if result.error:
            click.echo(f"Skipped {result.key}: {result.error}", err=True)
    click.echo(f"{verb} {summary.deleted_count} blob(s) across {len(summary.results)} key(s).")
    if summary.failed_count:
        click.echo(f"Failed to delete {summary.failed_count} blob(s).", err=True)
        sys.exit(1)


@main.command("report")
@click.option("--db", default=None, help="Registry directory (default: ./db)")
@click.option("--json", "as_json", is_flag=True, help="Print the report as JSON")
@click.option("--write/--no-write", default=False, help="Rewrite README files in the registry")
def report(db: str | None, as_json: bool, write: bool) -> None:
    """Summarize the registry without contacting GitHub."""
    registry = _open_existing(db)
    try:
        organization = registry.manifests.load().organization
    except RegistryRootError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    registry_report = summarize_registry(registry)
    usage = summarize_usage(usage_from_registry(registry))

    if write:
        write_reports(registry, registry_report, usage, organization)

    if as_json:
        response = build_response(organization, registry_report, usage)
        click.echo(response.model_dump_json(indent=2))
        return

    if not registry_report.indexes:
        click.echo("Registry is empty.")
        return
    for summary in registry_report.indexes:
        marker = " (drift)" if summary.drifted else ""
        click.echo(
            f"{summary.key}: {summary.total_owners} repositories, "
            f"{summary.unique_digests} version(s){marker}"
        )
    for key in registry_report.skipped:
        click.echo(f"{key}: index unreadable", err=True)
    click.echo(f"\n{len(usage.actions)} actions referenced {usage.total_occurrences} times.")


if __name__ == "__main__":
    main()
