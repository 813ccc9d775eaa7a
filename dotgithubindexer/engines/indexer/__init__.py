"""Indexer engine: ingest observed files, then collect garbage and report."""

from dotgithubindexer.engines.indexer.models import RunResult
from dotgithubindexer.engines.indexer.runner import IndexerRunner, collection_key_for

__all__ = ["IndexerRunner", "RunResult", "collection_key_for"]
