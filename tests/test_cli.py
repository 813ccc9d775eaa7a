"""Tests for CLI commands (local checkouts only, no GitHub access)."""

from __future__ import annotations

import json
import os
from unittest.mock import AsyncMock, patch

from click.testing import CliRunner

from dotgithubindexer.cli import main
from dotgithubindexer.registry.keys import CollectionKey
from dotgithubindexer.registry.store import Registry

CI_YML = "jobs:\n  build:\n    steps:\n      - uses: actions/checkout@v4\n"
CI = CollectionKey.workflow("ci.yml")


def _env(**extra):
    env = {"DOTGITHUBINDEXER_ORG": "", "GITHUB_TOKEN": "", "GH_TOKEN": ""}
    env.update(extra)
    return env


def _audit(checkouts, db, *args):
    runner = CliRunner()
    with patch.dict(os.environ, _env()):
        return runner.invoke(
            main,
            ["audit", "--org", "acme", "--db", str(db), "--source-dir", str(checkouts), *args],
        )


# ── audit ──


class TestAudit:
    def test_local_audit(self, tmp_path, make_repo, checkouts):
        make_repo("web", {".github/workflows/ci.yml": CI_YML, ".gitignore": "*.pyc\n"})
        db = tmp_path / "db"

        result = _audit(checkouts, db)

        assert result.exit_code == 0, result.output
        assert "Repositories: 1" in result.output
        assert "Files indexed: 2" in result.output
        assert Registry(db).list_keys()[-1] == CI
        assert (db / "README.md").is_file()

    def test_no_reports_flag(self, tmp_path, make_repo, checkouts):
        make_repo("web", {".gitignore": "*.pyc\n"})
        db = tmp_path / "db"

        result = _audit(checkouts, db, "--no-reports", "--no-gc")

        assert result.exit_code == 0, result.output
        assert not (db / "README.md").exists()

    def test_missing_org(self, tmp_path):
        runner = CliRunner()
        with patch.dict(os.environ, _env()):
            result = runner.invoke(main, ["audit", "--db", str(tmp_path / "db")])
        assert result.exit_code == 1
        assert "--org" in result.output

    def test_invalid_log_level(self, tmp_path):
        runner = CliRunner()
        with patch.dict(os.environ, _env(DOTGITHUBINDEXER_LOG_LEVEL="chatty")):
            result = runner.invoke(main, ["audit", "--db", str(tmp_path / "db")])
        assert result.exit_code == 1
        assert "unknown log level" in result.output

    def test_org_from_env(self, tmp_path, make_repo, checkouts):
        make_repo("web", {".gitignore": "*.pyc\n"})
        runner = CliRunner()
        with patch.dict(os.environ, _env(DOTGITHUBINDEXER_ORG="acme")):
            result = runner.invoke(
                main,
                ["audit", "--db", str(tmp_path / "db"), "--source-dir", str(checkouts)],
            )
        assert result.exit_code == 0, result.output
        assert "Audit of 'acme'" in result.output

    def test_root_error_exits_1(self, tmp_path, make_repo, checkouts):
        make_repo("web", {".gitignore": "*.pyc\n"})
        db = tmp_path / "db"
        db.write_text("not a directory")

        result = _audit(checkouts, db)

        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_github_source_selected(self, tmp_path):
        runner = CliRunner()
        with patch.dict(os.environ, _env()), patch(
            "dotgithubindexer.cli._run_github", new_callable=AsyncMock
        ) as mock_run, patch("dotgithubindexer.cli._print_result"):
            result = runner.invoke(
                main,
                [
                    "audit",
                    "--org",
                    "acme",
                    "--token",
                    "t0k",
                    "--db",
                    str(tmp_path / "db"),
                    "--private",
                    "--include-archived",
                ],
            )
        assert result.exit_code == 0, result.output
        args, kwargs = mock_run.call_args
        assert args[1:] == ("acme", "t0k")
        assert kwargs["include_public"] is True
        assert kwargs["include_private"] is True
        assert kwargs["include_archived"] is True


# ── gc ──


class TestGC:
    def test_dry_run_then_delete(self, tmp_path, make_repo, checkouts):
        make_repo("web", {".github/workflows/ci.yml": CI_YML})
        db = tmp_path / "db"
        _audit(checkouts, db)
        stale = Registry(db).put_blob(CI, b"stale content")

        runner = CliRunner()
        dry = runner.invoke(main, ["gc", "--db", str(db), "--dry-run"])
        assert dry.exit_code == 0, dry.output
        assert f"Would delete workflows/ci.yml/{stale}" in dry.output
        assert Registry(db).blobs.exists(CI, stale)

        real = runner.invoke(main, ["gc", "--db", str(db)])
        assert real.exit_code == 0, real.output
        assert "Deleted 1 blob(s)" in real.output
        assert not Registry(db).blobs.exists(CI, stale)

    def test_missing_registry(self, tmp_path):
        result = CliRunner().invoke(main, ["gc", "--db", str(tmp_path / "nope")])
        assert result.exit_code == 1


# ── report ──


class TestReport:
    def test_json(self, tmp_path, make_repo, checkouts):
        make_repo("web", {".github/workflows/ci.yml": CI_YML})
        make_repo("api", {".github/workflows/ci.yml": CI_YML})
        db = tmp_path / "db"
        _audit(checkouts, db)

        with patch.dict(os.environ, {"DOTGITHUBINDEXER_LOG_LEVEL": "WARNING"}):
            result = CliRunner().invoke(main, ["report", "--db", str(db), "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["organization"] == "acme"
        assert data["indexes"][0]["key"] == "workflows/ci.yml"
        assert data["indexes"][0]["variants"][0]["owners"] == ["api", "web"]
        assert data["actions"][0]["action"] == "actions/checkout"
        assert data["actions"][0]["total"] == 2

    def test_text(self, tmp_path, make_repo, checkouts):
        make_repo("web", {".github/workflows/ci.yml": CI_YML})
        db = tmp_path / "db"
        _audit(checkouts, db)

        result = CliRunner().invoke(main, ["report", "--db", str(db)])

        assert result.exit_code == 0, result.output
        assert "workflows/ci.yml: 1 repositories, 1 version(s)" in result.output
        assert "1 actions referenced 1 times." in result.output

    def test_write_regenerates_readmes(self, tmp_path, make_repo, checkouts):
        make_repo("web", {".github/workflows/ci.yml": CI_YML})
        db = tmp_path / "db"
        _audit(checkouts, db, "--no-reports")

        result = CliRunner().invoke(main, ["report", "--db", str(db), "--write"])

        assert result.exit_code == 0, result.output
        assert (db / "actions" / "README.md").is_file()
