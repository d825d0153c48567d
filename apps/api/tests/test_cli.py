"""tracker-db commands through click's CliRunner."""

import json

import pytest
from click.testing import CliRunner

from tracker.cli import cli
from tracker.core.migrate import current_revision


@pytest.fixture
def runner():
    return CliRunner()


class TestMigrate:
    def test_fresh_database(self, runner, db_url):
        result = runner.invoke(cli, ["migrate"])

        assert result.exit_code == 0, result.output
        assert "Applied 0001_initial_schema" in result.output
        assert "Applied 0006_kv_store" in result.output
        assert "Migration complete (6 step(s))." in result.output
        assert current_revision(db_url) == "0006_kv_store"

    def test_rerun_reports_nothing_to_do(self, runner, migrated_db):
        result = runner.invoke(cli, ["migrate"])

        assert result.exit_code == 0, result.output
        assert "Already at 0006_kv_store, nothing to do." in result.output

    def test_explicit_target_and_url_option(self, runner, tmp_path):
        url = "sqlite:///" + (tmp_path / "other.db").as_posix()

        result = runner.invoke(cli, ["--database-url", url, "migrate", "--to", "0002_session_tracking_columns"])

        assert result.exit_code == 0, result.output
        assert "Migration complete (2 step(s))." in result.output
        assert current_revision(url) == "0002_session_tracking_columns"

    def test_unknown_revision_fails(self, runner, db_url):
        result = runner.invoke(cli, ["migrate", "--to", "9999_nope"])

        assert result.exit_code == 1
        assert "Migration failed" in result.output


class TestLedgerCommands:
    def test_current_on_empty_database(self, runner, db_url):
        result = runner.invoke(cli, ["current"])
        assert result.exit_code == 0
        assert result.output.strip() == "(none)"

    def test_history_marks_applied(self, runner, db_url):
        runner.invoke(cli, ["migrate", "--to", "0001_initial_schema"])

        lines = runner.invoke(cli, ["history"]).output.splitlines()

        assert len(lines) == 6
        assert lines[0].startswith("[x] 0001_initial_schema")
        assert lines[1].startswith("[ ] 0002_session_tracking_columns")


class TestAudit:
    def test_text_report(self, runner, migrated_db):
        result = runner.invoke(cli, ["audit"])

        assert result.exit_code == 0, result.output
        assert "--- DATABASE AUDIT ---" in result.output
        assert "--- END AUDIT ---" in result.output

    def test_findings_do_not_change_exit_code(self, runner, migrated_db, tmp_path):
        types = tmp_path / "types.ts"
        types.write_text("export interface Player {\n  id: string\n  nickname: string\n}\n", encoding="utf-8")

        result = runner.invoke(cli, ["audit", "--types-file", str(types), "--json"])

        assert result.exit_code == 0, result.output
        report = json.loads(result.output)
        assert "[players] fields declared but not in SQL: nickname" in report["correspondence_issues"]

    def test_missing_database(self, runner, tmp_path):
        url = "sqlite:///" + (tmp_path / "missing.db").as_posix()

        result = runner.invoke(cli, ["--database-url", url, "audit"])

        assert result.exit_code == 1
        assert "Cannot open database" in result.output
        assert not (tmp_path / "missing.db").exists()
