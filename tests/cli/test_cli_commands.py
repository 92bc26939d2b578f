"""Tests for the pathways CLI."""

import json

import pytest
from typer.testing import CliRunner

from pathways.cli.commands import app

runner = CliRunner()


@pytest.fixture
def cli_env(ada_store, tmp_path) -> dict[str, str]:
    """Point the CLI at the test store and a temporary exports directory."""
    return {
        "PATHWAYS_DB_PATH": str(ada_store),
        "PATHWAYS_EXPORTS_DIR": str(tmp_path / "exports"),
    }


class TestExportCommand:
    """Tests for pathways export."""

    def test_export_all_json(self, cli_env, tmp_path):
        result = runner.invoke(app, ["export"], env=cli_env)

        assert result.exit_code == 0
        assert "Exported 1 users" in result.output
        files = list((tmp_path / "exports").glob("pathway_data_*.json"))
        assert len(files) == 1
        assert json.loads(files[0].read_text(encoding="utf-8"))["totalUsers"] == 1

    def test_export_csv(self, cli_env, tmp_path):
        result = runner.invoke(app, ["export", "--format", "csv"], env=cli_env)

        assert result.exit_code == 0
        assert len(list((tmp_path / "exports").glob("pathway_data_*.csv"))) == 1

    def test_export_single_user_csv(self, cli_env, tmp_path):
        result = runner.invoke(app, ["export", "-f", "csv", "--user", "u1"], env=cli_env)

        assert result.exit_code == 0
        assert "Ada" in result.output
        assert len(list((tmp_path / "exports").glob("user_pathway_u1_*.csv"))) == 1
        assert len(list((tmp_path / "exports").glob("user_pathway_Ada_u1_*.json"))) == 1

    def test_export_unknown_user_fails(self, cli_env, tmp_path):
        result = runner.invoke(app, ["export", "--user", "ghost"], env=cli_env)

        assert result.exit_code == 1
        assert "User not found" in result.output
        assert not (tmp_path / "exports").exists()

    def test_export_unknown_format_fails(self, cli_env):
        result = runner.invoke(app, ["export", "--format", "xml"], env=cli_env)

        assert result.exit_code == 1
        assert "Unsupported format" in result.output

    def test_export_missing_store_fails(self, tmp_path):
        result = runner.invoke(
            app,
            ["export", "--db", str(tmp_path / "missing.db"), "-o", str(tmp_path / "out")],
        )

        assert result.exit_code == 1
        assert "Store error" in result.output

    def test_export_empty_user_id_fails(self, cli_env, tmp_path):
        result = runner.invoke(app, ["export", "--user", ""], env=cli_env)

        assert result.exit_code == 1
        assert not (tmp_path / "exports").exists()

    def test_unencodable_record_fails_cleanly(self, seeder, tmp_path):
        seeder.user("u1", "Ada", learning_parameters={"note": "\ud800"})
        out = tmp_path / "exports"

        result = runner.invoke(
            app, ["export", "--db", str(seeder.db_path), "-o", str(out)]
        )

        assert result.exit_code == 1
        assert "Could not write export" in result.output
        assert list(out.iterdir()) == []

    def test_output_dir_option_overrides_env(self, cli_env, tmp_path):
        target = tmp_path / "elsewhere"

        result = runner.invoke(app, ["export", "-o", str(target)], env=cli_env)

        assert result.exit_code == 0
        assert len(list(target.glob("pathway_data_*.json"))) == 1


class TestExportUserCommand:
    """Tests for pathways export-user."""

    def test_export_user(self, cli_env, tmp_path):
        result = runner.invoke(app, ["export-user", "u1"], env=cli_env)

        assert result.exit_code == 0
        assert "roadmaps:" in result.output
        assert len(list((tmp_path / "exports").glob("user_pathway_Ada_u1_*.json"))) == 1

    def test_export_user_not_found(self, cli_env):
        result = runner.invoke(app, ["export-user", "ghost"], env=cli_env)

        assert result.exit_code == 1
        assert "ghost" in result.output


class TestStatsCommand:
    """Tests for pathways stats."""

    def test_stats_prints_and_saves(self, cli_env, tmp_path):
        result = runner.invoke(app, ["stats"], env=cli_env)

        assert result.exit_code == 0
        assert "100.00%" in result.output
        assert "cs: 1" in result.output
        files = list((tmp_path / "exports").glob("pathway_stats_*.json"))
        assert len(files) == 1
        data = json.loads(files[0].read_text(encoding="utf-8"))
        assert data["performance"]["averageQuizScore"] == "8.00"


class TestRunCommand:
    """Tests for pathways run."""

    def test_run_writes_stats_json_and_csv(self, cli_env, tmp_path):
        result = runner.invoke(app, ["run"], env=cli_env)

        assert result.exit_code == 0
        assert "Exported 1 users" in result.output
        # strip the date stamp
        names = sorted(
            p.name.rsplit("_", 1)[0] + p.suffix for p in (tmp_path / "exports").iterdir()
        )
        assert names == ["pathway_data.csv", "pathway_data.json", "pathway_stats.json"]

    def test_run_missing_store_fails(self, tmp_path):
        out = tmp_path / "exports"

        result = runner.invoke(app, ["run", "--db", str(tmp_path / "missing.db"), "-o", str(out)])

        assert result.exit_code == 1
        assert "Store error" in result.output
        assert not out.exists()


class TestInitDbCommand:
    """Tests for pathways init-db."""

    def test_init_db_creates_store(self, tmp_path):
        db = tmp_path / "new" / "store.db"

        result = runner.invoke(app, ["init-db", "--db", str(db)])

        assert result.exit_code == 0
        assert db.exists()
