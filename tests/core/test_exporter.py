"""Tests for top-level export operations."""

import csv
import io
import json

import pytest

from pathways.core.exporter import (
    export_all,
    export_stats,
    export_user,
    export_with_format,
    sanitize_name,
    user_file_name,
)
from pathways.db.records_repository import UserNotFoundError


class TestFileNames:
    """Tests for artifact naming."""

    def test_sanitize_collapses_whitespace_runs(self):
        assert sanitize_name("Ada  King\tLovelace") == "Ada_King_Lovelace"

    def test_user_file_name(self, fixed_now):
        assert (
            user_file_name("Ada Lovelace", "u1", fixed_now)
            == "user_pathway_Ada_Lovelace_u1_2026-10-19.json"
        )


class TestExportAll:
    """Tests for export_all."""

    def test_writes_dated_json(self, ada_store, conn, tmp_path, fixed_now):
        out = tmp_path / "exports"

        result = export_all(conn, out, fixed_now)

        assert result.paths == [out / "pathway_data_2026-10-19.json"]
        data = json.loads(result.paths[0].read_text(encoding="utf-8"))
        assert data["totalUsers"] == 1
        assert data["users"][0]["roadmaps"][0]["quizzes"][0]["topic"] == "Intro to Algorithms"

    def test_same_day_exports_differ_only_in_date(self, ada_store, conn, tmp_path, fixed_now):
        first = export_all(conn, tmp_path / "one", fixed_now.replace(hour=8))
        second = export_all(conn, tmp_path / "two", fixed_now.replace(hour=9))

        first_data = json.loads(first.paths[0].read_text(encoding="utf-8"))
        second_data = json.loads(second.paths[0].read_text(encoding="utf-8"))

        assert first_data.pop("exportDate") != second_data.pop("exportDate")
        assert json.dumps(first_data) == json.dumps(second_data)


class TestExportUser:
    """Tests for export_user."""

    def test_writes_user_file(self, seeder, conn, tmp_path, fixed_now):
        seeder.user("u7", "Grace  Brewster Hopper")

        result = export_user(conn, "u7", tmp_path, fixed_now)

        assert result.paths[0].name == "user_pathway_Grace_Brewster_Hopper_u7_2026-10-19.json"
        data = json.loads(result.paths[0].read_text(encoding="utf-8"))
        assert data["exportDate"] == fixed_now.isoformat()
        assert data["userId"] == "u7"

    def test_unknown_user_writes_nothing(self, ada_store, conn, tmp_path):
        out = tmp_path / "exports"

        with pytest.raises(UserNotFoundError):
            export_user(conn, "ghost", out)

        assert not out.exists()


class TestExportStats:
    """Tests for export_stats."""

    def test_writes_stats_file(self, ada_store, conn, tmp_path, fixed_now):
        result = export_stats(conn, tmp_path, fixed_now)

        assert result.path.name == "pathway_stats_2026-10-19.json"
        data = json.loads(result.path.read_text(encoding="utf-8"))
        assert data["performance"]["checkpointCompletionRate"] == "100.00%"


class TestExportWithFormat:
    """Tests for export_with_format."""

    def test_json_only(self, ada_store, conn, tmp_path, fixed_now):
        result = export_with_format(conn, tmp_path, "json", now=fixed_now)
        assert [p.name for p in result.paths] == ["pathway_data_2026-10-19.json"]

    def test_csv_adds_tabular_artifact(self, ada_store, conn, tmp_path, fixed_now):
        result = export_with_format(conn, tmp_path, "csv", now=fixed_now)

        assert [p.name for p in result.paths] == [
            "pathway_data_2026-10-19.json",
            "pathway_data_2026-10-19.csv",
        ]
        rows = list(csv.DictReader(io.StringIO(result.paths[1].read_text(encoding="utf-8"))))
        assert len(rows) == 1
        assert rows[0]["checkpointTitle"] == "Intro"
        assert rows[0]["roadmapProgress"] == "40"

    def test_csv_for_single_user(self, ada_store, conn, tmp_path, fixed_now):
        result = export_with_format(conn, tmp_path, "csv", user_id="u1", now=fixed_now)

        assert [p.name for p in result.paths] == [
            "user_pathway_Ada_u1_2026-10-19.json",
            "user_pathway_u1_2026-10-19.csv",
        ]

    def test_csv_without_checkpoints_is_empty_file(self, seeder, conn, tmp_path, fixed_now):
        seeder.user("u1", "Ada")
        seeder.roadmap("r1", "u1", "Go")

        result = export_with_format(conn, tmp_path, "csv", now=fixed_now)

        assert result.paths[1].read_text(encoding="utf-8") == ""

    def test_unknown_format_rejected(self, ada_store, conn, tmp_path):
        with pytest.raises(ValueError):
            export_with_format(conn, tmp_path / "exports", "xml")
        assert not (tmp_path / "exports").exists()

    def test_empty_user_id_is_not_found(self, ada_store, conn, tmp_path):
        out = tmp_path / "exports"

        with pytest.raises(UserNotFoundError):
            export_with_format(conn, out, "csv", user_id="")

        assert not out.exists()


class TestUnencodableRecords:
    """Tests for records that cannot be written as UTF-8."""

    def test_failed_export_leaves_no_files(self, seeder, conn, tmp_path, fixed_now):
        seeder.user("u1", "Ada", learning_parameters={"note": "\ud800"})
        out = tmp_path / "exports"

        with pytest.raises(UnicodeEncodeError):
            export_all(conn, out, fixed_now)

        assert list(out.iterdir()) == []
