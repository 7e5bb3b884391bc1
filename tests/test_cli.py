"""Tests for taskboard.cli module."""

import json

import pytest

from taskboard.cli import main


@pytest.fixture
def run(tmp_path, monkeypatch, capsys):
    """Run the CLI against a local store in tmp_path"""
    for var in ("TASKBOARD_API_URL", "TASKBOARD_TOKEN", "TASKBOARD_COMPANY_ID", "TASKBOARD_DATA_DIR"):
        monkeypatch.delenv(var, raising=False)
    data_dir = str(tmp_path / "board")

    def _run(*argv):
        capsys.readouterr()
        code = main(["--dir", data_dir, *argv])
        return code, capsys.readouterr().out
    return _run


class TestCLI:
    """End-to-end CLI flows on the file store."""

    def test_no_command_prints_help(self, run):
        code, out = run()
        assert code == 1
        assert "usage" in out.lower()

    def test_create_and_list(self, run):
        code, out = run("create", "Call supplier", "--content", "March invoice")
        assert code == 0
        assert "[1] Call supplier" in out

        code, out = run("list")
        assert code == 0
        assert "TO DO (1)" in out
        assert "IN PROGRESS (0)" in out
        assert "[1] Call supplier" in out

    def test_move_persists_status(self, run):
        run("create", "A")
        code, out = run("move", "1", "ip")
        assert code == 0
        assert "IN PROGRESS" in out

        code, out = run("list", "--json")
        data = json.loads(out)
        assert [t["id"] for t in data["in_progress"]] == [1]
        assert data["todo"] == []

    def test_reorder_reports_not_saved(self, run):
        run("create", "A")
        run("create", "B")
        code, out = run("move", "2", "todo", "--index", "0")
        assert code == 0
        assert "not saved" in out

    def test_move_to_same_place(self, run):
        run("create", "A")
        code, out = run("move", "1", "t")
        assert code == 0
        assert "already there" in out

    def test_move_errors(self, run):
        run("create", "A")
        assert run("move", "9", "done")[0] == 1
        code, out = run("move", "1", "backlog")
        assert code == 1
        assert "Invalid column" in out

    def test_edit_and_delete(self, run):
        run("create", "A")
        code, out = run("edit", "1", "--title", "A2", "--priority", "urgent")
        assert code == 0
        assert "A2" in out
        assert run("edit", "1")[0] == 1

        code, _ = run("delete", "1")
        assert code == 0
        code, out = run("delete", "1")
        assert code == 1
        assert "Task not found" in out

    def test_comments(self, run):
        run("create", "A")
        assert run("comment", "1", "Left a voicemail")[0] == 0
        code, out = run("comments", "1")
        assert code == 0
        assert "Left a voicemail" in out
        assert run("comment", "1", "  ")[0] == 1

    def test_stats(self, run):
        run("create", "A")
        run("create", "B")
        run("move", "1", "done")
        code, out = run("stats", "--json")
        assert code == 0
        stats = json.loads(out)
        assert stats["total"] == 2
        assert stats["completion_rate"] == 50.0
        assert stats["by_status"]["done"] == 1

    def test_blank_title(self, run):
        code, out = run("create", "  ")
        assert code == 1
        assert "title" in out

    def test_create_help_mentions_api_content_rule(self, capsys):
        with pytest.raises(SystemExit):
            main(["create", "--help"])
        help_text = " ".join(capsys.readouterr().out.split())
        assert "the REST API requires one" in help_text
