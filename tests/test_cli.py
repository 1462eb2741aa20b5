"""Tests for the command-line interface."""

import json

import pytest
from click.testing import CliRunner

from edbsession.cli import main


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def session_file(tmp_path):
    path = tmp_path / "target.edb"
    path.write_text(
        json.dumps(
            {
                "id": "edb-session",
                "version": 1,
                "timestamp": "2024-01-02T03:04:05+00:00",
                "plugin-data": {"Bookmarks": {"items": []}},
                "objects": {
                    "0000000000401000": {"type": "comment", "comment": "entry point", "module": "app"},
                    "0000000000401080": {"type": "label", "label": "main_loop", "module": "app"},
                },
            }
        )
    )
    return path


class TestCli:
    """Tests for edbsession commands."""

    def test_info(self, runner, session_file):
        """Test info shows header and counts."""
        result = runner.invoke(main, ["info", str(session_file)])

        assert result.exit_code == 0
        assert "edb-session" in result.output
        assert "Bookmarks" in result.output

    def test_objects(self, runner, session_file):
        """Test objects lists every record."""
        result = runner.invoke(main, ["objects", str(session_file)])

        assert result.exit_code == 0
        assert "entry point" in result.output
        assert "main_loop" in result.output
        assert "Total: 2 objects" in result.output

    def test_objects_filter(self, runner, session_file):
        """Test filtering objects by type."""
        result = runner.invoke(main, ["objects", "--type", "label", str(session_file)])

        assert result.exit_code == 0
        assert "main_loop" in result.output
        assert "Total: 1 objects" in result.output

    def test_check_ok(self, runner, session_file):
        """Test check passes a valid file."""
        result = runner.invoke(main, ["check", str(session_file)])

        assert result.exit_code == 0
        assert "OK" in result.output

    def test_check_invalid(self, runner, tmp_path):
        """Test check fails on a foreign document."""
        path = tmp_path / "bad.edb"
        path.write_text(json.dumps({"id": "other", "version": 1}))

        result = runner.invoke(main, ["check", str(path)])

        assert result.exit_code == 1

    def test_check_corrupt(self, runner, tmp_path):
        """Test check fails on malformed JSON."""
        path = tmp_path / "bad.edb"
        path.write_text("{")

        result = runner.invoke(main, ["check", str(path)])

        assert result.exit_code == 1
