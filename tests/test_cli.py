"""Comprehensive tests for CLI module."""

import json
import tempfile
from io import StringIO
from pathlib import Path
from unittest.mock import patch

import pytest

from utd.cli import cmd_add, create_parser, format_entry, main, render, run_actions
from utd.config import Config
from utd.models import Entry, Priority
from utd.repository import EntryRepository
from utd.storage import JsonStorage


class TestCLI:
    """Test suite for CLI functionality."""

    @pytest.fixture
    def temp_dir(self):
        """Create a temporary data directory for testing."""
        with tempfile.TemporaryDirectory() as tmpdir:
            yield Path(tmpdir)

    @pytest.fixture
    def repo(self, temp_dir):
        """Create an EntryRepository with temporary storage."""
        return EntryRepository(JsonStorage(str(temp_dir / ".utd.json")))

    def run_main(self, temp_dir, *argv):
        with patch("sys.stdout", new_callable=StringIO) as mock_stdout:
            result = main(["--data-dir", str(temp_dir), *argv])
        return result, mock_stdout.getvalue()

    def test_create_parser(self):
        """Test that parser is created with the expected program name."""
        parser = create_parser()
        assert parser.prog == "utd"

        with pytest.raises(SystemExit):
            parser.parse_args(["--help"])

    def test_parser_defaults(self):
        args = create_parser().parse_args([])
        assert args.add is None
        assert args.note is None
        assert args.priority is None
        assert args.tidy is False
        assert args.re_set_ids is False
        assert args.sort is None

    def test_parser_multiple_actions(self):
        """Test that several actions can be combined in one invocation."""
        args = create_parser().parse_args(
            ["-a", "one", "two", "-p", "high", "low", "-d", "3", "-c", "1", "-t", "-s", "age"]
        )
        assert args.add == ["one", "two"]
        assert args.priority == ["high", "low"]
        assert args.delete == ["3"]
        assert args.check == ["1"]
        assert args.tidy is True
        assert args.sort == "age"

    def test_parser_rejects_unknown_priority(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["-a", "x", "-p", "urgent"])

    def test_cmd_add_tasks_then_notes(self, repo):
        """Test that tasks consume priorities before notes."""
        args = create_parser().parse_args(["-a", "t1", "-n", "n1", "n2", "-p", "low", "high"])
        cmd_add(args, repo)

        entries = repo.get_all()
        assert [(e.title, e.is_task, e.priority) for e in entries] == [
            ("t1", True, Priority.LOW),
            ("n1", False, Priority.HIGH),
            ("n2", False, Priority.NORMAL),
        ]

    def test_run_actions_continues_after_failure(self, repo, caplog):
        """Test that a failing action is logged and later ones still run."""
        repo.add(["a", "b", "c"])
        args = create_parser().parse_args(["-d", "2", "oops", "-c", "1", "-t"])

        run_actions(args, repo)

        assert [e.id for e in repo.get_all()] == [2, 3]
        assert "Invalid id" in caplog.text

    def test_run_actions_order(self, repo):
        """Test that delete runs before renumber."""
        repo.add(["a", "b", "c"])
        args = create_parser().parse_args(["-d", "1", "-r"])

        run_actions(args, repo)

        assert [(e.id, e.title) for e in repo.get_all()] == [(1, "b"), (2, "c")]

    def test_render_empty(self):
        assert render([], Config()) == ""

    def test_render_groups(self):
        entries = [
            Entry(id=1, title="open"),
            Entry(id=2, title="doing", in_progress=True),
            Entry(id=3, title="finished", is_done=True),
            Entry(id=4, title="idea", tags="@misc", is_task=False),
        ]
        lines = render(entries, Config(disable_title=True)).splitlines()
        assert lines == [
            "to-do [1/3]",
            "  ☐ 1. open (normal)",
            "  ✓ 3. finished (normal)",
            "in progress",
            "  ☐ 2. doing (normal)",
            "notes",
            "  ☐ 4. idea @misc (normal)",
        ]

    def test_render_title(self):
        output = render([Entry(id=1, title="x")], Config())
        assert output.splitlines()[0] in {
            "Here's your board",
            "Remember...",
            "Let's get things done",
            "Focus",
        }

    def test_format_entry(self):
        entry = Entry(id=5, title="Buy milk  ", tags="@shop", priority=Priority.HIGH)
        assert format_entry(entry) == "  ☐ 5. Buy milk   @shop (high)"

    def test_format_entry_shows_priority(self):
        """Test that every priority level is visible in the listing."""
        for priority in Priority:
            line = format_entry(Entry(id=1, title="x", priority=priority))
            assert line.endswith(f"({priority.value})")

    def test_main_add_and_display(self, temp_dir):
        (temp_dir / "utd.json").write_text(json.dumps({"disable_title": True}))

        result, output = self.run_main(temp_dir, "-a", "Write tests @dev")

        assert result == 0
        assert "to-do [0/1]" in output
        assert "1. Write tests   @dev" in output

    def test_main_empty_prints_nothing(self, temp_dir):
        result, output = self.run_main(temp_dir)
        assert result == 0
        assert output == ""

    def test_main_sort_by_priority(self, temp_dir):
        (temp_dir / "utd.json").write_text(json.dumps({"disable_title": True}))
        self.run_main(temp_dir, "-a", "low", "high", "-p", "low", "high")

        _, output = self.run_main(temp_dir, "-s", "priority")
        assert output.index("high") < output.index("low")

        _, output = self.run_main(temp_dir)
        assert output.index("low") < output.index("high")

    def test_main_bad_config_falls_back(self, temp_dir):
        (temp_dir / "utd.json").write_text("not json")

        result, output = self.run_main(temp_dir, "-a", "still works")

        assert result == 0
        assert "still works" in output

    def test_main_corrupted_state_file(self, temp_dir):
        """Test that an unreadable collection makes the display fail."""
        (temp_dir / ".utd.json").write_text("{broken")

        result, output = self.run_main(temp_dir, "-a", "x")

        assert result == 1
        assert output == ""
        assert (temp_dir / ".utd.json").read_text() == "{broken"

    def test_main_state_file_not_utf8(self, temp_dir):
        """Test that undecodable state content is logged, not raised."""
        (temp_dir / ".utd.json").write_bytes(b"\xff\xfe[]")

        result, output = self.run_main(temp_dir, "-d", "1")

        assert result == 1
        assert output == ""
        assert (temp_dir / ".utd.json").read_bytes() == b"\xff\xfe[]"

    def test_main_state_file_nested_too_deeply(self, temp_dir):
        (temp_dir / ".utd.json").write_text("[" * 100000)

        result, output = self.run_main(temp_dir, "-c", "1")

        assert result == 1
        assert output == ""

    def test_main_config_not_utf8_falls_back(self, temp_dir):
        (temp_dir / "utd.json").write_bytes(b"\xff\xfe{}")

        result, output = self.run_main(temp_dir, "-a", "still works")

        assert result == 0
        assert "still works" in output

    def test_main_underscore_id_does_not_delete(self, temp_dir):
        """Test that '1_0' is rejected rather than read as 10."""
        self.run_main(temp_dir, "-a", *[f"entry {i}" for i in range(1, 11)])

        result, output = self.run_main(temp_dir, "-d", "1_0")

        assert result == 0
        assert "10. entry 10" in output
