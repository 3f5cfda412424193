from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

import pytest
from click.testing import CliRunner

from board import Board
from cli import CLI
from main import main
from storage import Storage


@pytest.fixture()
def cli(tmp_path: Path) -> CLI:
    board = Board(clock=lambda: datetime(2024, 6, 1, 12, 0))
    storage = Storage(tmp_path / "todos.json", tmp_path / "archive")
    shell = CLI(board, storage, view="planning", alt_screen=False)
    for text in ("Plan sprint", "Water plants tomorrow", "Read book"):
        board.add_task(text)
    shell.redraw()
    return shell


def _inbox(cli: CLI):
    return [t.text for t in cli.board.tasks_in("inbox")]


def test_add_with_natural_and_explicit_dates(cli: CLI) -> None:
    assert cli.handle_command("add Call mom tomorrow") == 'Added "Call mom" due 2024-06-02.'
    assert cli.handle_command("add Pay rent by 6/3 @ 2024-06-05") == 'Added "Pay rent" due 2024-06-05.'
    assert cli.handle_command("add Bad @ 2024-13-01").startswith("Invalid date")


def test_numbers_refer_to_last_render(cli: CLI) -> None:
    cli.handle_command("before 3 1")
    assert _inbox(cli) == ["Read book", "Plan sprint", "Water plants"]
    cli.redraw()
    cli.handle_command("down 1")
    assert _inbox(cli) == ["Plan sprint", "Read book", "Water plants"]


def test_move_and_done(cli: CLI) -> None:
    assert cli.handle_command("mv 1 t") == 'Task "Plan sprint" moved to "today".'
    assert cli.handle_command("mv 2 nowhere") == "Invalid heading."
    cli.handle_command("done 3")
    assert [t.text for t in cli.board.tasks_in("done")] == ["Read book"]
    assert cli.handle_command("mv 9 t") == "Invalid number."


def test_due_accepts_iso_and_natural_text(cli: CLI) -> None:
    cli.handle_command("due 1 2024-08-01")
    cli.handle_command("due 2 Jan 7")
    cli.handle_command("due 3 tomorrow")
    assert [t.due_date for t in cli.board.tasks_in("inbox")] == ["2024-08-01", "2025-01-07", "2024-06-02"]
    cli.handle_command("due 1 -")
    assert cli.board.tasks_in("inbox")[0].due_date is None
    assert cli.handle_command("due 1 someday") == "Invalid date: someday"


def test_due_rejects_trailing_text(cli: CLI) -> None:
    assert cli.handle_command("due 1 1/7 buy milk") == "Invalid date: 1/7 buy milk"
    assert cli.board.tasks_in("inbox")[0].due_date is None


def test_desc_and_show(cli: CLI, monkeypatch: pytest.MonkeyPatch) -> None:
    lines = iter(["## Steps", "**buy** soil", "."])
    monkeypatch.setattr("builtins.input", lambda *args: next(lines))
    cli.handle_command("desc 1")
    shown = cli.handle_command("show 1")
    assert shown.splitlines()[0] == "Plan sprint"
    assert "Heading: Inbox" in shown
    assert shown.splitlines()[-2:] == ["Steps", "buy soil"]


def test_view_archive_and_save(cli: CLI, tmp_path: Path) -> None:
    assert cli.handle_command("view calendar") == "Switched to calendar view."
    assert cli.handle_command("view gantt").startswith("Usage")
    assert cli.handle_command("archive") == "Nothing to archive."
    cli.handle_command("done 1")
    assert cli.handle_command("archive").startswith("Archived done tasks to")
    cli.save()
    saved = json.loads((tmp_path / "todos.json").read_text(encoding="utf-8"))
    assert saved["view"] == "calendar"
    assert [t["text"] for t in saved["todos"]] == ["Water plants", "Read book"]


def test_unknown_command(cli: CLI) -> None:
    assert cli.handle_command("frobnicate") == "Unknown command. Type 'help' for instructions."


def test_entry_point_reports_corrupt_data(tmp_path: Path) -> None:
    data_file = tmp_path / "todos.json"
    data_file.write_text("{broken", encoding="utf-8")
    result = CliRunner().invoke(main, ["--data-file", str(data_file), "--no-alt-screen"])
    assert result.exit_code == 1
    assert "Cannot read" in result.output
