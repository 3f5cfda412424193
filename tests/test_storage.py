from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

import pytest

from board import Board
from storage import Storage, StorageError


def test_load_missing_file_is_empty(tmp_path: Path) -> None:
    storage = Storage(tmp_path / "todos.json")
    assert storage.load() == {"headings": [], "todos": []}


def test_save_then_load(tmp_path: Path) -> None:
    storage = Storage(tmp_path / "nested" / "todos.json")
    board = Board()
    board.add_task("Call mom")
    storage.save(board.get_data())
    loaded = storage.load()
    assert loaded["todos"][0]["text"] == "Call mom"
    assert not (tmp_path / "nested" / "todos.json.tmp").exists()


def test_load_fills_missing_sections(tmp_path: Path) -> None:
    path = tmp_path / "todos.json"
    path.write_text(json.dumps({"todos": [{"id": "1", "text": "x"}]}), encoding="utf-8")
    data = Storage(path).load()
    assert data["headings"] == []
    assert Board(data).get("1").heading_id == "inbox"


@pytest.mark.parametrize("content", ["{not json", "[1, 2]"])
def test_load_rejects_bad_content(tmp_path: Path, content: str) -> None:
    path = tmp_path / "todos.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(StorageError):
        Storage(path).load()


def test_archive_done_exports_and_removes(tmp_path: Path) -> None:
    storage = Storage(tmp_path / "todos.json", tmp_path / "archive")
    board = Board()
    a = board.add_task("ship")
    board.add_task("keep")
    board.toggle_done(a.id)

    now = datetime(2024, 6, 1, 18, 30, 5)
    path = storage.archive_done(board, now)

    assert path == tmp_path / "archive" / "archive-20240601-183005.json"
    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["archivedAt"] == "2024-06-01T18:30:05"
    assert [t["text"] for t in payload["todos"]] == ["ship"]
    assert payload["todos"][0]["headingId"] == "done"
    assert [t.text for t in board.tasks] == ["keep"]


def test_second_archive_in_same_second_gets_its_own_file(tmp_path: Path) -> None:
    storage = Storage(tmp_path / "todos.json", tmp_path / "archive")
    board = Board()
    now = datetime(2024, 6, 1, 18, 30, 5)

    first = board.add_task("first")
    board.toggle_done(first.id)
    first_path = storage.archive_done(board, now)
    second = board.add_task("second")
    board.toggle_done(second.id)
    second_path = storage.archive_done(board, now)

    assert first_path.name == "archive-20240601-183005.json"
    assert second_path.name == "archive-20240601-183005-2.json"
    exported = [
        t["text"]
        for p in (first_path, second_path)
        for t in json.loads(p.read_text(encoding="utf-8"))["todos"]
    ]
    assert exported == ["first", "second"]


def test_archive_with_nothing_done_writes_nothing(tmp_path: Path) -> None:
    storage = Storage(tmp_path / "todos.json")
    board = Board()
    board.add_task("keep")
    assert storage.archive_done(board, datetime(2024, 6, 1)) is None
    assert not (tmp_path / "archive").exists()
