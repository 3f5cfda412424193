from __future__ import annotations

from datetime import datetime, timedelta
from typing import List

import pytest

from board import Board


class FakeClock:
    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        self.now += timedelta(milliseconds=1)
        return self.now


@pytest.fixture()
def board() -> Board:
    return Board(clock=FakeClock(datetime(2024, 6, 1, 9, 0)))


def _texts(board: Board, heading: str) -> List[str]:
    return [t.text for t in board.tasks_in(heading)]


def test_add_task_extracts_date_and_appends_to_inbox(board: Board) -> None:
    first = board.add_task("Call mom tomorrow")
    second = board.add_task("Write report")
    assert first.text == "Call mom"
    assert first.due_date == "2024-06-02"
    assert first.heading_id == "inbox"
    assert first.rank == 1000
    assert second.rank == 2000
    assert first.id != second.id
    assert first.created_at.startswith("2024-06-01T09:00")


def test_explicit_date_wins_over_extracted(board: Board) -> None:
    task = board.add_task("Call mom tomorrow", due_date="2024-07-01")
    assert task.text == "Call mom"
    assert task.due_date == "2024-07-01"


def test_add_task_rejects_empty_text(board: Board) -> None:
    assert board.add_task("   ") is None
    assert board.tasks == []


def test_move_task_gets_fresh_rank(board: Board) -> None:
    a = board.add_task("a")
    b = board.add_task("b")
    c = board.add_task("c")
    board.move_task(c.id, "today")
    assert c.heading_id == "today"
    assert c.rank == 1000
    board.move_task(a.id, "today")
    assert _texts(board, "today") == ["c", "a"]
    assert _texts(board, "inbox") == ["b"]
    assert b.rank == 2000


def test_move_task_rejects_unknown_heading(board: Board) -> None:
    a = board.add_task("a")
    assert board.move_task(a.id, "someday") == "Invalid heading: someday"
    assert a.heading_id == "inbox"


def test_toggle_done_round_trip(board: Board) -> None:
    board.add_task("keep")
    a = board.add_task("finish")
    board.toggle_done(a.id)
    assert a.heading_id == "done"
    board.toggle_done(a.id)
    assert a.heading_id == "inbox"
    assert _texts(board, "inbox") == ["keep", "finish"]


def test_reorder_and_nudge(board: Board) -> None:
    a = board.add_task("a")
    b = board.add_task("b")
    c = board.add_task("c")
    board.reorder_task(c.id, a.id, insert_before=True)
    assert _texts(board, "inbox") == ["c", "a", "b"]
    board.nudge(b.id, -1)
    assert _texts(board, "inbox") == ["c", "b", "a"]
    board.nudge(c.id, 1)
    assert _texts(board, "inbox") == ["b", "c", "a"]
    assert "already at the top" in board.nudge(b.id, -1)


def test_duplicate_ids_are_dropped_on_load_and_nudge_moves_the_right_task() -> None:
    record = {"id": "1", "text": "same", "headingId": "inbox", "rank": 1000}
    data = {
        "todos": [
            record,
            dict(record),
            {"id": "2", "text": "other", "headingId": "inbox", "rank": 2000},
        ],
    }
    board = Board(data)
    assert [t.id for t in board.tasks] == ["1", "2"]
    board.nudge("2", -1)
    assert _texts(board, "inbox") == ["other", "same"]
    board.nudge("1", -1)
    assert _texts(board, "inbox") == ["same", "other"]


def test_reorder_unknown_ids_changes_nothing(board: Board) -> None:
    a = board.add_task("a")
    assert board.reorder_task(a.id, "nope") == "Nothing to reorder."
    assert board.reorder_task(a.id, a.id) == "Nothing to reorder."
    assert a.rank == 1000


def test_field_edits(board: Board) -> None:
    a = board.add_task("a")
    board.edit_text(a.id, "  renamed ")
    board.set_description(a.id, "# Notes")
    assert a.text == "renamed"
    assert a.description == "# Notes"
    assert board.set_due_date(a.id, "not-a-date") == "Invalid date: not-a-date"
    board.snooze(a.id, 7)
    assert a.due_date == "2024-06-08"
    board.set_due_date(a.id, None)
    assert a.due_date is None
    assert board.edit_text("missing", "x") == "Task missing not found."


def test_remove_task(board: Board) -> None:
    a = board.add_task("a")
    board.remove_task(a.id)
    assert board.get(a.id) is None
    assert board.remove_task(a.id) == f"Task {a.id} not found."


def test_take_done_returns_done_tasks_in_order(board: Board) -> None:
    a = board.add_task("a")
    b = board.add_task("b")
    board.add_task("c")
    board.toggle_done(b.id)
    board.toggle_done(a.id)
    done = board.take_done()
    assert [t.text for t in done] == ["b", "a"]
    assert _texts(board, "done") == []
    assert _texts(board, "inbox") == ["c"]


def test_load_migrates_legacy_data() -> None:
    data = {
        "headings": [{"id": "inbox", "title": "Inbox"}, {"id": "upcoming", "title": "Upcoming"}],
        "todos": [
            {"id": "1", "text": "first", "headingId": "inbox"},
            {"id": "2", "text": "second", "headingId": "upcoming"},
            {"id": "3", "text": "third", "headingId": "inbox"},
            {"id": "4", "headingId": "inbox"},
            {"id": "5", "text": "ghost", "headingId": "someday"},
            {"id": "6", "text": "bad rank", "headingId": "inbox", "rank": "abc"},
        ],
    }
    board = Board(data)
    assert [h.id for h in board.headings] == ["inbox", "backlog", "today", "done"]
    assert board.heading("backlog").title == "Backlog"
    assert [(t.id, t.heading_id, t.rank) for t in board.tasks] == [
        ("1", "inbox", 0.0), ("2", "backlog", 1000.0), ("3", "inbox", 2000.0), ("6", "inbox", 5000.0),
    ]
    assert all(t.description == "" and t.due_date is None for t in board.tasks)


def test_load_keeps_existing_ranks_and_view() -> None:
    data = {
        "headings": [{"id": "today", "title": "Now"}],
        "todos": [
            {"id": "a", "text": "a", "headingId": "today", "rank": 5.5, "dueDate": "2024-01-02",
             "description": "d", "createdAt": "2024-01-01T00:00:00"},
        ],
        "view": "calendar",
    }
    board = Board(data)
    task = board.get("a")
    assert task.rank == 5.5
    assert task.due_date == "2024-01-02"
    assert board.heading("today").title == "Now"
    assert board.view == "calendar"


def test_get_data_round_trips() -> None:
    board = Board(clock=FakeClock(datetime(2024, 6, 1)))
    task = board.add_task("Pay rent by 6/3")
    board.view = "today"
    data = board.get_data()
    assert data["todos"] == [{
        "id": task.id, "text": "Pay rent", "description": "", "dueDate": "2024-06-03",
        "headingId": "inbox", "rank": 1000, "createdAt": task.created_at,
    }]
    assert data["view"] == "today"
    again = Board(data)
    assert again.get_data() == data
