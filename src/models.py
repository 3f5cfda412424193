"""Data models for the terminal todo list.

Headings are the fixed set of buckets a task lives in. The storage keys
("inbox", "backlog", "today", "done") never change; titles are what the
views print.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Tuple

RANK_INCREMENT = 1000
INTAKE_HEADING = "inbox"
DONE_HEADING = "done"
LEGACY_HEADINGS = {"upcoming": "backlog"}


@dataclass
class Heading:
    id: str
    title: str


DEFAULT_HEADINGS: Tuple[Heading, ...] = (
    Heading("inbox", "Inbox"),
    Heading("backlog", "Backlog"),
    Heading("today", "Today"),
    Heading("done", "Done"),
)


@dataclass
class Task:
    """A single task.

    Fields:
        id: Opaque identifier, assigned at creation and never changed.
        text: Single-line display text (date expression already stripped).
        description: Optional markdown source, may be empty.
        due_date: ``YYYY-MM-DD`` or None.
        heading_id: One of the configured heading ids.
        rank: Sort key within the heading only.
        created_at: ISO timestamp of creation.
    """
    id: str
    text: str
    heading_id: str = INTAKE_HEADING
    rank: float = 0.0
    description: str = ""
    due_date: Optional[str] = None
    created_at: Optional[str] = None

    def __repr__(self) -> str:  # pragma: no cover - convenience only
        return f"Task(id={self.id}, text={self.text}, heading={self.heading_id}, rank={self.rank})"
