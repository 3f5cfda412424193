"""Fractional ranking of tasks inside a heading.

Ranks are plain floats compared only within one heading. New tasks go to
the end (max + increment); drops between two tasks take the midpoint of
their neighbours, so nothing else has to be renumbered. Every function here
is pure: it reads the task list it is given and returns the new values,
the caller applies them.
"""
from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Optional, Sequence

from models import RANK_INCREMENT, Task


@dataclass(frozen=True)
class Placement:
    heading_id: str
    rank: float
    # other tasks whose rank had to change (only after a renormalisation)
    renumbered: Dict[str, float] = field(default_factory=dict)


def _find(items: Iterable[Task], task_id: str) -> Optional[Task]:
    for task in items:
        if task.id == task_id:
            return task
    return None


class RankEngine:
    def __init__(self, increment: float = RANK_INCREMENT):
        self.increment = increment

    # -------------------- ordering --------------------
    def ordered(self, items: Sequence[Task], heading_id: str) -> List[Task]:
        """Tasks of one heading by rank; storage order breaks ties."""
        indexed = [(i, t) for i, t in enumerate(items) if t.heading_id == heading_id]
        indexed.sort(key=lambda pair: (pair[1].rank, pair[0]))
        return [t for _, t in indexed]

    # -------------------- append / move --------------------
    def append_rank(self, items: Iterable[Task], heading_id: str) -> float:
        ranks = [t.rank for t in items if t.heading_id == heading_id]
        return max(ranks, default=0) + self.increment

    def move_to_category(self, item: Task, heading_id: str, items: Sequence[Task]) -> Placement:
        others = [t for t in items if t.id != item.id]
        return Placement(heading_id, self.append_rank(others, heading_id))

    # -------------------- drag / drop --------------------
    def reorder(self, dragged_id: str, target_id: str, insert_before: bool,
                items: Sequence[Task]) -> Optional[Placement]:
        """Place ``dragged_id`` right before or after ``target_id``.

        The dragged task adopts the target's heading. Returns None when the
        ids are equal or either one is unknown.
        """
        if dragged_id == target_id:
            return None
        dragged = _find(items, dragged_id)
        target = _find(items, target_id)
        if dragged is None or target is None:
            return None

        heading_id = target.heading_id
        rank = self._between(target, insert_before, items, exclude=dragged.id)
        if rank is not None:
            return Placement(heading_id, rank)

        # neighbours too close to split: spread the heading out and retry
        renumbered = self.renormalize(items, heading_id, exclude=dragged.id)
        spread = [replace(t, rank=renumbered[t.id]) if t.id in renumbered else t for t in items]
        target = _find(spread, target_id)
        rank = self._between(target, insert_before, spread, exclude=dragged.id)
        return Placement(heading_id, rank, renumbered)

    def _between(self, target: Task, insert_before: bool, items: Sequence[Task],
                 exclude: str) -> Optional[float]:
        peers = [t.rank for t in items
                 if t.heading_id == target.heading_id and t.id not in (exclude, target.id)]
        if insert_before:
            low = max((r for r in peers if r < target.rank), default=target.rank - self.increment)
            high = target.rank
        else:
            low = target.rank
            high = min((r for r in peers if r > target.rank), default=target.rank + self.increment)
        mid = (low + high) / 2
        if low < mid < high:
            return mid
        return None

    def renormalize(self, items: Sequence[Task], heading_id: str,
                    exclude: Optional[str] = None) -> Dict[str, float]:
        """Ranks ``index * increment`` for a heading, in current order."""
        ordered = [t for t in self.ordered(items, heading_id) if t.id != exclude]
        return {t.id: index * self.increment for index, t in enumerate(ordered)}
