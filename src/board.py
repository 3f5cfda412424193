"""Board logic: holds headings and tasks, load-time migration, task mutation.

Tasks are kept in one list in storage order; per-heading order comes from
the rank engine. The board is the only owner of this state and every
mutation goes through it, one at a time.
"""
import logging
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from dates import DateExtractor, parse_due
from models import (DEFAULT_HEADINGS, DONE_HEADING, INTAKE_HEADING, LEGACY_HEADINGS,
                    Heading, Task)
from rank import Placement, RankEngine

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class Board:
    def __init__(self, data: Optional[Mapping[str, Any]] = None,
                 clock: Clock = datetime.now,
                 ranker: Optional[RankEngine] = None,
                 extractor: Optional[DateExtractor] = None):
        self.clock = clock
        self.ranker = ranker or RankEngine()
        self.extractor = extractor or DateExtractor()
        self.headings: List[Heading] = [replace(h) for h in DEFAULT_HEADINGS]
        self.tasks: List[Task] = []
        self.view: Optional[str] = None
        self._last_id: int = 0
        if data:
            self._load_from_dict(data)

    # -------------------- loading / migration --------------------
    def _load_from_dict(self, data: Mapping[str, Any]) -> None:
        known = {h.id: h for h in self.headings}
        for raw in data.get('headings') or []:
            hid = LEGACY_HEADINGS.get(raw.get('id'), raw.get('id'))
            if hid != raw.get('id'):
                logger.info('Renamed legacy heading %r to %r', raw.get('id'), hid)
                continue  # renamed headings take the current title
            if hid in known and raw.get('title'):
                known[hid].title = str(raw['title'])

        for index, raw in enumerate(data.get('todos') or []):
            text = raw.get('text')
            if text is None:
                logger.warning('Dropping stored task without text: %r', raw)
                continue
            hid = raw.get('headingId') or INTAKE_HEADING
            hid = LEGACY_HEADINGS.get(hid, hid)
            if hid not in known:
                logger.warning('Dropping task %r with unknown heading %r', raw.get('id'), hid)
                continue
            rank = raw.get('rank')
            try:
                rank = float(rank) if rank is not None else index * self.ranker.increment
            except (TypeError, ValueError):
                logger.warning('Task %r has unusable rank %r, using position', raw.get('id'), rank)
                rank = index * self.ranker.increment
            tid = raw.get('id')
            if tid is not None and self.get(str(tid)) is not None:
                logger.warning('Dropping duplicate task id %r', tid)
                continue
            self.tasks.append(Task(
                id=str(tid) if tid is not None else self._allocate_id(),
                text=str(text),
                heading_id=hid,
                rank=rank,
                description=raw.get('description') or '',
                due_date=raw.get('dueDate') or None,
                created_at=raw.get('createdAt'),
            ))
        self.view = data.get('view')

    # -------------------- id management --------------------
    def _allocate_id(self) -> str:
        """Millisecond timestamp ids, bumped when two land in the same ms."""
        nid = int(self.clock().timestamp() * 1000)
        taken = {t.id for t in self.tasks}
        nid = max(nid, self._last_id + 1)
        while str(nid) in taken:
            nid += 1
        self._last_id = nid
        return str(nid)

    # -------------------- queries --------------------
    def heading_ids(self) -> List[str]:
        return [h.id for h in self.headings]

    def heading(self, heading_id: str) -> Optional[Heading]:
        for h in self.headings:
            if h.id == heading_id:
                return h
        return None

    def tasks_in(self, heading_id: str) -> List[Task]:
        return self.ranker.ordered(self.tasks, heading_id)

    def get(self, task_id: str) -> Optional[Task]:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def today(self) -> date:
        return self.clock().date()

    # -------------------- task operations --------------------
    def add_task(self, text: str, due_date: Optional[str] = None) -> Optional[Task]:
        """Create a task in the intake heading.

        A date found in ``text`` is stripped from it; an explicit ``due_date``
        wins over the extracted one.
        """
        now = self.clock()
        parsed = self.extractor.extract(text.strip(), now)
        if not parsed.cleaned_text:
            return None
        task = Task(
            id=self._allocate_id(),
            text=parsed.cleaned_text,
            heading_id=INTAKE_HEADING,
            rank=self.ranker.append_rank(self.tasks, INTAKE_HEADING),
            due_date=due_date or parsed.resolved_date,
            created_at=now.isoformat(),
        )
        self.tasks.append(task)
        logger.info('Added task %s to %s (due %s)', task.id, task.heading_id, task.due_date)
        return task

    def move_task(self, task_id: str, heading_id: str) -> str:
        if heading_id not in self.heading_ids():
            return f'Invalid heading: {heading_id}'
        task = self.get(task_id)
        if task is None:
            return f'Task {task_id} not found.'
        if task.heading_id == heading_id:
            return f'Task "{task.text}" already in {heading_id}.'
        self._apply(task, self.ranker.move_to_category(task, heading_id, self.tasks))
        return f'Task "{task.text}" moved to "{heading_id}".'

    def toggle_done(self, task_id: str) -> str:
        task = self.get(task_id)
        if task is None:
            return f'Task {task_id} not found.'
        target = INTAKE_HEADING if task.heading_id == DONE_HEADING else DONE_HEADING
        return self.move_task(task_id, target)

    def reorder_task(self, task_id: str, target_id: str, insert_before: bool = True) -> str:
        placement = self.ranker.reorder(task_id, target_id, insert_before, self.tasks)
        if placement is None:
            return 'Nothing to reorder.'
        task = self.get(task_id)
        self._apply(task, placement)
        side = 'before' if insert_before else 'after'
        return f'Task "{task.text}" placed {side} task {target_id}.'

    def nudge(self, task_id: str, offset: int) -> str:
        """Swap a task with its neighbour above (offset -1) or below (+1)."""
        task = self.get(task_id)
        if task is None:
            return f'Task {task_id} not found.'
        column = self.tasks_in(task.heading_id)
        pos = next(i for i, t in enumerate(column) if t is task) + offset
        if pos < 0 or pos >= len(column):
            return f'Task "{task.text}" is already at the {"top" if offset < 0 else "bottom"}.'
        return self.reorder_task(task.id, column[pos].id, insert_before=offset < 0)

    def _apply(self, task: Task, placement: Placement) -> None:
        if placement.renumbered:
            logger.info('Renormalized %d ranks in %s', len(placement.renumbered), placement.heading_id)
            for other in self.tasks:
                if other.id in placement.renumbered:
                    other.rank = placement.renumbered[other.id]
        task.heading_id = placement.heading_id
        task.rank = placement.rank

    def edit_text(self, task_id: str, text: str) -> str:
        task = self.get(task_id)
        if task is None:
            return f'Task {task_id} not found.'
        text = text.strip()
        if not text:
            return 'Text required.'
        task.text = text
        return f'Task {task_id} updated.'

    def set_description(self, task_id: str, description: str) -> str:
        task = self.get(task_id)
        if task is None:
            return f'Task {task_id} not found.'
        task.description = description
        return f'Task {task_id} description updated.'

    def set_due_date(self, task_id: str, due_date: Optional[str]) -> str:
        task = self.get(task_id)
        if task is None:
            return f'Task {task_id} not found.'
        if due_date and parse_due(due_date) is None:
            return f'Invalid date: {due_date}'
        task.due_date = due_date or None
        return f'Task {task_id} due {task.due_date or "never"}.'

    def snooze(self, task_id: str, days: int) -> str:
        due = self.today() + timedelta(days=days)
        return self.set_due_date(task_id, due.isoformat())

    def remove_task(self, task_id: str) -> str:
        task = self.get(task_id)
        if task is None:
            return f'Task {task_id} not found.'
        self.tasks.remove(task)
        return f'Task "{task.text}" removed.'

    def take_done(self) -> List[Task]:
        """Remove and return every task in the done heading, in rank order."""
        done = self.tasks_in(DONE_HEADING)
        self.tasks = [t for t in self.tasks if t.heading_id != DONE_HEADING]
        return done

    # -------------------- serialization --------------------
    def get_data(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            'headings': [{'id': h.id, 'title': h.title} for h in self.headings],
            'todos': tasks_to_dicts(self.tasks),
        }
        if self.view:
            data['view'] = self.view
        return data

    def __str__(self) -> str:
        return ', '.join(f'{h.title}: {len(self.tasks_in(h.id))} tasks' for h in self.headings)


def task_to_dict(task: Task) -> Dict[str, Any]:
    return {
        'id': task.id,
        'text': task.text,
        'description': task.description,
        'dueDate': task.due_date,
        'headingId': task.heading_id,
        'rank': task.rank,
        'createdAt': task.created_at,
    }


def tasks_to_dicts(tasks: Iterable[Task]) -> List[Dict[str, Any]]:
    return [task_to_dict(t) for t in tasks]
