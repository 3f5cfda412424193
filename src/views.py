"""Terminal views over a Board.

Every renderer returns a ``Rendered``: the lines to print and the task ids in
the order their ``#`` numbers were handed out, so the REPL can turn a number
typed by the user back into a task id.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Mapping, Optional
import re, shutil

from board import Board
from dates import due_label, due_state, parse_due
from models import DONE_HEADING, Task
from theme import (color, BOLD, DIM, DUE_COLOR, EMPTY_COLOR, HEADER_COLOR,
                   HEADING_COLOR, ID_COLOR)

MIN_COL_WIDTH = 18
SEP = " | "
ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")
NOTE_MARK = " *"  # task has a description


@dataclass
class Rendered:
    lines: List[str] = field(default_factory=list)
    order: List[str] = field(default_factory=list)

    def number(self, task: Task) -> int:
        self.order.append(task.id)
        return len(self.order)


def visible_len(s: str) -> int:
    return len(ANSI_RE.sub('', s))


def _due_suffix(task: Task, today: date) -> str:
    label = due_label(task.due_date, today)
    if not label:
        return ''
    return ' ' + color(f'({label})', DUE_COLOR[due_state(task.due_date, today)])


def _task_line(num: int, task: Task, today: date, show_due: bool = True) -> str:
    note = NOTE_MARK if task.description else ''
    line = color(f'{num}.', ID_COLOR) + ' ' + color(task.text + note, HEADING_COLOR.get(task.heading_id, ''))
    if show_due and task.heading_id != DONE_HEADING:
        line += _due_suffix(task, today)
    return line


def _title(text: str) -> List[str]:
    return [color(text, HEADER_COLOR, BOLD), color('-' * len(text), HEADER_COLOR)]


# -------------------- board (columns) --------------------
def render_board(board: Board, today: date, term_width: Optional[int] = None) -> Rendered:
    out = Rendered()
    if term_width is None:
        term_width = shutil.get_terminal_size((120, 30)).columns
    ids = board.heading_ids()
    columns = {hid: board.tasks_in(hid) for hid in ids}
    titles = {h.id: f'{h.title.upper()} ({len(columns[h.id])})' for h in board.headings}
    numbered: Dict[str, List[tuple]] = {}
    for hid in ids:
        numbered[hid] = [(out.number(t), t) for t in columns[hid]]
    widths = _compute_column_widths(numbered, titles, today, term_width)
    wrapped = {hid: _wrap_column(numbered[hid], widths[hid], today) for hid in ids}

    header_cells = []
    for hid in ids:
        h = color(titles[hid], HEADER_COLOR, BOLD)
        header_cells.append(h + ' ' * max(0, widths[hid] - visible_len(h)))
    out.lines.append(SEP.join(header_cells))
    out.lines.append(SEP.join(color('-' * widths[hid], HEADER_COLOR) for hid in ids))
    rows = max(len(wrapped[hid]) for hid in ids)
    for r in range(rows):
        cells = []
        for hid in ids:
            col = wrapped[hid]
            line = col[r] if r < len(col) else ''
            cells.append(line + ' ' * max(0, widths[hid] - visible_len(line)))
        out.lines.append(SEP.join(cells).rstrip())
    return out


def _plain_segments(num: int, task: Task, today: date):
    prefix = f'{num}. '
    body = task.text + (NOTE_MARK if task.description else '')
    label = due_label(task.due_date, today) if task.heading_id != DONE_HEADING else ''
    suffix = f' ({label})' if label else ''
    return prefix, body, suffix


def _compute_column_widths(numbered: Mapping[str, List[tuple]], titles: Mapping[str, str],
                           today: date, term_width: int) -> Dict[str, int]:
    ids = list(numbered)
    sep_total = len(SEP) * (len(ids) - 1)
    widths: Dict[str, int] = {}
    for hid in ids:
        longest = len(titles[hid])
        for num, t in numbered[hid]:
            prefix, body, suffix = _plain_segments(num, t, today)
            longest = max(longest, len(prefix) + len(body) + len(suffix))
        widths[hid] = max(MIN_COL_WIDTH, longest)
    if sum(widths.values()) + sep_total > term_width:
        target_space = max(term_width - sep_total, len(ids) * MIN_COL_WIDTH)
        while sum(widths.values()) > target_space:
            widest = max(ids, key=lambda h: widths[h])
            if widths[widest] <= MIN_COL_WIDTH:
                break
            widths[widest] -= 1
    return widths


def _wrap_column(numbered: List[tuple], width: int, today: date) -> List[str]:
    if not numbered:
        return [color('(empty)', EMPTY_COLOR)]
    lines: List[str] = []
    for num, task in numbered:
        lines.extend(_wrap_task(num, task, width, today))
    return lines


def _wrap_task(num: int, task: Task, width: int, today: date) -> List[str]:
    prefix, body, suffix = _plain_segments(num, task, today)
    limit = max(1, width - len(prefix))
    raw: List[str] = []
    current = ''
    for w in body.split():
        candidate = w if not current else current + ' ' + w
        if len(candidate) <= limit or not current:
            current = candidate
        else:
            raw.append(current)
            current = w
    if current:
        raw.append(current)
    if not raw:
        raw = ['<empty>']
    body_col = HEADING_COLOR.get(task.heading_id, '')
    styled_suffix = ''
    if suffix:
        styled_suffix = ' ' + color(suffix.strip(), DUE_COLOR[due_state(task.due_date, today)])
    indent = ' ' * len(prefix)
    out = []
    for i, part in enumerate(raw):
        lead = color(prefix.rstrip(), ID_COLOR) + ' ' if i == 0 else indent
        out.append(lead + color(part, body_col))
    if styled_suffix:
        if len(raw[-1]) + len(suffix) <= limit:
            out[-1] += styled_suffix
        else:
            out.append(indent + styled_suffix.lstrip())
    return out


# -------------------- single-list views --------------------
def render_planning(board: Board, today: date) -> Rendered:
    out = Rendered()
    inbox = board.tasks_in('inbox')
    out.lines.extend(_title(f'Planning - Inbox ({len(inbox)})'))
    out.lines.append(color('Process your inbox and move tasks to backlog or today', DIM))
    if not inbox:
        out.lines.append(color('Your inbox is empty! Add tasks or switch to the board view.', EMPTY_COLOR))
    for task in inbox:
        out.lines.append(_task_line(out.number(task), task, today))
    return out


def render_today(board: Board, today: date) -> Rendered:
    out = Rendered()
    focus = board.tasks_in('today')
    out.lines.extend(_title(f"Today's Focus ({len(focus)})"))
    if not focus:
        out.lines.append(color('No tasks for today. Move items from your backlog or inbox!', EMPTY_COLOR))
    for task in focus:
        out.lines.append(_task_line(out.number(task), task, today))
    backlog = board.tasks_in('backlog')
    if backlog:
        out.lines.append('')
        out.lines.append(color(f'Backlog ({len(backlog)})', HEADER_COLOR, BOLD)
                         + ' ' + color('Pull tasks up when ready', DIM))
        for task in backlog:
            out.lines.append(_task_line(out.number(task), task, today))
    return out


def render_calendar(board: Board, today: date) -> Rendered:
    """Open tasks with a due date, grouped by day, earliest first."""
    out = Rendered()
    out.lines.extend(_title('Calendar Timeline'))
    by_date: Dict[date, List[Task]] = {}
    for hid in board.heading_ids():
        if hid == DONE_HEADING:
            continue
        for task in board.tasks_in(hid):
            due = parse_due(task.due_date)
            if due is not None:
                by_date.setdefault(due, []).append(task)
    if not by_date:
        out.lines.append(color('No tasks with due dates. Add due dates to see them here!', EMPTY_COLOR))
    for day in sorted(by_date):
        iso = day.isoformat()
        label = color(f'({due_label(iso, today)})', DUE_COLOR[due_state(iso, today)])
        out.lines.append(color(day.strftime('%a, %b %d, %Y'), HEADER_COLOR, BOLD) + ' ' + label)
        for task in by_date[day]:
            out.lines.append('  ' + _task_line(out.number(task), task, today, show_due=False))
    return out


RENDERERS = {
    'board': render_board,
    'planning': render_planning,
    'today': render_today,
    'calendar': render_calendar,
}


def render(view: str, board: Board, today: date) -> Rendered:
    return RENDERERS.get(view, render_board)(board, today)
