"""Command-line interface loop for the todo list.

Tasks are addressed by the ``#`` number shown in the current view; numbers
are reassigned on every redraw.
"""
import logging
from typing import List, Optional

import click

from board import Board
from config import VIEWS
from dates import parse_due
from preview import render_markdown
from storage import Storage
from views import render

logger = logging.getLogger(__name__)


# --- terminal control helpers ---
# ESC[3J (scrollback), ESC[H (home), ESC[2J (screen), ESC[H (home); 3J first
# is more reliable in some terminals.
def _clear_screen() -> None:  # pragma: no cover
    click.echo("\033[3J\033[H\033[2J\033[H", nl=False)


def _enter_alt_screen() -> None:  # pragma: no cover
    click.echo("\033[?1049h", nl=False)


def _leave_alt_screen() -> None:  # pragma: no cover
    click.echo("\033[?1049l", nl=False)


HEADING_ALIASES = {
    'i': 'inbox',
    'inbox': 'inbox',
    'b': 'backlog',
    'backlog': 'backlog',
    't': 'today',
    'today': 'today',
    'd': 'done',
    'done': 'done',
}

EXPLICIT_DATE_SEP = ' @ '


class CLI:
    def __init__(self, board: Board, storage: Storage, view: str = 'board', alt_screen: bool = True):
        self.board: Board = board
        self.storage: Storage = storage
        self.view: str = board.view if board.view in VIEWS else view
        self.alt_screen: bool = alt_screen
        self._order: List[str] = []

    def run(self) -> None:  # pragma: no cover - interactive
        """Main REPL loop; the view is cleared and redrawn each cycle.

        Uses the terminal's alternate screen (if enabled) so prior renders
        do not remain in scrollback history.
        """
        exit_message: Optional[str] = None
        message: Optional[str] = None
        if self.alt_screen:
            _enter_alt_screen()
        try:
            while True:
                _clear_screen()
                self.redraw()
                if message:
                    click.echo(f"\n{message}")
                line = input("\n: ").strip()
                if not line:
                    message = None
                    continue
                lower = line.lower()
                if lower == 'help':
                    _clear_screen()
                    self._help()
                    input("\nPress Enter to return...")
                    message = None
                    continue
                if lower == 'exit':
                    self.save()
                    exit_message = "Goodbye."
                    break
                message = self.handle_command(line)
                self.save()
        except (KeyboardInterrupt, EOFError):
            self.save()
            exit_message = "Interrupted. Goodbye."
        finally:
            if self.alt_screen:
                _leave_alt_screen()
            if exit_message:
                click.echo(exit_message)

    def redraw(self) -> None:
        rendered = render(self.view, self.board, self.board.today())
        self._order = rendered.order
        for line in rendered.lines:
            click.echo(line)

    def save(self) -> None:
        self.board.view = self.view
        self.storage.save(self.board.get_data())

    # -------------------- number lookup --------------------
    def _task_id(self, token: str) -> Optional[str]:
        raw = token.rstrip('.')
        if not raw.isdigit():
            return None
        idx = int(raw) - 1
        if idx < 0 or idx >= len(self._order):
            return None
        return self._order[idx]

    # -------------------- command dispatch --------------------
    def handle_command(self, line: str) -> Optional[str]:
        """Run one command line; returns the message to show under the view."""
        tokens = line.split()
        if not tokens:
            return None
        cmd = tokens[0].lower()
        handler = getattr(self, f'_cmd_{cmd}', None)
        if handler is None:
            return "Unknown command. Type 'help' for instructions."
        logger.debug('Command %s', tokens)
        return handler(tokens, line)

    # ---- individual command helpers ----
    def _cmd_add(self, tokens: List[str], line: str) -> Optional[str]:
        text = line.split(None, 1)[1] if len(tokens) > 1 else input("Enter task: ")
        due: Optional[str] = None
        if EXPLICIT_DATE_SEP in text:
            text, due = (part.strip() for part in text.rsplit(EXPLICIT_DATE_SEP, 1))
            if parse_due(due) is None:
                return f"Invalid date: {due} (use YYYY-MM-DD)"
        task = self.board.add_task(text, due_date=due)
        if task is None:
            return "Text required."
        return f'Added "{task.text}"' + (f' due {task.due_date}.' if task.due_date else '.')

    def _cmd_mv(self, tokens: List[str], line: str) -> Optional[str]:
        if len(tokens) != 3:
            return "Usage: mv <#> <heading>; headings: i/b/t/d"
        task_id = self._task_id(tokens[1])
        if task_id is None:
            return "Invalid number."
        heading = HEADING_ALIASES.get(tokens[2].lower())
        if not heading:
            return "Invalid heading."
        return self.board.move_task(task_id, heading)

    def _reorder(self, tokens: List[str], insert_before: bool) -> str:
        if len(tokens) != 3:
            return f"Usage: {tokens[0]} <#> <target #>"
        task_id, target_id = self._task_id(tokens[1]), self._task_id(tokens[2])
        if task_id is None or target_id is None:
            return "Invalid number."
        return self.board.reorder_task(task_id, target_id, insert_before)

    def _cmd_before(self, tokens: List[str], line: str) -> str:
        return self._reorder(tokens, True)

    def _cmd_after(self, tokens: List[str], line: str) -> str:
        return self._reorder(tokens, False)

    def _nudge(self, tokens: List[str], offset: int) -> str:
        if len(tokens) != 2:
            return f"Usage: {tokens[0]} <#>"
        task_id = self._task_id(tokens[1])
        if task_id is None:
            return "Invalid number."
        return self.board.nudge(task_id, offset)

    def _cmd_up(self, tokens: List[str], line: str) -> str:
        return self._nudge(tokens, -1)

    def _cmd_down(self, tokens: List[str], line: str) -> str:
        return self._nudge(tokens, 1)

    def _cmd_done(self, tokens: List[str], line: str) -> str:
        if len(tokens) != 2:
            return "Usage: done <#>"
        task_id = self._task_id(tokens[1])
        if task_id is None:
            return "Invalid number."
        return self.board.toggle_done(task_id)

    def _cmd_due(self, tokens: List[str], line: str) -> str:
        if len(tokens) < 3:
            return "Usage: due <#> <YYYY-MM-DD | tomorrow | 1/7 | Jan 7 | ->"
        task_id = self._task_id(tokens[1])
        if task_id is None:
            return "Invalid number."
        value = line.split(None, 2)[2].strip()
        if value == '-':
            return self.board.set_due_date(task_id, None)
        if parse_due(value) is None:
            parsed = self.board.extractor.extract(f"due {value}", self.board.clock())
            if parsed.resolved_date is None or parsed.cleaned_text:
                return f"Invalid date: {value}"
            value = parsed.resolved_date
        return self.board.set_due_date(task_id, value)

    def _cmd_snooze(self, tokens: List[str], line: str) -> str:
        if len(tokens) != 3 or not tokens[2].lstrip('-').isdigit():
            return "Usage: snooze <#> <days>"
        task_id = self._task_id(tokens[1])
        if task_id is None:
            return "Invalid number."
        return self.board.snooze(task_id, int(tokens[2]))

    def _cmd_edit(self, tokens: List[str], line: str) -> str:
        if len(tokens) < 3:
            return "Usage: edit <#> <new text>"
        task_id = self._task_id(tokens[1])
        if task_id is None:
            return "Invalid number."
        return self.board.edit_text(task_id, line.split(None, 2)[2])

    def _cmd_desc(self, tokens: List[str], line: str) -> str:
        if len(tokens) != 2:
            return "Usage: desc <#>"
        task_id = self._task_id(tokens[1])
        if task_id is None:
            return "Invalid number."
        click.echo("Enter description (markdown). Finish with a single '.' line:")
        lines: List[str] = []
        while True:
            entry = input()
            if entry.strip() == '.':
                break
            lines.append(entry)
        return self.board.set_description(task_id, '\n'.join(lines))

    def _cmd_show(self, tokens: List[str], line: str) -> str:
        if len(tokens) != 2:
            return "Usage: show <#>"
        task_id = self._task_id(tokens[1])
        task = self.board.get(task_id) if task_id else None
        if task is None:
            return "Invalid number."
        heading = self.board.heading(task.heading_id)
        details = [task.text, f"Heading: {heading.title if heading else task.heading_id}",
                   f"Due: {task.due_date or '-'}", f"Created: {task.created_at or '-'}"]
        if task.description:
            details.append('')
            details.extend(render_markdown(task.description))
        return '\n'.join(details)

    def _cmd_rm(self, tokens: List[str], line: str) -> str:
        if len(tokens) != 2:
            return "Usage: rm <#>"
        task_id = self._task_id(tokens[1])
        if task_id is None:
            return "Invalid number."
        return self.board.remove_task(task_id)

    def _cmd_view(self, tokens: List[str], line: str) -> str:
        if len(tokens) != 2 or tokens[1].lower() not in VIEWS:
            return f"Usage: view <{'|'.join(VIEWS)}>"
        self.view = tokens[1].lower()
        return f"Switched to {self.view} view."

    def _cmd_archive(self, tokens: List[str], line: str) -> str:
        path = self.storage.archive_done(self.board, self.board.clock())
        if path is None:
            return "Nothing to archive."
        return f"Archived done tasks to {path}"

    # -------------------- help --------------------
    def _help(self) -> None:
        click.echo("Commands (<#> is the number shown next to a task):")
        click.echo("  add <text>              Add to inbox; 'tomorrow', 'on 1/7', 'by Jan 7' set the due date")
        click.echo("  add <text> @ YYYY-MM-DD Add with an explicit due date")
        click.echo("  mv <#> <heading>        Move to heading: i (inbox), b (backlog), t (today), d (done)")
        click.echo("  before <#> <#>          Place a task just before another one")
        click.echo("  after <#> <#>           Place a task just after another one")
        click.echo("  up <#> / down <#>       Move a task one place within its heading")
        click.echo("  done <#>                Toggle done")
        click.echo("  due <#> <date>          Set due date (YYYY-MM-DD, tomorrow, 1/7, Jan 7; '-' clears)")
        click.echo("  snooze <#> <days>       Due date = today + days")
        click.echo("  edit <#> <text>         Replace the text")
        click.echo("  desc <#>                Write a markdown description")
        click.echo("  show <#>                Show details and description")
        click.echo("  rm <#>                  Delete a task")
        click.echo(f"  view <name>             Switch view: {', '.join(VIEWS)}")
        click.echo("  archive                 Export done tasks to a file and remove them")
        click.echo("  help                    Show this help")
        click.echo("  exit                    Save and exit")
