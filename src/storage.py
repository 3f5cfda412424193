"""Persistence helpers (load/save/archive) for the todo list.

The whole state is one JSON record: ``{"headings": [...], "todos": [...]}``
plus the selected view. Field-level migration (legacy heading ids, missing
ranks) happens when a Board is built from the loaded dict.
"""
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from board import Board, tasks_to_dicts
from models import DONE_HEADING

logger = logging.getLogger(__name__)

StateDict = Dict[str, Any]


class StorageError(ValueError):
    """The data file exists but cannot be read as a todo state."""


class Storage:
    def __init__(self, data_file: Path, archive_dir: Optional[Path] = None):
        self.data_file = Path(data_file)
        self.archive_dir = Path(archive_dir) if archive_dir else self.data_file.parent / 'archive'

    def load(self) -> StateDict:
        """Load state from disk.

        Missing file -> empty structure.
        """
        if not self.data_file.exists():
            return {"headings": [], "todos": []}
        try:
            with open(self.data_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise StorageError(f'Cannot read {self.data_file}: {exc}') from exc
        if not isinstance(data, dict):
            raise StorageError(f'Unexpected content in {self.data_file}')
        data.setdefault('headings', [])
        data.setdefault('todos', [])
        logger.info('Loaded %d tasks from %s', len(data['todos']), self.data_file)
        return data

    def save(self, data: StateDict) -> None:
        """Persist state to disk (pretty-printed)."""
        self.data_file.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.data_file.with_suffix(self.data_file.suffix + '.tmp')
        with open(tmp, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=4)
        tmp.replace(self.data_file)

    def archive_done(self, board: Board, now: datetime) -> Optional[Path]:
        """Export every done task to a dated JSON file and drop it from the board.

        Returns the written path, or None when nothing was done.
        """
        done = board.tasks_in(DONE_HEADING)
        if not done:
            return None
        self.archive_dir.mkdir(parents=True, exist_ok=True)
        payload = {'archivedAt': now.isoformat(), 'todos': tasks_to_dicts(done)}
        stem = f'archive-{now:%Y%m%d-%H%M%S}'
        attempt = 1
        while True:
            suffix = '' if attempt == 1 else f'-{attempt}'
            path = self.archive_dir / f'{stem}{suffix}.json'
            try:
                f = open(path, 'x', encoding='utf-8')
            except FileExistsError:
                attempt += 1
                continue
            with f:
                json.dump(payload, f, indent=4)
            break
        board.take_done()
        logger.info('Archived %d done tasks to %s', len(done), path)
        return path
