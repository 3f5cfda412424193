"""Runtime settings.

Values come from the process environment first, then from a ``.env`` file
(current directory unless another path is given), then defaults.
"""
from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional

from dotenv import dotenv_values

DEFAULT_DATA_FILE = Path.home() / '.termtodo' / 'todos.json'
DEFAULT_VIEW = 'board'
VIEWS = ('board', 'planning', 'today', 'calendar')


def truthy(value: Optional[str], default: bool = True) -> bool:
    if value is None:
        return default
    return value.strip().lower() not in {"0", "false", "no", "off", ""}


def read_env(environ: Optional[Mapping[str, str]] = None,
             env_file: Optional[Path] = None) -> Dict[str, str]:
    """Merge ``.env`` values under the real environment (real env wins)."""
    path = env_file if env_file is not None else Path.cwd() / '.env'
    merged: Dict[str, str] = {}
    if path.exists():
        merged.update({k: v for k, v in dotenv_values(path).items() if v is not None})
    merged.update(os.environ if environ is None else environ)
    return merged


@dataclass(frozen=True)
class Settings:
    data_file: Path
    archive_dir: Path
    alt_screen: bool = True
    view: str = DEFAULT_VIEW
    log_level: str = 'WARNING'
    log_file: Optional[Path] = None


def load_settings(environ: Optional[Mapping[str, str]] = None,
                  env_file: Optional[Path] = None) -> Settings:
    env = read_env(environ, env_file)
    data_file = Path(env.get('TODO_DATA_FILE') or DEFAULT_DATA_FILE).expanduser()
    archive_dir = Path(env.get('TODO_ARCHIVE_DIR') or data_file.parent / 'archive').expanduser()
    view = (env.get('TODO_VIEW') or DEFAULT_VIEW).strip().lower()
    if view not in VIEWS:
        view = DEFAULT_VIEW
    log_file = env.get('TODO_LOG_FILE')
    return Settings(
        data_file=data_file,
        archive_dir=archive_dir,
        alt_screen=truthy(env.get('TODO_ALT_SCREEN'), True),
        view=view,
        log_level=(env.get('TODO_LOG_LEVEL') or 'WARNING').upper(),
        log_file=Path(log_file).expanduser() if log_file else None,
    )
