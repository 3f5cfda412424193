"""Main entry point for termtodo."""
import logging
from dataclasses import replace
from pathlib import Path
from typing import Optional

import click

from board import Board
from cli import CLI
from config import VIEWS, Settings, load_settings
from storage import Storage, StorageError


def setup_logging(settings: Settings) -> None:
    """Log to a file when one is configured; the REPL owns the screen otherwise."""
    handler: logging.Handler
    if settings.log_file:
        settings.log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(settings.log_file)
    else:
        handler = logging.StreamHandler()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.WARNING),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[handler],
    )


@click.command()
@click.option('--data-file', type=click.Path(dir_okay=False, path_type=Path),
              help='JSON file holding the todo list.')
@click.option('--archive-dir', type=click.Path(file_okay=False, path_type=Path),
              help='Directory for exported done tasks.')
@click.option('--view', type=click.Choice(VIEWS), help='View to open with.')
@click.option('--no-alt-screen', is_flag=True, help="Don't switch to the alternate screen.")
@click.option('--log-level', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False))
def main(data_file: Optional[Path], archive_dir: Optional[Path], view: Optional[str],
         no_alt_screen: bool, log_level: Optional[str]) -> None:
    """Terminal todo list with natural-language due dates."""
    settings = load_settings()
    setup_logging(replace(settings, log_level=(log_level or settings.log_level).upper()))
    data_path = data_file or settings.data_file
    storage = Storage(data_path, archive_dir or (settings.archive_dir if not data_file else None))
    try:
        data = storage.load()
    except StorageError as exc:
        raise click.ClickException(str(exc)) from exc
    board = Board(data)
    if view:
        board.view = view
    CLI(board, storage, view=settings.view, alt_screen=settings.alt_screen and not no_alt_screen).run()


if __name__ == "__main__":
    main()
