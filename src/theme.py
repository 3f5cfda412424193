"""Color & style helpers.

Decisions:
- One accent color per heading; due dates get overdue/today colors.
- Truecolor preferred; falls back to 256-color cube if unsupported.
- Disables automatically when not a TTY unless FORCE_COLOR=1.
- Honors NO_COLOR for complete disable.
- Supports palette overrides via environment or a .env file.
"""
from __future__ import annotations
import os, sys

from config import read_env

_FORCE = os.environ.get("FORCE_COLOR", "").lower() in {"1", "true", "yes", "on"}
_NO_COLOR = os.environ.get("NO_COLOR") is not None
_ENABLE = (_FORCE or sys.stdout.isatty()) and not _NO_COLOR
_COLORTERM = os.environ.get("COLORTERM", "").lower()
_USE_TRUECOLOR = _ENABLE and any(tok in _COLORTERM for tok in ("truecolor", "24bit"))

def _code(part: str) -> str:
    """Generate ANSI escape code for a given style part."""
    return f"\033[{part}m" if _ENABLE else ''

def _hex_to_rgb(hex_code: str) -> tuple[int,int,int]:
    h = hex_code.lstrip('#')
    return int(h[0:2],16), int(h[2:4],16), int(h[4:6],16)

def _fg_256(r: int, g: int, b: int) -> str:
    """Approximate RGB to xterm 256-color cube."""
    def to_6(x: int) -> int:
        return int(round(x / 255 * 5))
    r6, g6, b6 = to_6(r), to_6(g), to_6(b)
    return f"\033[38;5;{16 + 36 * r6 + 6 * g6 + b6}m"

def _from_hex(hex_code: str) -> str:
    if not _ENABLE:
        return ''
    r, g, b = _hex_to_rgb(hex_code)
    if _USE_TRUECOLOR:
        return f"\033[38;2;{r};{g};{b}m"
    return _fg_256(r, g, b)

def _valid_hex(value: str) -> bool:
    h = value.lstrip('#')
    return len(h) == 6 and all(c in '0123456789abcdefABCDEF' for c in h)

RESET = _code('0')
BOLD = _code('1')
DIM = _code('2')
ITALIC = _code('3')
UNDERLINE = _code('4')

PALETTE_DEFAULTS = {
    'TODO_PRIMARY': '#476EAE',
    'TODO_INBOX': '#48B3AF',
    'TODO_BACKLOG': '#8E9AAF',
    'TODO_TODAY': '#F6FF99',
    'TODO_DONE': '#A7E399',
    'TODO_OVERDUE': '#E06C75',
}

# Resolve final hex values (priority: real env var > .env > default)
_env = read_env()
PALETTE = {
    key: ('#' + _env[key].lstrip('#')) if _valid_hex(_env.get(key, '')) else default
    for key, default in PALETTE_DEFAULTS.items()
}

PRIMARY = _from_hex(PALETTE['TODO_PRIMARY'])

HEADING_COLOR = {
    'inbox': _from_hex(PALETTE['TODO_INBOX']),
    'backlog': _from_hex(PALETTE['TODO_BACKLOG']),
    'today': _from_hex(PALETTE['TODO_TODAY']),
    'done': _from_hex(PALETTE['TODO_DONE']),
}

DUE_COLOR = {
    'overdue': _from_hex(PALETTE['TODO_OVERDUE']) + BOLD,
    'today': _from_hex(PALETTE['TODO_TODAY']) + BOLD,
    None: DIM,
}

HEADER_COLOR = PRIMARY
ID_COLOR = PRIMARY + BOLD  # emphasize ids with bold primary
EMPTY_COLOR = DIM + PRIMARY

def color(text: str, *styles: str) -> str:
    """Apply ANSI styles to a given text."""
    if not _ENABLE:
        return text
    return ''.join(styles) + text + RESET

__all__ = [
    'color','RESET','BOLD','DIM','ITALIC','UNDERLINE','HEADING_COLOR','DUE_COLOR',
    'HEADER_COLOR','ID_COLOR','EMPTY_COLOR','PALETTE',
]
