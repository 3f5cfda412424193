"""Terminal preview for task descriptions written in a small markdown subset."""
import re
from typing import List

from theme import color, BOLD, DIM, ITALIC, UNDERLINE, HEADER_COLOR

HEADER_RE = re.compile(r"^(#{1,3}) (.*)$")
INLINE_RULES = (
    (re.compile(r"\[(.+?)\]\((.+?)\)"), lambda m: color(m.group(1), UNDERLINE) + f" <{m.group(2)}>"),
    (re.compile(r"`(.+?)`"), lambda m: color(m.group(1), DIM)),
    (re.compile(r"\*\*(.+?)\*\*"), lambda m: color(m.group(1), BOLD)),
    (re.compile(r"__(.+?)__"), lambda m: color(m.group(1), BOLD)),
    (re.compile(r"\*(.+?)\*"), lambda m: color(m.group(1), ITALIC)),
    (re.compile(r"(?<!\w)_(.+?)_(?!\w)"), lambda m: color(m.group(1), ITALIC)),
)


def render_inline(text: str) -> str:
    for pattern, repl in INLINE_RULES:
        text = pattern.sub(repl, text)
    return text


def render_markdown(text: str) -> List[str]:
    if not text:
        return []
    lines: List[str] = []
    for raw in text.splitlines():
        m = HEADER_RE.match(raw)
        if m:
            level, title = len(m.group(1)), m.group(2)
            style = (HEADER_COLOR, BOLD, UNDERLINE) if level == 1 else (HEADER_COLOR, BOLD)
            lines.append(color(render_inline(title), *style))
        else:
            lines.append(render_inline(raw))
    return lines
