"""Natural-language due dates.

``DateExtractor`` looks for at most one date expression in a task title and
returns the title without it. The rules are tried in a fixed order and the
first one that matches decides, even if its date turns out to be invalid.

Supported forms:
    "on 1/7", "by 1/7/26", "due 1/7/2026"
    "Renew license - 1/7", "Renew license 1/7/26"   (end of text only)
    "on Jan 7", "by January 7th"
    "today", "tomorrow", "due tomorrow"

Dates without a year that already passed this year roll to next year.
``now`` is always passed in by the caller.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, Optional, Tuple, Union

Now = Union[date, datetime]

MONTHS = {
    "jan": 1, "january": 1,
    "feb": 2, "february": 2,
    "mar": 3, "march": 3,
    "apr": 4, "april": 4,
    "may": 5,
    "jun": 6, "june": 6,
    "jul": 7, "july": 7,
    "aug": 8, "august": 8,
    "sep": 9, "sept": 9, "september": 9,
    "oct": 10, "october": 10,
    "nov": 11, "november": 11,
    "dec": 12, "december": 12,
}

_KEYWORD = r"\b(?:on|by|due)\s+"
_NUMERIC = r"(?P<month>\d{1,2})/(?P<day>\d{1,2})(?:/(?P<year>\d{2,4}))?(?!\d)"
_MONTH_NAMES = "|".join(sorted(MONTHS, key=len, reverse=True))

KEYWORD_NUMERIC_RE = re.compile(_KEYWORD + _NUMERIC + r"(?!/)", re.IGNORECASE)
DASH_NUMERIC_RE = re.compile(r"\s*[-–—]\s*" + _NUMERIC + r"\s*$")
TRAILING_NUMERIC_RE = re.compile(r"\s+" + _NUMERIC + r"\s*$")
KEYWORD_MONTH_RE = re.compile(
    _KEYWORD + r"(?P<name>" + _MONTH_NAMES + r")\.?\s+(?P<day>\d{1,2})(?:st|nd|rd|th)?\b",
    re.IGNORECASE,
)
RELATIVE_RE = re.compile(
    r"(?:" + _KEYWORD + r")?(?<![\w'])(?P<word>today|tomorrow)(?![\w'])", re.IGNORECASE
)

RELATIVE_DAYS = {"today": 0, "tomorrow": 1}


@dataclass(frozen=True)
class Extraction:
    cleaned_text: str
    resolved_date: Optional[str]  # YYYY-MM-DD


@dataclass(frozen=True)
class DateRule:
    name: str
    pattern: re.Pattern
    resolve: Callable[[re.Match, date], Optional[date]]


def _today(now: Now) -> date:
    return now.date() if isinstance(now, datetime) else now


def _upcoming(month: int, day: int, today: date) -> Optional[date]:
    """This year's month/day, or next year's when it already passed (or does not exist)."""
    for year in (today.year, today.year + 1):
        try:
            candidate = date(year, month, day)
        except ValueError:
            continue
        if candidate >= today:
            return candidate
    return None


def _resolve_numeric(m: re.Match, today: date) -> Optional[date]:
    month, day = int(m.group("month")), int(m.group("day"))
    year_token = m.group("year")
    if year_token is None:
        return _upcoming(month, day, today)
    year = int(year_token)
    if year < 100:
        year += 2000
    try:
        return date(year, month, day)
    except ValueError:
        return None


def _resolve_month_name(m: re.Match, today: date) -> Optional[date]:
    month = MONTHS.get(m.group("name").lower())
    if month is None:
        return None
    return _upcoming(month, int(m.group("day")), today)


def _resolve_relative(m: re.Match, today: date) -> Optional[date]:
    return today + timedelta(days=RELATIVE_DAYS[m.group("word").lower()])


RULES: Tuple[DateRule, ...] = (
    DateRule("keyword-numeric", KEYWORD_NUMERIC_RE, _resolve_numeric),
    DateRule("dash-numeric", DASH_NUMERIC_RE, _resolve_numeric),
    DateRule("trailing-numeric", TRAILING_NUMERIC_RE, _resolve_numeric),
    DateRule("keyword-month", KEYWORD_MONTH_RE, _resolve_month_name),
    DateRule("relative", RELATIVE_RE, _resolve_relative),
)


def _cut(text: str, start: int, end: int) -> str:
    head = text[:start].rstrip()
    tail = text[end:].lstrip()
    return f"{head} {tail}".strip()


class DateExtractor:
    def __init__(self, rules: Tuple[DateRule, ...] = RULES):
        self.rules = rules

    def extract(self, text: str, now: Now) -> Extraction:
        today = _today(now)
        for rule in self.rules:
            m = rule.pattern.search(text)
            if not m:
                continue
            resolved = rule.resolve(m, today)
            if resolved is None:
                return Extraction(text, None)
            return Extraction(_cut(text, m.start(), m.end()), resolved.isoformat())
        return Extraction(text, None)


# -------------------- due-date labels --------------------
def parse_due(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def due_label(value: Optional[str], today: date) -> str:
    """Relative label for a stored due date ('' when unset or unreadable)."""
    due = parse_due(value)
    if due is None:
        return ""
    days = (due - today).days
    if days == 0:
        return "Today"
    if days == 1:
        return "Tomorrow"
    if days == -1:
        return "Yesterday"
    if days < 0:
        return f"{-days} days overdue"
    if days <= 7:
        return f"In {days} days"
    return due.strftime("%b %d, %Y").replace(" 0", " ")


def due_state(value: Optional[str], today: date) -> Optional[str]:
    due = parse_due(value)
    if due is None:
        return None
    if due < today:
        return "overdue"
    if due == today:
        return "today"
    return None
