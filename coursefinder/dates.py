"""
Date handling.

- parse_loose_date(): catalogue dates such as "Wed 20th August 2025"
- normalize_date_window(): natural-language windows such as "next month",
  "in 3 weeks", "after 10th september", "end of october"

All dates are UTC calendar days (datetime.date). The reference instant `now`
is injectable and truncated to its UTC day.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Optional, Tuple

from coursefinder import config
from coursefinder.model import DateWindow
from coursefinder.text import normalize

logger = logging.getLogger(__name__)

MONTHS = {
    "january": 1, "february": 2, "march": 3, "april": 4, "may": 5, "june": 6,
    "july": 7, "august": 8, "september": 9, "october": 10, "november": 11, "december": 12,
}

# Catalogue feeds sometimes abbreviate; only parse_loose_date accepts these.
_MONTH_ABBREVIATIONS = {name[:3]: num for name, num in MONTHS.items()}
_MONTH_ABBREVIATIONS["sept"] = 9

_ORDINAL_RE = re.compile(r"\b(\d{1,2})(st|nd|rd|th)\b", re.IGNORECASE)
_INT_PREFIX_RE = re.compile(r"^[+-]?\d+")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def utc_today(now: date | datetime | None = None) -> date:
    """Truncate `now` (default: current time) to its UTC calendar day."""
    if now is None:
        return datetime.now(timezone.utc).date()
    if isinstance(now, datetime):
        if now.tzinfo is not None:
            now = now.astimezone(timezone.utc)
        return now.date()
    return now


def _day(year: int, month: int, day: int) -> date:
    """
    Build a date, letting month and day overflow into the following
    months/years (day 0 is the last day of the previous month).
    """
    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    return date(year, month, 1) + timedelta(days=day - 1)


def _month_end(year: int, month: int) -> date:
    return _day(year, month + 1, 0)


def _rollover_year(month: int, today: date) -> int:
    # a month that already passed this year means next year's
    return today.year + (1 if month < today.month else 0)


def _int_prefix(token: str) -> Optional[int]:
    m = _INT_PREFIX_RE.match(token)
    if m is None:
        return None
    try:
        return int(m.group(0))
    except ValueError:
        # digit strings beyond the interpreter's int conversion limit
        return None


def _month_number(token: str) -> Optional[int]:
    t = token.lower().rstrip(".")
    return MONTHS.get(t) or _MONTH_ABBREVIATIONS.get(t)


# ---------------------------------------------------------------------------
# Catalogue dates
# ---------------------------------------------------------------------------


def parse_loose_date(text: Optional[str]) -> Optional[date]:
    """
    Parse "Wed 20th August 2025", "20 August 2025" or "20th August, 2025".

    Returns None when day, month or year cannot be read.
    """
    if not text:
        return None

    clean = _ORDINAL_RE.sub(r"\1", str(text)).replace(",", "").strip()
    parts = clean.split()

    # leading weekday name
    offset = 1 if len(parts) >= 4 and _int_prefix(parts[0]) is None else 0
    if len(parts) < offset + 3:
        return None

    day = _int_prefix(parts[offset])
    month = _month_number(parts[offset + 1])
    year = _int_prefix(parts[offset + 2])
    if day is None or month is None or year is None:
        return None

    try:
        return date(year, month, day)
    except (OverflowError, ValueError):
        return None


def within_range(date_text: Optional[str], window: Optional[DateWindow]) -> bool:
    """
    True when the parsed date lies inside the window (bounds inclusive).
    Unparsable dates never fall inside a bounded window.
    """
    if window is None or not window.is_bounded:
        return True
    d = parse_loose_date(date_text)
    if d is None:
        return False
    if window.start is not None and d < window.start:
        return False
    if window.end is not None and d > window.end:
        return False
    return True


# ---------------------------------------------------------------------------
# Natural-language windows
# ---------------------------------------------------------------------------

_MONTH_ALTERNATION = "|".join(MONTHS)

WindowRule = Callable[[re.Match[str], date], Optional[DateWindow]]


def _default_window(today: date) -> DateWindow:
    days = config.DEFAULT_WINDOW_DAYS
    return DateWindow(today, today + timedelta(days=days), f"next {days // 7} weeks")


def _anytime(m: re.Match[str], today: date) -> DateWindow:
    return DateWindow(today, _day(today.year + 1, today.month, today.day), "anytime (next 12 months)")


def _this_month(m: re.Match[str], today: date) -> DateWindow:
    return DateWindow(
        _day(today.year, today.month, 1), _month_end(today.year, today.month), "this month"
    )


def _next_month(m: re.Match[str], today: date) -> DateWindow:
    start = _day(today.year, today.month + 1, 1)
    return DateWindow(start, _month_end(start.year, start.month), "next month")


def _next_week(m: re.Match[str], today: date) -> DateWindow:
    # always the following Monday, a full week ahead when today is Monday
    start = today + timedelta(days=7 - today.weekday())
    return DateWindow(start, start + timedelta(days=6), "next week")


def _week_offset(m: re.Match[str], today: date) -> Optional[Tuple[int, date]]:
    # week counts past the calendar range fall through to the next rule
    try:
        n = int(m.group(1))
        return n, today + timedelta(days=n * 7)
    except (OverflowError, ValueError):
        return None


def _in_n_weeks(m: re.Match[str], today: date) -> Optional[DateWindow]:
    offset = _week_offset(m, today)
    if offset is None:
        return None
    n, start = offset
    try:
        end = start + timedelta(days=6)
    except OverflowError:
        return None
    return DateWindow(start, end, f"in {n} week(s)")


def _next_n_weeks(m: re.Match[str], today: date) -> Optional[DateWindow]:
    offset = _week_offset(m, today)
    if offset is None:
        return None
    n, end = offset
    return DateWindow(today, end, f"next {n} week(s)")


def _relative_to_day(m: re.Match[str], today: date) -> DateWindow:
    rel, day_str, month_name = m.group(1), m.group(2), m.group(4)
    day = int(day_str)
    month = MONTHS[month_name]
    year = _rollover_year(month, today)

    # "from" is inclusive, "after" / "later than" start the next day
    start = _day(year, month, day if rel == "from" else day + 1)
    end = _month_end(year, month)
    if start > end:
        end = _month_end(start.year, start.month)
    return DateWindow(start, end, f"{rel} {day} {month_name}")


def _end_of_month(m: re.Match[str], today: date) -> Optional[DateWindow]:
    month_name = m.group(1)
    month = MONTHS.get(month_name)
    if month is None:
        return None
    year = _rollover_year(month, today)
    return DateWindow(_day(year, month, 25), _month_end(year, month), f"end of {month_name}")


def _named_month(m: re.Match[str], today: date) -> DateWindow:
    # calendar order, not position in the text
    month_name = next(name for name in MONTHS if name in m.string)
    month = MONTHS[month_name]
    year = _rollover_year(month, today)
    return DateWindow(_day(year, month, 1), _month_end(year, month), month_name)


# Evaluated in order, first rule producing a window wins.
WINDOW_RULES: Tuple[Tuple[re.Pattern[str], WindowRule], ...] = (
    (re.compile(r"\bany\s*time\b|\banytime\b|\bwhenever\b"), _anytime),
    (re.compile(r"\bthis month\b"), _this_month),
    (re.compile(r"\bnext month\b"), _next_month),
    (re.compile(r"next\s*week"), _next_week),
    (re.compile(r"in\s*(\d+)\s*weeks?"), _in_n_weeks),
    (re.compile(r"next\s*(\d+)\s*weeks?"), _next_n_weeks),
    (
        re.compile(rf"\b(after|later than|from)\s+(\d{{1,2}})(st|nd|rd|th)?\s+({_MONTH_ALTERNATION})\b"),
        _relative_to_day,
    ),
    (re.compile(r"end of (\w+)"), _end_of_month),
    (re.compile(rf"({_MONTH_ALTERNATION})"), _named_month),
)


def normalize_date_window(text: Optional[str], now: date | datetime | None = None) -> DateWindow:
    """
    Convert a natural-language time expression into a DateWindow.

    Anything unrecognized (and empty input) falls back to the default
    window starting today.
    """
    today = utc_today(now)
    q = normalize(text)
    if not q:
        return _default_window(today)

    for pattern, rule in WINDOW_RULES:
        m = pattern.search(q)
        if m is None:
            continue
        window = rule(m, today)
        if window is not None:
            logger.debug("date window %r -> %s..%s (%s)", q, window.start, window.end, window.label)
            return window

    return _default_window(today)
