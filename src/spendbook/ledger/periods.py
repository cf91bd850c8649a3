from __future__ import annotations

import calendar
import datetime as dt
import logging
import re
from typing import Any, Iterable, Optional

from src.spendbook.ledger.errors import LedgerErrorCode, Outcome
from src.spendbook.ledger.models import Expense, Window
from src.utils.time import local_today

log = logging.getLogger(__name__)

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_calendar_date(value: Any) -> Optional[dt.date]:
    """Returns the date for a zero-padded YYYY-MM-DD string, None for anything else."""
    if not isinstance(value, str) or not _DATE_RE.match(value):
        return None
    try:
        return dt.date.fromisoformat(value)
    except ValueError:
        return None


def is_valid_date(value: Any) -> bool:
    return parse_calendar_date(value) is not None


def _year_month(d: dt.date) -> str:
    return f"{d.year:04d}-{d.month:02d}"


def most_recent_month_with_data(expenses: Iterable[Expense], *, today: Optional[dt.date] = None) -> str:
    """
    Latest YYYY-MM that has an expense with a valid date, else the current month.

    Zero-padded ISO dates sort lexicographically in chronological order, so the max string is the latest day.
    """
    latest = ""
    for exp in expenses:
        if not is_valid_date(exp.date):
            log.warning("Ignoring expense %s with invalid date %r", exp.id, exp.date)
            continue
        if exp.date > latest:
            latest = exp.date
    if not latest:
        return _year_month(today or local_today())
    return latest[:7]


def month_window(year_month: str) -> Window:
    year, month = (int(p) for p in year_month.split("-"))
    last_day = calendar.monthrange(year, month)[1]
    start = dt.datetime(year, month, 1)
    end = dt.datetime.combine(dt.date(year, month, last_day), dt.time(23, 59, 59))
    return Window(start=start, end=end, label=year_month)


def validate_range(start: Optional[str], end: Optional[str]) -> Outcome[None]:
    # Only two real dates can be out of order; anything else falls back to the default window.
    start_d = parse_calendar_date(start)
    end_d = parse_calendar_date(end)
    if start_d is not None and end_d is not None and start_d > end_d:
        return Outcome.failure(LedgerErrorCode.INVALID_DATE_RANGE, "End date cannot be before start date.")
    return Outcome.success()


def resolve_window(
    expenses: Iterable[Expense],
    explicit_start: Optional[str] = None,
    explicit_end: Optional[str] = None,
    *,
    today: Optional[dt.date] = None,
) -> Window:
    """
    Pick the analytics window.

    Both bounds valid -> that inclusive range, labelled "<start> to <end>". Anything else -> the most
    recent calendar month containing data (or the current month when there is none), labelled "YYYY-MM".
    """
    if explicit_start and explicit_end:
        start = parse_calendar_date(explicit_start)
        end = parse_calendar_date(explicit_end)
        if start is not None and end is not None:
            window = Window(
                start=dt.datetime.combine(start, dt.time.min),
                end=dt.datetime.combine(end, dt.time(23, 59, 59)),
                label=f"{explicit_start} to {explicit_end}",
            )
            log.debug("Using explicit window %s", window.label)
            return window
        log.warning("Invalid date range %r..%r; falling back to the latest month", explicit_start, explicit_end)

    window = month_window(most_recent_month_with_data(expenses, today=today))
    log.debug("Using default window %s", window.label)
    return window


def filter_window(expenses: Iterable[Expense], window: Window) -> list[Expense]:
    out: list[Expense] = []
    for exp in expenses:
        d = parse_calendar_date(exp.date)
        if d is None:
            continue
        if window.contains(d):
            out.append(exp)
    return out
