# carcheck/utils/date_parser.py
"""
Helpers for the date formats found in DVLA payloads and report fixtures.
DVLA sends "YYYY-MM-DD" and "YYYY-MM"; MOT records carry full ISO timestamps.
"""

from calendar import monthrange
from datetime import date, datetime
from typing import Optional


def parse_date(value: Optional[str]) -> Optional[date]:
    """Parse an ISO date, ISO timestamp or "YYYY-MM" month. Returns None on error."""
    if not value:
        return None
    try:
        if "T" in value:
            return datetime.fromisoformat(value).date()
        if len(value) == 7:
            return datetime.strptime(value, "%Y-%m").date()
        return date.fromisoformat(value)
    except ValueError:
        return None


def days_until(target: Optional[date], today: date) -> Optional[int]:
    """Days from today until target (negative if already past)."""
    if target is None:
        return None
    return (target - today).days


def is_due_within(target: Optional[date], today: date, days: int) -> bool:
    """True if target falls between today and today + days (inclusive)."""
    remaining = days_until(target, today)
    return remaining is not None and 0 <= remaining <= days


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


def _add_months(start: date, months: int) -> date:
    """start shifted by whole months, clamped to the last day of the target month."""
    index = start.month - 1 + months
    year, month = start.year + index // 12, index % 12 + 1
    return start.replace(year=year, month=month, day=min(start.day, monthrange(year, month)[1]))


def describe_duration(start: date, end: date) -> str:
    """Calendar difference as text, e.g. "3 years, 1 month and 12 days"."""
    months = (end.year - start.year) * 12 + end.month - start.month
    if end.day < start.day:
        months -= 1
    months = max(months, 0)
    days = (end - _add_months(start, months)).days
    years, months = divmod(months, 12)

    parts = [_plural(n, unit) for n, unit in ((years, "year"), (months, "month"), (days, "day")) if n]
    if not parts:
        return "0 days"
    if len(parts) == 1:
        return parts[0]
    return ", ".join(parts[:-1]) + " and " + parts[-1]
