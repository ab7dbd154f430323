from __future__ import annotations
import calendar
import re
from datetime import date, timedelta

_ISO_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")

def is_iso_date(value: str) -> bool:
    """Pattern check only: '2024-13-45' passes, '02/30/2024' does not."""
    return bool(_ISO_DATE_RE.fullmatch(value))

def parse_iso(value: str | date | None) -> date | None:
    """'YYYY-MM-DD' to date, or None when empty or not a real calendar day."""
    if isinstance(value, date):
        return value
    if not value or not is_iso_date(value):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None

def days_between(start: date, end: date) -> int:
    return (end - start).days

def add_months(d: date, months: int = 1) -> date:
    # clamp the day: 31 Jan + 1 month -> 28/29 Feb
    idx = d.month - 1 + months
    year, month = d.year + idx // 12, idx % 12 + 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return d.replace(year=year, month=month, day=day)

def add_days(d: date, days: int) -> date:
    return d + timedelta(days=days)
