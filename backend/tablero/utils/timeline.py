from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date
from types import SimpleNamespace

from ..domain import Project
from .dates import add_days, add_months, days_between, parse_iso
from .formatting import dmy

MAX_LEFT = 0.98
MIN_WIDTH = 0.02
SINGLE_BOUND_WIDTH = 0.05
MONTHLY_TICKS_AFTER_DAYS = 180


@dataclass(frozen=True)
class Window:
    """Visible date range; either bound may be open."""
    start: date | None = None
    end: date | None = None

    @classmethod
    def from_input(cls, start: str | date | None = None, end: str | date | None = None) -> "Window":
        return cls(parse_iso(start), parse_iso(end))

    @property
    def is_open(self) -> bool:
        return self.start is None and self.end is None


@dataclass
class TimelineLayout:
    domain_start: date | None = None
    domain_end: date | None = None
    bars: list[SimpleNamespace] = field(default_factory=list)
    ticks: list[SimpleNamespace] = field(default_factory=list)
    tick_unit: str = "week"
    today_position: float | None = None


def _bounds(p: Project) -> tuple[date | None, date | None]:
    return parse_iso(p.start_date), parse_iso(p.end_date)


def overlaps(p: Project, window: Window) -> bool:
    """Inclusive overlap; a project with a single date is tested as a point."""
    start, end = _bounds(p)
    if start is None and end is None:
        return False
    lo = start or end
    hi = end or start
    if window.start and hi < window.start:
        return False
    if window.end and lo > window.end:
        return False
    return True


def _ticks(ds: date, de: date, span: int) -> tuple[str, list[SimpleNamespace]]:
    unit = "month" if span > MONTHLY_TICKS_AFTER_DAYS else "week"
    ticks = []
    current = ds
    n = 0
    while current <= de:
        ticks.append(SimpleNamespace(date=current, label=dmy(current), position=days_between(ds, current) / span))
        n += 1
        current = add_months(ds, n) if unit == "month" else add_days(ds, 7 * n)
    return unit, ticks


def layout(projects: list[Project], window: Window | None = None,
           today: date | None = None, padding_days: int = 30) -> TimelineLayout:
    window = window or Window()
    dated = [p for p in projects if any(_bounds(p))]
    if not window.is_open:
        dated = [p for p in dated if overlaps(p, window)]
    if not dated:
        return TimelineLayout()

    all_dates = [d for p in dated for d in _bounds(p) if d is not None]
    ds = window.start or add_days(min(all_dates), -padding_days)
    de = window.end or add_days(max(all_dates), padding_days)
    span = max(days_between(ds, de), 1)

    out = TimelineLayout(domain_start=ds, domain_end=de)
    for row, p in enumerate(dated):
        start, end = _bounds(p)
        if start and end:
            eff_start, eff_end = max(start, ds), min(end, de)
            left = days_between(ds, eff_start) / span
            width = days_between(eff_start, eff_end) / span
        else:
            left = days_between(ds, start or end) / span
            width = SINGLE_BOUND_WIDTH
        out.bars.append(SimpleNamespace(
            id=p.id,
            name=p.name,
            area=p.area,
            owner=p.owner,
            priority=p.priority,
            status=p.status,
            start_date=p.start_date,
            end_date=p.end_date,
            row=row,
            left=max(0.0, min(left, MAX_LEFT)),
            width=max(width, MIN_WIDTH),
        ))

    out.tick_unit, out.ticks = _ticks(ds, de, span)
    if today and ds <= today <= de:
        out.today_position = days_between(ds, today) / span
    return out
