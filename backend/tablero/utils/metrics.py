"""Dashboard statistics over a project list.

`aggregate` is a pure function of the list and an injected `today`; it
is recomputed from scratch whenever the board changes.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date
from types import SimpleNamespace

from ..domain import CURRENT_PIPELINE, Pipeline, Project
from .dates import days_between, parse_iso
from .formatting import hours_of, parse_leading_float

NO_AREA = "Sin área"
NO_PRIORITY = "a-definir"

# (field shown in remediation tables, accessor)
REQUIRED_FIELDS = (
    ("area", lambda p: p.area),
    ("owner", lambda p: p.owner),
    ("developers", lambda p: p.developers),
    ("estimate", lambda p: p.estimate),
    ("startDate", lambda p: p.start_date),
    ("endDate", lambda p: p.end_date),
)


@dataclass
class Metrics:
    today: date
    total_projects: int = 0
    total_tasks: int = 0
    total_estimated_hours: float = 0.0
    total_task_hours: float = 0.0
    total_delayed_hours: float = 0.0
    projects_with_dates: int = 0
    projects_by_status: dict[str, int] = field(default_factory=dict)
    projects_by_area: dict[str, SimpleNamespace] = field(default_factory=dict)
    projects_by_priority: dict[str, SimpleNamespace] = field(default_factory=dict)
    developers: dict[str, SimpleNamespace] = field(default_factory=dict)
    delayed: list[SimpleNamespace] = field(default_factory=list)
    upcoming: list[SimpleNamespace] = field(default_factory=list)
    at_risk: list[SimpleNamespace] = field(default_factory=list)
    completed: list[SimpleNamespace] = field(default_factory=list)
    incomplete: list[SimpleNamespace] = field(default_factory=list)
    without_tasks: list[SimpleNamespace] = field(default_factory=list)
    tasks_without_assignee: list[SimpleNamespace] = field(default_factory=list)
    unparsable_estimates: list[SimpleNamespace] = field(default_factory=list)

    @property
    def total_hours(self) -> float:
        return self.total_estimated_hours + self.total_task_hours

    @property
    def avg_hours_per_project(self) -> float:
        return self.total_estimated_hours / self.total_projects if self.total_projects else 0.0

    @property
    def avg_tasks_per_project(self) -> float:
        return self.total_tasks / self.total_projects if self.total_projects else 0.0


# ---------- small helpers ----------

def _bucket(buckets: dict[str, SimpleNamespace], key: str, hours: float) -> None:
    b = buckets.setdefault(key, SimpleNamespace(count=0, hours=0.0))
    b.count += 1
    b.hours += hours


def _developer(devs: dict[str, SimpleNamespace], name: str) -> SimpleNamespace:
    if name not in devs:
        devs[name] = SimpleNamespace(name=name, project_hours=0.0, task_hours=0.0, projects=[])
    return devs[name]


def _credit(dev: SimpleNamespace, project_name: str) -> None:
    if project_name not in dev.projects:
        dev.projects.append(project_name)


def missing_fields(project: Project) -> list[str]:
    return [name for name, get in REQUIRED_FIELDS if not get(project)]


def task_summary(project: Project) -> SimpleNamespace:
    tasks = project.tasks
    return SimpleNamespace(
        total=len(tasks),
        pending=sum(1 for t in tasks if t.status == "pendiente"),
        in_progress=sum(1 for t in tasks if t.status == "en-progreso"),
        done=sum(1 for t in tasks if t.status == "hecha"),
        estimated_hours=sum(t.estimated_time or 0 for t in tasks),
    )


# ---------- aggregation ----------

def _schedule(m: Metrics, p: Project, estimate_hours: float, pipeline: Pipeline,
              workday_hours: int, upcoming_days: int, at_risk_days: int) -> None:
    end = parse_iso(p.end_date)
    if end is None or p.status == pipeline.terminal:
        return
    remaining = days_between(m.today, end)
    if remaining < 0:
        days_late = -remaining
        delay_hours = days_late * workday_hours
        m.total_delayed_hours += delay_hours
        m.delayed.append(SimpleNamespace(
            id=p.id, name=p.name, area=p.area, end_date=p.end_date,
            days_delayed=days_late, delay_hours=delay_hours, estimated_hours=estimate_hours,
        ))
        return
    row = SimpleNamespace(
        id=p.id, name=p.name, area=p.area, end_date=p.end_date,
        days_until_end=remaining, priority=p.priority, status=p.status,
    )
    if remaining <= upcoming_days:
        m.upcoming.append(row)
    if 0 < remaining <= at_risk_days:
        m.at_risk.append(row)


def aggregate(
    projects: list[Project],
    today: date,
    pipeline: Pipeline = CURRENT_PIPELINE,
    *,
    workday_hours: int = 8,
    upcoming_days: int = 30,
    at_risk_days: int = 7,
) -> Metrics:
    m = Metrics(today=today, total_projects=len(projects))
    m.projects_by_status = {key: 0 for key in pipeline.keys}

    for p in projects:
        if p.status:
            m.projects_by_status[p.status] = m.projects_by_status.get(p.status, 0) + 1

        estimate_hours = hours_of(p.estimate)
        if p.estimate and parse_leading_float(p.estimate) is None:
            m.unparsable_estimates.append(SimpleNamespace(id=p.id, name=p.name, estimate=p.estimate))
        m.total_estimated_hours += estimate_hours
        _bucket(m.projects_by_area, p.area or NO_AREA, estimate_hours)
        _bucket(m.projects_by_priority, p.priority or NO_PRIORITY, estimate_hours)

        if p.status == pipeline.terminal:
            m.completed.append(SimpleNamespace(id=p.id, name=p.name, area=p.area, end_date=p.end_date))

        if p.start_date or p.end_date:
            m.projects_with_dates += 1

        missing = missing_fields(p)
        if missing:
            m.incomplete.append(SimpleNamespace(id=p.id, name=p.name, area=p.area, missing=missing))

        if not p.tasks:
            m.without_tasks.append(SimpleNamespace(id=p.id, name=p.name, area=p.area, status=p.status))

        # project estimate, split evenly across its developers
        if p.developers:
            share = estimate_hours / len(p.developers)
            for name in p.developers:
                dev = _developer(m.developers, name)
                dev.project_hours += share
                _credit(dev, p.name)

        # task estimates, split across assignees regardless of project membership
        for t in p.tasks:
            m.total_tasks += 1
            m.total_task_hours += t.estimated_time or 0
            if not t.assigned_to:
                m.tasks_without_assignee.append(SimpleNamespace(
                    project_id=p.id, project_name=p.name, task_title=t.title, area=p.area,
                ))
                continue
            share = (t.estimated_time or 0) / len(t.assigned_to)
            for name in t.assigned_to:
                dev = _developer(m.developers, name)
                dev.task_hours += share
                _credit(dev, p.name)

        _schedule(m, p, estimate_hours, pipeline, workday_hours, upcoming_days, at_risk_days)

    for dev in m.developers.values():
        dev.total_hours = dev.project_hours + dev.task_hours

    m.delayed.sort(key=lambda r: r.days_delayed, reverse=True)
    m.upcoming.sort(key=lambda r: r.days_until_end)
    m.at_risk.sort(key=lambda r: r.days_until_end)
    return m
