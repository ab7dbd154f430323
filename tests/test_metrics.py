"""
Tests for the dashboard aggregator.
"""

from datetime import date

import pytest

from tablero.utils.canonical import canonicalize
from tablero.utils.metrics import NO_AREA, aggregate, missing_fields, task_summary


@pytest.fixture
def metrics(projects, today):
    return aggregate(projects, today)


class TestTotals:
    def test_counts_and_hours(self, metrics):
        assert metrics.total_projects == 3
        assert metrics.total_tasks == 3
        assert metrics.total_estimated_hours == 52
        assert metrics.total_task_hours == 16
        assert metrics.total_hours == 68
        assert metrics.projects_with_dates == 3

    def test_averages(self, metrics):
        assert metrics.avg_hours_per_project == pytest.approx(52 / 3)
        assert metrics.avg_tasks_per_project == 1

    def test_empty_list(self, today):
        m = aggregate([], today)
        assert m.total_projects == 0
        assert m.avg_hours_per_project == 0
        assert m.avg_tasks_per_project == 0
        assert m.projects_by_status == {"en-analisis": 0, "en-desarrollo": 0, "terminado": 0}
        assert m.developers == {}

    def test_unparsable_estimate_counts_zero(self, metrics):
        assert [(r.name, r.estimate) for r in metrics.unparsable_estimates] == [("Migración ERP", "a confirmar")]
        assert metrics.projects_by_area["IT"].hours == 0

    def test_leading_number_estimate(self, today):
        p = canonicalize({"name": "x", "estimate": "12.5 horas"})
        m = aggregate([p], today)
        assert m.total_estimated_hours == 12.5
        assert m.unparsable_estimates == []


class TestBreakdowns:
    def test_status(self, metrics):
        assert metrics.projects_by_status == {"en-analisis": 1, "en-desarrollo": 1, "terminado": 1}

    def test_area_and_priority(self, metrics):
        assert {k: (v.count, v.hours) for k, v in metrics.projects_by_area.items()} == {
            "Comercial": (1, 40), "Logística": (1, 12), "IT": (1, 0),
        }
        assert {k: (v.count, v.hours) for k, v in metrics.projects_by_priority.items()} == {
            "alta": (1, 40), "media": (1, 12), "a-definir": (1, 0),
        }

    def test_missing_area_bucket(self, today):
        m = aggregate([canonicalize({"name": "x", "estimate": "3"})], today)
        assert m.projects_by_area[NO_AREA].hours == 3


class TestDevelopers:
    def test_hours_split(self, metrics):
        devs = metrics.developers
        assert devs["Alan Basualdo"].project_hours == 20
        assert devs["Alan Basualdo"].task_hours == 11
        assert devs["Alan Basualdo"].total_hours == 31
        assert devs["Gaspar Diaz"].project_hours == 32
        assert devs["Gaspar Diaz"].task_hours == 0
        assert devs["Vicente D'alesandro"].project_hours == 0
        assert devs["Vicente D'alesandro"].task_hours == 5

    def test_project_lists(self, metrics):
        devs = metrics.developers
        assert devs["Gaspar Diaz"].projects == ["Portal de clientes", "Conciliación bancaria"]
        assert devs["Alan Basualdo"].projects == ["Portal de clientes"]
        assert devs["Vicente D'alesandro"].projects == ["Portal de clientes"]

    def test_task_assignee_outside_project(self, today):
        p = canonicalize({"name": "x", "developers": ["Ana"], "estimate": "10",
                          "tasks": [{"title": "t", "assignedTo": "Luis", "estimatedTime": 4}]})
        devs = aggregate([p], today).developers
        assert devs["Ana"].total_hours == 10
        assert devs["Luis"].total_hours == 4

    def test_unassigned_tasks(self, metrics):
        assert [(r.project_name, r.task_title) for r in metrics.tasks_without_assignee] == [
            ("Portal de clientes", "Checkout"),
        ]


class TestSchedule:
    def test_delay(self, metrics):
        assert len(metrics.delayed) == 1
        row = metrics.delayed[0]
        assert (row.name, row.days_delayed, row.delay_hours) == ("Portal de clientes", 5, 40)
        assert metrics.total_delayed_hours == 40

    def test_terminal_not_delayed(self, projects):
        m = aggregate(projects, date(2024, 6, 1))
        assert "Migración ERP" not in [r.name for r in m.delayed]
        assert [r.name for r in m.completed] == ["Migración ERP"]

    def test_upcoming_and_at_risk(self, metrics):
        assert [(r.name, r.days_until_end) for r in metrics.upcoming] == [("Conciliación bancaria", 5)]
        assert [r.name for r in metrics.at_risk] == ["Conciliación bancaria"]

    def test_due_today_is_upcoming_not_at_risk(self, today):
        p = canonicalize({"name": "hoy", "endDate": "2024-03-10"})
        m = aggregate([p], today)
        assert [r.days_until_end for r in m.upcoming] == [0]
        assert m.at_risk == [] and m.delayed == []

    def test_window_edges(self, today):
        p30 = canonicalize({"name": "30", "endDate": "2024-04-09"})
        p31 = canonicalize({"name": "31", "endDate": "2024-04-10"})
        p7 = canonicalize({"name": "7", "endDate": "2024-03-17"})
        p8 = canonicalize({"name": "8", "endDate": "2024-03-18"})
        m = aggregate([p31, p30, p8, p7], today)
        assert [r.name for r in m.upcoming] == ["7", "8", "30"]
        assert [r.name for r in m.at_risk] == ["7"]

    def test_delayed_sorted_by_days(self, today):
        a = canonicalize({"name": "a", "endDate": "2024-03-08"})
        b = canonicalize({"name": "b", "endDate": "2024-01-10"})
        m = aggregate([a, b], today, workday_hours=6)
        assert [(r.name, r.delay_hours) for r in m.delayed] == [("b", 60 * 6), ("a", 12)]

    def test_invalid_calendar_date_ignored(self, today):
        p = canonicalize({"name": "x", "endDate": "2024-02-30"})
        m = aggregate([p], today)
        assert p.end_date == "2024-02-30"
        assert m.delayed == [] and m.upcoming == []
        assert m.projects_with_dates == 1


class TestRemediation:
    def test_incomplete(self, metrics):
        assert [(r.name, r.missing) for r in metrics.incomplete] == [
            ("Migración ERP", ["owner", "developers", "startDate"]),
        ]

    def test_without_tasks(self, metrics):
        assert [r.name for r in metrics.without_tasks] == ["Conciliación bancaria", "Migración ERP"]

    def test_missing_fields_all(self):
        assert missing_fields(canonicalize({"name": "x"})) == [
            "area", "owner", "developers", "estimate", "startDate", "endDate",
        ]

    def test_task_summary(self, projects):
        s = task_summary(projects[0])
        assert (s.total, s.pending, s.in_progress, s.done) == (3, 1, 1, 1)
        assert s.estimated_hours == 16
