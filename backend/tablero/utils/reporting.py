from __future__ import annotations
from pathlib import Path
from types import SimpleNamespace
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..domain import CURRENT_PIPELINE, PRIORITY_LABELS, Pipeline
from .formatting import hours_label, iso_to_dmy
from .metrics import Metrics

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"


def _env(templates_dir: Path) -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(templates_dir)),
        autoescape=select_autoescape(["html", "xml"]),
    )
    env.filters["hours"] = hours_label
    env.filters["dmy"] = iso_to_dmy
    return env


def to_plain(value: Any) -> Any:
    """Metrics/timeline objects to JSON-ready dicts and lists."""
    if isinstance(value, SimpleNamespace):
        return {k: to_plain(v) for k, v in vars(value).items()}
    if isinstance(value, dict):
        return {k: to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain(v) for v in value]
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value


def metrics_to_dict(m: Metrics) -> dict:
    out = to_plain({k: v for k, v in vars(m).items()})
    out["total_hours"] = m.total_hours
    out["avg_hours_per_project"] = m.avg_hours_per_project
    out["avg_tasks_per_project"] = m.avg_tasks_per_project
    return out


# ---------- small helpers ----------

def _share(count: int, total: int) -> float:
    return 100.0 * count / total if total else 0.0


def _dashboard_context(m: Metrics, pipeline: Pipeline, app_name: str) -> dict:
    status_rows = [
        SimpleNamespace(label=pipeline.label(key), count=count, share=_share(count, m.total_projects))
        for key, count in m.projects_by_status.items() if count > 0
    ]
    area_rows = [
        SimpleNamespace(label=area, count=b.count, hours=b.hours, share=_share(b.count, m.total_projects))
        for area, b in sorted(m.projects_by_area.items(), key=lambda kv: kv[1].count, reverse=True)
    ]
    priority_rows = [
        SimpleNamespace(label=PRIORITY_LABELS.get(key, key), count=b.count, hours=b.hours,
                        share=_share(b.count, m.total_projects))
        for key, b in m.projects_by_priority.items()
    ]
    developers = sorted(m.developers.values(), key=lambda d: d.total_hours, reverse=True)
    busiest = max((d.total_hours for d in developers), default=0) or 1
    developer_rows = [
        SimpleNamespace(name=d.name, total_hours=d.total_hours, project_hours=d.project_hours,
                        task_hours=d.task_hours, projects=", ".join(d.projects),
                        share=100.0 * d.total_hours / busiest)
        for d in developers
    ]
    return {
        "app_name": app_name,
        "today": m.today,
        "m": m,
        "status_rows": status_rows,
        "area_rows": area_rows,
        "priority_rows": priority_rows,
        "developer_rows": developer_rows,
        "status_label": pipeline.label,
        "priority_label": lambda key: PRIORITY_LABELS.get(key, key),
    }


def render_dashboard_html(m: Metrics, pipeline: Pipeline = CURRENT_PIPELINE,
                          app_name: str = "Tablero de proyectos",
                          templates_dir: Path = TEMPLATES_DIR) -> str:
    env = _env(templates_dir)
    tpl = env.get_template("reports/dashboard.html")
    return tpl.render(**_dashboard_context(m, pipeline, app_name))
