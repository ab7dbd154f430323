from __future__ import annotations
from dataclasses import dataclass
from types import SimpleNamespace

from ..domain import CURRENT_PIPELINE, Pipeline, Project
from .formatting import fold_text


@dataclass(frozen=True)
class FilterSpec:
    """Board filters; empty string means no constraint.

    `search` is expected already folded (see `from_input`).
    """
    search: str = ""
    area: str = ""
    priority: str = ""
    status: str = ""

    @classmethod
    def from_input(cls, search: str | None = "", area: str | None = "",
                   priority: str | None = "", status: str | None = "") -> "FilterSpec":
        return cls(
            search=fold_text((search or "").strip()),
            area=area or "",
            priority=priority or "",
            status=status or "",
        )


def has_active_filters(spec: FilterSpec) -> bool:
    return bool(spec.search or spec.area or spec.priority or spec.status)


def searchable_text(project: Project) -> str:
    parts = [
        project.name,
        project.area,
        project.owner,
        " ".join(project.developers),
        project.description,
    ]
    return fold_text(" ".join(p for p in parts if p))


def matches(project: Project, spec: FilterSpec) -> bool:
    if spec.area and project.area != spec.area:
        return False
    if spec.priority and project.priority != spec.priority:
        return False
    if spec.status and project.status != spec.status:
        return False
    if spec.search and spec.search not in searchable_text(project):
        return False
    return True


def filter_projects(projects: list[Project], spec: FilterSpec) -> list[Project]:
    return [p for p in projects if matches(p, spec)]


def summarize(filtered: list[Project], total: int, spec: FilterSpec,
              pipeline: Pipeline = CURRENT_PIPELINE) -> SimpleNamespace:
    """Counts behind the 'showing N of M' line above the board."""
    by_status = {stage.key: 0 for stage in pipeline.stages}
    points = 0.0
    for p in filtered:
        by_status[p.status] = by_status.get(p.status, 0) + 1
        if p.points is not None:
            points += p.points
    return SimpleNamespace(
        shown=len(filtered),
        total=total,
        filters_active=has_active_filters(spec),
        points=points,
        by_status=[
            SimpleNamespace(key=stage.key, label=stage.label, count=by_status[stage.key])
            for stage in pipeline.stages
        ],
    )
