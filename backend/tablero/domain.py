"""Canonical in-memory shapes shared by every consumer of the board.

Field names are snake_case in Python; `to_dict` produces the camelCase
wire/persistence shape. `Task.assigned_to` is a list in memory and a
comma-joined string on the wire.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any

from .utils.formatting import join_people

# --- Enumerations ---

PRIORITIES: tuple[str, ...] = ("alta", "media", "baja", "a-definir")
DEFAULT_PRIORITY = "media"

PRIORITY_LABELS: dict[str, str] = {
    "alta": "Alta",
    "media": "Media",
    "baja": "Baja",
    "a-definir": "A definir",
}

TASK_STATUSES: tuple[str, ...] = ("pendiente", "en-progreso", "hecha")
DEFAULT_TASK_STATUS = "pendiente"


@dataclass(frozen=True)
class StatusStage:
    key: str
    label: str


@dataclass(frozen=True)
class Pipeline:
    """Ordered status stages plus the substring rules used to map raw input.

    `rules` are checked in order against the lower-cased input; the first
    fragment found wins. Unmatched input falls back to the first stage.
    """
    name: str
    stages: tuple[StatusStage, ...]
    rules: tuple[tuple[str, str], ...] = ()

    @property
    def keys(self) -> tuple[str, ...]:
        return tuple(s.key for s in self.stages)

    @property
    def first(self) -> str:
        return self.stages[0].key

    @property
    def terminal(self) -> str:
        return self.stages[-1].key

    def label(self, key: str) -> str:
        for stage in self.stages:
            if stage.key == key:
                return stage.label
        return key

    def index(self, key: str) -> int:
        try:
            return self.keys.index(key)
        except ValueError:
            return -1


CURRENT_PIPELINE = Pipeline(
    name="current",
    stages=(
        StatusStage("en-analisis", "En análisis"),
        StatusStage("en-desarrollo", "En desarrollo"),
        StatusStage("terminado", "Terminado"),
    ),
    rules=(
        ("termin", "terminado"),
        ("desar", "en-desarrollo"),
        # keys and labels of the older five-stage board
        ("complet", "terminado"),
        ("progres", "en-desarrollo"),
        ("revis", "en-desarrollo"),
    ),
)

LEGACY_PIPELINE = Pipeline(
    name="legacy",
    stages=(
        StatusStage("backlog", "Ideas / Backlog"),
        StatusStage("planificado", "Planificado"),
        StatusStage("en-progreso", "En progreso"),
        StatusStage("revision", "En revisión"),
        StatusStage("completado", "Completado"),
    ),
    rules=(
        ("complet", "completado"),
        ("revis", "revision"),
        ("progres", "en-progreso"),
        ("planific", "planificado"),
        ("backlog", "backlog"),
    ),
)

PIPELINES: dict[str, Pipeline] = {p.name: p for p in (CURRENT_PIPELINE, LEGACY_PIPELINE)}


def get_pipeline(name: str) -> Pipeline:
    try:
        return PIPELINES[name]
    except KeyError:
        raise ValueError(f"Unknown status pipeline: {name!r}") from None


# --- Entities ---

@dataclass
class Task:
    id: str
    title: str
    description: str = ""
    assigned_to: list[str] = field(default_factory=list)
    estimated_time: float | None = None
    status: str = DEFAULT_TASK_STATUS

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "assignedTo": join_people(self.assigned_to),
            "estimatedTime": self.estimated_time,
            "status": self.status,
        }


@dataclass
class Project:
    id: str
    name: str
    area: str = ""
    owner: str = ""
    developers: list[str] = field(default_factory=list)
    estimate: str = ""
    points: float | None = None
    start_date: str = ""
    end_date: str = ""
    priority: str = DEFAULT_PRIORITY
    status: str = ""
    description: str = ""
    tasks: list[Task] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "area": self.area,
            "owner": self.owner,
            "developers": list(self.developers),
            "estimate": self.estimate,
            "points": self.points,
            "startDate": self.start_date,
            "endDate": self.end_date,
            "priority": self.priority,
            "status": self.status,
            "description": self.description,
            "tasks": [t.to_dict() for t in self.tasks],
        }

    def find_task(self, task_id: str) -> Task | None:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None


PROJECT_KEYS = frozenset(Project("", "").to_dict())
