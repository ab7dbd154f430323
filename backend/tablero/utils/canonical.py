"""Turn raw JSON objects (seed file, imports, form posts) into canonical projects.

Nothing here raises on bad input: each field degrades to its default on
its own, and only a record without a usable name is rejected (None).
Field names are looked up through alias lists, first non-empty wins, so
that exports of older board versions load unchanged.
"""
from __future__ import annotations
import logging
import math
import uuid
from collections.abc import Mapping
from typing import Any, Callable, Iterable

from ..domain import (
    CURRENT_PIPELINE,
    DEFAULT_PRIORITY,
    DEFAULT_TASK_STATUS,
    PRIORITIES,
    PROJECT_KEYS,
    Pipeline,
    Project,
    Task,
)
from .dates import is_iso_date
from .formatting import split_people, to_text

logger = logging.getLogger(__name__)

# primary key first, then legacy spellings
ID_KEYS = ("id", "ID", "Id")
NAME_KEYS = ("name", "project", "Proyecto", "nombre")
AREA_KEYS = ("area", "Area")
OWNER_KEYS = ("owner", "responsable", "Responsable")
DEVELOPER_KEYS = ("developers", "Desarrolladores", "desarrolladores")
ESTIMATE_KEYS = ("estimate", "estimacion", "Estimacion")
POINTS_KEYS = ("points", "Puntos")
START_KEYS = ("startDate", "fechaInicio", "FechaInicio")
END_KEYS = ("endDate", "fechaFin", "FechaFin")
PRIORITY_KEYS = ("priority", "Prioridad")
STATUS_KEYS = ("status", "Estado")
DESCRIPTION_KEYS = ("description", "observaciones", "Observaciones")
TASK_LIST_KEYS = ("tasks",)

FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "id": ID_KEYS,
    "name": NAME_KEYS,
    "area": AREA_KEYS,
    "owner": OWNER_KEYS,
    "developers": DEVELOPER_KEYS,
    "estimate": ESTIMATE_KEYS,
    "points": POINTS_KEYS,
    "startDate": START_KEYS,
    "endDate": END_KEYS,
    "priority": PRIORITY_KEYS,
    "status": STATUS_KEYS,
    "description": DESCRIPTION_KEYS,
    "tasks": TASK_LIST_KEYS,
}


def new_id() -> str:
    return str(uuid.uuid4())


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return not value
    return False


def _resolve(raw: Mapping, keys: Iterable[str]) -> Any:
    for key in keys:
        value = raw.get(key)
        if not _is_blank(value):
            return value
    return None


# ------- field normalizers -------

def to_number(value: Any) -> int | float | None:
    """Numeric coercion; absent, unparsable or non-finite gives None."""
    if value is None or isinstance(value, bool):
        return None
    text = value if isinstance(value, (int, float)) else str(value).strip()
    if text == "":
        return None
    try:
        # ints beyond float range raise OverflowError
        parsed = float(text)
    except (OverflowError, ValueError):
        return None
    if not math.isfinite(parsed):
        return None
    if isinstance(value, int):
        return value
    return int(parsed) if parsed.is_integer() else parsed


def format_developers(value: Any) -> list[str]:
    return split_people(value)


def sanitize_date(value: Any) -> str:
    if _is_blank(value):
        return ""
    text = str(value)
    return text if is_iso_date(text) else ""


def normalize_priority(value: Any) -> str:
    if _is_blank(value):
        return DEFAULT_PRIORITY
    text = to_text(value).lower()
    if text in PRIORITIES:
        return text
    if "alta" in text:
        return "alta"
    if "media" in text:
        return "media"
    if "baja" in text:
        return "baja"
    if "definir" in text or "define" in text:
        return "a-definir"
    return DEFAULT_PRIORITY


def normalize_status(value: Any, pipeline: Pipeline = CURRENT_PIPELINE) -> str:
    if _is_blank(value):
        return pipeline.first
    text = to_text(value).lower()
    if text in pipeline.keys:
        return text
    for fragment, key in pipeline.rules:
        if fragment in text:
            return key
    return pipeline.first


def normalize_task_status(value: Any) -> str:
    if _is_blank(value):
        return DEFAULT_TASK_STATUS
    text = to_text(value).lower()
    if "progreso" in text or "proceso" in text:
        return "en-progreso"
    if "hecha" in text or "complet" in text:
        return "hecha"
    return DEFAULT_TASK_STATUS


# ------- tasks -------

def canonicalize_task(raw: Any, taken_ids: set[str] | None = None) -> Task | None:
    """One raw task to a Task; non-objects and untitled tasks give None."""
    if not isinstance(raw, Mapping):
        return None
    title = to_text(raw.get("title"))
    if not title:
        return None
    task_id = to_text(raw.get("id")) or new_id()
    if taken_ids is not None:
        while task_id in taken_ids:
            task_id = new_id()
        taken_ids.add(task_id)
    return Task(
        id=task_id,
        title=title,
        description=to_text(raw.get("description")),
        assigned_to=split_people(raw.get("assignedTo")),
        estimated_time=to_number(raw.get("estimatedTime")),
        status=normalize_task_status(raw.get("status")),
    )


def canonicalize_tasks(value: Any) -> list[Task]:
    if not isinstance(value, (list, tuple)):
        return []
    taken: set[str] = set()
    tasks = []
    for item in value:
        task = canonicalize_task(item, taken)
        if task is not None:
            tasks.append(task)
    return tasks


# ------- projects -------

def _build(get: Callable[[str], Any], pipeline: Pipeline) -> Project | None:
    name = to_text(get("name"))
    if not name:
        return None
    return Project(
        id=to_text(get("id")) or new_id(),
        name=name,
        area=to_text(get("area")),
        owner=to_text(get("owner")),
        developers=format_developers(get("developers")),
        estimate=to_text(get("estimate")),
        points=to_number(get("points")),
        start_date=sanitize_date(get("startDate")),
        end_date=sanitize_date(get("endDate")),
        priority=normalize_priority(get("priority")),
        status=normalize_status(get("status"), pipeline),
        description=to_text(get("description")),
        tasks=canonicalize_tasks(get("tasks")),
    )


def canonicalize(raw: Any, pipeline: Pipeline = CURRENT_PIPELINE) -> Project | None:
    """Raw object to canonical Project, or None when it has no name."""
    if not isinstance(raw, Mapping):
        return None
    if PROJECT_KEYS.issuperset(raw.keys()):
        # already in canonical shape: read the primary keys directly
        return _build(raw.get, pipeline)
    return _build(lambda field: _resolve(raw, FIELD_ALIASES[field]), pipeline)


def canonicalize_all(raw_list: Any, pipeline: Pipeline = CURRENT_PIPELINE) -> list[Project]:
    """Sole ingestion path for seed data and imports; rejects are dropped."""
    if not isinstance(raw_list, (list, tuple)):
        return []
    projects = []
    for raw in raw_list:
        project = canonicalize(raw, pipeline)
        if project is not None:
            projects.append(project)
    dropped = len(raw_list) - len(projects)
    if dropped:
        logger.debug("Dropped %d record(s) without a usable name", dropped)
    return projects
