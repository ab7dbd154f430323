"""Mutations of the in-memory project list.

Callers load the list from storage, apply one of these and save it back.
Raw form/task data always goes through the canonicalizer first.
"""
from __future__ import annotations
from collections.abc import Mapping
from typing import Any

from ..domain import CURRENT_PIPELINE, TASK_STATUSES, Pipeline, Project, Task
from ..utils.canonical import canonicalize, canonicalize_task
from ..utils.formatting import unique


class ProjectNotFound(ValueError):
    pass


class TaskNotFound(ValueError):
    pass


def get_project(projects: list[Project], project_id: str) -> Project:
    for p in projects:
        if p.id == project_id:
            return p
    raise ProjectNotFound(f"Project not found: {project_id}")


def get_task(project: Project, task_id: str) -> Task:
    task = project.find_task(task_id)
    if task is None:
        raise TaskNotFound(f"Task not found: {task_id}")
    return task


def upsert_project(projects: list[Project], raw: Mapping[str, Any],
                   pipeline: Pipeline = CURRENT_PIPELINE) -> Project:
    """Create, or replace by id; an edit keeps the tasks already on the project."""
    project = canonicalize(raw, pipeline)
    if project is None:
        raise ValueError("Project name is required")
    project.developers = unique(project.developers)
    for i, existing in enumerate(projects):
        if existing.id == project.id:
            project.tasks = existing.tasks
            projects[i] = project
            return project
    projects.append(project)
    return project


def set_status(projects: list[Project], project_id: str, status: str,
               pipeline: Pipeline = CURRENT_PIPELINE) -> Project:
    if status not in pipeline.keys:
        raise ValueError(f"Invalid status: {status}")
    project = get_project(projects, project_id)
    project.status = status
    return project


def move_project(projects: list[Project], project_id: str, direction: int,
                 pipeline: Pipeline = CURRENT_PIPELINE) -> Project:
    """Shift one stage left (-1) or right (+1); no-op past either end."""
    if direction not in (-1, 1):
        raise ValueError("Direction must be -1 or 1")
    project = get_project(projects, project_id)
    target = pipeline.index(project.status) + direction
    if 0 <= target < len(pipeline.stages):
        project.status = pipeline.stages[target].key
    return project


def delete_project(projects: list[Project], project_id: str) -> list[Project]:
    remaining = [p for p in projects if p.id != project_id]
    if len(remaining) == len(projects):
        raise ProjectNotFound(f"Project not found: {project_id}")
    return remaining


# --- tasks ---

def add_task(projects: list[Project], project_id: str, raw: Mapping[str, Any]) -> Task:
    project = get_project(projects, project_id)
    task = canonicalize_task(raw, {t.id for t in project.tasks})
    if task is None:
        raise ValueError("Task title is required")
    project.tasks.append(task)
    return task


def update_task(projects: list[Project], project_id: str, task_id: str,
                raw: Mapping[str, Any]) -> Task:
    project = get_project(projects, project_id)
    existing = get_task(project, task_id)
    data = dict(raw, id=task_id)
    if not data.get("status"):
        data["status"] = existing.status
    task = canonicalize_task(data)
    if task is None:
        raise ValueError("Task title is required")
    project.tasks[project.tasks.index(existing)] = task
    return task


def delete_task(projects: list[Project], project_id: str, task_id: str) -> None:
    project = get_project(projects, project_id)
    project.tasks.remove(get_task(project, task_id))


def set_task_status(projects: list[Project], project_id: str, task_id: str, status: str) -> Task:
    if status not in TASK_STATUSES:
        raise ValueError(f"Invalid task status: {status}")
    task = get_task(get_project(projects, project_id), task_id)
    task.status = status
    return task


# --- catalog renames ---

def _replace(names: list[str], old: str, new: str) -> list[str]:
    return unique(new if n == old else n for n in names)


def cascade_rename(projects: list[Project], kind: str, old: str, new: str) -> int:
    """Rewrite every copy of a renamed catalog entry; returns projects touched.

    Owners and developers are both people, so task assignees are rewritten
    for either kind.
    """
    touched = 0
    for p in projects:
        before = p.to_dict()
        if kind == "area" and p.area == old:
            p.area = new
        if kind == "owner" and p.owner == old:
            p.owner = new
        if kind == "developer" and old in p.developers:
            p.developers = _replace(p.developers, old, new)
        if kind in ("owner", "developer"):
            for t in p.tasks:
                if old in t.assigned_to:
                    t.assigned_to = _replace(t.assigned_to, old, new)
        if p.to_dict() != before:
            touched += 1
    return touched
