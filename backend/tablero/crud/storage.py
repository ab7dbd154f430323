from __future__ import annotations
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.orm import Session

from ..domain import CURRENT_PIPELINE, Pipeline, Project
from ..models import StorageEntry
from ..utils.canonical import canonicalize_all, new_id
from ..utils.seed import fetch_seed

logger = logging.getLogger(__name__)

PROJECTS_KEY = "gestionProjects"
META_KEY = "gestionProjectsMeta"
PEOPLE_KEY = "gestionPeople"

DEFAULT_DEVELOPERS = ("Diego Gatica", "Alan Basualdo", "Vicente D'alesandro", "Gaspar Diaz")
DEFAULT_OWNERS = ("Diego Gatica",)
DEFAULT_AREAS = ("Comercial", "Contabilidad", "Finanzas", "IT", "Logística", "Postventa", "Todas", "CCHH")


@dataclass
class Catalogs:
    developers: list[str] = field(default_factory=lambda: list(DEFAULT_DEVELOPERS))
    owners: list[str] = field(default_factory=lambda: list(DEFAULT_OWNERS))
    areas: list[str] = field(default_factory=lambda: list(DEFAULT_AREAS))

    def to_dict(self) -> dict[str, list[str]]:
        return {"developers": list(self.developers), "owners": list(self.owners), "areas": list(self.areas)}


# -------------------------------
# Raw key/value access
# -------------------------------

def get_value(db: Session, key: str) -> str | None:
    row = db.get(StorageEntry, key)
    return row.value if row else None


def set_value(db: Session, key: str, value: str) -> StorageEntry:
    row = db.get(StorageEntry, key)
    if row:
        row.value = value
    else:
        row = StorageEntry(key=key, value=value)
        db.add(row)
    db.flush()
    return row


def _read_json(db: Session, key: str) -> Any | None:
    text = get_value(db, key)
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError as e:
        logger.warning("Stored %s is corrupt, treating it as empty: %s", key, e)
        return None


# -------------------------------
# Projects
# -------------------------------

def ensure_unique_ids(projects: list[Project], taken: set[str] | None = None) -> list[Project]:
    """Give a fresh id to every project whose id is already in use."""
    seen = set(taken or ())
    for p in projects:
        if p.id in seen:
            old, p.id = p.id, new_id()
            logger.info("Project %r had duplicate id %s, reassigned %s", p.name, old, p.id)
        seen.add(p.id)
    return projects


def load_stored_projects(db: Session, pipeline: Pipeline = CURRENT_PIPELINE) -> list[Project]:
    """Stored projects; repaired ids and shapes are written back once so they stay stable."""
    raw = _read_json(db, PROJECTS_KEY)
    projects = ensure_unique_ids(canonicalize_all(raw, pipeline))
    if raw is not None and [p.to_dict() for p in projects] != raw:
        logger.info("Rewriting stored projects in canonical shape")
        save_projects(db, projects)
    return projects


def save_projects(db: Session, projects: list[Project]) -> None:
    set_value(db, PROJECTS_KEY, json.dumps([p.to_dict() for p in projects], ensure_ascii=False))
    meta = {"lastUpdate": datetime.now(timezone.utc).isoformat(), "totalProjects": len(projects)}
    set_value(db, META_KEY, json.dumps(meta))


def load_meta(db: Session) -> dict | None:
    meta = _read_json(db, META_KEY)
    return meta if isinstance(meta, dict) else None


async def bootstrap_projects(db: Session, seed_url: str, timeout: float = 10.0,
                             pipeline: Pipeline = CURRENT_PIPELINE, transport=None) -> list[Project]:
    """Stored projects, or the seed file on first run (persisted once loaded)."""
    stored = load_stored_projects(db, pipeline)
    if stored:
        return stored
    raw = await fetch_seed(seed_url, timeout=timeout, transport=transport)
    if raw is None:
        return []
    projects = ensure_unique_ids(canonicalize_all(raw, pipeline))
    save_projects(db, projects)
    logger.info("Loaded %d seed project(s) from %s", len(projects), seed_url)
    return projects


# -------------------------------
# Import / export files
# -------------------------------

def import_projects(text: str | bytes, pipeline: Pipeline = CURRENT_PIPELINE) -> list[Project]:
    """Parse an import file; raises ValueError unless it holds a JSON array."""
    data = json.loads(text)
    if not isinstance(data, list):
        raise ValueError("The file does not contain an array of projects")
    return ensure_unique_ids(canonicalize_all(data, pipeline))


def export_projects(projects: list[Project]) -> str:
    return json.dumps([p.to_dict() for p in projects], ensure_ascii=False, indent=2)


# -------------------------------
# Reference catalogs
# -------------------------------

def _names(value: Any, default: tuple[str, ...]) -> list[str]:
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return list(value)
    return list(default)


def load_catalogs(db: Session) -> Catalogs:
    data = _read_json(db, PEOPLE_KEY)
    if not isinstance(data, dict):
        return Catalogs()
    return Catalogs(
        developers=_names(data.get("developers"), DEFAULT_DEVELOPERS),
        owners=_names(data.get("owners"), DEFAULT_OWNERS),
        areas=_names(data.get("areas"), DEFAULT_AREAS),
    )


def save_catalogs(db: Session, catalogs: Catalogs) -> None:
    set_value(db, PEOPLE_KEY, json.dumps(catalogs.to_dict(), ensure_ascii=False))
