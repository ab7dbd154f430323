"""Reference catalogs of areas, owners and developers.

Projects copy catalog names by value, so renaming an entry has to be
cascaded into the stored projects as a second write (`rename_with_cascade`).
Removing an entry never touches projects; stale names are accepted.
"""
from __future__ import annotations
import logging
from enum import Enum

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..domain import CURRENT_PIPELINE, Pipeline, Project
from ..utils.formatting import fold_text
from .projects import cascade_rename
from .storage import Catalogs, load_catalogs, load_stored_projects, save_catalogs, save_projects

logger = logging.getLogger(__name__)

KINDS: dict[str, str] = {"area": "areas", "owner": "owners", "developer": "developers"}


class RenameOutcome(str, Enum):
    rejected = "rejected"
    renamed = "renamed"
    partial = "partial"  # catalog renamed, projects may still show the old name


def collation_key(name: str) -> tuple[str, str]:
    return fold_text(name), name


def _catalog(catalogs: Catalogs, kind: str) -> list[str]:
    try:
        return getattr(catalogs, KINDS[kind])
    except KeyError:
        raise ValueError(f"Unknown catalog: {kind!r}") from None


def list_all(db: Session, kind: str) -> list[str]:
    return sorted(_catalog(load_catalogs(db), kind), key=collation_key)


def list_all_people(db: Session) -> list[str]:
    catalogs = load_catalogs(db)
    return sorted(set(catalogs.owners) | set(catalogs.developers), key=collation_key)


def add(db: Session, kind: str, name: str) -> bool:
    catalogs = load_catalogs(db)
    names = _catalog(catalogs, kind)
    trimmed = (name or "").strip()
    if not trimmed or trimmed in names:
        return False
    names.append(trimmed)
    names.sort(key=collation_key)
    save_catalogs(db, catalogs)
    logger.info("Added %s %r", kind, trimmed)
    return True


def remove(db: Session, kind: str, name: str) -> bool:
    catalogs = load_catalogs(db)
    names = _catalog(catalogs, kind)
    if name not in names:
        return False
    names.remove(name)
    save_catalogs(db, catalogs)
    logger.info("Removed %s %r", kind, name)
    return True


def rename(db: Session, kind: str, old_name: str, new_name: str) -> bool:
    """Catalog-only rename; see `rename_with_cascade` for the project update."""
    catalogs = load_catalogs(db)
    names = _catalog(catalogs, kind)
    trimmed = (new_name or "").strip()
    if old_name not in names or not trimmed or trimmed in names:
        return False
    names[names.index(old_name)] = trimmed
    names.sort(key=collation_key)
    save_catalogs(db, catalogs)
    return True


def rename_with_cascade(db: Session, kind: str, old_name: str, new_name: str,
                        pipeline: Pipeline = CURRENT_PIPELINE) -> RenameOutcome:
    """Rename in the catalog, commit, then rewrite and commit the projects."""
    if not rename(db, kind, old_name, new_name):
        return RenameOutcome.rejected
    db.commit()
    new_name = new_name.strip()
    try:
        projects = load_stored_projects(db, pipeline)
        touched = cascade_rename(projects, kind, old_name, new_name)
        if touched:
            save_projects(db, projects)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning("Renamed %s %r -> %r in the catalog but projects were not updated: %s",
                       kind, old_name, new_name, e)
        return RenameOutcome.partial
    logger.info("Renamed %s %r -> %r (%d project(s) updated)", kind, old_name, new_name, touched)
    return RenameOutcome.renamed


def sync_areas(db: Session, projects: list[Project]) -> list[str]:
    """Fold areas used by projects but missing from the catalog into it."""
    catalogs = load_catalogs(db)
    added = sorted({p.area for p in projects if p.area and p.area not in catalogs.areas}, key=collation_key)
    if added:
        catalogs.areas.extend(added)
        catalogs.areas.sort(key=collation_key)
        save_catalogs(db, catalogs)
        logger.info("Added %d area(s) found in projects: %s", len(added), ", ".join(added))
    return added
