import logging
from contextlib import contextmanager
from datetime import date

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import HTMLResponse, Response
from sqlalchemy.orm import Session

from .settings import settings
from .db import engine, Base, get_db, session_scope
from .domain import get_pipeline

# CRUD layers
from .crud import projects as cp
from .crud import registry as cr
from .crud import storage as cs
from .utils.logger import setup_logger
from .utils.metrics import aggregate, task_summary
from .utils.query import FilterSpec, filter_projects, summarize
from .utils.reporting import metrics_to_dict, render_dashboard_html, to_plain
from .utils.timeline import Window, layout
from .schemas import CatalogNameIn, MoveIn, ProjectIn, RenameIn, StatusIn, TaskIn

# --- App
Base.metadata.create_all(bind=engine)
setup_logger()
logger = logging.getLogger(__name__)

PIPELINE = get_pipeline(settings.status_pipeline)

app = FastAPI(title=settings.app_name)


@contextmanager
def user_errors():
    """Map CRUD-layer errors onto HTTP status codes."""
    try:
        yield
    except (cp.ProjectNotFound, cp.TaskNotFound) as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def load(db: Session):
    return cs.load_stored_projects(db, PIPELINE)


def check_kind(kind: str) -> str:
    if kind not in cr.KINDS:
        raise HTTPException(status_code=404, detail=f"Unknown catalog: {kind}")
    return kind


def project_out(p) -> dict:
    data = p.to_dict()
    data["taskSummary"] = to_plain(task_summary(p))
    return data


@app.on_event("startup")
async def startup():
    with session_scope() as db:
        projects = await cs.bootstrap_projects(db, settings.seed_url, settings.seed_timeout, PIPELINE)
        cr.sync_areas(db, projects)
    logger.info("%s ready (%d project(s), pipeline %s)", settings.app_name, len(projects), PIPELINE.name)

# ------------------
# Board
# ------------------
@app.get("/health")
def health():
    return {"status": "healthy", "app": settings.app_name}

@app.get("/api/pipeline")
def api_pipeline():
    return {
        "name": PIPELINE.name,
        "stages": [{"key": s.key, "label": s.label} for s in PIPELINE.stages],
    }

@app.get("/api/projects")
def api_projects(search: str = "", area: str = "", priority: str = "", status: str = "",
                 db: Session = Depends(get_db)):
    projects = load(db)
    spec = FilterSpec.from_input(search, area, priority, status)
    filtered = filter_projects(projects, spec)
    return {
        "projects": [project_out(p) for p in filtered],
        "summary": to_plain(summarize(filtered, len(projects), spec, PIPELINE)),
    }

@app.get("/api/projects/{pid}")
def api_project(pid: str, db: Session = Depends(get_db)):
    with user_errors():
        return project_out(cp.get_project(load(db), pid))

@app.post("/api/projects")
def api_projects_upsert(body: ProjectIn, db: Session = Depends(get_db)):
    projects = load(db)
    with user_errors():
        p = cp.upsert_project(projects, body.raw(), PIPELINE)
    cs.save_projects(db, projects)
    cr.sync_areas(db, projects)
    return project_out(p)

@app.delete("/api/projects/{pid}")
def api_projects_delete(pid: str, db: Session = Depends(get_db)):
    with user_errors():
        remaining = cp.delete_project(load(db), pid)
    cs.save_projects(db, remaining)
    return {"deleted": pid}

@app.post("/api/projects/{pid}/move")
def api_projects_move(pid: str, body: MoveIn, db: Session = Depends(get_db)):
    projects = load(db)
    with user_errors():
        p = cp.move_project(projects, pid, body.direction, PIPELINE)
    cs.save_projects(db, projects)
    return project_out(p)

@app.post("/api/projects/{pid}/status")
def api_projects_status(pid: str, body: StatusIn, db: Session = Depends(get_db)):
    projects = load(db)
    with user_errors():
        p = cp.set_status(projects, pid, body.status, PIPELINE)
    cs.save_projects(db, projects)
    return project_out(p)

# Tasks
@app.post("/api/projects/{pid}/tasks")
def api_tasks_add(pid: str, body: TaskIn, db: Session = Depends(get_db)):
    projects = load(db)
    with user_errors():
        t = cp.add_task(projects, pid, body.raw())
    cs.save_projects(db, projects)
    return t.to_dict()

@app.put("/api/projects/{pid}/tasks/{tid}")
def api_tasks_update(pid: str, tid: str, body: TaskIn, db: Session = Depends(get_db)):
    projects = load(db)
    with user_errors():
        t = cp.update_task(projects, pid, tid, body.raw())
    cs.save_projects(db, projects)
    return t.to_dict()

@app.delete("/api/projects/{pid}/tasks/{tid}")
def api_tasks_delete(pid: str, tid: str, db: Session = Depends(get_db)):
    projects = load(db)
    with user_errors():
        cp.delete_task(projects, pid, tid)
    cs.save_projects(db, projects)
    return {"deleted": tid}

@app.post("/api/projects/{pid}/tasks/{tid}/status")
def api_tasks_status(pid: str, tid: str, body: StatusIn, db: Session = Depends(get_db)):
    projects = load(db)
    with user_errors():
        t = cp.set_task_status(projects, pid, tid, body.status)
    cs.save_projects(db, projects)
    return t.to_dict()

# ------------------
# Views
# ------------------
@app.get("/api/dashboard")
def api_dashboard(today: date | None = None, db: Session = Depends(get_db)):
    m = aggregate(
        load(db), today or date.today(), PIPELINE,
        workday_hours=settings.workday_hours,
        upcoming_days=settings.upcoming_days,
        at_risk_days=settings.at_risk_days,
    )
    return metrics_to_dict(m)

@app.get("/reports/dashboard", response_class=HTMLResponse)
def report_dashboard(today: date | None = None, db: Session = Depends(get_db)):
    m = aggregate(
        load(db), today or date.today(), PIPELINE,
        workday_hours=settings.workday_hours,
        upcoming_days=settings.upcoming_days,
        at_risk_days=settings.at_risk_days,
    )
    return HTMLResponse(render_dashboard_html(m, PIPELINE, settings.app_name))

@app.get("/api/timeline")
def api_timeline(
    search: str = "", area: str = "", priority: str = "", status: str = "",
    date_from: str = Query("", alias="from"),
    date_to: str = Query("", alias="to"),
    today: date | None = None,
    db: Session = Depends(get_db),
):
    spec = FilterSpec.from_input(search, area, priority, status)
    tl = layout(
        filter_projects(load(db), spec),
        Window.from_input(date_from, date_to),
        today or date.today(),
        settings.timeline_padding_days,
    )
    return to_plain(vars(tl))

# ------------------
# Import / export
# ------------------
@app.post("/api/import")
async def api_import(request: Request, db: Session = Depends(get_db)):
    body = await request.body()
    with user_errors():
        projects = cs.import_projects(body, PIPELINE)
    cs.save_projects(db, projects)
    cr.sync_areas(db, projects)
    logger.info("Imported %d project(s)", len(projects))
    return {"imported": len(projects)}

@app.get("/api/export")
def api_export(db: Session = Depends(get_db)):
    filename = f"proyectos-{date.today().isoformat()}.json"
    return Response(
        content=cs.export_projects(load(db)),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )

# ------------------
# Reference catalogs
# ------------------
@app.get("/api/catalogs")
def api_catalogs(db: Session = Depends(get_db)):
    return {kind: cr.list_all(db, kind) for kind in cr.KINDS}

@app.get("/api/people")
def api_people(db: Session = Depends(get_db)):
    return cr.list_all_people(db)

@app.get("/api/catalogs/{kind}")
def api_catalog(kind: str, db: Session = Depends(get_db)):
    return cr.list_all(db, check_kind(kind))

@app.post("/api/catalogs/{kind}")
def api_catalog_add(kind: str, body: CatalogNameIn, db: Session = Depends(get_db)):
    added = cr.add(db, check_kind(kind), body.name)
    return {"added": added, "names": cr.list_all(db, kind)}

@app.delete("/api/catalogs/{kind}/{name}")
def api_catalog_remove(kind: str, name: str, db: Session = Depends(get_db)):
    removed = cr.remove(db, check_kind(kind), name)
    return {"removed": removed, "names": cr.list_all(db, kind)}

@app.post("/api/catalogs/{kind}/rename")
def api_catalog_rename(kind: str, body: RenameIn, db: Session = Depends(get_db)):
    outcome = cr.rename_with_cascade(db, check_kind(kind), body.old_name, body.new_name, PIPELINE)
    return {"outcome": outcome.value, "names": cr.list_all(db, kind)}
