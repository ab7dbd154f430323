"""
Shared fixtures: in-memory database, sample raw projects, API client.
"""

import os

# must be set before tablero.settings is imported
os.environ["TABLERO_DATABASE_URL"] = "sqlite://"
os.environ["TABLERO_SEED_URL"] = ""
os.environ["TABLERO_STATUS_PIPELINE"] = "current"

import pytest
from datetime import date

from tablero.db import Base, SessionLocal, engine
from tablero import models  # noqa: F401  (registers tables)
from tablero.utils.canonical import canonicalize_all


@pytest.fixture
def tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session(tables):
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client(tables):
    from fastapi.testclient import TestClient
    from tablero.main import app
    return TestClient(app)


@pytest.fixture
def today():
    return date(2024, 3, 10)


@pytest.fixture
def raw_projects():
    return [
        {
            "id": "p1",
            "name": "Portal de clientes",
            "area": "Comercial",
            "owner": "Diego Gatica",
            "developers": ["Alan Basualdo", "Gaspar Diaz"],
            "estimate": "40",
            "points": 8,
            "startDate": "2024-02-01",
            "endDate": "2024-03-05",
            "priority": "alta",
            "status": "en-desarrollo",
            "description": "Autogestión de pedidos",
            "tasks": [
                {"id": "t1", "title": "Login", "assignedTo": "Alan Basualdo", "estimatedTime": 6, "status": "hecha"},
                {"id": "t2", "title": "Catálogo", "assignedTo": "Alan Basualdo, Vicente D'alesandro",
                 "estimatedTime": 10, "status": "en-progreso"},
                {"id": "t3", "title": "Checkout", "assignedTo": "", "estimatedTime": None, "status": "pendiente"},
            ],
        },
        {
            "ID": 2,
            "Proyecto": "Conciliación bancaria",
            "Area": "Logística",
            "Responsable": "Diego Gatica",
            "Desarrolladores": "Gaspar Diaz",
            "Estimacion": "12h",
            "FechaInicio": "2024-03-01",
            "FechaFin": "2024-03-15",
            "Prioridad": "Media",
            "Estado": "En análisis",
            "Observaciones": "Integración con el banco",
        },
        {
            "id": "p3",
            "name": "Migración ERP",
            "area": "IT",
            "owner": "",
            "developers": [],
            "estimate": "a confirmar",
            "startDate": "",
            "endDate": "2024-03-12",
            "priority": "A definir",
            "status": "Terminado",
        },
        {"name": "", "area": "IT"},
        "not a project",
    ]


@pytest.fixture
def projects(raw_projects):
    return canonicalize_all(raw_projects)
