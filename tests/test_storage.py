"""
Tests for persisted projects, meta, import/export and catalogs.
"""

import json

import pytest

from tablero.crud import storage as cs
from tablero.domain import LEGACY_PIPELINE
from tablero.utils.canonical import canonicalize_all


class TestProjects:
    def test_empty_store(self, db_session):
        assert cs.load_stored_projects(db_session) == []
        assert cs.load_meta(db_session) is None

    def test_save_and_load(self, db_session, projects):
        cs.save_projects(db_session, projects)
        assert cs.load_stored_projects(db_session) == projects
        meta = cs.load_meta(db_session)
        assert meta["totalProjects"] == 3
        assert meta["lastUpdate"]

    def test_stored_shape_is_canonical(self, db_session, projects):
        cs.save_projects(db_session, projects)
        stored = json.loads(cs.get_value(db_session, cs.PROJECTS_KEY))
        assert stored[1]["name"] == "Conciliación bancaria"
        assert stored[0]["tasks"][1]["assignedTo"] == "Alan Basualdo, Vicente D'alesandro"
        assert "Proyecto" not in stored[1]

    def test_corrupt_json_is_empty(self, db_session, caplog):
        cs.set_value(db_session, cs.PROJECTS_KEY, "{not json")
        assert cs.load_stored_projects(db_session) == []
        assert "corrupt" in caplog.text

    def test_stored_records_recanonicalized(self, db_session):
        cs.set_value(db_session, cs.PROJECTS_KEY, json.dumps([{"Proyecto": "Viejo", "Estado": "backlog"}, {}]))
        loaded = cs.load_stored_projects(db_session)
        assert [(p.name, p.status) for p in loaded] == [("Viejo", "en-analisis")]

    def test_pipeline_is_applied(self, db_session):
        cs.set_value(db_session, cs.PROJECTS_KEY, json.dumps([{"name": "x", "status": "revision"}]))
        assert cs.load_stored_projects(db_session, LEGACY_PIPELINE)[0].status == "revision"

    def test_duplicate_ids_repaired_once(self, db_session):
        cs.set_value(db_session, cs.PROJECTS_KEY, json.dumps([{"id": "a", "name": "uno"}, {"id": "a", "name": "dos"}]))
        first = [p.id for p in cs.load_stored_projects(db_session)]
        second = [p.id for p in cs.load_stored_projects(db_session)]
        assert first == second
        assert len(set(first)) == 2
        assert [p["id"] for p in json.loads(cs.get_value(db_session, cs.PROJECTS_KEY))] == first

    def test_canonical_store_not_rewritten(self, db_session, projects):
        cs.save_projects(db_session, projects)
        meta = cs.get_value(db_session, cs.META_KEY)
        cs.load_stored_projects(db_session)
        assert cs.get_value(db_session, cs.META_KEY) == meta

    def test_ensure_unique_ids(self):
        projects = canonicalize_all([{"id": "a", "name": "uno"}, {"id": "a", "name": "dos"}, {"id": "b", "name": "tres"}])
        cs.ensure_unique_ids(projects)
        ids = [p.id for p in projects]
        assert ids[0] == "a" and ids[2] == "b"
        assert len(set(ids)) == 3

    def test_ensure_unique_ids_against_taken(self):
        projects = canonicalize_all([{"id": "a", "name": "uno"}])
        cs.ensure_unique_ids(projects, {"a"})
        assert projects[0].id != "a"


class TestImportExport:
    def test_round_trip(self, projects):
        text = cs.export_projects(projects)
        assert text.startswith("[\n  {")
        assert cs.import_projects(text) == projects

    def test_import_bytes(self):
        data = json.dumps([{"name": "Ñandú"}]).encode("utf-8")
        assert [p.name for p in cs.import_projects(data)] == ["Ñandú"]

    @pytest.mark.parametrize("text", ['{"name": "x"}', '"texto"', "42", "null"])
    def test_import_non_array(self, text):
        with pytest.raises(ValueError):
            cs.import_projects(text)

    def test_import_invalid_json(self):
        with pytest.raises(ValueError):
            cs.import_projects("[{")

    def test_import_huge_numbers(self):
        text = '[{"name": "Grande", "points": 1' + "0" * 400 + ', "estimate": 1' + "0" * 400 + "}]"
        (p,) = cs.import_projects(text)
        assert p.points is None
        assert p.name == "Grande"

    def test_import_drops_rejects(self):
        assert [p.name for p in cs.import_projects('[{"name": "ok"}, {"name": ""}, 3]')] == ["ok"]


class TestCatalogs:
    def test_defaults(self, db_session):
        c = cs.load_catalogs(db_session)
        assert c.developers == list(cs.DEFAULT_DEVELOPERS)
        assert c.owners == ["Diego Gatica"]
        assert "Logística" in c.areas

    def test_save_and_load(self, db_session):
        c = cs.load_catalogs(db_session)
        c.owners.append("Ana")
        cs.save_catalogs(db_session, c)
        assert cs.load_catalogs(db_session).owners == ["Diego Gatica", "Ana"]

    def test_bad_entry_falls_back_per_catalog(self, db_session):
        cs.set_value(db_session, cs.PEOPLE_KEY, json.dumps({"owners": ["Ana"], "areas": "IT", "developers": [1, 2]}))
        c = cs.load_catalogs(db_session)
        assert c.owners == ["Ana"]
        assert c.areas == list(cs.DEFAULT_AREAS)
        assert c.developers == list(cs.DEFAULT_DEVELOPERS)

    def test_corrupt_catalogs(self, db_session):
        cs.set_value(db_session, cs.PEOPLE_KEY, "[[")
        assert cs.load_catalogs(db_session) == cs.Catalogs()
