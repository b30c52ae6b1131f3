"""
Entity persister tests.

Run with:
    pytest tests/test_persister.py -v
"""

from unittest.mock import patch

from career_graph.db import db_utils
from career_graph.db.db_utils import count_rows, generic_upsert
from career_graph.db.models import Industry, Role, Skill
from career_graph.exceptions import PersistenceError
from career_graph.graph.persister import EMPTY_CAREER_PATH, EntityPersister


class TestPersistEntities:
    """Tests for natural-key upserts and id assignment."""

    def test_ids_assigned_sequentially(self, db, skill_payload):
        EntityPersister(db).persist_skills([skill_payload("Python"), skill_payload("SQL")])

        skills = db.query(Skill).order_by(Skill.id).all()
        assert [(s.id, s.name) for s in skills] == [(1, "Python"), (2, "SQL")]

    def test_persist_twice_is_idempotent(self, db, skill_payload):
        items = [skill_payload("Python"), skill_payload("SQL"), skill_payload("Excel")]
        persister = EntityPersister(db)

        first = persister.persist_skills(items)
        ids_before = {s.name: s.id for s in db.query(Skill).all()}
        second = persister.persist_skills(items)
        ids_after = {s.name: s.id for s in db.query(Skill).all()}

        assert first["created"] == 3
        assert second["created"] == 0 and second["updated"] == 3
        assert count_rows(db, Skill) == 3
        assert ids_before == ids_after

    def test_update_overwrites_fields_and_keeps_id(self, db, industry_payload):
        persister = EntityPersister(db)
        persister.persist_industries([industry_payload("Fintech")])
        changed = industry_payload("Fintech")
        changed["description"] = "Updated description."

        persister.persist_industries([changed])

        industry = db.query(Industry).one()
        assert industry.id == 1
        assert industry.description == "Updated description."

    def test_new_entities_continue_the_sequence(self, db, role_payload):
        persister = EntityPersister(db)
        persister.persist_roles([role_payload("Analyst"), role_payload("Engineer")])
        persister.persist_roles([role_payload("Engineer"), role_payload("Designer")])

        ids = {r.title: r.id for r in db.query(Role).all()}
        assert ids == {"Analyst": 1, "Engineer": 2, "Designer": 3}

    def test_nested_documents_stored(self, db, skill_payload):
        EntityPersister(db).persist_skills([skill_payload("Python")])

        skill = db.query(Skill).one()
        assert skill.sfia_mapping["level"] == 3
        assert skill.digcomp_mapping["proficiencyLevel"] == 4
        assert [c["level"] for c in skill.leveling_criteria] == [1, 3, 5]
        assert skill.leveling_criteria[0]["assessmentMethods"] == ["Quiz"]

    def test_role_career_path_initialised_empty(self, db, role_payload):
        EntityPersister(db).persist_roles([role_payload("Analyst")])

        assert db.query(Role).one().career_path == {"next": [], "previous": []}

    def test_role_career_paths_do_not_share_lists(self, db, role_payload):
        EntityPersister(db).persist_roles([role_payload("Analyst"), role_payload("Architect")])

        first, second = db.query(Role).order_by(Role.id).all()
        assert first.career_path is not second.career_path
        assert first.career_path["next"] is not second.career_path["next"]
        assert first.career_path is not EMPTY_CAREER_PATH
        first.career_path["next"].append(99)
        assert second.career_path["next"] == []
        assert EMPTY_CAREER_PATH == {"next": [], "previous": []}

    def test_role_career_path_survives_reupsert(self, db, role_payload):
        persister = EntityPersister(db)
        persister.persist_roles([role_payload("Analyst")])
        generic_upsert(db, Role, {"id": 1}, {"career_path": {"next": [2], "previous": []}})

        persister.persist_roles([role_payload("Analyst")])

        assert db.query(Role).one().career_path == {"next": [2], "previous": []}

    def test_failed_item_does_not_stop_the_loop(self, db, skill_payload):
        real_upsert = db_utils.generic_upsert
        calls = {"n": 0}

        def flaky_upsert(*args, **kwargs):
            calls["n"] += 1
            if calls["n"] == 1:
                raise PersistenceError("connection lost")
            return real_upsert(*args, **kwargs)

        with patch("career_graph.graph.persister.generic_upsert", side_effect=flaky_upsert):
            stats = EntityPersister(db).persist_skills([skill_payload("Python"), skill_payload("SQL")])

        assert stats == {"saved": 1, "created": 1, "updated": 0, "failed": 1}
        assert [s.name for s in db.query(Skill).all()] == ["SQL"]

    def test_malformed_cached_item_counted_as_failed(self, db, skill_payload):
        stats = EntityPersister(db).persist_skills([{"category": "Technical"}, skill_payload("Python")])

        assert stats["failed"] == 1
        assert stats["saved"] == 1
