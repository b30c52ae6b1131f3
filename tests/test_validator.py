"""
Graph validator tests.

Run with:
    pytest tests/test_validator.py -v
"""

import random

from career_graph.db.models import CareerPathway, RoleSkill, SkillPrerequisite
from career_graph.graph.pathways import CareerPathwayGenerator
from career_graph.graph.relationships import RelationshipSynthesizer
from career_graph.graph.resources import LearningResourceGenerator
from career_graph.graph.validator import (
    STATUS_COMPLETE,
    STATUS_IN_PROGRESS,
    STATUS_NOT_STARTED,
    GraphValidator,
    check_route_steps,
)


class TestCheckRouteSteps:
    """Tests for step list checks."""

    def test_valid(self):
        steps = [{"step": 1, "roleId": 1}, {"step": 2, "roleId": 3}, {"step": 3, "roleId": 2}]
        assert check_route_steps(steps, 1, 2) == []

    def test_gap_in_numbering(self):
        steps = [{"step": 1, "roleId": 1}, {"step": 3, "roleId": 2}]
        assert len(check_route_steps(steps, 1, 2)) == 1

    def test_wrong_endpoints(self):
        steps = [{"step": 1, "roleId": 2}, {"step": 2, "roleId": 1}]
        assert len(check_route_steps(steps, 1, 2)) == 2

    def test_empty(self):
        assert check_route_steps([], 1, 2) == ["no steps"]


class TestGraphValidator:
    """Tests for GraphValidator."""

    def test_empty_store_not_started(self, db):
        report = GraphValidator(db).validate()

        assert report["status"] == STATUS_NOT_STARTED
        assert report["is_valid"] is True
        assert set(report["counts"]) >= {"skills", "roles", "career_pathways"}

    def test_entities_only_in_progress(self, db, seed_graph):
        seed_graph(db)

        assert GraphValidator(db).validate()["status"] == STATUS_IN_PROGRESS

    def test_full_graph_complete_and_valid(self, db, seed_graph):
        seed_graph(db)
        rng = random.Random(5)
        RelationshipSynthesizer(db, rng=rng).synthesize_all()
        LearningResourceGenerator(db, rng=rng).generate()
        CareerPathwayGenerator(db, rng=rng).generate()

        report = GraphValidator(db).validate()

        assert report["status"] == STATUS_COMPLETE
        assert report["is_valid"] is True
        assert report["counts"]["career_pathways"] > 0

    def test_dangling_edge_reported(self, db, seed_graph):
        seed_graph(db)
        db.add(RoleSkill(role_id=999, skill_id=1, importance="critical", level_required=2))
        db.commit()

        report = GraphValidator(db).validate()

        assert report["is_valid"] is False
        assert report["dangling_edges"] == [
            {"collection": "role_skills", "column": "role_id", "missing_id": 999}
        ]

    def test_bad_pathway_reported(self, db, seed_graph):
        seed_graph(db)
        db.add(CareerPathway(
            id=1, name="Broken", description="", starting_role_id=1, target_role_id=2,
            estimated_time_years=4,
            steps=[{"step": 1, "roleId": 1}, {"step": 3, "roleId": 2}],
            alternative_routes=[],
        ))
        db.commit()

        problems = GraphValidator(db).check_pathways()
        assert problems == [{"pathway_id": 1, "route": "main", "problem": "step 1 numbered 3, expected 2"}]

    def test_self_prerequisite_query(self, db, seed_graph):
        seed_graph(db)
        db.add(SkillPrerequisite(skill_id=1, prerequisite_id=2, importance="helpful"))
        db.commit()

        assert GraphValidator(db).check_self_prerequisites() == []
