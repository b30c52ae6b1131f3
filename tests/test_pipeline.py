"""
Pipeline orchestrator tests.

Tests for:
- Stage ordering and completion markers
- Conditional re-runs (completed skipped, partial re-run)
- Failure handling per stage

Run with:
    pytest tests/test_pipeline.py -v
"""

import random
from unittest.mock import patch

import pytest

from career_graph.db.db_utils import count_rows
from career_graph.db.models import (
    CareerPathway,
    Industry,
    LearningResource,
    Role,
    RoleSkill,
    Skill,
    SkillIndustry,
)
from career_graph.graph.persister import EntityPersister
from career_graph.pipeline import (
    STAGES,
    STATUS_COMPLETED,
    STATUS_FAILED,
    STATUS_PARTIAL,
    STATUS_SKIPPED,
    PipelineOrchestrator,
)


@pytest.fixture
def orchestrator(database, cache, fake_provider, gen_config):
    return PipelineOrchestrator(
        database,
        cache=cache,
        provider=fake_provider,
        gen_config=gen_config,
        rng=random.Random(21),
    )


@pytest.fixture
def scripted_replies(fake_provider, skill_payload, role_payload, industry_payload):
    """One reply per entity stage, covering both configured categories."""
    def _script():
        fake_provider.reply("skills", [
            skill_payload("Python", "Technical", difficulty="high"),
            skill_payload("Statistics", "Analytical"),
            skill_payload("SQL", "Technical"),
        ])
        fake_provider.reply("roles", [
            role_payload("Backend Engineer", "Engineering"),
            role_payload("UX Designer", "Design"),
            role_payload("Data Engineer", "Engineering"),
        ])
        fake_provider.reply("industries", [
            industry_payload("Cloud Computing", "Technology"),
            industry_payload("Banking", "Finance"),
        ])
    return _script


# ============================================================================
# Full Run Tests
# ============================================================================

class TestPipelineRun:
    """Tests for PipelineOrchestrator.run."""

    def test_full_run_completes_every_stage(self, orchestrator, database, fake_provider, scripted_replies):
        scripted_replies()

        results = orchestrator.run()

        assert list(results) == STAGES
        assert {r["status"] for r in results.values()} == {STATUS_COMPLETED}
        assert fake_provider.calls == 3
        with database.session() as db:
            assert count_rows(db, Skill) == 3
            assert count_rows(db, Role) == 3
            assert count_rows(db, Industry) == 2
            assert count_rows(db, CareerPathway) > 0

    def test_markers_record_counts(self, orchestrator, database, scripted_replies):
        scripted_replies()
        orchestrator.run()

        marker = orchestrator.get_marker("roles")
        assert marker.status == STATUS_COMPLETED
        assert marker.item_count == 3
        assert marker.completed_on is not None
        with database.session() as db:
            assert orchestrator.get_marker("role_skills").item_count == count_rows(db, RoleSkill)

    def test_second_run_skips_completed_stages(self, orchestrator, fake_provider, scripted_replies):
        scripted_replies()
        orchestrator.run()

        results = orchestrator.run()

        assert {r["status"] for r in results.values()} == {STATUS_SKIPPED}
        assert fake_provider.calls == 3

    def test_force_reruns_completed_stage(self, orchestrator, fake_provider, scripted_replies):
        scripted_replies()
        orchestrator.run()

        results = orchestrator.run(step="role_skills", force=True)

        assert results["role_skills"]["status"] == STATUS_COMPLETED
        assert results["role_skills"]["updated"] + results["role_skills"]["created"] > 0

    def test_resume_from(self, orchestrator, scripted_replies):
        scripted_replies()
        results = orchestrator.run(resume_from="learning_resources")

        assert list(results) == ["learning_resources", "career_pathways"]
        assert results["learning_resources"]["status"] == STATUS_PARTIAL

    def test_unknown_stage_rejected(self, orchestrator):
        with pytest.raises(ValueError):
            orchestrator.run_stage("widgets")


# ============================================================================
# Partial and Failed Stage Tests
# ============================================================================

class TestStageOutcomes:
    """Tests for partial and failed stages."""

    def test_missing_category_marks_partial_then_resumes(
        self, orchestrator, fake_provider, skill_payload
    ):
        fake_provider.reply("skills", [skill_payload("Python", "Technical")])

        first = orchestrator.run(step="skills")
        assert first["skills"]["status"] == STATUS_PARTIAL
        assert first["skills"]["missing_categories"] == ["Analytical"]

        fake_provider.reply("skills", [skill_payload("Statistics", "Analytical")])
        second = orchestrator.run(step="skills")

        assert second["skills"]["status"] == STATUS_COMPLETED
        assert second["skills"]["item_count"] == 2
        assert fake_provider.calls == 2
        assert "Analytical" in fake_provider.prompts[1]
        assert "Technical" not in fake_provider.prompts[1].split("categories:")[1].split("\n")[0]

    def test_provider_failure_leaves_stage_partial(self, orchestrator, fake_provider):
        fake_provider.responses.append("not json")

        results = orchestrator.run(step="industries")

        assert results["industries"]["status"] == STATUS_PARTIAL
        assert results["industries"]["item_count"] == 0

    def test_edges_without_entities_are_partial(self, orchestrator):
        results = orchestrator.run(step="role_skills")

        assert results["role_skills"]["status"] == STATUS_PARTIAL

    def test_strict_gap_fails_stage_and_pipeline_continues(
        self, database, cache, fake_provider, gen_config, skill_payload, role_payload
    ):
        orchestrator = PipelineOrchestrator(
            database, cache=cache, provider=fake_provider, gen_config=gen_config,
            rng=random.Random(1), strict_references=True,
        )
        fake_provider.reply("skills", [skill_payload("Python", "Technical"), skill_payload("R", "Analytical")])
        fake_provider.reply("roles", [role_payload("Analyst", "Engineering"), role_payload("Artist", "Design")])
        fake_provider.responses.append("not json")

        results = orchestrator.run()

        assert results["role_industries"]["status"] == STATUS_FAILED
        assert "industries" in results["role_industries"]["error"]
        assert results["skill_industries"]["status"] == STATUS_FAILED
        assert results["career_pathways"]["status"] == STATUS_COMPLETED
        assert orchestrator.get_marker("role_industries").status == STATUS_FAILED
        assert orchestrator.get_marker("role_industries").error_message

    def test_failed_stage_is_rerun(self, database, cache, fake_provider, gen_config, seed_graph):
        with database.session() as db:
            seed_graph(db, industries=0)
        orchestrator = PipelineOrchestrator(
            database, cache=cache, provider=fake_provider, gen_config=gen_config,
            strict_references=True,
        )
        assert orchestrator.run(step="role_industries")["role_industries"]["status"] == STATUS_FAILED
        assert not orchestrator.is_completed("role_industries")

    def test_unexpected_error_marks_failed_and_propagates(self, orchestrator, database, seed_graph):
        with database.session() as db:
            seed_graph(db)

        with patch(
            "career_graph.pipeline.RelationshipSynthesizer.synthesize_role_skills",
            side_effect=RuntimeError("boom"),
        ):
            with pytest.raises(RuntimeError):
                orchestrator.run(step="role_skills")

        assert orchestrator.get_marker("role_skills").status == STATUS_FAILED


# ============================================================================
# Upstream Change Tests
# ============================================================================

class TestUpstreamChanges:
    """Completed edge and artifact stages re-run when their inputs grow."""

    def _first_run_missing_analytical(self, orchestrator, fake_provider, skill_payload,
                                      role_payload, industry_payload):
        fake_provider.reply("skills", [
            skill_payload("Python", "Technical", difficulty="high"),
            skill_payload("SQL", "Technical"),
        ])
        fake_provider.reply("roles", [
            role_payload("Backend Engineer", "Engineering"),
            role_payload("UX Designer", "Design"),
        ])
        fake_provider.reply("industries", [
            industry_payload("Cloud Computing", "Technology"),
            industry_payload("Banking", "Finance"),
        ])
        return orchestrator.run()

    def test_markers_record_input_counts(
        self, orchestrator, fake_provider, skill_payload, role_payload, industry_payload
    ):
        self._first_run_missing_analytical(
            orchestrator, fake_provider, skill_payload, role_payload, industry_payload
        )

        assert orchestrator.get_marker("skill_industries").input_counts == {"skills": 2, "industries": 2}
        assert orchestrator.get_marker("learning_resources").input_counts == {"skills": 2}
        assert not orchestrator.get_marker("skills").input_counts

    def test_new_entities_get_edges_and_resources(
        self, orchestrator, database, fake_provider, skill_payload, role_payload, industry_payload
    ):
        first = self._first_run_missing_analytical(
            orchestrator, fake_provider, skill_payload, role_payload, industry_payload
        )
        assert first["skills"]["status"] == STATUS_PARTIAL
        assert first["learning_resources"]["status"] == STATUS_COMPLETED

        fake_provider.reply("skills", [skill_payload("Statistics", "Analytical")])
        second = orchestrator.run()

        assert second["skills"]["status"] == STATUS_COMPLETED
        assert second["roles"]["status"] == STATUS_SKIPPED
        assert second["industries"]["status"] == STATUS_SKIPPED
        assert second["role_industries"]["status"] == STATUS_SKIPPED
        for stage in ["role_skills", "skill_industries", "skill_prerequisites", "learning_resources"]:
            assert second[stage]["status"] == STATUS_COMPLETED

        with database.session() as db:
            new_skill = db.query(Skill).filter(Skill.name == "Statistics").one()
            resources = db.query(LearningResource).filter(LearningResource.skill_id == new_skill.id).count()
            edges = db.query(SkillIndustry).filter(SkillIndustry.skill_id == new_skill.id).count()
        assert resources >= 1
        assert edges >= 1

    def test_unchanged_inputs_still_skip(
        self, orchestrator, fake_provider, skill_payload, role_payload, industry_payload
    ):
        self._first_run_missing_analytical(
            orchestrator, fake_provider, skill_payload, role_payload, industry_payload
        )
        fake_provider.responses.append("not json")

        second = orchestrator.run()

        assert second["skills"]["status"] == STATUS_PARTIAL
        for stage in STAGES[1:]:
            assert second[stage]["status"] == STATUS_SKIPPED

    def test_is_completed_false_after_input_grows(self, orchestrator, database, seed_graph, role_payload):
        with database.session() as db:
            seed_graph(db)
        orchestrator.run(step="role_industries")
        assert orchestrator.is_completed("role_industries")

        with database.session() as db:
            EntityPersister(db).persist_roles([role_payload("Late Arrival")])

        assert not orchestrator.is_completed("role_industries")


class TestClean:
    """Tests for clearing cached generator output."""

    def test_clean_clears_entity_caches_only(self, orchestrator, cache):
        cache.write("skills", [{"name": "Python", "category": "Technical"}])
        cache.write("roles", [{"title": "Analyst", "category": "Engineering"}])

        orchestrator.clean(["skills", "role_skills"])

        assert cache.read("skills") == []
        assert len(cache.read("roles")) == 1
