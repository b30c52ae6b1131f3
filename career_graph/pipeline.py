"""
Pipeline orchestrator for career graph generation.

Runs the stages in dependency order:
1. Entities: skills, roles, industries (provider → cache → store)
2. Edges: role_skills, role_industries, skill_industries, skill_prerequisites
3. Derived artifacts: learning_resources, career_pathways

Each stage leaves a StageStatus marker (running / completed / partial /
failed, with item count and timestamps). Edge and artifact markers also
record the row counts of the collections they read. A conditional run
skips stages whose marker is completed and whose inputs have not changed,
and re-runs everything else; every write is an upsert, so re-running a
stage only fills in what is missing.
"""

import logging
import random
import time
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from career_graph.cache_store import CacheStore
from career_graph.config import GenerationConfig, LLMConfig
from career_graph.db.database import Database
from career_graph.db.db_utils import count_rows, generic_upsert
from career_graph.db.models import (
    CareerPathway,
    Industry,
    LearningResource,
    Role,
    RoleIndustry,
    RoleSkill,
    Skill,
    SkillIndustry,
    SkillPrerequisite,
    StageStatus,
)
from career_graph.exceptions import CareerGraphError
from career_graph.generators.industry_generator import IndustryGenerator
from career_graph.generators.role_generator import RoleGenerator
from career_graph.generators.skill_generator import SkillGenerator
from career_graph.graph.pathways import CareerPathwayGenerator
from career_graph.graph.persister import EntityPersister
from career_graph.graph.relationships import RelationshipSynthesizer
from career_graph.graph.resources import LearningResourceGenerator

logger = logging.getLogger(__name__)

# Stages in dependency order
STAGES = [
    "skills",
    "roles",
    "industries",
    "role_skills",
    "role_industries",
    "skill_industries",
    "skill_prerequisites",
    "learning_resources",
    "career_pathways",
]
ENTITY_STAGES = ["skills", "roles", "industries"]
RELATIONSHIP_STAGES = ["role_skills", "role_industries", "skill_industries", "skill_prerequisites"]

STATUS_RUNNING = "running"
STATUS_COMPLETED = "completed"
STATUS_PARTIAL = "partial"
STATUS_FAILED = "failed"
STATUS_SKIPPED = "skipped"

# Collection each stage writes to, and the collection that owns its items
STAGE_COLLECTIONS = {
    "skills": (Skill, None),
    "roles": (Role, None),
    "industries": (Industry, None),
    "role_skills": (RoleSkill, Role),
    "role_industries": (RoleIndustry, Role),
    "skill_industries": (SkillIndustry, Skill),
    "skill_prerequisites": (SkillPrerequisite, Skill),
    "learning_resources": (LearningResource, Skill),
    "career_pathways": (CareerPathway, Role),
}

# Collections each derived stage reads; a change in their row counts makes
# a completed marker stale
STAGE_INPUTS = {
    "role_skills": ["roles", "skills"],
    "role_industries": ["roles", "industries"],
    "skill_industries": ["skills", "industries"],
    "skill_prerequisites": ["skills"],
    "learning_resources": ["skills"],
    "career_pathways": ["roles", "role_skills"],
}


class PipelineOrchestrator:
    """Runs pipeline stages and tracks their completion markers."""

    def __init__(
        self,
        database: Database,
        cache: Optional[CacheStore] = None,
        provider: Optional[Any] = None,
        llm_config: Optional[LLMConfig] = None,
        gen_config: Optional[GenerationConfig] = None,
        rng: Optional[random.Random] = None,
        strict_references: bool = False,
    ):
        self.database = database
        self.cache = cache or CacheStore()
        self.provider = provider
        self.llm_config = llm_config
        self.gen_config = gen_config or GenerationConfig()
        self.rng = rng or random.Random()
        self.strict_references = strict_references

    # ── Stage markers ────────────────────────────────────────────

    def get_marker(self, stage: str) -> Optional[StageStatus]:
        with self.database.session() as db:
            return db.get(StageStatus, stage)

    def input_counts(self, db: Session, stage: str) -> Dict[str, int]:
        """Current row counts of the collections a stage reads."""
        return {
            name: count_rows(db, STAGE_COLLECTIONS[name][0])
            for name in STAGE_INPUTS.get(stage, [])
        }

    def is_completed(self, stage: str) -> bool:
        """True if the stage completed and its inputs have not grown since."""
        with self.database.session() as db:
            marker = db.get(StageStatus, stage)
            if marker is None or marker.status != STATUS_COMPLETED:
                return False
            current = self.input_counts(db, stage)
            if (marker.input_counts or {}) != current:
                logger.info(
                    f"Stage '{stage}' inputs changed since last run "
                    f"({marker.input_counts} -> {current})"
                )
                return False
        return True

    def mark(
        self,
        db: Session,
        stage: str,
        status: str,
        item_count: int = 0,
        error_message: Optional[str] = None,
        input_counts: Optional[Dict[str, int]] = None,
    ) -> None:
        now = datetime.utcnow()
        data = {
            "status": status,
            "item_count": item_count,
            "error_message": error_message,
            "input_counts": input_counts,
        }
        if status == STATUS_RUNNING:
            data.update(started_on=now, completed_on=None)
        else:
            data["completed_on"] = now
        generic_upsert(db, StageStatus, {"stage": stage}, data)

    # ── Stage bodies ─────────────────────────────────────────────

    def _generator(self, stage: str):
        generator_class = {
            "skills": SkillGenerator,
            "roles": RoleGenerator,
            "industries": IndustryGenerator,
        }[stage]
        return generator_class(
            provider=self.provider,
            llm_config=self.llm_config,
            gen_config=self.gen_config,
            cache=self.cache,
        )

    def _run_entity_stage(self, db: Session, stage: str) -> Dict[str, Any]:
        generator = self._generator(stage)
        items = generator.generate()
        persister = EntityPersister(db)
        persist = {
            "skills": persister.persist_skills,
            "roles": persister.persist_roles,
            "industries": persister.persist_industries,
        }[stage]
        stats = persist(items)
        stats["missing_categories"] = generator.pending_categories()
        stats["complete"] = not stats["missing_categories"] and stats["failed"] == 0
        return stats

    def _run_derived_stage(self, db: Session, stage: str) -> Dict[str, Any]:
        runners: Dict[str, Callable[[], Dict[str, int]]] = {}
        if stage in RELATIONSHIP_STAGES:
            synthesizer = RelationshipSynthesizer(
                db, rng=self.rng, gen_config=self.gen_config,
                strict_references=self.strict_references,
            )
            runners = {
                "role_skills": synthesizer.synthesize_role_skills,
                "role_industries": synthesizer.synthesize_role_industries,
                "skill_industries": synthesizer.synthesize_skill_industries,
                "skill_prerequisites": synthesizer.synthesize_skill_prerequisites,
            }
        elif stage == "learning_resources":
            runners[stage] = LearningResourceGenerator(
                db, rng=self.rng, gen_config=self.gen_config,
            ).generate
        elif stage == "career_pathways":
            runners[stage] = CareerPathwayGenerator(
                db, rng=self.rng, gen_config=self.gen_config,
                strict_references=self.strict_references,
            ).generate

        stats = runners[stage]()
        _, owner_model = STAGE_COLLECTIONS[stage]
        owners_present = count_rows(db, owner_model) > 0
        stats["complete"] = owners_present and stats["failed"] == 0 and stats["skipped"] == 0
        return stats

    # ── Public API ───────────────────────────────────────────────

    def run_stage(self, stage: str) -> Dict[str, Any]:
        """Run one stage unconditionally and record its marker.

        Pipeline errors mark the stage failed and are reported in the
        returned stats. Anything else marks it failed and propagates.
        """
        if stage not in STAGES:
            raise ValueError(f"Unknown stage '{stage}'. Choose from: {STAGES}")

        model_class, _ = STAGE_COLLECTIONS[stage]
        with self.database.session() as db:
            self.mark(db, stage, STATUS_RUNNING)
            inputs = self.input_counts(db, stage)
            try:
                if stage in ENTITY_STAGES:
                    stats = self._run_entity_stage(db, stage)
                else:
                    stats = self._run_derived_stage(db, stage)
            except CareerGraphError as e:
                db.rollback()
                logger.error(f"Stage '{stage}' failed: {e}")
                self.mark(db, stage, STATUS_FAILED, count_rows(db, model_class), str(e))
                return {"status": STATUS_FAILED, "error": str(e)}
            except Exception as e:
                db.rollback()
                self.mark(db, stage, STATUS_FAILED, count_rows(db, model_class), str(e))
                raise

            status = STATUS_COMPLETED if stats.pop("complete") else STATUS_PARTIAL
            item_count = count_rows(db, model_class)
            self.mark(db, stage, status, item_count, input_counts=inputs)

        stats.update(status=status, item_count=item_count)
        logger.info(f"Stage '{stage}' {status} with {item_count} items")
        return stats

    def clean(self, stages: List[str]) -> None:
        """Drop cached generator output so entity stages regenerate."""
        for stage in stages:
            if stage in ENTITY_STAGES:
                self.cache.clear(stage)

    def run(
        self,
        step: Optional[str] = None,
        resume_from: Optional[str] = None,
        force: bool = False,
    ) -> Dict[str, Dict[str, Any]]:
        """Run the pipeline, skipping stages already marked completed."""
        if step:
            steps_to_run = [step]
        elif resume_from:
            steps_to_run = STAGES[STAGES.index(resume_from):]
        else:
            steps_to_run = list(STAGES)

        logger.info(f"Running pipeline stages: {steps_to_run}")
        start_time = time.time()
        results: Dict[str, Dict[str, Any]] = {}

        for stage in steps_to_run:
            logger.info(f"\n{'=' * 60}")
            logger.info(f"STAGE: {stage.upper()}")
            logger.info(f"{'=' * 60}")

            if not force and self.is_completed(stage):
                logger.info(f"Stage '{stage}' already completed, skipping")
                results[stage] = {"status": STATUS_SKIPPED}
                continue

            stage_start = time.time()
            results[stage] = self.run_stage(stage)
            logger.info(f"Stage '{stage}' finished in {time.time() - stage_start:.1f}s")

        logger.info(f"\n{'=' * 60}")
        logger.info(f"PIPELINE FINISHED in {time.time() - start_time:.1f}s")
        logger.info(f"{'=' * 60}")
        for stage, result in results.items():
            logger.info(f"  {stage}: {result.get('status')}")
        return results
