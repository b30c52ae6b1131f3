"""
Relationship synthesizer: persisted entities → typed edges.

For each owner entity a small random subset of target ids is sampled
without replacement and given attribute values drawn uniformly from
their domains. Edges are upserted on (owner_id, target_id), so a re-run
refreshes attributes but never duplicates a pair.

Edge types:
  Role  → Skill     (RoleSkill: importance, level_required, context)
  Role  → Industry  (RoleIndustry: prevalence, notes, specializations)
  Skill → Industry  (SkillIndustry: importance, trend_direction, contextual_application)
  Skill → Skill     (SkillPrerequisite, high-difficulty skills only)
"""

import logging
import random
from typing import Any, Dict, List, Optional, Sequence, Tuple, Type

from sqlalchemy.orm import Session

from career_graph.config import (
    DEMAND_TRENDS,
    IMPORTANCE_LEVELS,
    MAX_SKILL_LEVEL,
    MIN_SKILL_LEVEL,
    PREREQUISITE_DIFFICULTY,
    PREVALENCE_LEVELS,
    GenerationConfig,
)
from career_graph.db.db_utils import generic_upsert
from career_graph.db.models import (
    Industry,
    Role,
    RoleIndustry,
    RoleSkill,
    Skill,
    SkillIndustry,
    SkillPrerequisite,
)
from career_graph.exceptions import PersistenceError, ReferentialIntegrityError

logger = logging.getLogger(__name__)


def new_edge_stats() -> Dict[str, int]:
    return {"owners": 0, "created": 0, "updated": 0, "failed": 0, "skipped": 0}


class RelationshipSynthesizer:
    """Builds the many-to-many graph between persisted entities."""

    def __init__(
        self,
        db: Session,
        rng: Optional[random.Random] = None,
        gen_config: Optional[GenerationConfig] = None,
        strict_references: bool = False,
    ):
        self.db = db
        self.rng = rng or random.Random()
        self.gen_config = gen_config or GenerationConfig()
        self.strict_references = strict_references

    # ── Helpers ──────────────────────────────────────────────────

    def _load(self, model_class: Type) -> List[Any]:
        """All rows of an entity collection, ordered by id."""
        return self.db.query(model_class).order_by(model_class.id).all()

    def sample_ids(self, ids: Sequence[int], count_range: Tuple[int, int]) -> List[int]:
        """Sample without replacement; the count is capped by the population."""
        low, high = count_range
        count = min(self.rng.randint(low, high), len(ids))
        return self.rng.sample(sorted(ids), count)

    def referential_gap(self, label: str, missing: str, stats: Dict[str, int]) -> None:
        """Apply the configured policy for a reference to a missing entity."""
        if self.strict_references:
            raise ReferentialIntegrityError(label, missing)
        logger.warning(f"ReferentialGap {label}: referenced {missing} does not exist, skipping")
        stats["skipped"] += 1

    def _exists(self, model_class: Type, entity_id: int) -> bool:
        return self.db.get(model_class, entity_id) is not None

    def _upsert_edge(
        self,
        model_class: Type,
        keys: Dict[str, int],
        data: Dict[str, Any],
        stats: Dict[str, int],
    ) -> None:
        try:
            _, created = generic_upsert(self.db, model_class, keys, data)
        except PersistenceError as e:
            logger.error(f"Failed to save {model_class.__tablename__} edge {keys}: {e}")
            stats["failed"] += 1
            return
        stats["created" if created else "updated"] += 1

    def _log_stats(self, label: str, stats: Dict[str, int]) -> None:
        logger.info(
            f"  {label}: {stats['created']} new, {stats['updated']} refreshed, "
            f"{stats['failed']} failed, {stats['skipped']} skipped "
            f"across {stats['owners']} owners"
        )

    # ── Edge types ───────────────────────────────────────────────

    def synthesize_role_skills(self) -> Dict[str, int]:
        """Give every role 2-3 skills with importance and required level."""
        stats = new_edge_stats()
        roles = self._load(Role)
        skills = {s.id: s for s in self._load(Skill)}
        logger.info(f"Synthesizing role-skill edges for {len(roles)} roles")
        if roles and not skills:
            self.referential_gap("role_skills", "skills", stats)
            return stats

        for role in roles:
            stats["owners"] += 1
            for skill_id in self.sample_ids(list(skills), self.gen_config.skills_per_role):
                importance = self.rng.choice(IMPORTANCE_LEVELS)
                level_required = self.rng.randint(MIN_SKILL_LEVEL, MAX_SKILL_LEVEL)
                if not self._exists(Skill, skill_id):
                    self.referential_gap("role_skills", f"skill {skill_id}", stats)
                    continue
                self._upsert_edge(
                    RoleSkill,
                    {"role_id": role.id, "skill_id": skill_id},
                    {
                        "importance": importance,
                        "level_required": level_required,
                        "context": f"This skill is {importance} for the role of {role.title}.",
                    },
                    stats,
                )
        self._log_stats("role_skills", stats)
        return stats

    def synthesize_role_industries(self) -> Dict[str, int]:
        """Place every role in 1-2 industries with a prevalence."""
        stats = new_edge_stats()
        roles = self._load(Role)
        industries = {i.id: i for i in self._load(Industry)}
        logger.info(f"Synthesizing role-industry edges for {len(roles)} roles")
        if roles and not industries:
            self.referential_gap("role_industries", "industries", stats)
            return stats

        for role in roles:
            stats["owners"] += 1
            for industry_id in self.sample_ids(list(industries), self.gen_config.industries_per_role):
                prevalence = self.rng.choice(PREVALENCE_LEVELS)
                if not self._exists(Industry, industry_id):
                    self.referential_gap("role_industries", f"industry {industry_id}", stats)
                    continue
                industry_name = industries[industry_id].name
                self._upsert_edge(
                    RoleIndustry,
                    {"role_id": role.id, "industry_id": industry_id},
                    {
                        "prevalence": prevalence,
                        "notes": f"This role has {prevalence} prevalence in the {industry_name} industry.",
                        "specializations": f"{role.title} in {industry_name}",
                    },
                    stats,
                )
        self._log_stats("role_industries", stats)
        return stats

    def synthesize_skill_industries(self) -> Dict[str, int]:
        """Link every skill to 1-2 industries with importance and trend."""
        stats = new_edge_stats()
        skills = self._load(Skill)
        industries = {i.id: i for i in self._load(Industry)}
        logger.info(f"Synthesizing skill-industry edges for {len(skills)} skills")
        if skills and not industries:
            self.referential_gap("skill_industries", "industries", stats)
            return stats

        for skill in skills:
            stats["owners"] += 1
            for industry_id in self.sample_ids(list(industries), self.gen_config.industries_per_skill):
                importance = self.rng.choice(IMPORTANCE_LEVELS)
                trend = self.rng.choice(DEMAND_TRENDS)
                if not self._exists(Industry, industry_id):
                    self.referential_gap("skill_industries", f"industry {industry_id}", stats)
                    continue
                industry_name = industries[industry_id].name
                self._upsert_edge(
                    SkillIndustry,
                    {"skill_id": skill.id, "industry_id": industry_id},
                    {
                        "importance": importance,
                        "trend_direction": trend,
                        "contextual_application": (
                            f"{skill.name} is {importance} in {industry_name} "
                            f"with a {trend} demand trend."
                        ),
                    },
                    stats,
                )
        self._log_stats("skill_industries", stats)
        return stats

    def synthesize_skill_prerequisites(self) -> Dict[str, int]:
        """Give each high-difficulty skill 1-3 prerequisite skills."""
        stats = new_edge_stats()
        skills = self._load(Skill)
        by_id = {s.id: s for s in skills}
        advanced = [s for s in skills if s.learning_difficulty == PREREQUISITE_DIFFICULTY]
        logger.info(
            f"Synthesizing prerequisites for {len(advanced)} "
            f"{PREREQUISITE_DIFFICULTY}-difficulty skills"
        )

        for skill in advanced:
            stats["owners"] += 1
            candidates = [sid for sid in by_id if sid != skill.id]
            if not candidates:
                self.referential_gap("skill_prerequisites", f"prerequisite for skill {skill.id}", stats)
                continue
            sampled = self.sample_ids(candidates, self.gen_config.prerequisites_per_skill)
            for order, prerequisite_id in enumerate(sampled, start=1):
                importance = self.rng.choice(IMPORTANCE_LEVELS)
                if not self._exists(Skill, prerequisite_id):
                    self.referential_gap("skill_prerequisites", f"skill {prerequisite_id}", stats)
                    continue
                self._upsert_edge(
                    SkillPrerequisite,
                    {"skill_id": skill.id, "prerequisite_id": prerequisite_id},
                    {
                        "importance": importance,
                        "acquisition_order": order,
                        "notes": (
                            f"{by_id[prerequisite_id].name} is {importance} "
                            f"before learning {skill.name}."
                        ),
                    },
                    stats,
                )
        self._log_stats("skill_prerequisites", stats)
        return stats

    def synthesize_all(self) -> Dict[str, Dict[str, int]]:
        """Run every edge type in dependency order."""
        return {
            "role_skills": self.synthesize_role_skills(),
            "role_industries": self.synthesize_role_industries(),
            "skill_industries": self.synthesize_skill_industries(),
            "skill_prerequisites": self.synthesize_skill_prerequisites(),
        }
