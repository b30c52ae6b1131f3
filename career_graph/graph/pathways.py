"""
Career pathways derived from persisted roles and role-skill edges.

A pathway runs from a starting role to a distinct target role through
zero or more intermediate roles. Steps are numbered 1..n with the
endpoints first and last; each step lists the first few skills its role
requires. Pathways are upserted on (starting_role_id, target_role_id).

After pathways are written, Role.career_path is recomputed from every
stored pathway so the next/previous links always agree with them.
"""

import logging
import random
from collections import defaultdict
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from career_graph.config import GenerationConfig
from career_graph.db.db_utils import generic_upsert
from career_graph.db.models import CareerPathway, Role, RoleSkill
from career_graph.exceptions import PersistenceError, ReferentialIntegrityError

logger = logging.getLogger(__name__)


class CareerPathwayGenerator:
    """Builds CareerPathway documents and back-fills Role.career_path."""

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

    def required_skills(self, role_id: int) -> List[int]:
        """First skills_per_step skill ids required by a role, by skill id."""
        rows = (
            self.db.query(RoleSkill.skill_id)
            .filter(RoleSkill.role_id == role_id)
            .order_by(RoleSkill.skill_id)
            .limit(self.gen_config.skills_per_step)
            .all()
        )
        return [row.skill_id for row in rows]

    def _step(self, number: int, role: Role, timeframe: str, description: str) -> Dict[str, Any]:
        return {
            "step": number,
            "roleId": role.id,
            "timeframe": timeframe,
            "description": description,
            "requiredSkills": self.required_skills(role.id),
        }

    def build_steps(self, start: Role, middle: List[Role], target: Role) -> List[Dict[str, Any]]:
        years_per_step = self.gen_config.years_per_step
        total_years = (len(middle) + 2) * years_per_step

        steps = [self._step(
            1, start, f"0-{years_per_step} years",
            f"Begin as a {start.title} to build foundational skills and experience.",
        )]
        for j, role in enumerate(middle):
            steps.append(self._step(
                j + 2, role,
                f"{(j + 1) * years_per_step}-{(j + 2) * years_per_step} years",
                f"Progress to a {role.title} position to expand expertise and responsibilities.",
            ))
        steps.append(self._step(
            len(middle) + 2, target,
            f"{total_years - years_per_step}-{total_years} years",
            f"Advance to the role of {target.title} after gaining sufficient experience and skills.",
        ))
        return steps

    def build_alternative_route(self, start: Role, via: Role, target: Role) -> Dict[str, Any]:
        years_per_step = self.gen_config.years_per_step
        steps = [
            self._step(
                1, start, f"0-{years_per_step} years",
                f"Begin as a {start.title} to build foundational skills and experience.",
            ),
            self._step(
                2, via, f"{years_per_step}-{2 * years_per_step} years",
                f"Take an alternative path as a {via.title} to gain different perspective and skills.",
            ),
            self._step(
                3, target, f"{2 * years_per_step}-{3 * years_per_step} years",
                f"Transition to the target role of {target.title} with your unique background.",
            ),
        ]
        return {
            "name": f"Alternative Path via {via.title}",
            "description": (
                f"This alternative pathway reaches the same destination role of {target.title} "
                f"but passes through a {via.title} position, offering different skill "
                f"development opportunities."
            ),
            "steps": steps,
        }

    def build_pathway(self, start: Role, target: Role, roles: Dict[int, Role]) -> Dict[str, Any]:
        """Assemble one pathway document between two distinct roles."""
        others = [rid for rid in sorted(roles) if rid not in (start.id, target.id)]
        low, high = self.gen_config.pathway_steps
        num_steps = min(self.rng.randint(low, high), len(others) + 2)
        middle_ids = self.rng.sample(others, num_steps - 2)
        middle = [roles[rid] for rid in middle_ids]

        steps = self.build_steps(start, middle, target)
        estimated_years = num_steps * self.gen_config.years_per_step

        alternative_routes = []
        remaining = [rid for rid in others if rid not in middle_ids]
        if middle and remaining:
            via = roles[self.rng.choice(remaining)]
            alternative_routes.append(self.build_alternative_route(start, via, target))

        return {
            "name": f"From {start.title} to {target.title}",
            "description": (
                f"A structured career progression pathway from a {start.title} position to "
                f"becoming a {target.title} over approximately {estimated_years} years."
            ),
            "estimated_time_years": estimated_years,
            "steps": steps,
            "alternative_routes": alternative_routes,
        }

    def generate(self) -> Dict[str, int]:
        """Upsert a batch of pathways over distinct (start, target) role pairs."""
        stats = {"owners": 0, "created": 0, "updated": 0, "failed": 0, "skipped": 0}
        roles = {r.id: r for r in self.db.query(Role).order_by(Role.id).all()}
        if len(roles) < 2:
            if self.strict_references:
                raise ReferentialIntegrityError("career_pathways", "a second role")
            logger.warning(
                f"ReferentialGap career_pathways: need at least 2 roles, found {len(roles)}, skipping"
            )
            stats["skipped"] += 1
            return stats

        role_ids = sorted(roles)
        pairs = [(s, t) for s in role_ids for t in role_ids if s != t]
        low, high = self.gen_config.pathway_count
        count = min(self.rng.randint(low, high), len(pairs))
        logger.info(f"Generating {count} career pathways across {len(roles)} roles")

        for start_id, target_id in self.rng.sample(pairs, count):
            stats["owners"] += 1
            data = self.build_pathway(roles[start_id], roles[target_id], roles)
            try:
                _, created = generic_upsert(
                    self.db,
                    CareerPathway,
                    {"starting_role_id": start_id, "target_role_id": target_id},
                    data,
                    allocate=True,
                )
            except PersistenceError as e:
                logger.error(f"Failed to save pathway {start_id} -> {target_id}: {e}")
                stats["failed"] += 1
                continue
            stats["created" if created else "updated"] += 1
            logger.info(f"Saving pathway: {data['name']}")

        self.backfill_career_paths()
        logger.info(
            f"  career_pathways: {stats['created']} new, {stats['updated']} refreshed, "
            f"{stats['failed']} failed"
        )
        return stats

    def backfill_career_paths(self) -> Dict[str, int]:
        """Recompute Role.career_path from every stored pathway and route."""
        next_ids = defaultdict(set)
        previous_ids = defaultdict(set)
        for pathway in self.db.query(CareerPathway).all():
            routes = [pathway.steps or []]
            routes += [route.get("steps", []) for route in (pathway.alternative_routes or [])]
            for steps in routes:
                ordered = sorted(steps, key=lambda s: s["step"])
                for current, following in zip(ordered, ordered[1:]):
                    next_ids[current["roleId"]].add(following["roleId"])
                    previous_ids[following["roleId"]].add(current["roleId"])

        stats = {"updated": 0, "failed": 0}
        for role in self.db.query(Role).order_by(Role.id).all():
            career_path = {
                "next": sorted(next_ids.get(role.id, ())),
                "previous": sorted(previous_ids.get(role.id, ())),
            }
            if role.career_path == career_path:
                continue
            try:
                generic_upsert(self.db, Role, {"id": role.id}, {"career_path": career_path})
            except PersistenceError as e:
                logger.error(f"Failed to back-fill career path for role {role.id}: {e}")
                stats["failed"] += 1
                continue
            stats["updated"] += 1

        logger.info(f"Back-filled career paths on {stats['updated']} roles")
        return stats
