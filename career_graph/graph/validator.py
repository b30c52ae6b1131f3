"""
Graph integrity validation and generation status.

Two responsibilities:
1. Structural validation - do edges reference existing entities, are
   pathway steps contiguous, are there self-prerequisites?
2. Generation status - how far has the pipeline got (not started,
   in progress, complete)?
"""

import logging
from typing import Any, Dict, List, Tuple, Type

from sqlalchemy.orm import Session

from career_graph.db.db_utils import count_rows
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
)

logger = logging.getLogger(__name__)

COLLECTIONS: List[Tuple[str, Type]] = [
    ("skills", Skill),
    ("roles", Role),
    ("industries", Industry),
    ("role_skills", RoleSkill),
    ("role_industries", RoleIndustry),
    ("skill_industries", SkillIndustry),
    ("skill_prerequisites", SkillPrerequisite),
    ("learning_resources", LearningResource),
    ("career_pathways", CareerPathway),
]

# (edge model, [(column, referenced entity model)])
EDGE_REFERENCES = [
    (RoleSkill, [("role_id", Role), ("skill_id", Skill)]),
    (RoleIndustry, [("role_id", Role), ("industry_id", Industry)]),
    (SkillIndustry, [("skill_id", Skill), ("industry_id", Industry)]),
    (SkillPrerequisite, [("skill_id", Skill), ("prerequisite_id", Skill)]),
    (LearningResource, [("skill_id", Skill)]),
]

STATUS_NOT_STARTED = "NOT_STARTED"
STATUS_IN_PROGRESS = "IN_PROGRESS"
STATUS_COMPLETE = "COMPLETE"


def check_route_steps(steps: List[Dict[str, Any]], start_id: int, target_id: int) -> List[str]:
    """Problems with one ordered step list, empty if it is well-formed."""
    problems = []
    if not steps:
        return ["no steps"]
    for i, step in enumerate(steps):
        if step.get("step") != i + 1:
            problems.append(f"step {i} numbered {step.get('step')}, expected {i + 1}")
    if steps[0].get("roleId") != start_id:
        problems.append("first step is not the starting role")
    if steps[-1].get("roleId") != target_id:
        problems.append("last step is not the target role")
    return problems


class GraphValidator:
    """Validates graph integrity and reports generation status."""

    def __init__(self, db: Session):
        self.db = db

    def get_counts(self) -> Dict[str, int]:
        """Count documents per collection."""
        return {name: count_rows(self.db, model) for name, model in COLLECTIONS}

    def _ids(self, model_class: Type) -> set:
        return {row.id for row in self.db.query(model_class.id).all()}

    def check_dangling_edges(self) -> List[Dict[str, Any]]:
        """Edges and resources whose referenced entity is missing."""
        entity_ids = {model: self._ids(model) for model in (Skill, Role, Industry)}
        dangling = []
        for edge_model, references in EDGE_REFERENCES:
            for edge in self.db.query(edge_model).all():
                for column, target in references:
                    value = getattr(edge, column)
                    if value not in entity_ids[target]:
                        dangling.append({
                            "collection": edge_model.__tablename__,
                            "column": column,
                            "missing_id": value,
                        })
        return dangling

    def check_self_prerequisites(self) -> List[Dict[str, int]]:
        rows = (
            self.db.query(SkillPrerequisite)
            .filter(SkillPrerequisite.skill_id == SkillPrerequisite.prerequisite_id)
            .all()
        )
        return [{"skill_id": r.skill_id} for r in rows]

    def check_pathways(self) -> List[Dict[str, Any]]:
        """Step contiguity and endpoints for every pathway and alternative route."""
        problems = []
        for pathway in self.db.query(CareerPathway).order_by(CareerPathway.id).all():
            if pathway.starting_role_id == pathway.target_role_id:
                problems.append({"pathway_id": pathway.id, "route": "main", "problem": "start equals target"})
            routes = [("main", pathway.steps or [])]
            routes += [
                (route.get("name", f"alternative {i + 1}"), route.get("steps") or [])
                for i, route in enumerate(pathway.alternative_routes or [])
            ]
            for route_name, steps in routes:
                for problem in check_route_steps(steps, pathway.starting_role_id, pathway.target_role_id):
                    problems.append({"pathway_id": pathway.id, "route": route_name, "problem": problem})
        return problems

    def generation_status(self, counts: Dict[str, int] = None) -> str:
        counts = counts or self.get_counts()
        if counts["skills"] == 0 and counts["roles"] == 0 and counts["industries"] == 0:
            return STATUS_NOT_STARTED
        core = ["skills", "roles", "industries", "role_skills", "role_industries", "skill_industries"]
        if all(counts[name] > 0 for name in core):
            return STATUS_COMPLETE
        return STATUS_IN_PROGRESS

    def validate(self) -> Dict[str, Any]:
        """Run all validation checks and return a report."""
        logger.info("Running graph validation...")
        counts = self.get_counts()
        dangling = self.check_dangling_edges()
        self_prereqs = self.check_self_prerequisites()
        pathway_problems = self.check_pathways()

        report = {
            "counts": counts,
            "dangling_edges": dangling,
            "self_prerequisites": self_prereqs,
            "pathway_problems": pathway_problems,
            "status": self.generation_status(counts),
            "is_valid": not dangling and not self_prereqs and not pathway_problems,
        }
        logger.info(
            f"Validation: {len(dangling)} dangling edges, {len(self_prereqs)} self-prerequisites, "
            f"{len(pathway_problems)} pathway problems"
        )
        return report
