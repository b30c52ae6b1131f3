"""
Learning resources derived from persisted skills.

Each skill gets a small set of resources whose type, difficulty and cost
are drawn from fixed enumerations. Resource ids are res-{skill_id}-{index}
so a re-run overwrites instead of duplicating.
"""

import logging
import random
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from career_graph.config import (
    COST_TYPES,
    RESOURCE_DIFFICULTIES,
    RESOURCE_TYPES,
    GenerationConfig,
)
from career_graph.db.db_utils import generic_upsert
from career_graph.db.models import LearningResource, Skill
from career_graph.exceptions import PersistenceError

logger = logging.getLogger(__name__)

# Provider names and price/effort ranges per resource type
RESOURCE_TEMPLATES = {
    "course": {
        "providers": ["Udemy", "Coursera", "edX", "Pluralsight", "LinkedIn Learning"],
        "hours": (10, 29),
        "price": (50, 199),
    },
    "book": {
        "providers": ["O'Reilly", "Packt", "Wiley", "Manning", "Apress"],
        "hours": (15, 44),
        "price": (20, 59),
    },
    "tutorial": {
        "providers": ["YouTube", "FreeCodeCamp", "W3Schools", "MDN", "TutorialsPoint"],
        "hours": (2, 11),
        "price": (10, 39),
    },
}
DEFAULT_TEMPLATE = {
    "providers": ["Various", "Online Platform", "Industry Expert", "Leading Provider"],
    "hours": (1, 15),
    "price": (10, 59),
}


def resource_id(skill_id: int, index: int) -> str:
    return f"res-{skill_id}-{index}"


class LearningResourceGenerator:
    """Builds LearningResource documents for every skill."""

    def __init__(
        self,
        db: Session,
        rng: Optional[random.Random] = None,
        gen_config: Optional[GenerationConfig] = None,
    ):
        self.db = db
        self.rng = rng or random.Random()
        self.gen_config = gen_config or GenerationConfig()

    def build_resource(self, skill: Skill, index: int) -> Dict[str, Any]:
        rng = self.rng
        resource_type = rng.choice(RESOURCE_TYPES)
        difficulty = rng.choice(RESOURCE_DIFFICULTIES)
        cost_type = rng.choice(COST_TYPES)
        template = RESOURCE_TEMPLATES.get(resource_type, DEFAULT_TEMPLATE)

        if resource_type == "course":
            title = f"Complete {skill.name} Masterclass"
            description = (
                f"A comprehensive course on {skill.name} designed for {difficulty} learners. "
                f"This course covers all aspects needed to master this skill in a practical setting."
            )
        elif resource_type == "book":
            title = f"{skill.name}: A Complete Guide"
            description = (
                f"This definitive book on {skill.name} provides both theoretical knowledge "
                f"and practical examples for {difficulty} practitioners."
            )
        elif resource_type == "tutorial":
            title = f"{skill.name} Tutorial for {difficulty.capitalize()}s"
            description = (
                f"A hands-on tutorial series that teaches {skill.name} through practical "
                f"examples and exercises suitable for {difficulty} learners."
            )
        else:
            title = f"Learning {skill.name}: {resource_type.capitalize()}"
            description = (
                f"This {resource_type} provides valuable insights into {skill.name} "
                f"with a focus on practical applications for {difficulty} users."
            )

        provider = rng.choice(template["providers"])
        estimated_hours = rng.randint(*template["hours"])
        cost = "0" if cost_type == "free" else f"${rng.randint(*template['price'])}"

        return {
            "title": title,
            "type": resource_type,
            "provider": provider,
            "url": f"https://example.com/{resource_type}/{skill.id}/{index}",
            "description": description,
            "skill_id": skill.id,
            "difficulty": difficulty,
            "estimated_hours": estimated_hours,
            "cost_type": cost_type,
            "cost": cost,
            "tags": [skill.category, difficulty, skill.name.lower()],
            "rating": round(rng.uniform(3.0, 5.0), 1),
            "review_count": rng.randint(20, 519),
            "relevance_score": rng.randint(5, 10),
            "match_reason": (
                f"This {resource_type} is highly relevant to building your "
                f"{skill.name} skills at the {difficulty} level."
            ),
        }

    def generate(self) -> Dict[str, int]:
        """Upsert 1-2 resources per persisted skill."""
        stats = {"owners": 0, "created": 0, "updated": 0, "failed": 0, "skipped": 0}
        skills = self.db.query(Skill).order_by(Skill.id).all()
        logger.info(f"Generating learning resources for {len(skills)} skills")

        low, high = self.gen_config.resources_per_skill
        for skill in skills:
            stats["owners"] += 1
            for index in range(self.rng.randint(low, high)):
                data = self.build_resource(skill, index)
                rid = resource_id(skill.id, index)
                try:
                    _, created = generic_upsert(self.db, LearningResource, {"id": rid}, data)
                except PersistenceError as e:
                    logger.error(f"Failed to save learning resource {rid}: {e}")
                    stats["failed"] += 1
                    continue
                stats["created" if created else "updated"] += 1

        logger.info(
            f"  learning_resources: {stats['created']} new, {stats['updated']} refreshed, "
            f"{stats['failed']} failed"
        )
        return stats
