"""
Skill generator.

Generates skills per category with SFIA 9 / DigComp 2.2 mappings and
leveling criteria for levels 1, 3 and 5.

Batch strategy: 1 provider call per 1-2 categories.
"""

import json
import logging
from typing import Sequence

from career_graph.config import DIGCOMP_AREAS, SFIA9_CATEGORIES, SKILL_CATEGORIES
from career_graph.generators.base_generator import BaseGenerator
from career_graph.generators.schemas import SkillPayload

logger = logging.getLogger(__name__)

SKILL_PROMPT = """Generate {count} detailed skills for each of these categories: {categories}

Each skill should include:
1. A specific name (not generic or category names)
2. A detailed description (at least 100 words)
3. SFIA 9 mapping with a real skill and category from the SFIA 9 framework (category, skill name, level 1-7, description)
4. DigComp 2.2 mapping with a real area and competence (area, competence, proficiency level 1-8, description)
5. Demand trend ("increasing", "stable" or "decreasing")
6. Learning difficulty ("low", "medium" or "high")
7. Future relevance (50+ words on how this skill will evolve)
8. Three leveling criteria for levels 1, 3 and 5, each with examples and assessment methods

The "category" of each skill must be exactly one of: {categories}

SFIA 9 categories to choose from: {sfia_categories}
DigComp 2.2 areas to choose from: {digcomp_areas}

Return a JSON object with a single "skills" array:
{{
  "skills": [
    {{
      "name": "...",
      "description": "...",
      "category": "...",
      "sfiaMapping": {{"category": "...", "skill": "...", "level": 3, "description": "..."}},
      "digCompMapping": {{"area": "...", "competence": "...", "proficiencyLevel": 4, "description": "..."}},
      "demandTrend": "increasing",
      "futureRelevance": "...",
      "learningDifficulty": "medium",
      "levelingCriteria": [
        {{"level": 1, "description": "...", "examples": ["..."], "assessmentMethods": ["..."]}}
      ]
    }}
  ]
}}

Return ONLY the JSON object, no other text.
"""


class SkillGenerator(BaseGenerator):
    """Generates the skill catalog."""

    ENTITY_KEY = "skills"
    PAYLOAD_MODEL = SkillPayload
    CATEGORIES = SKILL_CATEGORIES

    def default_categories(self):
        return list(self.gen_config.skill_categories)

    def build_prompt(self, categories: Sequence[str], count_per_category: int) -> str:
        return SKILL_PROMPT.format(
            count=count_per_category,
            categories=", ".join(categories),
            sfia_categories=json.dumps(SFIA9_CATEGORIES),
            digcomp_areas=json.dumps(DIGCOMP_AREAS),
        )
