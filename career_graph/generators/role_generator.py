"""Role generator: job titles with salary, education and experience requirements."""

import logging
from typing import Sequence

from career_graph.config import GROWTH_OUTLOOK, ROLE_CATEGORIES
from career_graph.generators.base_generator import BaseGenerator
from career_graph.generators.schemas import RolePayload

logger = logging.getLogger(__name__)

ROLE_PROMPT = """Generate {count} detailed professional roles for each of these categories: {categories}

Each role should include:
1. A specific title (a real job title, not generic)
2. A detailed description (at least 150 words)
3. Average salary range (realistic range with currency)
4. Education requirements (specific degrees/qualifications)
5. Experience requirements (specific years and types of experience)
6. Demand outlook (one of {outlooks})

The "category" of each role must be exactly one of: {categories}

Return a JSON object with a single "roles" array:
{{
  "roles": [
    {{
      "title": "...",
      "description": "...",
      "category": "...",
      "averageSalary": "...",
      "educationRequirements": ["..."],
      "experienceRequirements": ["..."],
      "demandOutlook": "..."
    }}
  ]
}}

Ensure all data is professionally written, realistic, and accurate.
Return ONLY the JSON object, no other text.
"""


class RoleGenerator(BaseGenerator):
    """Generates professional roles."""

    ENTITY_KEY = "roles"
    PAYLOAD_MODEL = RolePayload
    CATEGORIES = ROLE_CATEGORIES

    def default_categories(self):
        return list(self.gen_config.role_categories)

    def build_prompt(self, categories: Sequence[str], count_per_category: int) -> str:
        return ROLE_PROMPT.format(
            count=count_per_category,
            categories=", ".join(categories),
            outlooks=", ".join(f'"{o}"' for o in GROWTH_OUTLOOK),
        )
