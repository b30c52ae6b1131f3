"""Industry generator: industries with trends, disruptive technologies and regulations."""

import logging
from typing import Sequence

from career_graph.config import GROWTH_OUTLOOK, INDUSTRY_CATEGORIES
from career_graph.generators.base_generator import BaseGenerator
from career_graph.generators.schemas import IndustryPayload

logger = logging.getLogger(__name__)

INDUSTRY_PROMPT = """Generate {count} detailed industries for each of these categories: {categories}

Each industry should include:
1. A specific name (not the category itself)
2. A detailed description (at least 150 words)
3. Trend description (at least 100 words about current trends)
4. Growth outlook (one of {outlooks})
5. Disruptive technologies (3-5 technologies impacting this industry)
6. Regulations (3-5 major regulations affecting this industry)

The "category" of each industry must be exactly one of: {categories}

Return a JSON object with a single "industries" array:
{{
  "industries": [
    {{
      "name": "...",
      "description": "...",
      "category": "...",
      "trendDescription": "...",
      "growthOutlook": "...",
      "disruptiveTechnologies": ["..."],
      "regulations": ["..."]
    }}
  ]
}}

Ensure all data is professionally written, realistic, and accurate.
Return ONLY the JSON object, no other text.
"""


class IndustryGenerator(BaseGenerator):
    """Generates industries."""

    ENTITY_KEY = "industries"
    PAYLOAD_MODEL = IndustryPayload
    CATEGORIES = INDUSTRY_CATEGORIES

    def default_categories(self):
        return list(self.gen_config.industry_categories)

    def build_prompt(self, categories: Sequence[str], count_per_category: int) -> str:
        return INDUSTRY_PROMPT.format(
            count=count_per_category,
            categories=", ".join(categories),
            outlooks=", ".join(f'"{o}"' for o in GROWTH_OUTLOOK),
        )
