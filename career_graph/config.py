"""
Configuration for career graph generation.

Centralizes generation parameters (categories, batch sizes, edge counts)
and the enumerated attribute domains shared by generators, the
relationship synthesizer and the derived-artifact generators.

Environment-backed values (credentials, connection string, cache dir)
live in career_graph.settings.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from career_graph.settings import Settings, get_settings

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────────────────────
# Entity categories
# ──────────────────────────────────────────────────────────────

SKILL_CATEGORIES = [
    "Technical",
    "Soft Skills",
    "Management",
    "Creative",
    "Analytical",
    "Communication",
    "Leadership",
    "Domain-Specific",
    "Certifications",
]

ROLE_CATEGORIES = [
    "Engineering",
    "Design",
    "Management",
    "Analysis",
    "Support",
    "Sales and Marketing",
    "Research",
    "Operations",
    "Human Resources",
    "Legal and Compliance",
]

INDUSTRY_CATEGORIES = [
    "Technology",
    "Healthcare",
    "Finance",
    "Education",
    "Manufacturing",
    "Retail",
    "Media and Entertainment",
    "Government",
    "Energy and Utilities",
    "Transportation and Logistics",
]

# SFIA 9 categories (skill framework mapping, level 1-7)
SFIA9_CATEGORIES = [
    "Strategy and architecture",
    "Change and transformation",
    "Development and implementation",
    "Delivery and operation",
    "Skills and quality",
    "Relationships and engagement",
]

# DigComp 2.2 competence areas (proficiency 1-8)
DIGCOMP_AREAS = [
    "Information and data literacy",
    "Communication and collaboration",
    "Digital content creation",
    "Safety",
    "Problem solving",
]

# ──────────────────────────────────────────────────────────────
# Attribute domains
# ──────────────────────────────────────────────────────────────

DEMAND_TRENDS = ["increasing", "stable", "decreasing"]
LEARNING_DIFFICULTIES = ["low", "medium", "high"]
GROWTH_OUTLOOK = ["high growth", "moderate growth", "stable", "declining"]
IMPORTANCE_LEVELS = ["critical", "important", "helpful"]
PREVALENCE_LEVELS = ["high", "medium", "low"]

# Only skills at this difficulty declare prerequisites
PREREQUISITE_DIFFICULTY = "high"

MIN_SKILL_LEVEL = 1
MAX_SKILL_LEVEL = 5

RESOURCE_TYPES = ["course", "book", "tutorial", "video", "podcast", "article", "practice", "certification"]
RESOURCE_DIFFICULTIES = ["beginner", "intermediate", "advanced", "expert"]
COST_TYPES = ["free", "paid", "subscription"]


@dataclass
class LLMConfig:
    """Provider call settings."""
    provider: str = "anthropic"
    model: str = "claude-haiku-4-5-20251001"
    temperature: float = 0.3
    max_tokens: int = 16384
    timeout_seconds: float = 120.0
    api_key: Optional[str] = field(default=None, repr=False)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "LLMConfig":
        settings = settings or get_settings()
        return cls(
            model=settings.llm_model,
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
            timeout_seconds=settings.llm_timeout_seconds,
            api_key=settings.anthropic_api_key,
        )


@dataclass
class GenerationConfig:
    """Batch sizes, target counts and sampling ranges."""
    # Categories requested from the provider per entity type
    skill_categories: List[str] = field(default_factory=lambda: SKILL_CATEGORIES[:3])
    role_categories: List[str] = field(default_factory=lambda: ROLE_CATEGORIES[:2])
    industry_categories: List[str] = field(default_factory=lambda: INDUSTRY_CATEGORIES[:2])

    # Entities per category, and categories grouped into one provider call
    count_per_category: int = 1
    categories_per_batch: int = 2

    # Edge fan-out per owner entity (inclusive ranges)
    skills_per_role: Tuple[int, int] = (2, 3)
    industries_per_role: Tuple[int, int] = (1, 2)
    industries_per_skill: Tuple[int, int] = (1, 2)
    prerequisites_per_skill: Tuple[int, int] = (1, 3)

    # Derived artifacts
    resources_per_skill: Tuple[int, int] = (1, 2)
    pathway_count: Tuple[int, int] = (5, 10)
    pathway_steps: Tuple[int, int] = (2, 4)
    skills_per_step: int = 3
    years_per_step: int = 2


@dataclass
class CacheConfig:
    """Location of the raw generator output."""
    cache_dir: Path = field(default_factory=lambda: Path(get_settings().cache_dir))

    def cache_file(self, entity: str) -> Path:
        """One file per entity type, e.g. cache/skills.json."""
        return self.cache_dir / f"{entity}.json"
