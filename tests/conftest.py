"""
Pytest configuration and shared fixtures for career graph tests.

This file provides:
- In-memory SQLite document store
- Cache store on a temporary directory
- Scripted fake provider
- Payload builders for skills, roles and industries
"""

import json
import random
from typing import Any, Dict, List

import pytest

from career_graph.cache_store import CacheStore
from career_graph.config import CacheConfig, GenerationConfig, LLMConfig
from career_graph.db.database import Database
from career_graph.exceptions import ProviderError
from career_graph.graph.persister import EntityPersister


# ============================================================================
# Store and Cache Fixtures
# ============================================================================

@pytest.fixture
def make_database():
    """Factory for fresh in-memory stores (disposed after the test)."""
    created = []

    def _make() -> Database:
        database = Database("sqlite://")
        database.create_all()
        created.append(database)
        return database

    yield _make
    for database in created:
        database.dispose()


@pytest.fixture
def database(make_database):
    return make_database()


@pytest.fixture
def db(database):
    with database.session() as session:
        yield session


@pytest.fixture
def cache(tmp_path):
    return CacheStore(CacheConfig(cache_dir=tmp_path / "cache"))


@pytest.fixture
def gen_config():
    return GenerationConfig(
        skill_categories=["Technical", "Analytical"],
        role_categories=["Engineering", "Design"],
        industry_categories=["Technology", "Finance"],
    )


@pytest.fixture
def llm_config():
    return LLMConfig(api_key="test-key", model="test-model")


@pytest.fixture
def rng():
    return random.Random(42)


# ============================================================================
# Provider Fixtures
# ============================================================================

class FakeProvider:
    """Returns scripted replies in order; exceptions in the script are raised."""

    def __init__(self):
        self.responses: List[Any] = []
        self.prompts: List[str] = []

    @property
    def calls(self) -> int:
        return len(self.prompts)

    def reply(self, entity_key: str, items: List[Dict[str, Any]]) -> "FakeProvider":
        self.responses.append(json.dumps({entity_key: items}))
        return self

    def complete(self, prompt: str, system: str = None) -> str:
        self.prompts.append(prompt)
        if not self.responses:
            raise ProviderError("No scripted response left")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def fake_provider():
    return FakeProvider()


# ============================================================================
# Payload Fixtures
# ============================================================================

@pytest.fixture
def skill_payload():
    def _build(name: str, category: str = "Technical", difficulty: str = "medium") -> Dict[str, Any]:
        return {
            "name": name,
            "category": category,
            "description": f"{name} applied in day-to-day work.",
            "sfiaMapping": {
                "category": "Development and implementation",
                "skill": "Programming/software development",
                "level": 3,
                "description": "Designs, codes and tests programs.",
            },
            "digCompMapping": {
                "area": "Digital content creation",
                "competence": "Programming",
                "proficiencyLevel": 4,
                "description": "Writes programs for well-defined problems.",
            },
            "demandTrend": "increasing",
            "learningDifficulty": difficulty,
            "futureRelevance": f"{name} will stay relevant.",
            "levelingCriteria": [
                {"level": 5, "description": "Expert", "examples": ["Leads"], "assessmentMethods": ["Review"]},
                {"level": 1, "description": "Novice", "examples": ["Follows"], "assessmentMethods": ["Quiz"]},
                {"level": 3, "description": "Practitioner", "examples": ["Builds"], "assessmentMethods": ["Project"]},
            ],
        }
    return _build


@pytest.fixture
def role_payload():
    def _build(title: str, category: str = "Engineering") -> Dict[str, Any]:
        return {
            "title": title,
            "category": category,
            "description": f"{title} role.",
            "averageSalary": "$80,000 - $120,000",
            "educationRequirements": ["Bachelor's degree in Computer Science"],
            "experienceRequirements": ["2+ years of professional experience"],
            "demandOutlook": "high growth",
        }
    return _build


@pytest.fixture
def industry_payload():
    def _build(name: str, category: str = "Technology") -> Dict[str, Any]:
        return {
            "name": name,
            "category": category,
            "description": f"{name} industry.",
            "trendDescription": "Growing steadily.",
            "growthOutlook": "moderate growth",
            "disruptiveTechnologies": ["AI", "Cloud"],
            "regulations": ["GDPR"],
        }
    return _build


@pytest.fixture
def seed_graph(skill_payload, role_payload, industry_payload):
    """Persist a small set of entities into a session."""
    def _seed(session, skills=4, roles=4, industries=2, high_skills=2):
        persister = EntityPersister(session)
        persister.persist_skills([
            skill_payload(f"Skill {i}", difficulty="high" if i < high_skills else "low")
            for i in range(skills)
        ])
        persister.persist_roles([role_payload(f"Role {i}") for i in range(roles)])
        persister.persist_industries([industry_payload(f"Industry {i}") for i in range(industries)])
    return _seed
