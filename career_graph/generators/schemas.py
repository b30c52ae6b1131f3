"""
Payload models for generated entities.

The provider returns camelCase JSON; these models validate its shape,
coerce enumerated attributes to their domains and map the payload onto
store columns. Validation is structural only, the content itself is
taken as generated.
"""

from typing import Any, ClassVar, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from career_graph.config import (
    DEMAND_TRENDS,
    GROWTH_OUTLOOK,
    LEARNING_DIFFICULTIES,
)


def _coerce_choice(value: Any, choices: List[str], default: str) -> str:
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in choices:
            return normalized
    return default


def _coerce_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v is not None and str(v).strip()]
    return [str(value)]


class PayloadModel(BaseModel):
    """Base for generated entity payloads."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    NATURAL_KEY: ClassVar[str] = "name"

    @property
    def natural_key(self) -> str:
        return getattr(self, self.NATURAL_KEY)

    def to_cache(self) -> Dict[str, Any]:
        """Payload as cached: camelCase, un-identified."""
        return self.model_dump(by_alias=True, mode="json")

    def to_record(self) -> Dict[str, Any]:
        """Column values for the store (snake_case top level)."""
        record = {}
        for name, field_info in type(self).model_fields.items():
            value = getattr(self, name)
            if isinstance(value, BaseModel):
                value = value.model_dump(by_alias=True, mode="json")
            elif isinstance(value, list):
                value = [
                    v.model_dump(by_alias=True, mode="json") if isinstance(v, BaseModel) else v
                    for v in value
                ]
            record[name] = value
        return record


# ──────────────────────────────────────────────────────────────
# Skill
# ──────────────────────────────────────────────────────────────

class SfiaMapping(BaseModel):
    """SFIA 9 framework mapping (level 1-7)."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    category: str = ""
    skill: str = ""
    level: int = Field(default=1, ge=1, le=7)
    description: str = ""


class DigCompMapping(BaseModel):
    """DigComp 2.2 framework mapping (proficiency 1-8)."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    area: str = ""
    competence: str = ""
    proficiency_level: int = Field(default=1, ge=1, le=8, alias="proficiencyLevel")
    description: str = ""


class LevelingCriterion(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    level: int
    description: str = ""
    examples: List[str] = Field(default_factory=list)
    assessment_methods: List[str] = Field(default_factory=list, alias="assessmentMethods")

    @field_validator("examples", "assessment_methods", mode="before")
    @classmethod
    def _lists(cls, v):
        return _coerce_str_list(v)


class SkillPayload(PayloadModel):
    NATURAL_KEY: ClassVar[str] = "name"

    name: str = Field(min_length=1)
    category: str = Field(min_length=1)
    description: str = ""
    sfia_mapping: Optional[SfiaMapping] = Field(default=None, alias="sfiaMapping")
    digcomp_mapping: Optional[DigCompMapping] = Field(default=None, alias="digCompMapping")
    demand_trend: str = Field(default="stable", alias="demandTrend")
    learning_difficulty: str = Field(default="medium", alias="learningDifficulty")
    future_relevance: str = Field(default="", alias="futureRelevance")
    leveling_criteria: List[LevelingCriterion] = Field(default_factory=list, alias="levelingCriteria")

    @field_validator("name", "category", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("demand_trend", mode="before")
    @classmethod
    def _demand_trend(cls, v):
        return _coerce_choice(v, DEMAND_TRENDS, "stable")

    @field_validator("learning_difficulty", mode="before")
    @classmethod
    def _learning_difficulty(cls, v):
        return _coerce_choice(v, LEARNING_DIFFICULTIES, "medium")

    @field_validator("leveling_criteria")
    @classmethod
    def _order_levels(cls, v):
        return sorted(v, key=lambda c: c.level)


# ──────────────────────────────────────────────────────────────
# Role
# ──────────────────────────────────────────────────────────────

class RolePayload(PayloadModel):
    NATURAL_KEY: ClassVar[str] = "title"

    title: str = Field(min_length=1)
    category: str = Field(min_length=1)
    description: str = ""
    average_salary: str = Field(default="", alias="averageSalary")
    education_requirements: List[str] = Field(default_factory=list, alias="educationRequirements")
    experience_requirements: List[str] = Field(default_factory=list, alias="experienceRequirements")
    demand_outlook: str = Field(default="stable", alias="demandOutlook")

    @field_validator("title", "category", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("average_salary", mode="before")
    @classmethod
    def _salary(cls, v):
        return "" if v is None else str(v)

    @field_validator("education_requirements", "experience_requirements", mode="before")
    @classmethod
    def _lists(cls, v):
        return _coerce_str_list(v)

    @field_validator("demand_outlook", mode="before")
    @classmethod
    def _outlook(cls, v):
        return _coerce_choice(v, GROWTH_OUTLOOK, "stable")


# ──────────────────────────────────────────────────────────────
# Industry
# ──────────────────────────────────────────────────────────────

class IndustryPayload(PayloadModel):
    NATURAL_KEY: ClassVar[str] = "name"

    name: str = Field(min_length=1)
    category: str = Field(min_length=1)
    description: str = ""
    trend_description: str = Field(default="", alias="trendDescription")
    growth_outlook: str = Field(default="stable", alias="growthOutlook")
    disruptive_technologies: List[str] = Field(default_factory=list, alias="disruptiveTechnologies")
    regulations: List[str] = Field(default_factory=list)

    @field_validator("name", "category", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("disruptive_technologies", "regulations", mode="before")
    @classmethod
    def _lists(cls, v):
        return _coerce_str_list(v)

    @field_validator("growth_outlook", mode="before")
    @classmethod
    def _outlook(cls, v):
        return _coerce_choice(v, GROWTH_OUTLOOK, "stable")
