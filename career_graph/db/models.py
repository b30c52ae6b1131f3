"""
Document-store collections for the career knowledge graph.

Entities (Skill, Role, Industry) are keyed by an allocated integer id and
unique on their natural key. Edges use the (owner, target) pair as primary
key. Nested attributes are stored as JSON documents.
"""

from datetime import datetime

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB

from career_graph.db.database import Base

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONDocument = JSON().with_variant(JSONB(), "postgresql")


class BaseModel(Base):
    __abstract__ = True

    created_on = Column(DateTime, default=datetime.utcnow, nullable=False)
    modified_on = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


# ──────────────────────────────────────────────────────────────
# Entities
# ──────────────────────────────────────────────────────────────

class Skill(BaseModel):
    __tablename__ = "skills"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(255), nullable=False, unique=True)
    category = Column(String(100), nullable=False)
    description = Column(Text, nullable=False, default="")
    demand_trend = Column(String(20), nullable=False, default="stable")
    learning_difficulty = Column(String(20), nullable=False, default="medium")
    future_relevance = Column(Text, nullable=True)
    sfia_mapping = Column(JSONDocument, nullable=True)
    digcomp_mapping = Column(JSONDocument, nullable=True)
    leveling_criteria = Column(JSONDocument, nullable=False, default=list)


class Role(BaseModel):
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, autoincrement=False)
    title = Column(String(255), nullable=False, unique=True)
    category = Column(String(100), nullable=False)
    description = Column(Text, nullable=False, default="")
    average_salary = Column(String(100), nullable=True)
    education_requirements = Column(JSONDocument, nullable=False, default=list)
    experience_requirements = Column(JSONDocument, nullable=False, default=list)
    demand_outlook = Column(String(30), nullable=False, default="stable")
    career_path = Column(JSONDocument, nullable=False, default=lambda: {"next": [], "previous": []})


class Industry(BaseModel):
    __tablename__ = "industries"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(255), nullable=False, unique=True)
    category = Column(String(100), nullable=False)
    description = Column(Text, nullable=False, default="")
    trend_description = Column(Text, nullable=True)
    growth_outlook = Column(String(30), nullable=False, default="stable")
    disruptive_technologies = Column(JSONDocument, nullable=False, default=list)
    regulations = Column(JSONDocument, nullable=False, default=list)


# ──────────────────────────────────────────────────────────────
# Edges
# ──────────────────────────────────────────────────────────────

class RoleSkill(BaseModel):
    __tablename__ = "role_skills"

    role_id = Column(Integer, ForeignKey("roles.id"), primary_key=True)
    skill_id = Column(Integer, ForeignKey("skills.id"), primary_key=True)
    importance = Column(String(20), nullable=False)
    level_required = Column(Integer, nullable=False)
    context = Column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint("level_required BETWEEN 1 AND 5", name="ck_role_skill_level"),
    )


class RoleIndustry(BaseModel):
    __tablename__ = "role_industries"

    role_id = Column(Integer, ForeignKey("roles.id"), primary_key=True)
    industry_id = Column(Integer, ForeignKey("industries.id"), primary_key=True)
    prevalence = Column(String(20), nullable=False)
    notes = Column(Text, nullable=True)
    specializations = Column(Text, nullable=True)


class SkillIndustry(BaseModel):
    __tablename__ = "skill_industries"

    skill_id = Column(Integer, ForeignKey("skills.id"), primary_key=True)
    industry_id = Column(Integer, ForeignKey("industries.id"), primary_key=True)
    importance = Column(String(20), nullable=False)
    trend_direction = Column(String(20), nullable=False)
    contextual_application = Column(Text, nullable=True)


class SkillPrerequisite(BaseModel):
    __tablename__ = "skill_prerequisites"

    skill_id = Column(Integer, ForeignKey("skills.id"), primary_key=True)
    prerequisite_id = Column(Integer, ForeignKey("skills.id"), primary_key=True)
    importance = Column(String(20), nullable=False)
    acquisition_order = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint("skill_id <> prerequisite_id", name="ck_skill_prerequisite_no_self"),
    )


# ──────────────────────────────────────────────────────────────
# Derived artifacts
# ──────────────────────────────────────────────────────────────

class LearningResource(BaseModel):
    __tablename__ = "learning_resources"

    id = Column(String(64), primary_key=True)  # res-{skill_id}-{index}
    title = Column(String(255), nullable=False)
    type = Column(String(30), nullable=False)
    provider = Column(String(100), nullable=True)
    url = Column(String(500), nullable=True)
    description = Column(Text, nullable=False, default="")
    skill_id = Column(Integer, ForeignKey("skills.id"), nullable=False, index=True)
    difficulty = Column(String(20), nullable=False)
    estimated_hours = Column(Integer, nullable=True)
    cost_type = Column(String(20), nullable=False)
    cost = Column(String(20), nullable=True)
    tags = Column(JSONDocument, nullable=False, default=list)
    rating = Column(Float, nullable=True)
    review_count = Column(Integer, nullable=True)
    relevance_score = Column(Integer, nullable=True)
    match_reason = Column(Text, nullable=True)


class CareerPathway(BaseModel):
    __tablename__ = "career_pathways"
    __table_args__ = (
        UniqueConstraint("starting_role_id", "target_role_id", name="uix_career_pathway_endpoints"),
        CheckConstraint("starting_role_id <> target_role_id", name="ck_career_pathway_distinct_roles"),
    )

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(500), nullable=False)
    description = Column(Text, nullable=False, default="")
    starting_role_id = Column(Integer, ForeignKey("roles.id"), nullable=False)
    target_role_id = Column(Integer, ForeignKey("roles.id"), nullable=False)
    estimated_time_years = Column(Integer, nullable=True)
    steps = Column(JSONDocument, nullable=False, default=list)
    alternative_routes = Column(JSONDocument, nullable=False, default=list)


# ──────────────────────────────────────────────────────────────
# Pipeline bookkeeping
# ──────────────────────────────────────────────────────────────

class IdSequence(Base):
    """Last allocated id per entity collection."""
    __tablename__ = "id_sequences"

    name = Column(String(100), primary_key=True)
    value = Column(Integer, nullable=False, default=0)


class StageStatus(Base):
    """Completion marker for one pipeline stage."""
    __tablename__ = "stage_status"

    stage = Column(String(100), primary_key=True)
    status = Column(String(20), nullable=False)
    item_count = Column(Integer, nullable=False, default=0)
    error_message = Column(Text, nullable=True)
    started_on = Column(DateTime, nullable=True)
    completed_on = Column(DateTime, nullable=True)
    # Row counts of the collections the stage read, as of its last run
    input_counts = Column(JSONDocument, nullable=True)
