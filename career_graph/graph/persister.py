"""
Entity persister: cached payloads → document store.

Each payload is upserted by its natural key (Skill.name, Role.title,
Industry.name). New rows get an id from the per-table sequence, existing
rows keep theirs. Safe to re-run.
"""

import copy
import logging
from typing import Any, Dict, List, Optional, Type

from pydantic import ValidationError
from sqlalchemy.orm import Session

from career_graph.db.db_utils import generic_upsert
from career_graph.db.models import Industry, Role, Skill
from career_graph.exceptions import PersistenceError
from career_graph.generators.schemas import (
    IndustryPayload,
    PayloadModel,
    RolePayload,
    SkillPayload,
)

logger = logging.getLogger(__name__)

EMPTY_CAREER_PATH = {"next": [], "previous": []}


class EntityPersister:
    """Upserts generated entities and assigns their ids."""

    def __init__(self, db: Session):
        self.db = db

    def _persist(
        self,
        items: List[Dict[str, Any]],
        model_class: Type,
        payload_model: Type[PayloadModel],
        label: str,
        insert_only: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, int]:
        stats = {"saved": 0, "created": 0, "updated": 0, "failed": 0}
        key_field = payload_model.NATURAL_KEY

        for item in items:
            try:
                payload = payload_model.model_validate(item)
            except ValidationError as e:
                logger.warning(f"Skipping malformed cached {label}: {e.error_count()} errors")
                stats["failed"] += 1
                continue

            record = payload.to_record()
            natural_key = record.pop(key_field)
            logger.info(f"Saving {label}: {natural_key}")
            try:
                instance, created = generic_upsert(
                    self.db,
                    model_class,
                    unique_keys={key_field: natural_key},
                    update_data=record,
                    insert_only=copy.deepcopy(insert_only) if insert_only else None,
                    allocate=True,
                )
            except PersistenceError as e:
                logger.error(f"Failed to save {label} '{natural_key}': {e}")
                stats["failed"] += 1
                continue

            stats["saved"] += 1
            stats["created" if created else "updated"] += 1

        logger.info(
            f"Persisted {stats['saved']} {label} entities "
            f"({stats['created']} new, {stats['updated']} updated, {stats['failed']} failed)"
        )
        return stats

    def persist_skills(self, items: List[Dict[str, Any]]) -> Dict[str, int]:
        return self._persist(items, Skill, SkillPayload, "skill")

    def persist_roles(self, items: List[Dict[str, Any]]) -> Dict[str, int]:
        # career_path is owned by pathway synthesis: set on insert, never reset
        return self._persist(
            items, Role, RolePayload, "role",
            insert_only={"career_path": EMPTY_CAREER_PATH},
        )

    def persist_industries(self, items: List[Dict[str, Any]]) -> Dict[str, int]:
        return self._persist(items, Industry, IndustryPayload, "industry")
