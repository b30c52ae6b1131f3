import logging
from datetime import datetime
from typing import Any, Dict, Optional, Tuple, Type, TypeVar

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from career_graph.db.models import IdSequence
from career_graph.exceptions import PersistenceError

logger = logging.getLogger(__name__)

T = TypeVar('T')


def allocate_id(db: Session, model_class: Type[T]) -> int:
    """
    Allocate the next integer id for an entity collection.

    The sequence row is seeded from max(id) of the collection the first
    time it is used, and locked while it is bumped so repeated or
    concurrent runs never hand out the same id twice.

    Args:
        db: Database session
        model_class: SQLAlchemy model with an integer `id` column

    Returns:
        The allocated id (not yet committed)
    """
    name = model_class.__tablename__
    sequence = (
        db.query(IdSequence)
        .filter(IdSequence.name == name)
        .with_for_update()
        .first()
    )
    if sequence is None:
        current = db.query(func.max(model_class.id)).scalar() or 0
        sequence = IdSequence(name=name, value=current)
        db.add(sequence)

    sequence.value += 1
    db.flush()
    return sequence.value


def _apply_updates(instance: Any, unique_keys: Dict[str, Any], update_data: Dict[str, Any]) -> None:
    for key, value in update_data.items():
        if key in unique_keys or key == "id":
            continue
        setattr(instance, key, value)
    if hasattr(instance, 'modified_on'):
        instance.modified_on = datetime.utcnow()


def _find(db: Session, model_class: Type[T], unique_keys: Dict[str, Any]) -> Optional[T]:
    query = db.query(model_class)
    for key, value in unique_keys.items():
        query = query.filter(getattr(model_class, key) == value)
    return query.first()


def generic_upsert(
    db: Session,
    model_class: Type[T],
    unique_keys: Dict[str, Any],
    update_data: Dict[str, Any],
    insert_only: Optional[Dict[str, Any]] = None,
    allocate: bool = False,
) -> Tuple[T, bool]:
    """
    Upsert a record filtered by its natural or composite key, and commit.

    An existing record keeps its id: only the fields in update_data are
    overwritten. A new record gets unique_keys + update_data + insert_only,
    and an id from the collection sequence when allocate is set.

    Args:
        db: Database session
        model_class: SQLAlchemy model class
        unique_keys: Key-value pairs of the natural/composite key
        update_data: Fields to write on both insert and update
        insert_only: Fields written only when the record is created
        allocate: Assign a new id from the sequence on insert

    Returns:
        Tuple of (model instance, created flag)

    Raises:
        PersistenceError: the write failed; the session has been rolled back
    """
    try:
        instance = _find(db, model_class, unique_keys)
        if instance:
            _apply_updates(instance, unique_keys, update_data)
            db.commit()
            return instance, False

        combined_data = {**unique_keys, **(insert_only or {}), **update_data}
        if allocate:
            combined_data["id"] = allocate_id(db, model_class)
        instance = model_class(**combined_data)
        db.add(instance)

        try:
            db.commit()
            return instance, True
        except IntegrityError:
            # Lost a race on the unique key: update the winner instead
            db.rollback()
            instance = _find(db, model_class, unique_keys)
            if instance is None:
                raise
            _apply_updates(instance, unique_keys, update_data)
            db.commit()
            return instance, False
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(
            f"Failed to upsert {model_class.__tablename__} {unique_keys}: {e}"
        ) from e


def count_rows(db: Session, model_class: Type[T]) -> int:
    """Number of documents in a collection."""
    return db.query(func.count()).select_from(model_class).scalar() or 0
