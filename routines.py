"""
Routine blocks: reusable, ordered exercise lists owned by a coach.
"""

import logging
import math
from typing import Any, Dict, Optional

from sqlalchemy import desc, func, select
from sqlalchemy.orm import Session

from config import get_settings
from exceptions import NotFoundError, ValidationError
from models import RoutineBlock, RoutineItem, WorkoutFormat, WorkoutLibrary, WorkoutType
from ordering import apply_order, next_order_index
from ownership import assert_block_ownership, assert_item_ownership
from schemas import Page, RoutineBlockCreate, RoutineBlockRead, RoutineBlockUpdate, RoutineItemCreate

logger = logging.getLogger(__name__)

# Coach guide fields allowed for each library workout type
RECOMMENDATION_TEMPLATES = {
    WorkoutType.WEIGHT_REPS: ("sets", "reps", "weight", "rest", "note"),
    WorkoutType.DURATION: ("duration", "rounds", "rest", "note"),
    WorkoutType.TIME: ("duration", "rounds", "rest", "note"),
    WorkoutType.DISTANCE: ("distance", "time", "rest", "note"),
}


def clean_recommendation(
    recommendation: Optional[Dict[str, Any]], workout_type: Optional[WorkoutType]
) -> Optional[Dict[str, str]]:
    """
    Check ``recommendation`` against the template for ``workout_type`` and
    drop empty values. Returns None when nothing is left.

    An item whose exercise was removed from the library accepts any
    template field.
    """
    if not recommendation:
        return None

    if workout_type is None:
        allowed = {key for fields in RECOMMENDATION_TEMPLATES.values() for key in fields}
    else:
        allowed = set(RECOMMENDATION_TEMPLATES[workout_type])

    unknown = sorted(set(recommendation) - allowed)
    if unknown:
        raise ValidationError(
            f"Unsupported recommendation fields: {', '.join(unknown)}.", field="recommendation"
        )

    cleaned = {}
    for key, value in recommendation.items():
        if value is None:
            continue
        value = str(value).strip()
        if value:
            cleaned[key] = value
    return cleaned or None


# ========== BLOCKS ==========

def create_routine_block(db: Session, coach_id: str, data: RoutineBlockCreate) -> RoutineBlock:
    block = RoutineBlock(**data.model_dump(), coach_id=coach_id)
    db.add(block)
    db.commit()
    db.refresh(block)
    logger.info("Routine block %s created by %s", block.id, coach_id)
    return block


def update_routine_block(db: Session, coach_id: str, block_id: str, data: RoutineBlockUpdate) -> RoutineBlock:
    block = assert_block_ownership(db, block_id, coach_id)

    for key, value in data.model_dump(exclude_unset=True).items():
        if value is None and key in ("name", "workout_format", "is_leaderboard_enabled"):
            raise ValidationError(f"{key} cannot be empty.", field=key)
        setattr(block, key, value)

    db.commit()
    db.refresh(block)
    logger.info("Routine block %s updated", block_id)
    return block


def delete_routine_block(db: Session, coach_id: str, block_id: str) -> None:
    block = assert_block_ownership(db, block_id, coach_id)
    db.delete(block)
    db.commit()
    logger.info("Routine block %s deleted", block_id)


def get_routine_block(db: Session, coach_id: str, block_id: str) -> RoutineBlock:
    return assert_block_ownership(db, block_id, coach_id)


def list_routine_blocks(
    db: Session,
    coach_id: str,
    page: int = 1,
    search: Optional[str] = None,
    workout_format: Optional[WorkoutFormat] = None,
) -> Page[RoutineBlockRead]:
    page_size = get_settings().routine_page_size
    page = max(page, 1)

    query = select(RoutineBlock).where(RoutineBlock.coach_id == coach_id)
    if search:
        query = query.where(RoutineBlock.name.ilike(f"%{search.strip()}%"))
    if workout_format:
        query = query.where(RoutineBlock.workout_format == workout_format)

    total_count = db.execute(select(func.count()).select_from(query.subquery())).scalar_one()
    blocks = db.execute(
        query.order_by(desc(RoutineBlock.updated_at), desc(RoutineBlock.created_at))
        .offset((page - 1) * page_size)
        .limit(page_size)
    ).scalars().all()

    return Page[RoutineBlockRead](
        items=[RoutineBlockRead.model_validate(block) for block in blocks],
        total_count=total_count,
        total_pages=math.ceil(total_count / page_size),
        current_page=page,
        page_size=page_size,
    )


# ========== ITEMS ==========

def add_routine_item(db: Session, coach_id: str, block_id: str, data: RoutineItemCreate) -> RoutineItem:
    block = assert_block_ownership(db, block_id, coach_id)

    exercise = db.get(WorkoutLibrary, data.library_id)
    if not exercise:
        raise NotFoundError("Exercise not found.")

    item = RoutineItem(
        library_id=exercise.id,
        order_index=next_order_index(block.items),
        recommendation=clean_recommendation(data.recommendation, exercise.workout_type),
    )
    block.items.append(item)
    db.commit()
    db.refresh(item)
    logger.info("Routine item %s added to block %s", item.id, block_id)
    return item


def update_routine_item(
    db: Session, coach_id: str, item_id: str, recommendation: Optional[Dict[str, Any]]
) -> RoutineItem:
    item = assert_item_ownership(db, item_id, coach_id)
    workout_type = item.library.workout_type if item.library else None
    item.recommendation = clean_recommendation(recommendation, workout_type)
    db.commit()
    db.refresh(item)
    return item


def reorder_routine_items(db: Session, coach_id: str, block_id: str, ordered_item_ids) -> RoutineBlock:
    block = assert_block_ownership(db, block_id, coach_id)
    apply_order(block.items, ordered_item_ids)
    db.commit()
    db.refresh(block)
    return block


def delete_routine_item(db: Session, coach_id: str, item_id: str) -> None:
    item = assert_item_ownership(db, item_id, coach_id)
    db.delete(item)
    db.commit()
    logger.info("Routine item %s deleted", item_id)
