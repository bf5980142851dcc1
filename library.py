import logging
import math
from typing import List, Optional

from sqlalchemy import desc, func, or_, select
from sqlalchemy.orm import Session

from config import get_settings
from exceptions import NotFoundError, ValidationError
from models import WorkoutLibrary, WorkoutType
from ownership import assert_library_ownership
from performance import classify_exercise
from schemas import LibraryExerciseCreate, LibraryExerciseRead, LibraryExerciseUpdate, Page

logger = logging.getLogger(__name__)


def search_library(
    db: Session,
    page: int = 1,
    search: Optional[str] = None,
    categories: Optional[List[str]] = None,
    workout_types: Optional[List[WorkoutType]] = None,
) -> Page[LibraryExerciseRead]:
    """
    Paginated exercise search.

    ``search`` matches title, category or description. Values inside
    ``categories`` or ``workout_types`` are alternatives; the groups combine.
    """
    page_size = get_settings().library_page_size
    page = max(page, 1)

    query = select(WorkoutLibrary)
    if search and search.strip():
        pattern = f"%{search.strip()}%"
        query = query.where(or_(
            WorkoutLibrary.title.ilike(pattern),
            WorkoutLibrary.category.ilike(pattern),
            WorkoutLibrary.description.ilike(pattern),
        ))
    if categories:
        query = query.where(WorkoutLibrary.category.in_(categories))
    if workout_types:
        query = query.where(WorkoutLibrary.workout_type.in_(workout_types))

    total_count = db.execute(select(func.count()).select_from(query.subquery())).scalar_one()
    items = db.execute(
        query.order_by(desc(WorkoutLibrary.created_at), desc(WorkoutLibrary.updated_at))
        .offset((page - 1) * page_size)
        .limit(page_size)
    ).scalars().all()

    return Page[LibraryExerciseRead](
        items=[LibraryExerciseRead.model_validate(item) for item in items],
        total_count=total_count,
        total_pages=math.ceil(total_count / page_size),
        current_page=page,
        page_size=page_size,
    )


def get_library_exercise(db: Session, library_id: str) -> WorkoutLibrary:
    exercise = db.get(WorkoutLibrary, library_id)
    if not exercise:
        raise NotFoundError("Exercise not found.")
    return exercise


def create_library_exercise(db: Session, coach_id: str, data: LibraryExerciseCreate) -> WorkoutLibrary:
    values = data.model_dump()
    if values["lift_tag"] is None:
        values["lift_tag"] = classify_exercise(data.title)

    exercise = WorkoutLibrary(**values, coach_id=coach_id, is_system=False)
    db.add(exercise)
    db.commit()
    db.refresh(exercise)
    logger.info("Library exercise %s created by %s", exercise.id, coach_id)
    return exercise


def update_library_exercise(
    db: Session, coach_id: str, library_id: str, data: LibraryExerciseUpdate
) -> WorkoutLibrary:
    exercise = assert_library_ownership(db, library_id, coach_id)

    for key, value in data.model_dump(exclude_unset=True).items():
        if value is None and key in ("title", "workout_type"):
            raise ValidationError(f"{key} cannot be empty.", field=key)
        setattr(exercise, key, value)

    db.commit()
    db.refresh(exercise)
    logger.info("Library exercise %s updated", library_id)
    return exercise


def delete_library_exercise(db: Session, coach_id: str, library_id: str) -> None:
    exercise = assert_library_ownership(db, library_id, coach_id)
    db.delete(exercise)
    db.commit()
    logger.info("Library exercise %s deleted", library_id)
