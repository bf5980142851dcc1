"""
Authorization checks shared by every action.

Coach-facing lookups return the same "no permission" failure whether the
row is missing or owned by someone else, so callers cannot probe for ids.
"""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from exceptions import ForbiddenError, NotFoundError
from models import (
    Blueprint, BlueprintSection, BlueprintSectionItem, Enrollment, Program, RoutineBlock,
    RoutineItem, WorkoutLibrary, WorkoutLog,
)

logger = logging.getLogger(__name__)


def _deny(kind: str, entity_id: str, user_id: str):
    logger.warning("Denied %s %s for user %s", kind, entity_id, user_id)
    return ForbiddenError()


def assert_program_ownership(db: Session, program_id: str, user_id: str) -> Program:
    program = db.get(Program, program_id)
    if not program or program.coach_id != user_id:
        raise _deny("program", program_id, user_id)
    return program


def assert_blueprint_ownership(db: Session, blueprint_id: str, user_id: str) -> Blueprint:
    blueprint = db.get(Blueprint, blueprint_id)
    if not blueprint or blueprint.program.coach_id != user_id:
        raise _deny("blueprint", blueprint_id, user_id)
    return blueprint


def assert_section_ownership(db: Session, section_id: str, user_id: str) -> BlueprintSection:
    section = db.get(BlueprintSection, section_id)
    if section:
        # A section may be linked to several days; any one of them decides the owner
        link = db.execute(
            select(BlueprintSectionItem).where(BlueprintSectionItem.section_id == section_id).limit(1)
        ).scalar_one_or_none()
        if link and link.blueprint.program.coach_id == user_id:
            return section
    raise _deny("section", section_id, user_id)


def assert_block_ownership(db: Session, block_id: str, user_id: str) -> RoutineBlock:
    block = db.get(RoutineBlock, block_id)
    if not block or block.coach_id != user_id:
        raise _deny("routine block", block_id, user_id)
    return block


def assert_item_ownership(db: Session, item_id: str, user_id: str) -> RoutineItem:
    item = db.get(RoutineItem, item_id)
    if not item or item.block.coach_id != user_id:
        raise _deny("routine item", item_id, user_id)
    return item


def assert_library_ownership(db: Session, library_id: str, user_id: str) -> WorkoutLibrary:
    """System exercises have no coach and can never be edited."""
    exercise = db.get(WorkoutLibrary, library_id)
    if not exercise or exercise.coach_id != user_id:
        raise _deny("library exercise", library_id, user_id)
    return exercise


def assert_log_owner(db: Session, log_id: str, user_id: str) -> WorkoutLog:
    log = db.get(WorkoutLog, log_id)
    if not log:
        raise NotFoundError("Workout log not found.")
    if log.user_id != user_id:
        raise _deny("workout log", log_id, user_id)
    return log


def assert_log_reviewer(db: Session, log_id: str, user_id: str) -> WorkoutLog:
    """
    The reviewer of a log is the coach of the program its day belongs to.
    Logs without a day have no reviewer.
    """
    log = db.get(WorkoutLog, log_id)
    if not log:
        raise NotFoundError("Workout log not found.")
    if log.blueprint is None or log.blueprint.program.coach_id != user_id:
        raise _deny("log review", log_id, user_id)
    return log


def assert_enrollment_ownership(db: Session, enrollment_id: str, user_id: str) -> Enrollment:
    enrollment = db.get(Enrollment, enrollment_id)
    if not enrollment or enrollment.program.coach_id != user_id:
        raise _deny("enrollment", enrollment_id, user_id)
    return enrollment


def get_member_enrollment(db: Session, program_id: str, member_id: str) -> Enrollment:
    enrollment = db.execute(
        select(Enrollment).where(
            Enrollment.program_id == program_id,
            Enrollment.user_id == member_id,
        )
    ).scalar_one_or_none()
    if not enrollment:
        raise NotFoundError("Member not found in this program.")
    return enrollment
