"""
Program plan editing: the phase x day grid of blueprints, the routine
blocks assigned to each day, and each day's freeform sections.
"""

import logging
from itertools import groupby
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from config import get_settings
from exceptions import ConflictError, NotFoundError, ValidationError
from models import Blueprint, BlueprintRoutineBlock, BlueprintSection, BlueprintSectionItem
from ordering import apply_order, chunk, next_order_index
from ownership import (
    assert_block_ownership, assert_blueprint_ownership, assert_program_ownership,
    assert_section_ownership,
)
from schemas import (
    BlueprintRead, BlueprintUpdate, PhaseDeleteResult, PhaseRead, ProgramPlanData,
    SectionCreate, SectionUpdate,
)

logger = logging.getLogger(__name__)


def _phase_days(db: Session, program_id: str, phase_number: int) -> List[Blueprint]:
    result = db.execute(
        select(Blueprint)
        .where(Blueprint.program_id == program_id, Blueprint.phase_number == phase_number)
        .order_by(Blueprint.day_number)
    )
    return list(result.scalars().all())


def _program_days(db: Session, program_id: str) -> List[Blueprint]:
    result = db.execute(
        select(Blueprint)
        .where(Blueprint.program_id == program_id)
        .order_by(Blueprint.phase_number, Blueprint.day_number)
    )
    return list(result.scalars().all())


def _purge_orphan_sections(db: Session) -> None:
    db.flush()
    orphans = db.execute(
        select(BlueprintSection).where(~BlueprintSection.links.any())
    ).scalars().all()
    for section in orphans:
        db.delete(section)


# ========== READ ==========

def get_program_plan_data(db: Session, coach_id: str, program_id: str) -> ProgramPlanData:
    program = assert_program_ownership(db, program_id, coach_id)
    days = _program_days(db, program_id)

    phases = [
        PhaseRead(
            phase_number=phase_number,
            days=[BlueprintRead.model_validate(day) for day in phase_days],
        )
        for phase_number, phase_days in groupby(days, key=lambda day: day.phase_number)
    ]

    return ProgramPlanData(
        program_id=program.id,
        program_title=program.title,
        duration_weeks=program.duration_weeks,
        days_per_week=program.days_per_week,
        phases=phases,
        calendar=chunk([day.id for day in days], 7),
    )


def get_blueprint(
    db: Session, coach_id: str, program_id: str, phase_number: int, day_number: int
) -> Optional[Blueprint]:
    assert_program_ownership(db, program_id, coach_id)
    return db.execute(
        select(Blueprint).where(
            Blueprint.program_id == program_id,
            Blueprint.phase_number == phase_number,
            Blueprint.day_number == day_number,
        )
    ).scalar_one_or_none()


# ========== PHASES & DAYS ==========

def create_phase(
    db: Session, coach_id: str, program_id: str, phase_number: int, day_count: int
) -> List[Blueprint]:
    assert_program_ownership(db, program_id, coach_id)

    max_days = get_settings().max_days_per_phase
    if day_count < 1 or day_count > max_days:
        raise ValidationError(f"A phase must have between 1 and {max_days} days.", field="day_count")
    if _phase_days(db, program_id, phase_number):
        raise ConflictError(f"Phase {phase_number} already exists.")

    days = [
        Blueprint(program_id=program_id, phase_number=phase_number, day_number=day_number)
        for day_number in range(1, day_count + 1)
    ]
    db.add_all(days)
    db.commit()
    logger.info("Phase %s created with %s days in program %s", phase_number, day_count, program_id)
    return _phase_days(db, program_id, phase_number)


def add_day_to_phase(db: Session, coach_id: str, program_id: str, phase_number: int) -> Blueprint:
    assert_program_ownership(db, program_id, coach_id)

    days = _phase_days(db, program_id, phase_number)
    if not days:
        raise NotFoundError(f"Phase {phase_number} not found.")

    max_days = get_settings().max_days_per_phase
    new_day_number = max(day.day_number for day in days) + 1
    if new_day_number > max_days:
        raise ValidationError(f"A phase can have at most {max_days} days.", field="day_number")

    day = Blueprint(program_id=program_id, phase_number=phase_number, day_number=new_day_number)
    db.add(day)
    db.commit()
    db.refresh(day)
    logger.info("Day %s added to phase %s of program %s", new_day_number, phase_number, program_id)
    return day


def delete_phase(
    db: Session,
    coach_id: str,
    program_id: str,
    phase_number: int,
    selected_phase: Optional[int] = None,
) -> PhaseDeleteResult:
    assert_program_ownership(db, program_id, coach_id)

    days = _phase_days(db, program_id, phase_number)
    if not days:
        raise NotFoundError(f"Phase {phase_number} not found.")

    for day in days:
        db.delete(day)
    _purge_orphan_sections(db)
    db.commit()
    logger.info("Phase %s deleted from program %s (%s days)", phase_number, program_id, len(days))

    remaining = sorted({day.phase_number for day in _program_days(db, program_id)})
    if selected_phase is None or selected_phase == phase_number or selected_phase not in remaining:
        selected_phase = remaining[0] if remaining else None
    return PhaseDeleteResult(deleted_count=len(days), selected_phase=selected_phase)


def delete_day(db: Session, coach_id: str, blueprint_id: str) -> None:
    blueprint = assert_blueprint_ownership(db, blueprint_id, coach_id)
    db.delete(blueprint)
    _purge_orphan_sections(db)
    db.commit()
    logger.info("Blueprint %s deleted", blueprint_id)


def update_blueprint(db: Session, coach_id: str, blueprint_id: str, data: BlueprintUpdate) -> Blueprint:
    blueprint = assert_blueprint_ownership(db, blueprint_id, coach_id)

    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(blueprint, key, value)

    db.commit()
    db.refresh(blueprint)
    return blueprint


# ========== ROUTINE BLOCKS OF A DAY ==========

def assign_routine_block(db: Session, coach_id: str, blueprint_id: str, block_id: str) -> Blueprint:
    blueprint = assert_blueprint_ownership(db, blueprint_id, coach_id)
    assert_block_ownership(db, block_id, coach_id)

    if any(link.block_id == block_id for link in blueprint.block_links):
        raise ConflictError("This routine block is already assigned to the day.")

    blueprint.block_links.append(
        BlueprintRoutineBlock(block_id=block_id, order_index=next_order_index(blueprint.block_links))
    )
    db.commit()
    db.refresh(blueprint)
    logger.info("Routine block %s assigned to blueprint %s", block_id, blueprint_id)
    return blueprint


def unassign_routine_block(db: Session, coach_id: str, blueprint_id: str, block_id: str) -> Blueprint:
    blueprint = assert_blueprint_ownership(db, blueprint_id, coach_id)

    link = next((link for link in blueprint.block_links if link.block_id == block_id), None)
    if link is None:
        raise NotFoundError("This routine block is not assigned to the day.")

    blueprint.block_links.remove(link)
    db.commit()
    db.refresh(blueprint)
    logger.info("Routine block %s removed from blueprint %s", block_id, blueprint_id)
    return blueprint


def reorder_routine_blocks(
    db: Session, coach_id: str, blueprint_id: str, ordered_block_ids: List[str]
) -> Blueprint:
    blueprint = assert_blueprint_ownership(db, blueprint_id, coach_id)
    apply_order(blueprint.block_links, ordered_block_ids, key="block_id")
    db.commit()
    db.refresh(blueprint)
    return blueprint


def clear_routine_blocks(db: Session, coach_id: str, blueprint_id: str) -> Blueprint:
    blueprint = assert_blueprint_ownership(db, blueprint_id, coach_id)
    blueprint.block_links.clear()
    db.commit()
    db.refresh(blueprint)
    logger.info("Routine blocks cleared from blueprint %s", blueprint_id)
    return blueprint


# ========== SECTIONS OF A DAY ==========

def create_section(db: Session, coach_id: str, blueprint_id: str, data: SectionCreate) -> BlueprintSection:
    blueprint = assert_blueprint_ownership(db, blueprint_id, coach_id)

    section = BlueprintSection(**data.model_dump())
    blueprint.section_links.append(
        BlueprintSectionItem(section=section, order_index=next_order_index(blueprint.section_links))
    )
    db.commit()
    db.refresh(section)
    logger.info("Section %s created on blueprint %s", section.id, blueprint_id)
    return section


def update_section(db: Session, coach_id: str, section_id: str, data: SectionUpdate) -> BlueprintSection:
    section = assert_section_ownership(db, section_id, coach_id)

    for key, value in data.model_dump(exclude_unset=True).items():
        if value is None and key in ("title", "content", "record_type", "is_recordable"):
            raise ValidationError(f"{key} cannot be empty.", field=key)
        setattr(section, key, value)

    db.commit()
    db.refresh(section)
    return section


def delete_section(db: Session, coach_id: str, section_id: str) -> None:
    section = assert_section_ownership(db, section_id, coach_id)
    db.delete(section)
    db.commit()
    logger.info("Section %s deleted", section_id)


def reorder_sections(
    db: Session, coach_id: str, blueprint_id: str, ordered_section_ids: List[str]
) -> Blueprint:
    blueprint = assert_blueprint_ownership(db, blueprint_id, coach_id)
    apply_order(blueprint.section_links, ordered_section_ids, key="section_id")
    db.commit()
    db.refresh(blueprint)
    return blueprint
