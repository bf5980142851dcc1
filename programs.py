import logging
import re
import uuid
from typing import List

from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from exceptions import ValidationError
from models import Program
from ownership import assert_program_ownership
from schemas import ProgramCreate, ProgramUpdate

logger = logging.getLogger(__name__)

# Columns a coach may change but never clear
REQUIRED_FIELDS = (
    "title", "type", "difficulty", "duration_weeks", "days_per_week", "price", "is_public", "is_for_sale",
)


def make_slug(title: str) -> str:
    base = re.sub(r"[^\w]+", "-", title.strip().lower(), flags=re.UNICODE).strip("-") or "program"
    return f"{base[:60]}-{uuid.uuid4().hex[:8]}"


def create_program(db: Session, coach_id: str, data: ProgramCreate) -> Program:
    program = Program(**data.model_dump(), coach_id=coach_id, slug=make_slug(data.title))
    db.add(program)
    db.commit()
    db.refresh(program)
    logger.info("Program %s created by %s", program.id, coach_id)
    return program


def update_program(db: Session, coach_id: str, program_id: str, data: ProgramUpdate) -> Program:
    program = assert_program_ownership(db, program_id, coach_id)

    update_data = data.model_dump(exclude_unset=True)
    for key, value in update_data.items():
        if value is None and key in REQUIRED_FIELDS:
            raise ValidationError(f"{key} cannot be empty.", field=key)

    for key, value in update_data.items():
        setattr(program, key, value)

    db.commit()
    db.refresh(program)
    logger.info("Program %s updated (%s)", program.id, ", ".join(sorted(update_data)))
    return program


def get_program(db: Session, coach_id: str, program_id: str) -> Program:
    return assert_program_ownership(db, program_id, coach_id)


def list_my_programs(db: Session, coach_id: str) -> List[Program]:
    result = db.execute(
        select(Program)
        .where(Program.coach_id == coach_id)
        .order_by(desc(Program.created_at))
    )
    return list(result.scalars().all())


def list_public_programs(db: Session, skip: int = 0, limit: int = 12) -> List[Program]:
    result = db.execute(
        select(Program)
        .where(Program.is_public.is_(True))
        .order_by(desc(Program.created_at))
        .offset(skip)
        .limit(limit)
    )
    return list(result.scalars().all())
