"""
Member enrollments of a program and their coach-side management.

Status is an open enum: a coach may move an enrollment between ACTIVE,
EXPIRED and PAUSED in any direction.
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import desc, func, or_, select
from sqlalchemy.orm import Session

from config import get_settings
from exceptions import ConflictError, NotFoundError, ValidationError
from models import Enrollment, EnrollmentStatus, User, utcnow
from ownership import assert_enrollment_ownership, assert_program_ownership, get_member_enrollment
from schemas import MemberStats

logger = logging.getLogger(__name__)


def grant_enrollment(db: Session, coach_id: str, program_id: str, user_id: str) -> Enrollment:
    program = assert_program_ownership(db, program_id, coach_id)

    if not db.get(User, user_id):
        raise NotFoundError("User not found.")

    existing = db.execute(
        select(Enrollment).where(Enrollment.program_id == program_id, Enrollment.user_id == user_id)
    ).scalar_one_or_none()
    if existing:
        raise ConflictError("This user is already enrolled in the program.")

    end_date = None
    if program.access_period_days:
        end_date = utcnow() + timedelta(days=program.access_period_days)

    enrollment = Enrollment(
        user_id=user_id,
        program_id=program_id,
        status=EnrollmentStatus.ACTIVE,
        end_date=end_date,
    )
    db.add(enrollment)
    db.commit()
    db.refresh(enrollment)
    logger.info("Enrollment %s granted to %s in program %s", enrollment.id, user_id, program_id)
    return enrollment


def list_members(
    db: Session, coach_id: str, program_id: str, search: Optional[str] = None
) -> List[Enrollment]:
    assert_program_ownership(db, program_id, coach_id)

    query = (
        select(Enrollment)
        .join(User, Enrollment.user_id == User.id)
        .where(Enrollment.program_id == program_id)
    )
    if search and search.strip():
        pattern = f"%{search.strip()}%"
        query = query.where(or_(User.full_name.ilike(pattern), User.email.ilike(pattern)))

    return list(db.execute(query.order_by(desc(Enrollment.created_at))).scalars().all())


def get_member_detail(db: Session, coach_id: str, program_id: str, member_id: str) -> Enrollment:
    assert_program_ownership(db, program_id, coach_id)
    return get_member_enrollment(db, program_id, member_id)


def list_my_enrollments(db: Session, user_id: str) -> List[Enrollment]:
    result = db.execute(
        select(Enrollment)
        .where(Enrollment.user_id == user_id)
        .order_by(desc(Enrollment.created_at))
    )
    return list(result.scalars().all())


def update_enrollment_status(
    db: Session, coach_id: str, enrollment_id: str, status: EnrollmentStatus
) -> Enrollment:
    enrollment = assert_enrollment_ownership(db, enrollment_id, coach_id)
    enrollment.status = status
    db.commit()
    db.refresh(enrollment)
    logger.info("Enrollment %s set to %s", enrollment_id, status.value)
    return enrollment


def update_enrollment_start_date(
    db: Session, coach_id: str, enrollment_id: str, start_date: Optional[datetime]
) -> Enrollment:
    enrollment = assert_enrollment_ownership(db, enrollment_id, coach_id)

    if start_date and enrollment.end_date and start_date > enrollment.end_date:
        raise ValidationError("Start date cannot be after the end date.", field="start_date")

    enrollment.start_date = start_date
    db.commit()
    db.refresh(enrollment)
    logger.info("Enrollment %s start date set to %s", enrollment_id, start_date)
    return enrollment


def update_enrollment_end_date(
    db: Session, coach_id: str, enrollment_id: str, end_date: Optional[datetime]
) -> Enrollment:
    enrollment = assert_enrollment_ownership(db, enrollment_id, coach_id)

    if end_date and enrollment.start_date and end_date < enrollment.start_date:
        raise ValidationError("End date cannot be before the start date.", field="end_date")

    enrollment.end_date = end_date
    db.commit()
    db.refresh(enrollment)
    logger.info("Enrollment %s end date set to %s", enrollment_id, end_date)
    return enrollment


def extend_enrollment(db: Session, coach_id: str, enrollment_id: str, days: int) -> Enrollment:
    """Push the end date ``days`` forward from the current end date, or from now when unlimited."""
    if days < 1:
        raise ValidationError("Extension must be at least one day.", field="days")

    enrollment = assert_enrollment_ownership(db, enrollment_id, coach_id)
    enrollment.end_date = (enrollment.end_date or utcnow()) + timedelta(days=days)
    db.commit()
    db.refresh(enrollment)
    logger.info("Enrollment %s extended by %s days", enrollment_id, days)
    return enrollment


def get_member_stats(db: Session, coach_id: str, program_id: str) -> MemberStats:
    assert_program_ownership(db, program_id, coach_id)

    rows = db.execute(
        select(Enrollment.status, func.count(Enrollment.id))
        .where(Enrollment.program_id == program_id)
        .group_by(Enrollment.status)
    ).all()

    stats = MemberStats()
    for status, count in rows:
        setattr(stats, status.value.lower(), count)
        stats.total += count
    return stats


def get_expiring_enrollments(
    db: Session, coach_id: str, program_id: str, days_until_expiry: Optional[int] = None
) -> List[Enrollment]:
    """ACTIVE enrollments whose end date falls in the next ``days_until_expiry`` days."""
    assert_program_ownership(db, program_id, coach_id)

    if days_until_expiry is None:
        days_until_expiry = get_settings().expiring_default_days
    now = utcnow()

    result = db.execute(
        select(Enrollment)
        .where(
            Enrollment.program_id == program_id,
            Enrollment.status == EnrollmentStatus.ACTIVE,
            Enrollment.end_date.is_not(None),
            Enrollment.end_date >= now,
            Enrollment.end_date <= now + timedelta(days=days_until_expiry),
        )
        .order_by(Enrollment.end_date)
    )
    return list(result.scalars().all())
