"""
Member workout logs, coach review, and the per-day homework leaderboard.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from exceptions import ForbiddenError, NotFoundError, ValidationError
from models import Blueprint, Enrollment, WorkoutLibrary, WorkoutLog
from ownership import (
    assert_log_owner, assert_log_reviewer, assert_program_ownership, get_member_enrollment,
)
from schemas import (
    HomeworkDay, HomeworkPageData, HomeworkStats, HomeworkSubmission, MemberLogs, MemberRead,
    WorkoutLogCreate, WorkoutLogRead, WorkoutLogUpdate,
)

logger = logging.getLogger(__name__)

MEDALS = ("GOLD", "SILVER", "BRONZE")


def _number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def summarize_content(content: Optional[Dict[str, Any]]) -> Tuple[float, float, Optional[int]]:
    """
    Derive ``(max_weight, total_volume, total_duration)`` from a log payload.

    ``content["sets"]`` is a list of ``{"weight", "reps"}`` entries. An
    explicit ``totalReps`` replaces the weight x reps volume, and
    ``durationSeconds`` becomes the duration.
    """
    content = content or {}
    sets = [entry for entry in content.get("sets") or [] if isinstance(entry, dict)]

    weights = [w for w in (_number(entry.get("weight")) for entry in sets) if w is not None]
    if not weights and _number(content.get("weight")) is not None:
        weights = [_number(content.get("weight"))]
    max_weight = max(weights) if weights else 0

    total_reps = _number(content.get("totalReps"))
    if total_reps is not None:
        total_volume = total_reps
    else:
        total_volume = sum(
            (_number(entry.get("weight")) or 0) * (_number(entry.get("reps")) or 0) for entry in sets
        )

    duration = _number(content.get("durationSeconds"))
    return max_weight, total_volume, int(duration) if duration is not None else None


def _apply_summary(log: WorkoutLog) -> None:
    log.max_weight, log.total_volume, log.total_duration = summarize_content(log.content)


# ========== MEMBER SIDE ==========

def create_workout_log(db: Session, user_id: str, data: WorkoutLogCreate) -> WorkoutLog:
    if not db.get(WorkoutLibrary, data.library_id):
        raise NotFoundError("Exercise not found.")

    if data.blueprint_id:
        blueprint = db.get(Blueprint, data.blueprint_id)
        if not blueprint:
            raise NotFoundError("Program day not found.")
        enrolled = db.execute(
            select(Enrollment).where(
                Enrollment.program_id == blueprint.program_id,
                Enrollment.user_id == user_id,
            )
        ).scalar_one_or_none()
        if not enrolled:
            logger.warning("User %s logged against blueprint %s without enrollment", user_id, blueprint.id)
            raise ForbiddenError("You are not enrolled in this program.")

    log = WorkoutLog(**data.model_dump(), user_id=user_id)
    _apply_summary(log)
    db.add(log)
    db.commit()
    db.refresh(log)
    logger.info("Workout log %s created by %s", log.id, user_id)
    return log


def list_my_workout_logs(db: Session, user_id: str) -> List[WorkoutLog]:
    result = db.execute(
        select(WorkoutLog)
        .where(WorkoutLog.user_id == user_id)
        .order_by(desc(WorkoutLog.log_date))
    )
    return list(result.scalars().all())


def get_workout_log(db: Session, user_id: str, log_id: str) -> WorkoutLog:
    """Readable by its owner and by the coach of the program it was logged against."""
    log = db.get(WorkoutLog, log_id)
    if log and log.user_id == user_id:
        return log
    return assert_log_reviewer(db, log_id, user_id)


def update_workout_log(db: Session, user_id: str, log_id: str, data: WorkoutLogUpdate) -> WorkoutLog:
    log = assert_log_owner(db, log_id, user_id)

    updates = data.model_dump(exclude_unset=True)
    if "content" in updates and updates["content"] is None:
        raise ValidationError("content cannot be empty.", field="content")

    for key, value in updates.items():
        if value is None and key == "log_date":
            continue
        setattr(log, key, value)
    _apply_summary(log)

    db.commit()
    db.refresh(log)
    logger.info("Workout log %s updated", log_id)
    return log


def delete_workout_log(db: Session, user_id: str, log_id: str) -> None:
    log = assert_log_owner(db, log_id, user_id)
    db.delete(log)
    db.commit()
    logger.info("Workout log %s deleted", log_id)


# ========== COACH REVIEW ==========

def update_coach_comment(db: Session, coach_id: str, log_id: str, comment: Optional[str]) -> WorkoutLog:
    log = assert_log_reviewer(db, log_id, coach_id)
    log.coach_comment = comment.strip() if comment and comment.strip() else None
    db.commit()
    db.refresh(log)
    logger.info("Coach comment on log %s updated by %s", log_id, coach_id)
    return log


def toggle_coach_check(db: Session, coach_id: str, log_id: str) -> WorkoutLog:
    log = assert_log_reviewer(db, log_id, coach_id)
    log.is_checked_by_coach = not log.is_checked_by_coach
    db.commit()
    db.refresh(log)
    logger.info("Log %s checked=%s by %s", log_id, log.is_checked_by_coach, coach_id)
    return log


def _program_logs(program_id: str):
    return (
        select(WorkoutLog)
        .join(Blueprint, WorkoutLog.blueprint_id == Blueprint.id)
        .where(Blueprint.program_id == program_id)
    )


def list_program_member_logs(db: Session, program_id: str, member_id: str) -> List[WorkoutLog]:
    result = db.execute(
        _program_logs(program_id)
        .where(WorkoutLog.user_id == member_id)
        .order_by(desc(WorkoutLog.log_date))
    )
    return list(result.scalars().all())


def get_member_performance_logs(db: Session, coach_id: str, program_id: str, member_id: str) -> List[WorkoutLog]:
    """A member's logs for one program, for its coach's performance view."""
    assert_program_ownership(db, program_id, coach_id)
    get_member_enrollment(db, program_id, member_id)
    return list_program_member_logs(db, program_id, member_id)


def list_member_workout_logs(db: Session, coach_id: str, program_id: str, member_id: str) -> MemberLogs:
    assert_program_ownership(db, program_id, coach_id)
    enrollment = get_member_enrollment(db, program_id, member_id)

    logs = list_program_member_logs(db, program_id, member_id)
    return MemberLogs(
        member=MemberRead.model_validate(enrollment.user),
        logs=[WorkoutLogRead.model_validate(log) for log in logs],
    )


# ========== HOMEWORK ==========

def get_homework_submissions(
    db: Session, coach_id: str, program_id: str, phase_number: int, day_number: int
) -> List[HomeworkSubmission]:
    """
    Logs submitted for one day, newest first. Rank is the list position;
    the first three get a medal.
    """
    assert_program_ownership(db, program_id, coach_id)

    logs = db.execute(
        _program_logs(program_id)
        .where(Blueprint.phase_number == phase_number, Blueprint.day_number == day_number)
        .order_by(desc(WorkoutLog.created_at))
    ).scalars().all()

    return [
        HomeworkSubmission(
            rank=position + 1,
            medal=MEDALS[position] if position < len(MEDALS) else None,
            member=MemberRead.model_validate(log.user),
            log=WorkoutLogRead.model_validate(log),
        )
        for position, log in enumerate(logs)
    ]


def get_homework_stats(db: Session, coach_id: str, program_id: str) -> HomeworkStats:
    assert_program_ownership(db, program_id, coach_id)

    logs = db.execute(_program_logs(program_id)).scalars().all()
    completed = sum(1 for log in logs if log.is_checked_by_coach)
    return HomeworkStats(total=len(logs), pending=len(logs) - completed, completed=completed)


def get_homework_page_data(db: Session, coach_id: str, program_id: str) -> HomeworkPageData:
    program = assert_program_ownership(db, program_id, coach_id)

    days = db.execute(
        select(Blueprint)
        .where(Blueprint.program_id == program_id)
        .order_by(Blueprint.phase_number, Blueprint.day_number)
    ).scalars().all()

    return HomeworkPageData(
        program_id=program.id,
        program_title=program.title,
        total_weeks=program.duration_weeks,
        stats=get_homework_stats(db, coach_id, program_id),
        available_days=[
            HomeworkDay(
                phase_number=day.phase_number,
                day_number=day.day_number,
                label=f"P{day.phase_number}-D{day.day_number}",
            )
            for day in days
        ],
    )
