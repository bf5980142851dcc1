"""
Tests for workout logs, coach review and homework.
"""

from datetime import datetime

import pytest

import planner
import workout_logs
from exceptions import ForbiddenError, NotFoundError, ValidationError
from models import Enrollment, EnrollmentStatus, Intensity, User, UserRole, WorkoutLog
from schemas import WorkoutLogCreate, WorkoutLogUpdate
from workout_logs import summarize_content


@pytest.fixture
def days(db, coach, program):
    return planner.create_phase(db, coach.id, program.id, 1, 2)


def log_for(db, user_id, exercise, blueprint=None, content=None, log_date=datetime(2024, 3, 1)):
    return workout_logs.create_workout_log(db, user_id, WorkoutLogCreate(
        library_id=exercise.id,
        blueprint_id=blueprint.id if blueprint else None,
        log_date=log_date,
        content=content or {},
        intensity=Intensity.MEDIUM,
    ))


class TestSummarizeContent:

    def test_weight_sets(self):
        content = {"sets": [{"weight": 100, "reps": 5}, {"weight": "110", "reps": "3"}]}
        assert summarize_content(content) == (110, 830, None)

    def test_total_reps_replaces_volume(self):
        content = {"sets": [{"weight": 20, "reps": 10}], "totalReps": 150}
        max_weight, total_volume, _ = summarize_content(content)
        assert max_weight == 20
        assert total_volume == 150

    def test_duration(self):
        assert summarize_content({"durationSeconds": "754"}) == (0, 0, 754)

    def test_empty_and_malformed(self):
        assert summarize_content(None) == (0, 0, None)
        assert summarize_content({"sets": ["bad", {"weight": "heavy", "reps": 5}]}) == (0, 0, None)


class TestMemberLogs:

    def test_create_derives_summary(self, db, member, exercise):
        log = log_for(db, member.id, exercise, content={"sets": [{"weight": 60, "reps": 8}]})

        assert log.user_id == member.id
        assert log.max_weight == 60
        assert log.total_volume == 480
        assert log.is_checked_by_coach is False

    def test_summary_columns_default_to_zero(self, db, member):
        log = WorkoutLog(user_id=member.id, log_date=datetime(2024, 1, 1))
        db.add(log)
        db.commit()
        db.refresh(log)

        assert (log.max_weight, log.total_volume) == (0, 0)
        assert WorkoutLog.__table__.c.max_weight.nullable is False
        assert WorkoutLog.__table__.c.total_volume.nullable is False

    def test_day_log_requires_enrollment(self, db, member, exercise, days):
        with pytest.raises(ForbiddenError):
            log_for(db, member.id, exercise, days[0])

    def test_unknown_exercise_or_day(self, db, member, exercise):
        with pytest.raises(NotFoundError):
            workout_logs.create_workout_log(db, member.id, WorkoutLogCreate(
                library_id="missing", log_date=datetime(2024, 1, 1), intensity=Intensity.LOW,
            ))
        with pytest.raises(NotFoundError):
            workout_logs.create_workout_log(db, member.id, WorkoutLogCreate(
                library_id=exercise.id, blueprint_id="missing",
                log_date=datetime(2024, 1, 1), intensity=Intensity.LOW,
            ))

    def test_list_newest_first(self, db, member, exercise):
        older = log_for(db, member.id, exercise, log_date=datetime(2024, 1, 1))
        newer = log_for(db, member.id, exercise, log_date=datetime(2024, 2, 1))

        assert [log.id for log in workout_logs.list_my_workout_logs(db, member.id)] == [newer.id, older.id]

    def test_update_recomputes_summary(self, db, member, exercise):
        log = log_for(db, member.id, exercise, content={"sets": [{"weight": 60, "reps": 8}]})

        updated = workout_logs.update_workout_log(db, member.id, log.id, WorkoutLogUpdate(
            content={"sets": [{"weight": 80, "reps": 2}]},
        ))
        assert updated.max_weight == 80
        assert updated.total_volume == 160

    def test_null_content_is_rejected(self, db, member, exercise):
        log = log_for(db, member.id, exercise, content={"sets": [{"weight": 60, "reps": 8}]})

        with pytest.raises(ValidationError) as excinfo:
            workout_logs.update_workout_log(db, member.id, log.id, WorkoutLogUpdate(content=None))
        assert excinfo.value.field == "content"

        db.refresh(log)
        assert log.content == {"sets": [{"weight": 60, "reps": 8}]}
        assert log.max_weight == 60

    def test_only_owner_can_edit(self, db, member, coach, exercise):
        log = log_for(db, member.id, exercise)

        with pytest.raises(ForbiddenError):
            workout_logs.update_workout_log(db, coach.id, log.id, WorkoutLogUpdate(content={}))
        with pytest.raises(ForbiddenError):
            workout_logs.delete_workout_log(db, coach.id, log.id)

        workout_logs.delete_workout_log(db, member.id, log.id)
        with pytest.raises(NotFoundError):
            workout_logs.get_workout_log(db, member.id, log.id)


class TestCoachReview:

    def test_comment_and_check(self, db, coach, member, exercise, days, enrollment):
        log = log_for(db, member.id, exercise, days[0])

        commented = workout_logs.update_coach_comment(db, coach.id, log.id, "  Great depth  ")
        assert commented.coach_comment == "Great depth"

        cleared = workout_logs.update_coach_comment(db, coach.id, log.id, "   ")
        assert cleared.coach_comment is None

        assert workout_logs.toggle_coach_check(db, coach.id, log.id).is_checked_by_coach is True
        assert workout_logs.toggle_coach_check(db, coach.id, log.id).is_checked_by_coach is False

    def test_log_without_day_has_no_reviewer(self, db, coach, member, exercise):
        log = log_for(db, member.id, exercise)

        with pytest.raises(ForbiddenError):
            workout_logs.update_coach_comment(db, coach.id, log.id, "Nice")
        with pytest.raises(ForbiddenError):
            workout_logs.toggle_coach_check(db, coach.id, log.id)

    def test_other_coach_cannot_review(self, db, other_coach, member, exercise, days, enrollment):
        log = log_for(db, member.id, exercise, days[0])

        with pytest.raises(ForbiddenError):
            workout_logs.update_coach_comment(db, other_coach.id, log.id, "Nice")

    def test_coach_can_read_members_day_log(self, db, coach, other_coach, member, exercise, days, enrollment):
        log = log_for(db, member.id, exercise, days[0])

        assert workout_logs.get_workout_log(db, coach.id, log.id).id == log.id
        with pytest.raises(ForbiddenError):
            workout_logs.get_workout_log(db, other_coach.id, log.id)

    def test_member_logs_for_program(self, db, coach, member, exercise, days, enrollment):
        day_log = log_for(db, member.id, exercise, days[0])
        log_for(db, member.id, exercise)

        result = workout_logs.list_member_workout_logs(db, coach.id, enrollment.program_id, member.id)
        assert result.member.id == member.id
        assert [log.id for log in result.logs] == [day_log.id]

    def test_member_must_be_enrolled(self, db, coach, program):
        with pytest.raises(NotFoundError):
            workout_logs.list_member_workout_logs(db, coach.id, program.id, "stranger")


class TestHomework:

    @pytest.fixture
    def athletes(self, db, program):
        users = []
        for index in range(4):
            user = User(email=f"athlete{index}@example.com", full_name=f"Athlete {index}", role=UserRole.USER)
            db.add(user)
            db.flush()
            db.add(Enrollment(user_id=user.id, program_id=program.id, status=EnrollmentStatus.ACTIVE))
            users.append(user)
        db.commit()
        return users

    def test_submissions_ranked_by_recency_with_medals(self, db, coach, program, exercise, days, athletes):
        logs = [log_for(db, athlete.id, exercise, days[0]) for athlete in athletes]
        log_for(db, athletes[0].id, exercise, days[1])

        submissions = workout_logs.get_homework_submissions(db, coach.id, program.id, 1, 1)

        assert [item.log.id for item in submissions] == [log.id for log in reversed(logs)]
        assert [item.rank for item in submissions] == [1, 2, 3, 4]
        assert [item.medal for item in submissions] == ["GOLD", "SILVER", "BRONZE", None]
        assert submissions[0].member.email == "athlete3@example.com"

    def test_stats_and_page_data(self, db, coach, program, exercise, days, athletes):
        logs = [log_for(db, athlete.id, exercise, days[0]) for athlete in athletes[:3]]
        workout_logs.toggle_coach_check(db, coach.id, logs[0].id)

        stats = workout_logs.get_homework_stats(db, coach.id, program.id)
        assert (stats.total, stats.pending, stats.completed) == (3, 2, 1)

        page = workout_logs.get_homework_page_data(db, coach.id, program.id)
        assert page.total_weeks == 8
        assert [day.label for day in page.available_days] == ["P1-D1", "P1-D2"]
        assert page.stats == stats

    def test_other_coach_cannot_see_homework(self, db, other_coach, program):
        with pytest.raises(ForbiddenError):
            workout_logs.get_homework_submissions(db, other_coach.id, program.id, 1, 1)
        with pytest.raises(ForbiddenError):
            workout_logs.get_homework_stats(db, other_coach.id, program.id)
