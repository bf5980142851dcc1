"""
Tests for the HTTP layer.

Tests cover:
- The action envelope for success and failure
- Bearer token and coach role checks
- End-to-end planner, enrollment and review flows
"""

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

import programs
from auth import create_access_token
from main import app


PROGRAM_BODY = {
    "title": "Engine Builder",
    "type": "SINGLE",
    "difficulty": "BEGINNER",
    "duration_weeks": 4,
    "days_per_week": 3,
    "access_period_days": 60,
    "curriculum": [{"title": "Week 1", "description": "Base"}],
}


# ============================================================================
# Envelope & auth
# ============================================================================

class TestEnvelope:

    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_missing_token(self, client):
        response = client.get("/api/programs")

        assert response.status_code == 401
        assert response.json() == {"success": False, "data": None, "message": "Not authenticated."}

    def test_invalid_token(self, client):
        response = client.get("/api/programs", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_expired_token(self, client, coach):
        token = create_access_token({"sub": coach.id, "role": "COACH"}, expires_delta=timedelta(seconds=-5))
        response = client.get("/api/programs", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_member_cannot_create_program(self, client, member_headers):
        response = client.post("/api/programs", json=PROGRAM_BODY, headers=member_headers)

        assert response.status_code == 403
        assert response.json()["success"] is False

    def test_body_validation_names_field(self, client, coach_headers, program):
        response = client.post(
            f"/api/programs/{program.id}/phases",
            json={"phase_number": 1, "day_count": 9},
            headers=coach_headers,
        )

        assert response.status_code == 422
        body = response.json()
        assert body["success"] is False
        assert "day_count" in body["message"]

    def test_foreign_program_is_forbidden(self, client, other_coach_headers, program):
        response = client.get(f"/api/programs/{program.id}/plan", headers=other_coach_headers)

        assert response.status_code == 403
        assert response.json()["message"] == "You do not have permission to do this."


# ============================================================================
# Programs
# ============================================================================

class TestPrograms:

    def test_create_list_update(self, client, coach_headers):
        created = client.post("/api/programs", json=PROGRAM_BODY, headers=coach_headers).json()

        assert created["success"] is True
        program = created["data"]
        assert program["slug"].startswith("engine-builder-")
        assert program["curriculum"] == [{"title": "Week 1", "description": "Base"}]

        listed = client.get("/api/programs", headers=coach_headers).json()["data"]
        assert [item["id"] for item in listed] == [program["id"]]

        updated = client.put(
            f"/api/programs/{program['id']}", json={"is_public": True}, headers=coach_headers,
        ).json()["data"]
        assert updated["is_public"] is True
        assert updated["title"] == "Engine Builder"

        public = client.get("/api/programs/public").json()["data"]
        assert [item["id"] for item in public] == [program["id"]]

    @pytest.mark.parametrize("field", ["title", "type", "duration_weeks", "is_public"])
    def test_clearing_required_field_names_it(self, client, coach_headers, program, field):
        response = client.put(f"/api/programs/{program.id}", json={field: None}, headers=coach_headers)

        assert response.status_code == 422
        body = response.json()
        assert body["success"] is False
        assert field in body["message"]

        current = client.get(f"/api/programs/{program.id}", headers=coach_headers).json()["data"]
        assert current["title"] == program.title


# ============================================================================
# Planner flow
# ============================================================================

class TestPlannerFlow:

    def create_block(self, client, headers, name):
        response = client.post(
            "/api/routine-blocks", json={"name": name, "workout_format": "AMRAP"}, headers=headers,
        )
        return response.json()["data"]["id"]

    def test_phase_blocks_and_reorder(self, client, coach_headers, program):
        days = client.post(
            f"/api/programs/{program.id}/phases",
            json={"phase_number": 1, "day_count": 3},
            headers=coach_headers,
        ).json()["data"]
        assert [day["day_number"] for day in days] == [1, 2, 3]
        day_id = days[0]["id"]

        block_ids = [self.create_block(client, coach_headers, name) for name in ("Fran", "Cindy", "Grace")]
        for block_id in block_ids:
            response = client.post(
                f"/api/blueprints/{day_id}/blocks", json={"block_id": block_id}, headers=coach_headers,
            )
            assert response.status_code == 200

        duplicate = client.post(
            f"/api/blueprints/{day_id}/blocks", json={"block_id": block_ids[0]}, headers=coach_headers,
        )
        assert duplicate.status_code == 409

        new_order = list(reversed(block_ids))
        reordered = client.put(
            f"/api/blueprints/{day_id}/blocks/order", json={"ordered_ids": new_order}, headers=coach_headers,
        ).json()["data"]
        assert [block["id"] for block in reordered["blocks"]] == new_order

        plan = client.get(f"/api/programs/{program.id}/plan", headers=coach_headers).json()["data"]
        first_day = plan["phases"][0]["days"][0]
        assert [block["name"] for block in first_day["blocks"]] == ["Grace", "Cindy", "Fran"]
        assert first_day["is_rest_day"] is False
        assert plan["phases"][0]["days"][1]["is_rest_day"] is True

    def test_phase_conflict_and_day_limit(self, client, coach_headers, program):
        url = f"/api/programs/{program.id}/phases"
        client.post(url, json={"phase_number": 1, "day_count": 6}, headers=coach_headers)

        assert client.post(url, json={"phase_number": 1, "day_count": 2}, headers=coach_headers).status_code == 409
        assert client.post(f"{url}/1/days", headers=coach_headers).status_code == 200
        assert client.post(f"{url}/1/days", headers=coach_headers).status_code == 422

    def test_delete_phase_reports_next_selection(self, client, coach_headers, program):
        url = f"/api/programs/{program.id}/phases"
        client.post(url, json={"phase_number": 1, "day_count": 1}, headers=coach_headers)
        client.post(url, json={"phase_number": 2, "day_count": 1}, headers=coach_headers)

        result = client.delete(f"{url}/1", params={"selected_phase": 1}, headers=coach_headers).json()
        assert result["success"] is True
        assert result["data"] == {"deleted_count": 1, "selected_phase": 2}

    def test_missing_day_returns_null(self, client, coach_headers, program):
        response = client.get(f"/api/programs/{program.id}/phases/1/days/1", headers=coach_headers)
        assert response.json() == {"success": True, "data": None, "message": None}


# ============================================================================
# Enrollment and review flow
# ============================================================================

class TestMemberFlow:

    def test_enroll_log_review(self, client, db, coach_headers, member_headers, member, program, exercise):
        enrollment = client.post(
            f"/api/programs/{program.id}/members", json={"user_id": member.id}, headers=coach_headers,
        ).json()["data"]
        assert enrollment["status"] == "ACTIVE"
        assert enrollment["user"]["email"] == member.email

        extended = client.post(
            f"/api/enrollments/{enrollment['id']}/extend", json={"days": 10}, headers=coach_headers,
        )
        assert extended.status_code == 200

        bad_extend = client.post(
            f"/api/enrollments/{enrollment['id']}/extend", json={"days": 0}, headers=coach_headers,
        )
        assert bad_extend.status_code == 422

        day = client.post(
            f"/api/programs/{program.id}/phases", json={"phase_number": 1, "day_count": 1}, headers=coach_headers,
        ).json()["data"][0]

        log = client.post("/api/workout-logs", json={
            "library_id": exercise.id,
            "blueprint_id": day["id"],
            "log_date": "2024-05-01T07:30:00+09:00",
            "content": {"sets": [{"weight": 100, "reps": 5}]},
            "intensity": "HIGH",
        }, headers=member_headers).json()["data"]
        assert log["max_weight"] == 100
        assert log["log_date"].startswith("2024-04-30T22:30:00")

        commented = client.put(
            f"/api/workout-logs/{log['id']}/comment", json={"comment": "Solid"}, headers=coach_headers,
        ).json()["data"]
        assert commented["coach_comment"] == "Solid"

        member_attempt = client.put(
            f"/api/workout-logs/{log['id']}/comment", json={"comment": "Self review"}, headers=member_headers,
        )
        assert member_attempt.status_code == 403

        submissions = client.get(
            f"/api/programs/{program.id}/homework/1/1", headers=coach_headers,
        ).json()["data"]
        assert submissions[0]["rank"] == 1
        assert submissions[0]["medal"] == "GOLD"

        homework = client.get(f"/api/programs/{program.id}/homework", headers=coach_headers).json()["data"]
        assert homework["stats"] == {"total": 1, "pending": 1, "completed": 0}
        assert homework["available_days"][0]["label"] == "P1-D1"

        mine = client.get("/api/me/performance", headers=member_headers).json()["data"]
        assert mine["exercises"][0]["current_pr"] == 100
        assert mine["big_three"]["squat"]["exercise_id"] == exercise.id

        coach_view = client.get(
            f"/api/programs/{program.id}/members/{member.id}/performance", headers=coach_headers,
        ).json()["data"]
        assert coach_view["intensity"]["high"] == 1

    def test_null_content_keeps_log_readable(self, client, member_headers, exercise):
        log = client.post("/api/workout-logs", json={
            "library_id": exercise.id,
            "log_date": "2024-05-01T07:30:00",
            "content": {"sets": [{"weight": 80, "reps": 3}]},
            "intensity": "MEDIUM",
        }, headers=member_headers).json()["data"]

        response = client.put(f"/api/workout-logs/{log['id']}", json={"content": None}, headers=member_headers)
        assert response.status_code == 422
        assert "content" in response.json()["message"]

        fetched = client.get(f"/api/workout-logs/{log['id']}", headers=member_headers)
        assert fetched.status_code == 200
        assert fetched.json()["data"]["max_weight"] == 80
        assert client.get("/api/me/workout-logs", headers=member_headers).status_code == 200

    def test_member_stats_and_expiring(self, client, coach_headers, enrollment, program):
        stats = client.get(f"/api/programs/{program.id}/members/stats", headers=coach_headers).json()["data"]
        assert stats == {"active": 1, "expired": 0, "paused": 0, "total": 1}

        expiring = client.get(
            f"/api/programs/{program.id}/members/expiring", params={"days": 7}, headers=coach_headers,
        ).json()["data"]
        assert expiring == []

    def test_start_date_after_end_date(self, client, coach_headers, enrollment):
        url = f"/api/enrollments/{enrollment.id}"
        client.put(f"{url}/end-date", json={"date": "2024-06-30T00:00:00"}, headers=coach_headers)

        response = client.put(f"{url}/start-date", json={"date": "2024-07-01T00:00:00"}, headers=coach_headers)
        assert response.status_code == 422
        assert response.json()["success"] is False


@pytest.mark.parametrize("path", ["/api/me/enrollments", "/api/me/workout-logs", "/api/library"])
def test_member_reads_start_empty(client, member_headers, path):
    body = client.get(path, headers=member_headers).json()
    assert body["success"] is True


def test_unexpected_error_is_hidden(client, coach_headers, monkeypatch, caplog):
    def fail(*args, **kwargs):
        raise RuntimeError("connection reset")

    monkeypatch.setattr(programs, "list_my_programs", fail)
    quiet_client = TestClient(app, raise_server_exceptions=False)

    response = quiet_client.get("/api/programs", headers=coach_headers)

    assert response.status_code == 500
    assert response.json() == {
        "success": False, "data": None, "message": "Something went wrong. Please try again.",
    }
    assert "LIST_MY_PROGRAMS_ERROR" in caplog.text
