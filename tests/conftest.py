"""
Shared fixtures: an in-memory database, users with bearer tokens, and a
program owned by the coach.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from auth import create_access_token
from database import Base, get_db
from main import app
from models import (
    Difficulty, Enrollment, EnrollmentStatus, ProgramType, RoutineBlock, User, UserRole,
    WorkoutFormat, WorkoutLibrary, WorkoutType,
)
from programs import create_program
from schemas import ProgramCreate


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def _user(db, email, role, full_name=None):
    user = User(email=email, full_name=full_name, role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def coach(db):
    return _user(db, "coach@example.com", UserRole.COACH, "Head Coach")


@pytest.fixture
def other_coach(db):
    return _user(db, "other@example.com", UserRole.COACH, "Other Coach")


@pytest.fixture
def member(db):
    return _user(db, "member@example.com", UserRole.USER, "Kim Member")


def auth_headers(user):
    token = create_access_token({"sub": user.id, "role": user.role.value})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def coach_headers(coach):
    return auth_headers(coach)


@pytest.fixture
def other_coach_headers(other_coach):
    return auth_headers(other_coach)


@pytest.fixture
def member_headers(member):
    return auth_headers(member)


@pytest.fixture
def program(db, coach):
    return create_program(db, coach.id, ProgramCreate(
        title="Hybrid Strength 8 Weeks",
        type=ProgramType.SUBSCRIPTION,
        difficulty=Difficulty.INTERMEDIATE,
        duration_weeks=8,
        days_per_week=5,
        access_period_days=30,
    ))


@pytest.fixture
def enrollment(db, program, member):
    enrollment = Enrollment(user_id=member.id, program_id=program.id, status=EnrollmentStatus.ACTIVE)
    db.add(enrollment)
    db.commit()
    db.refresh(enrollment)
    return enrollment


@pytest.fixture
def exercise(db):
    exercise = WorkoutLibrary(title="Back Squat", category="Legs", workout_type=WorkoutType.WEIGHT_REPS)
    db.add(exercise)
    db.commit()
    db.refresh(exercise)
    return exercise


@pytest.fixture
def make_block(db, coach):
    def _make(name="Block", coach_id=None):
        block = RoutineBlock(
            coach_id=coach_id or coach.id,
            name=name,
            workout_format=WorkoutFormat.STRENGTH,
        )
        db.add(block)
        db.commit()
        db.refresh(block)
        return block
    return _make
