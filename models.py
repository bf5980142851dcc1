import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON, Boolean, Column, DateTime, Enum, Float, ForeignKey, Integer, String, Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from database import Base


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    # Stored naive in UTC; SQLite drops tzinfo anyway
    return datetime.now(timezone.utc).replace(tzinfo=None)


class UserRole(str, enum.Enum):
    USER = "USER"
    COACH = "COACH"
    ADMIN = "ADMIN"


class ProgramType(str, enum.Enum):
    SINGLE = "SINGLE"
    SUBSCRIPTION = "SUBSCRIPTION"


class Difficulty(str, enum.Enum):
    BEGINNER = "BEGINNER"
    INTERMEDIATE = "INTERMEDIATE"
    ADVANCED = "ADVANCED"


class WorkoutFormat(str, enum.Enum):
    STRENGTH = "STRENGTH"
    FOR_TIME = "FOR_TIME"
    AMRAP = "AMRAP"
    EMOM = "EMOM"
    CUSTOM = "CUSTOM"


class WorkoutType(str, enum.Enum):
    WEIGHT_REPS = "WEIGHT_REPS"
    TIME = "TIME"
    DURATION = "DURATION"
    DISTANCE = "DISTANCE"


class LiftTag(str, enum.Enum):
    BENCH = "BENCH"
    DEADLIFT = "DEADLIFT"
    SQUAT = "SQUAT"
    RUN = "RUN"
    SKI_ERG = "SKI_ERG"
    SLED_PUSH = "SLED_PUSH"
    SLED_PULL = "SLED_PULL"
    BURPEE_BROAD_JUMP = "BURPEE_BROAD_JUMP"
    ROWING = "ROWING"
    FARMERS_CARRY = "FARMERS_CARRY"
    SANDBAG_LUNGES = "SANDBAG_LUNGES"


class SectionRecordType(str, enum.Enum):
    TIME_BASED = "TIME_BASED"
    WEIGHT_BASED = "WEIGHT_BASED"
    REP_BASED = "REP_BASED"
    DISTANCE_BASED = "DISTANCE_BASED"
    SURVEY = "SURVEY"
    CHECKLIST = "CHECKLIST"
    PHOTO = "PHOTO"
    OTHER = "OTHER"


class EnrollmentStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"
    PAUSED = "PAUSED"


class Intensity(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    email = Column(String, unique=True, index=True, nullable=False)
    full_name = Column(String, nullable=True)
    role = Column(Enum(UserRole), default=UserRole.USER, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    programs = relationship("Program", back_populates="coach", cascade="all, delete-orphan")
    enrollments = relationship("Enrollment", back_populates="user", cascade="all, delete-orphan")
    workout_logs = relationship("WorkoutLog", back_populates="user", cascade="all, delete-orphan")


class Program(Base):
    __tablename__ = "programs"

    id = Column(String(36), primary_key=True, default=new_id)
    coach_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    slug = Column(String, unique=True, nullable=False)
    type = Column(Enum(ProgramType), nullable=False)
    description = Column(Text, nullable=True)
    is_public = Column(Boolean, default=False, nullable=False)
    is_for_sale = Column(Boolean, default=False, nullable=False)
    price = Column(Integer, default=0, nullable=False)
    # None means lifetime access
    access_period_days = Column(Integer, nullable=True)
    difficulty = Column(Enum(Difficulty), nullable=False)
    duration_weeks = Column(Integer, nullable=False)
    days_per_week = Column(Integer, nullable=False)
    curriculum = Column(JSON, default=list)
    program_image = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    coach = relationship("User", back_populates="programs")
    blueprints = relationship("Blueprint", back_populates="program", cascade="all, delete-orphan")
    enrollments = relationship("Enrollment", back_populates="program", cascade="all, delete-orphan")


class Blueprint(Base):
    """One (phase, day) cell of a program plan."""

    __tablename__ = "program_blueprints"
    __table_args__ = (UniqueConstraint("program_id", "phase_number", "day_number"),)

    id = Column(String(36), primary_key=True, default=new_id)
    program_id = Column(String(36), ForeignKey("programs.id", ondelete="CASCADE"), nullable=False, index=True)
    phase_number = Column(Integer, nullable=False)
    day_number = Column(Integer, nullable=False)
    day_title = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    program = relationship("Program", back_populates="blueprints")
    block_links = relationship(
        "BlueprintRoutineBlock", back_populates="blueprint", cascade="all, delete-orphan",
        order_by="BlueprintRoutineBlock.order_index",
    )
    section_links = relationship(
        "BlueprintSectionItem", back_populates="blueprint", cascade="all, delete-orphan",
        order_by="BlueprintSectionItem.order_index",
    )
    # Logs survive their day being deleted, with blueprint_id nulled
    workout_logs = relationship("WorkoutLog", back_populates="blueprint")

    @property
    def blocks(self):
        return [link.block for link in self.block_links]

    @property
    def sections(self):
        return [link.section for link in self.section_links]

    @property
    def is_rest_day(self) -> bool:
        return len(self.block_links) == 0


class RoutineBlock(Base):
    __tablename__ = "routine_blocks"

    id = Column(String(36), primary_key=True, default=new_id)
    coach_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    workout_format = Column(Enum(WorkoutFormat), nullable=False)
    target_value = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    is_leaderboard_enabled = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    items = relationship(
        "RoutineItem", back_populates="block", cascade="all, delete-orphan",
        order_by="RoutineItem.order_index",
    )
    blueprint_links = relationship("BlueprintRoutineBlock", back_populates="block", cascade="all, delete-orphan")

    @property
    def item_count(self) -> int:
        return len(self.items)


class RoutineItem(Base):
    __tablename__ = "routine_items"

    id = Column(String(36), primary_key=True, default=new_id)
    block_id = Column(String(36), ForeignKey("routine_blocks.id", ondelete="CASCADE"), nullable=False, index=True)
    library_id = Column(String(36), ForeignKey("workout_library.id", ondelete="SET NULL"), nullable=True)
    order_index = Column(Integer, nullable=False, default=0)
    recommendation = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    block = relationship("RoutineBlock", back_populates="items")
    library = relationship("WorkoutLibrary", back_populates="routine_items")

    @property
    def library_title(self):
        return self.library.title if self.library else None


class BlueprintRoutineBlock(Base):
    __tablename__ = "blueprint_routine_blocks"
    __table_args__ = (UniqueConstraint("blueprint_id", "block_id"),)

    id = Column(String(36), primary_key=True, default=new_id)
    blueprint_id = Column(String(36), ForeignKey("program_blueprints.id", ondelete="CASCADE"), nullable=False, index=True)
    block_id = Column(String(36), ForeignKey("routine_blocks.id", ondelete="CASCADE"), nullable=False)
    order_index = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    blueprint = relationship("Blueprint", back_populates="block_links")
    block = relationship("RoutineBlock", back_populates="blueprint_links")


class BlueprintSection(Base):
    __tablename__ = "blueprint_sections"

    id = Column(String(36), primary_key=True, default=new_id)
    title = Column(String, nullable=False)
    # Rich-text HTML, stored as given
    content = Column(Text, nullable=False)
    record_type = Column(Enum(SectionRecordType), default=SectionRecordType.OTHER, nullable=False)
    is_recordable = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    links = relationship("BlueprintSectionItem", back_populates="section", cascade="all, delete-orphan")


class BlueprintSectionItem(Base):
    __tablename__ = "blueprint_section_items"

    id = Column(String(36), primary_key=True, default=new_id)
    blueprint_id = Column(String(36), ForeignKey("program_blueprints.id", ondelete="CASCADE"), nullable=False, index=True)
    section_id = Column(String(36), ForeignKey("blueprint_sections.id", ondelete="CASCADE"), nullable=False)
    order_index = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    blueprint = relationship("Blueprint", back_populates="section_links")
    section = relationship("BlueprintSection", back_populates="links")


class WorkoutLibrary(Base):
    __tablename__ = "workout_library"

    id = Column(String(36), primary_key=True, default=new_id)
    # None for system exercises
    coach_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    title = Column(String, nullable=False)
    category = Column(String, nullable=True)
    workout_type = Column(Enum(WorkoutType), default=WorkoutType.WEIGHT_REPS, nullable=False)
    lift_tag = Column(Enum(LiftTag), nullable=True)
    video_url = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    is_system = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    routine_items = relationship("RoutineItem", back_populates="library")
    workout_logs = relationship("WorkoutLog", back_populates="library")


class Enrollment(Base):
    __tablename__ = "enrollments"
    __table_args__ = (UniqueConstraint("user_id", "program_id"),)

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    program_id = Column(String(36), ForeignKey("programs.id", ondelete="CASCADE"), nullable=False, index=True)
    # Set later by the coach
    start_date = Column(DateTime, nullable=True)
    # None means unlimited
    end_date = Column(DateTime, nullable=True)
    status = Column(Enum(EnrollmentStatus), default=EnrollmentStatus.ACTIVE, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="enrollments")
    program = relationship("Program", back_populates="enrollments")


class WorkoutLog(Base):
    __tablename__ = "workout_logs"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    library_id = Column(String(36), ForeignKey("workout_library.id", ondelete="SET NULL"), nullable=True)
    blueprint_id = Column(String(36), ForeignKey("program_blueprints.id", ondelete="SET NULL"), nullable=True, index=True)
    log_date = Column(DateTime, nullable=False)
    content = Column(JSON, default=dict)
    intensity = Column(Enum(Intensity), nullable=True)

    # Summary fields for PRs and leaderboards, derived from content
    max_weight = Column(Float, nullable=False, default=0)
    total_volume = Column(Float, nullable=False, default=0)
    total_duration = Column(Integer, nullable=True)

    coach_comment = Column(Text, nullable=True)
    is_checked_by_coach = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="workout_logs")
    library = relationship("WorkoutLibrary", back_populates="workout_logs")
    blueprint = relationship("Blueprint", back_populates="workout_logs")
