from datetime import datetime, timezone
from typing import Annotated, Any, Dict, Generic, List, Optional, TypeVar

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from models import (
    Difficulty, EnrollmentStatus, Intensity, LiftTag, ProgramType, SectionRecordType,
    UserRole, WorkoutFormat, WorkoutType,
)

T = TypeVar("T")


def _to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


# Timestamps are compared against naive UTC columns
UtcDateTime = Annotated[datetime, AfterValidator(_to_naive_utc)]


# --- Action envelope ---
class ActionResult(BaseModel, Generic[T]):
    success: bool
    data: Optional[T] = None
    message: Optional[str] = None


class Page(BaseModel, Generic[T]):
    items: List[T]
    total_count: int
    total_pages: int
    current_page: int
    page_size: int


# --- Token ---
class TokenData(BaseModel):
    user_id: str
    role: UserRole = UserRole.USER


class MemberRead(BaseModel):
    id: str
    email: str
    full_name: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)


# --- Program schemas ---
class CurriculumEntry(BaseModel):
    title: str
    description: str = ""


class ProgramBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    type: ProgramType
    difficulty: Difficulty
    duration_weeks: int = Field(..., ge=1, le=52)
    days_per_week: int = Field(..., ge=1, le=7)
    price: int = Field(0, ge=0)
    access_period_days: Optional[int] = Field(None, ge=1)
    description: Optional[str] = None
    curriculum: List[CurriculumEntry] = []
    program_image: Optional[str] = None
    is_public: bool = False
    is_for_sale: bool = False


class ProgramCreate(ProgramBase):
    pass


class ProgramRead(ProgramBase):
    id: str
    coach_id: str
    slug: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class ProgramUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    type: Optional[ProgramType] = None
    difficulty: Optional[Difficulty] = None
    duration_weeks: Optional[int] = Field(None, ge=1, le=52)
    days_per_week: Optional[int] = Field(None, ge=1, le=7)
    price: Optional[int] = Field(None, ge=0)
    access_period_days: Optional[int] = Field(None, ge=1)
    description: Optional[str] = None
    curriculum: Optional[List[CurriculumEntry]] = None
    program_image: Optional[str] = None
    is_public: Optional[bool] = None
    is_for_sale: Optional[bool] = None


# --- Planner schemas ---
class PhaseCreate(BaseModel):
    phase_number: int = Field(..., ge=1)
    day_count: int = Field(..., ge=1, le=7)


class BlueprintUpdate(BaseModel):
    """Partial update; an explicit null clears the field."""
    day_title: Optional[str] = Field(None, max_length=200)
    notes: Optional[str] = None


class BlockAssign(BaseModel):
    block_id: str


class OrderUpdate(BaseModel):
    ordered_ids: List[str]


class SectionCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = ""
    record_type: SectionRecordType = SectionRecordType.OTHER
    is_recordable: bool = False


class SectionUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    content: Optional[str] = None
    record_type: Optional[SectionRecordType] = None
    is_recordable: Optional[bool] = None


class SectionRead(BaseModel):
    id: str
    title: str
    content: str
    record_type: SectionRecordType
    is_recordable: bool
    model_config = ConfigDict(from_attributes=True)


class BlockSummary(BaseModel):
    id: str
    name: str
    workout_format: WorkoutFormat
    target_value: Optional[str] = None
    description: Optional[str] = None
    is_leaderboard_enabled: bool
    model_config = ConfigDict(from_attributes=True)


class BlueprintRead(BaseModel):
    id: str
    program_id: str
    phase_number: int
    day_number: int
    day_title: Optional[str] = None
    notes: Optional[str] = None
    is_rest_day: bool
    blocks: List[BlockSummary] = []
    sections: List[SectionRead] = []
    created_at: datetime
    updated_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class PhaseRead(BaseModel):
    phase_number: int
    days: List[BlueprintRead]


class ProgramPlanData(BaseModel):
    program_id: str
    program_title: str
    duration_weeks: int
    days_per_week: int
    phases: List[PhaseRead]
    # Blueprint ids of every day in plan order, in rows of seven
    calendar: List[List[str]] = []


class PhaseDeleteResult(BaseModel):
    deleted_count: int
    # Phase the planner should show next, None when no phase is left
    selected_phase: Optional[int] = None


# --- Routine block schemas ---
class RoutineBlockCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    workout_format: WorkoutFormat
    target_value: Optional[str] = None
    description: Optional[str] = None
    is_leaderboard_enabled: bool = False


class RoutineBlockUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    workout_format: Optional[WorkoutFormat] = None
    target_value: Optional[str] = None
    description: Optional[str] = None
    is_leaderboard_enabled: Optional[bool] = None


class RoutineItemCreate(BaseModel):
    library_id: str
    recommendation: Optional[Dict[str, Any]] = None


class RoutineItemUpdate(BaseModel):
    recommendation: Optional[Dict[str, Any]] = None


class RoutineItemRead(BaseModel):
    id: str
    block_id: str
    library_id: Optional[str] = None
    library_title: Optional[str] = None
    order_index: int
    recommendation: Optional[Dict[str, Any]] = None
    model_config = ConfigDict(from_attributes=True)


class RoutineBlockRead(BaseModel):
    id: str
    coach_id: str
    name: str
    workout_format: WorkoutFormat
    target_value: Optional[str] = None
    description: Optional[str] = None
    is_leaderboard_enabled: bool
    item_count: int
    items: List[RoutineItemRead] = []
    created_at: datetime
    updated_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


# --- Exercise library schemas ---
class LibraryExerciseCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    category: Optional[str] = Field(None, max_length=50)
    workout_type: WorkoutType = WorkoutType.WEIGHT_REPS
    lift_tag: Optional[LiftTag] = None
    video_url: Optional[str] = None
    description: Optional[str] = None


class LibraryExerciseUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    category: Optional[str] = Field(None, max_length=50)
    workout_type: Optional[WorkoutType] = None
    lift_tag: Optional[LiftTag] = None
    video_url: Optional[str] = None
    description: Optional[str] = None


class LibraryExerciseRead(BaseModel):
    id: str
    coach_id: Optional[str] = None
    title: str
    category: Optional[str] = None
    workout_type: WorkoutType
    lift_tag: Optional[LiftTag] = None
    video_url: Optional[str] = None
    description: Optional[str] = None
    is_system: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


# --- Enrollment schemas ---
class EnrollmentGrant(BaseModel):
    user_id: str


class EnrollmentStatusUpdate(BaseModel):
    status: EnrollmentStatus


class EnrollmentDateUpdate(BaseModel):
    """A null date clears the field."""
    date: Optional[UtcDateTime] = None


class EnrollmentExtend(BaseModel):
    days: int = Field(..., ge=1, le=3650)


class EnrollmentRead(BaseModel):
    id: str
    user_id: str
    program_id: str
    status: EnrollmentStatus
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    user: Optional[MemberRead] = None
    model_config = ConfigDict(from_attributes=True)


class MemberStats(BaseModel):
    active: int = 0
    expired: int = 0
    paused: int = 0
    total: int = 0


# --- Workout log schemas ---
class WorkoutLogCreate(BaseModel):
    library_id: str
    blueprint_id: Optional[str] = None
    log_date: UtcDateTime
    content: Dict[str, Any] = {}
    intensity: Intensity


class WorkoutLogUpdate(BaseModel):
    log_date: Optional[UtcDateTime] = None
    content: Optional[Dict[str, Any]] = None
    intensity: Optional[Intensity] = None


class WorkoutLogRead(BaseModel):
    id: str
    user_id: str
    library_id: Optional[str] = None
    blueprint_id: Optional[str] = None
    log_date: datetime
    content: Dict[str, Any] = {}
    intensity: Optional[Intensity] = None
    max_weight: float = 0
    total_volume: float = 0
    total_duration: Optional[int] = None
    coach_comment: Optional[str] = None
    is_checked_by_coach: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class CoachCommentUpdate(BaseModel):
    comment: Optional[str] = Field(None, max_length=2000)


class MemberLogs(BaseModel):
    member: MemberRead
    logs: List[WorkoutLogRead]


class HomeworkSubmission(BaseModel):
    rank: int
    # GOLD / SILVER / BRONZE for the first three, None after that
    medal: Optional[str] = None
    member: MemberRead
    log: WorkoutLogRead


class HomeworkStats(BaseModel):
    total: int = 0
    pending: int = 0
    completed: int = 0


class HomeworkDay(BaseModel):
    phase_number: int
    day_number: int
    label: str


class HomeworkPageData(BaseModel):
    program_id: str
    program_title: str
    total_weeks: int
    stats: HomeworkStats
    available_days: List[HomeworkDay]


# --- Performance schemas ---
class PRRecordRead(BaseModel):
    date: datetime
    weight: float
    reps: float
    volume: float
    log_id: str
    model_config = ConfigDict(from_attributes=True)


class GrowthTrendRead(BaseModel):
    trend: str
    change_percent: float
    current_weight: float
    previous_weight: float
    model_config = ConfigDict(from_attributes=True)


class ExerciseProgressRead(BaseModel):
    exercise_id: str
    exercise_name: str
    category: Optional[str] = None
    lift_tag: Optional[LiftTag] = None
    current_pr: float
    history: List[PRRecordRead]
    growth_rate: float
    total_workouts: int
    trend: Optional[GrowthTrendRead] = None
    model_config = ConfigDict(from_attributes=True)


class BigThreeRead(BaseModel):
    bench: Optional[ExerciseProgressRead] = None
    deadlift: Optional[ExerciseProgressRead] = None
    squat: Optional[ExerciseProgressRead] = None
    model_config = ConfigDict(from_attributes=True)


class HyroxRead(BaseModel):
    run: Optional[ExerciseProgressRead] = None
    ski_erg: Optional[ExerciseProgressRead] = None
    sled_push: Optional[ExerciseProgressRead] = None
    sled_pull: Optional[ExerciseProgressRead] = None
    burpee_broad_jump: Optional[ExerciseProgressRead] = None
    rowing: Optional[ExerciseProgressRead] = None
    farmers_carry: Optional[ExerciseProgressRead] = None
    sandbag_lunges: Optional[ExerciseProgressRead] = None
    model_config = ConfigDict(from_attributes=True)


class IntensityStatsRead(BaseModel):
    low: int
    medium: int
    high: int
    total: int
    model_config = ConfigDict(from_attributes=True)


class MonthlyFrequencyRead(BaseModel):
    month: str
    count: int
    model_config = ConfigDict(from_attributes=True)


class PerformanceSummaryRead(BaseModel):
    exercises: List[ExerciseProgressRead]
    big_three: BigThreeRead
    hyrox: HyroxRead
    intensity: IntensityStatsRead
    monthly_frequency: List[MonthlyFrequencyRead]
    model_config = ConfigDict(from_attributes=True)
