import logging
from typing import List, Optional

from fastapi import Depends, FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

import enrollments
import library
import planner
import programs
import routines
import workout_logs
from auth import verify_token
from config import get_settings
from database import Base, engine, get_db
from exception_handlers import register_exception_handlers
from exceptions import ForbiddenError, NotAuthenticatedError
from models import UserRole, WorkoutFormat, WorkoutType
from performance import get_performance_summary
from schemas import (
    ActionResult, BlockAssign, BlueprintRead, BlueprintUpdate, CoachCommentUpdate,
    EnrollmentDateUpdate, EnrollmentExtend, EnrollmentGrant, EnrollmentRead, EnrollmentStatusUpdate,
    HomeworkPageData, HomeworkStats, HomeworkSubmission, LibraryExerciseCreate, LibraryExerciseRead,
    LibraryExerciseUpdate, MemberLogs, MemberStats, OrderUpdate, Page, PerformanceSummaryRead,
    PhaseCreate, PhaseDeleteResult, ProgramCreate, ProgramPlanData, ProgramRead, ProgramUpdate,
    RoutineBlockCreate, RoutineBlockRead, RoutineBlockUpdate, RoutineItemCreate, RoutineItemRead,
    RoutineItemUpdate, SectionCreate, SectionRead, SectionUpdate, TokenData, WorkoutLogCreate,
    WorkoutLogRead, WorkoutLogUpdate,
)

settings = get_settings()
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# ========== APPLICATION SETUP ==========
app = FastAPI(
    title="Coaching Program API",
    description="Program planning, routine blocks, enrollments and homework review for coaches",
    version="1.0.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

security = HTTPBearer(auto_error=False)


# ========== HELPERS ==========
def ok(data=None, message: Optional[str] = None) -> dict:
    return {"success": True, "data": data, "message": message}


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> TokenData:
    if credentials is None:
        raise NotAuthenticatedError()
    return await verify_token(credentials.credentials)


async def get_current_coach(current_user: TokenData = Depends(get_current_user)) -> TokenData:
    if current_user.role not in (UserRole.COACH, UserRole.ADMIN):
        logger.warning("User %s without coach role tried a coach action", current_user.user_id)
        raise ForbiddenError("Only coaches can do this.")
    return current_user


# ========== PROGRAMS ==========
@app.post("/api/programs", response_model=ActionResult[ProgramRead])
async def create_program(
    program_data: ProgramCreate,
    current_user: TokenData = Depends(get_current_coach),
    db: Session = Depends(get_db)
):
    return ok(programs.create_program(db, current_user.user_id, program_data), "Program created.")


@app.get("/api/programs", response_model=ActionResult[List[ProgramRead]])
async def list_my_programs(
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ok(programs.list_my_programs(db, current_user.user_id))


@app.get("/api/programs/public", response_model=ActionResult[List[ProgramRead]])
async def list_public_programs(
    skip: int = Query(0, ge=0),
    limit: int = Query(12, ge=1, le=100),
    db: Session = Depends(get_db)
):
    return ok(programs.list_public_programs(db, skip=skip, limit=limit))


@app.get("/api/programs/{program_id}", response_model=ActionResult[ProgramRead])
async def get_program(
    program_id: str,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ok(programs.get_program(db, current_user.user_id, program_id))


@app.put("/api/programs/{program_id}", response_model=ActionResult[ProgramRead])
async def update_program(
    program_id: str,
    program_data: ProgramUpdate,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ok(programs.update_program(db, current_user.user_id, program_id, program_data), "Program updated.")


# ========== PLANNER: PHASES & DAYS ==========
@app.get("/api/programs/{program_id}/plan", response_model=ActionResult[ProgramPlanData])
async def get_program_plan_data(
    program_id: str,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ok(planner.get_program_plan_data(db, current_user.user_id, program_id))


@app.get(
    "/api/programs/{program_id}/phases/{phase_number}/days/{day_number}",
    response_model=ActionResult[Optional[BlueprintRead]],
)
async def get_blueprint(
    program_id: str,
    phase_number: int,
    day_number: int,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ok(planner.get_blueprint(db, current_user.user_id, program_id, phase_number, day_number))


@app.post("/api/programs/{program_id}/phases", response_model=ActionResult[List[BlueprintRead]])
async def create_phase(
    program_id: str,
    phase_data: PhaseCreate,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    days = planner.create_phase(
        db, current_user.user_id, program_id, phase_data.phase_number, phase_data.day_count
    )
    return ok(days, f"Phase {phase_data.phase_number} created.")


@app.post("/api/programs/{program_id}/phases/{phase_number}/days", response_model=ActionResult[BlueprintRead])
async def add_day_to_phase(
    program_id: str,
    phase_number: int,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ok(planner.add_day_to_phase(db, current_user.user_id, program_id, phase_number), "Day added.")


@app.delete("/api/programs/{program_id}/phases/{phase_number}", response_model=ActionResult[PhaseDeleteResult])
async def delete_phase(
    program_id: str,
    phase_number: int,
    selected_phase: Optional[int] = Query(None),
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    result = planner.delete_phase(db, current_user.user_id, program_id, phase_number, selected_phase)
    return ok(result, f"Phase {phase_number} deleted.")


@app.put("/api/blueprints/{blueprint_id}", response_model=ActionResult[BlueprintRead])
async def update_blueprint(
    blueprint_id: str,
    blueprint_data: BlueprintUpdate,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ok(planner.update_blueprint(db, current_user.user_id, blueprint_id, blueprint_data), "Day updated.")


@app.delete("/api/blueprints/{blueprint_id}", response_model=ActionResult)
async def delete_day(
    blueprint_id: str,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    planner.delete_day(db, current_user.user_id, blueprint_id)
    return ok(message="Day deleted.")


# ========== PLANNER: ROUTINE BLOCKS OF A DAY ==========
@app.post("/api/blueprints/{blueprint_id}/blocks", response_model=ActionResult[BlueprintRead])
async def assign_routine_block(
    blueprint_id: str,
    assign_data: BlockAssign,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    blueprint = planner.assign_routine_block(db, current_user.user_id, blueprint_id, assign_data.block_id)
    return ok(blueprint, "Routine block assigned.")


@app.put("/api/blueprints/{blueprint_id}/blocks/order", response_model=ActionResult[BlueprintRead])
async def reorder_routine_blocks(
    blueprint_id: str,
    order_data: OrderUpdate,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ok(planner.reorder_routine_blocks(db, current_user.user_id, blueprint_id, order_data.ordered_ids))


@app.delete("/api/blueprints/{blueprint_id}/blocks/{block_id}", response_model=ActionResult[BlueprintRead])
async def unassign_routine_block(
    blueprint_id: str,
    block_id: str,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    blueprint = planner.unassign_routine_block(db, current_user.user_id, blueprint_id, block_id)
    return ok(blueprint, "Routine block removed.")


@app.delete("/api/blueprints/{blueprint_id}/blocks", response_model=ActionResult[BlueprintRead])
async def clear_routine_blocks(
    blueprint_id: str,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ok(planner.clear_routine_blocks(db, current_user.user_id, blueprint_id), "Routine blocks cleared.")


# ========== PLANNER: SECTIONS ==========
@app.post("/api/blueprints/{blueprint_id}/sections", response_model=ActionResult[SectionRead])
async def create_section(
    blueprint_id: str,
    section_data: SectionCreate,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ok(planner.create_section(db, current_user.user_id, blueprint_id, section_data), "Section created.")


@app.put("/api/blueprints/{blueprint_id}/sections/order", response_model=ActionResult[BlueprintRead])
async def reorder_sections(
    blueprint_id: str,
    order_data: OrderUpdate,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ok(planner.reorder_sections(db, current_user.user_id, blueprint_id, order_data.ordered_ids))


@app.put("/api/sections/{section_id}", response_model=ActionResult[SectionRead])
async def update_section(
    section_id: str,
    section_data: SectionUpdate,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ok(planner.update_section(db, current_user.user_id, section_id, section_data), "Section updated.")


@app.delete("/api/sections/{section_id}", response_model=ActionResult)
async def delete_section(
    section_id: str,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    planner.delete_section(db, current_user.user_id, section_id)
    return ok(message="Section deleted.")


# ========== ROUTINE BLOCKS ==========
@app.post("/api/routine-blocks", response_model=ActionResult[RoutineBlockRead])
async def create_routine_block(
    block_data: RoutineBlockCreate,
    current_user: TokenData = Depends(get_current_coach),
    db: Session = Depends(get_db)
):
    return ok(routines.create_routine_block(db, current_user.user_id, block_data), "Routine block created.")


@app.get("/api/routine-blocks", response_model=ActionResult[Page[RoutineBlockRead]])
async def list_routine_blocks(
    page: int = Query(1, ge=1),
    search: Optional[str] = Query(None),
    workout_format: Optional[WorkoutFormat] = Query(None, alias="format"),
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ok(routines.list_routine_blocks(db, current_user.user_id, page, search, workout_format))


@app.get("/api/routine-blocks/{block_id}", response_model=ActionResult[RoutineBlockRead])
async def get_routine_block(
    block_id: str,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ok(routines.get_routine_block(db, current_user.user_id, block_id))


@app.put("/api/routine-blocks/{block_id}", response_model=ActionResult[RoutineBlockRead])
async def update_routine_block(
    block_id: str,
    block_data: RoutineBlockUpdate,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    block = routines.update_routine_block(db, current_user.user_id, block_id, block_data)
    return ok(block, "Routine block updated.")


@app.delete("/api/routine-blocks/{block_id}", response_model=ActionResult)
async def delete_routine_block(
    block_id: str,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    routines.delete_routine_block(db, current_user.user_id, block_id)
    return ok(message="Routine block deleted.")


@app.post("/api/routine-blocks/{block_id}/items", response_model=ActionResult[RoutineItemRead])
async def add_routine_item(
    block_id: str,
    item_data: RoutineItemCreate,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ok(routines.add_routine_item(db, current_user.user_id, block_id, item_data), "Exercise added.")


@app.put("/api/routine-blocks/{block_id}/items/order", response_model=ActionResult[RoutineBlockRead])
async def reorder_routine_items(
    block_id: str,
    order_data: OrderUpdate,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ok(routines.reorder_routine_items(db, current_user.user_id, block_id, order_data.ordered_ids))


@app.put("/api/routine-items/{item_id}", response_model=ActionResult[RoutineItemRead])
async def update_routine_item(
    item_id: str,
    item_data: RoutineItemUpdate,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    item = routines.update_routine_item(db, current_user.user_id, item_id, item_data.recommendation)
    return ok(item, "Exercise updated.")


@app.delete("/api/routine-items/{item_id}", response_model=ActionResult)
async def delete_routine_item(
    item_id: str,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    routines.delete_routine_item(db, current_user.user_id, item_id)
    return ok(message="Exercise removed.")


# ========== EXERCISE LIBRARY ==========
@app.get("/api/library", response_model=ActionResult[Page[LibraryExerciseRead]])
async def search_library(
    page: int = Query(1, ge=1),
    search: Optional[str] = Query(None),
    categories: Optional[List[str]] = Query(None),
    workout_types: Optional[List[WorkoutType]] = Query(None),
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ok(library.search_library(db, page, search, categories, workout_types))


@app.get("/api/library/{library_id}", response_model=ActionResult[LibraryExerciseRead])
async def get_library_exercise(
    library_id: str,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ok(library.get_library_exercise(db, library_id))


@app.post("/api/library", response_model=ActionResult[LibraryExerciseRead])
async def create_library_exercise(
    exercise_data: LibraryExerciseCreate,
    current_user: TokenData = Depends(get_current_coach),
    db: Session = Depends(get_db)
):
    exercise = library.create_library_exercise(db, current_user.user_id, exercise_data)
    return ok(exercise, "Exercise created.")


@app.put("/api/library/{library_id}", response_model=ActionResult[LibraryExerciseRead])
async def update_library_exercise(
    library_id: str,
    exercise_data: LibraryExerciseUpdate,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    exercise = library.update_library_exercise(db, current_user.user_id, library_id, exercise_data)
    return ok(exercise, "Exercise updated.")


@app.delete("/api/library/{library_id}", response_model=ActionResult)
async def delete_library_exercise(
    library_id: str,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    library.delete_library_exercise(db, current_user.user_id, library_id)
    return ok(message="Exercise deleted.")


# ========== MEMBERS & ENROLLMENTS ==========
@app.post("/api/programs/{program_id}/members", response_model=ActionResult[EnrollmentRead])
async def grant_enrollment(
    program_id: str,
    grant_data: EnrollmentGrant,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    enrollment = enrollments.grant_enrollment(db, current_user.user_id, program_id, grant_data.user_id)
    return ok(enrollment, "Member enrolled.")


@app.get("/api/programs/{program_id}/members", response_model=ActionResult[List[EnrollmentRead]])
async def list_members(
    program_id: str,
    search: Optional[str] = Query(None),
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ok(enrollments.list_members(db, current_user.user_id, program_id, search))


@app.get("/api/programs/{program_id}/members/stats", response_model=ActionResult[MemberStats])
async def get_member_stats(
    program_id: str,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ok(enrollments.get_member_stats(db, current_user.user_id, program_id))


@app.get("/api/programs/{program_id}/members/expiring", response_model=ActionResult[List[EnrollmentRead]])
async def get_expiring_enrollments(
    program_id: str,
    days: Optional[int] = Query(None, ge=0, le=365),
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ok(enrollments.get_expiring_enrollments(db, current_user.user_id, program_id, days))


@app.get("/api/programs/{program_id}/members/{member_id}", response_model=ActionResult[EnrollmentRead])
async def get_member_detail(
    program_id: str,
    member_id: str,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ok(enrollments.get_member_detail(db, current_user.user_id, program_id, member_id))


@app.get("/api/programs/{program_id}/members/{member_id}/logs", response_model=ActionResult[MemberLogs])
async def list_member_workout_logs(
    program_id: str,
    member_id: str,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ok(workout_logs.list_member_workout_logs(db, current_user.user_id, program_id, member_id))


@app.get(
    "/api/programs/{program_id}/members/{member_id}/performance",
    response_model=ActionResult[PerformanceSummaryRead],
)
async def get_member_performance(
    program_id: str,
    member_id: str,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    logs = workout_logs.get_member_performance_logs(db, current_user.user_id, program_id, member_id)
    return ok(get_performance_summary(logs))


@app.get("/api/me/enrollments", response_model=ActionResult[List[EnrollmentRead]])
async def list_my_enrollments(
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ok(enrollments.list_my_enrollments(db, current_user.user_id))


@app.put("/api/enrollments/{enrollment_id}/status", response_model=ActionResult[EnrollmentRead])
async def update_enrollment_status(
    enrollment_id: str,
    status_data: EnrollmentStatusUpdate,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    enrollment = enrollments.update_enrollment_status(db, current_user.user_id, enrollment_id, status_data.status)
    return ok(enrollment, "Status updated.")


@app.put("/api/enrollments/{enrollment_id}/start-date", response_model=ActionResult[EnrollmentRead])
async def update_enrollment_start_date(
    enrollment_id: str,
    date_data: EnrollmentDateUpdate,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    enrollment = enrollments.update_enrollment_start_date(db, current_user.user_id, enrollment_id, date_data.date)
    return ok(enrollment, "Start date updated.")


@app.put("/api/enrollments/{enrollment_id}/end-date", response_model=ActionResult[EnrollmentRead])
async def update_enrollment_end_date(
    enrollment_id: str,
    date_data: EnrollmentDateUpdate,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    enrollment = enrollments.update_enrollment_end_date(db, current_user.user_id, enrollment_id, date_data.date)
    return ok(enrollment, "End date updated.")


@app.post("/api/enrollments/{enrollment_id}/extend", response_model=ActionResult[EnrollmentRead])
async def extend_enrollment(
    enrollment_id: str,
    extend_data: EnrollmentExtend,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    enrollment = enrollments.extend_enrollment(db, current_user.user_id, enrollment_id, extend_data.days)
    return ok(enrollment, f"Extended by {extend_data.days} days.")


# ========== WORKOUT LOGS ==========
@app.post("/api/workout-logs", response_model=ActionResult[WorkoutLogRead])
async def create_workout_log(
    log_data: WorkoutLogCreate,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ok(workout_logs.create_workout_log(db, current_user.user_id, log_data), "Workout logged.")


@app.get("/api/me/workout-logs", response_model=ActionResult[List[WorkoutLogRead]])
async def list_my_workout_logs(
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ok(workout_logs.list_my_workout_logs(db, current_user.user_id))


@app.get("/api/me/performance", response_model=ActionResult[PerformanceSummaryRead])
async def get_my_performance(
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ok(get_performance_summary(workout_logs.list_my_workout_logs(db, current_user.user_id)))


@app.get("/api/workout-logs/{log_id}", response_model=ActionResult[WorkoutLogRead])
async def get_workout_log(
    log_id: str,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ok(workout_logs.get_workout_log(db, current_user.user_id, log_id))


@app.put("/api/workout-logs/{log_id}", response_model=ActionResult[WorkoutLogRead])
async def update_workout_log(
    log_id: str,
    log_data: WorkoutLogUpdate,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ok(workout_logs.update_workout_log(db, current_user.user_id, log_id, log_data), "Workout log updated.")


@app.delete("/api/workout-logs/{log_id}", response_model=ActionResult)
async def delete_workout_log(
    log_id: str,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    workout_logs.delete_workout_log(db, current_user.user_id, log_id)
    return ok(message="Workout log deleted.")


@app.put("/api/workout-logs/{log_id}/comment", response_model=ActionResult[WorkoutLogRead])
async def update_coach_comment(
    log_id: str,
    comment_data: CoachCommentUpdate,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    log = workout_logs.update_coach_comment(db, current_user.user_id, log_id, comment_data.comment)
    return ok(log, "Comment saved.")


@app.post("/api/workout-logs/{log_id}/check", response_model=ActionResult[WorkoutLogRead])
async def toggle_coach_check(
    log_id: str,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ok(workout_logs.toggle_coach_check(db, current_user.user_id, log_id))


# ========== HOMEWORK ==========
@app.get("/api/programs/{program_id}/homework", response_model=ActionResult[HomeworkPageData])
async def get_homework_page_data(
    program_id: str,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ok(workout_logs.get_homework_page_data(db, current_user.user_id, program_id))


@app.get("/api/programs/{program_id}/homework/stats", response_model=ActionResult[HomeworkStats])
async def get_homework_stats(
    program_id: str,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ok(workout_logs.get_homework_stats(db, current_user.user_id, program_id))


@app.get(
    "/api/programs/{program_id}/homework/{phase_number}/{day_number}",
    response_model=ActionResult[List[HomeworkSubmission]],
)
async def get_homework_submissions(
    program_id: str,
    phase_number: int,
    day_number: int,
    current_user: TokenData = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    submissions = workout_logs.get_homework_submissions(
        db, current_user.user_id, program_id, phase_number, day_number
    )
    return ok(submissions)


# ========== SYSTEM ROUTES ==========
@app.on_event("startup")
def startup():
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ready")


@app.get("/api/health")
async def health():
    return {"status": "ok", "service": "coaching-program-api"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
