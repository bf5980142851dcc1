"""
Performance extraction from workout logs.

Everything here is a pure function over already-loaded logs: no session,
no I/O. Logs are read through the attributes of ``models.WorkoutLog``
(``id``, ``library_id``, ``library``, ``log_date``, ``max_weight``,
``total_volume``, ``content``, ``intensity``).

Each exercise carries a single lift tag, so it fills at most one big-three
or Hyrox bucket: "Ski Row" counts toward the SkiErg station only.
"""

import calendar
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from models import Intensity, LiftTag, utcnow

UNKNOWN_EXERCISE = "Unknown Exercise"
TREND_THRESHOLD_PERCENT = 5

# Checked in order; the first match wins
LIFT_KEYWORDS = [
    (LiftTag.DEADLIFT, ("데드", "deadlift")),
    (LiftTag.SQUAT, ("스쿼트", "squat")),
    (LiftTag.BENCH, ("벤치", "bench", "press")),
    (LiftTag.SLED_PUSH, ("sled push", "슬리지 푸시", " sled ")),
    (LiftTag.SLED_PULL, ("sled pull", "슬리지 풀")),
    (LiftTag.SKI_ERG, ("ski", "스키")),
    (LiftTag.BURPEE_BROAD_JUMP, ("burpee", "버피")),
    (LiftTag.ROWING, ("row", "로잉", "에르고")),
    (LiftTag.FARMERS_CARRY, ("farmer", "파머", "캐리")),
    (LiftTag.SANDBAG_LUNGES, ("sandbag", "샌드백", "런지")),
    (LiftTag.RUN, ("run", "러닝", "달리기")),
]

BIG_THREE = {
    "bench": LiftTag.BENCH,
    "deadlift": LiftTag.DEADLIFT,
    "squat": LiftTag.SQUAT,
}

# Hyrox stations: (tag, lower_is_better)
HYROX_STATIONS = {
    "run": (LiftTag.RUN, True),
    "ski_erg": (LiftTag.SKI_ERG, True),
    "sled_push": (LiftTag.SLED_PUSH, True),
    "sled_pull": (LiftTag.SLED_PULL, True),
    "burpee_broad_jump": (LiftTag.BURPEE_BROAD_JUMP, False),
    "rowing": (LiftTag.ROWING, True),
    "farmers_carry": (LiftTag.FARMERS_CARRY, False),
    "sandbag_lunges": (LiftTag.SANDBAG_LUNGES, False),
}


@dataclass
class PRRecord:
    date: datetime
    weight: float
    reps: float
    volume: float
    log_id: str


@dataclass
class GrowthTrend:
    trend: str  # UP / DOWN / STABLE
    change_percent: float
    current_weight: float
    previous_weight: float


@dataclass
class ExerciseProgress:
    exercise_id: str
    exercise_name: str
    category: Optional[str]
    lift_tag: Optional[LiftTag]
    current_pr: float
    history: List[PRRecord]
    growth_rate: float
    total_workouts: int
    trend: Optional[GrowthTrend] = None


@dataclass
class IntensityStats:
    low: int = 0
    medium: int = 0
    high: int = 0
    total: int = 0


@dataclass
class MonthlyFrequency:
    month: str  # YYYY-MM
    count: int


@dataclass
class PerformanceSummary:
    exercises: List[ExerciseProgress]
    big_three: Dict[str, Optional[ExerciseProgress]]
    hyrox: Dict[str, Optional[ExerciseProgress]]
    intensity: IntensityStats
    monthly_frequency: List[MonthlyFrequency] = field(default_factory=list)


def classify_exercise(name: Optional[str]) -> Optional[LiftTag]:
    """Guess the lift tag of an exercise from its name."""
    if not name:
        return None
    lowered = name.lower()
    for tag, keywords in LIFT_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return tag
    return None


def months_before(moment: datetime, months: int) -> datetime:
    """Same day-of-month ``months`` earlier, clamped to the month's length."""
    month_index = moment.year * 12 + moment.month - 1 - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def _exercise_name(log) -> str:
    content = log.content or {}
    if content.get("exerciseName"):
        return str(content["exerciseName"])
    if log.library is not None:
        return log.library.title
    return UNKNOWN_EXERCISE


def calculate_growth_rate(history: List[PRRecord]) -> float:
    """Percent change from the first to the last record, 0 when the first weight is 0."""
    if not history:
        return 0
    first, last = history[0], history[-1]
    if first.weight == 0:
        return 0
    return (last.weight - first.weight) / first.weight * 100


def calculate_growth_rate_in_period(history: List[PRRecord], start: datetime, end: datetime) -> float:
    return calculate_growth_rate([record for record in history if start <= record.date <= end])


def extract_chart_data(history: List[PRRecord]) -> List[dict]:
    return [
        {"date": record.date.date().isoformat(), "weight": record.weight, "reps": record.reps}
        for record in history
    ]


def extract_pr_from_logs(logs: Iterable, exercise_id: Optional[str] = None) -> Dict[str, ExerciseProgress]:
    """
    Group logs by library exercise and compute the PR, chronological history
    and growth rate of each. Logs without an exercise are skipped.
    """
    grouped: Dict[str, list] = {}
    for log in logs:
        if not log.library_id:
            continue
        if exercise_id and log.library_id != exercise_id:
            continue
        grouped.setdefault(log.library_id, []).append(log)

    progress = {}
    for library_id, exercise_logs in grouped.items():
        by_date = sorted(exercise_logs, key=lambda log: log.log_date)
        history = [
            PRRecord(
                date=log.log_date,
                weight=float(log.max_weight or 0),
                reps=float(log.total_volume or 0),
                volume=float(log.total_volume or 0),
                log_id=log.id,
            )
            for log in by_date
        ]

        first = by_date[0]
        name = _exercise_name(first)
        library = first.library
        lift_tag = library.lift_tag if library is not None and library.lift_tag else classify_exercise(name)

        progress[library_id] = ExerciseProgress(
            exercise_id=library_id,
            exercise_name=name,
            category=library.category if library is not None else None,
            lift_tag=lift_tag,
            current_pr=max(record.weight for record in history),
            history=history,
            growth_rate=calculate_growth_rate(history),
            total_workouts=len(exercise_logs),
        )
    return progress


def get_recent_growth_trend(
    history: List[PRRecord], months: int = 3, now: Optional[datetime] = None
) -> GrowthTrend:
    cutoff = months_before(now or utcnow(), months)
    recent = [record for record in history if record.date >= cutoff]

    if len(recent) < 2:
        return GrowthTrend(
            trend="STABLE",
            change_percent=0,
            current_weight=history[-1].weight if history else 0,
            previous_weight=history[0].weight if history else 0,
        )

    previous_weight = recent[0].weight
    current_weight = recent[-1].weight
    change_percent = (
        (current_weight - previous_weight) / previous_weight * 100 if previous_weight > 0 else 0
    )

    trend = "STABLE"
    if change_percent > TREND_THRESHOLD_PERCENT:
        trend = "UP"
    elif change_percent < -TREND_THRESHOLD_PERCENT:
        trend = "DOWN"
    return GrowthTrend(trend, change_percent, current_weight, previous_weight)


def _best(candidates: List[ExerciseProgress], lower_is_better: bool) -> Optional[ExerciseProgress]:
    if not candidates:
        return None
    pick = min if lower_is_better else max
    return pick(candidates, key=lambda progress: progress.current_pr)


def _tagged(progress: Dict[str, ExerciseProgress], tag: LiftTag) -> List[ExerciseProgress]:
    return [item for item in progress.values() if item.lift_tag == tag]


def get_big_three_lifts_pr(progress: Dict[str, ExerciseProgress]) -> Dict[str, Optional[ExerciseProgress]]:
    return {key: _best(_tagged(progress, tag), False) for key, tag in BIG_THREE.items()}


def get_hyrox_prs(progress: Dict[str, ExerciseProgress]) -> Dict[str, Optional[ExerciseProgress]]:
    return {
        key: _best(_tagged(progress, tag), lower_is_better)
        for key, (tag, lower_is_better) in HYROX_STATIONS.items()
    }


def get_intensity_stats(logs: Iterable) -> IntensityStats:
    stats = IntensityStats()
    for log in logs:
        stats.total += 1
        if log.intensity == Intensity.LOW:
            stats.low += 1
        elif log.intensity == Intensity.MEDIUM:
            stats.medium += 1
        elif log.intensity == Intensity.HIGH:
            stats.high += 1
    return stats


def get_monthly_frequency(logs: Iterable, months: int = 6) -> List[MonthlyFrequency]:
    """Log counts per calendar month, most recent month first."""
    counts: Dict[str, int] = {}
    for log in logs:
        month = log.log_date.strftime("%Y-%m")
        counts[month] = counts.get(month, 0) + 1
    return [MonthlyFrequency(month, counts[month]) for month in sorted(counts, reverse=True)[:months]]


def get_performance_summary(logs: Iterable, now: Optional[datetime] = None) -> PerformanceSummary:
    logs = list(logs)
    progress = extract_pr_from_logs(logs)
    for item in progress.values():
        item.trend = get_recent_growth_trend(item.history, months=3, now=now)

    return PerformanceSummary(
        exercises=sorted(progress.values(), key=lambda item: item.exercise_name.lower()),
        big_three=get_big_three_lifts_pr(progress),
        hyrox=get_hyrox_prs(progress),
        intensity=get_intensity_stats(logs),
        monthly_frequency=get_monthly_frequency(logs, months=6),
    )
