"""Academic state machine.

State is recomputed from current data on every read. There is no terminal
lock: removing a grade from an approved enrollment moves it back to
``IN_PROGRESS``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence

from .aggregator import course_average, program_final_grade
from .ledger import entered_grades
from .types import AcademicState, ActivitySpec, GradingThresholds, ModuleSchema

CAUSE_GRADE = "grade"
CAUSE_ATTENDANCE = "attendance"


@dataclass(frozen=True)
class Classification:
    state: str
    average: Optional[float]
    entered: int
    expected: int
    failure_cause: Optional[str] = None


def classify_course(
    grades: Sequence[Any],
    expected_count: int,
    attendance_pct: float,
    thresholds: GradingThresholds | None = None,
) -> Classification:
    t = thresholds or GradingThresholds()
    expected = max(int(expected_count or 0), 0)
    entered = len(entered_grades(list(grades or [])[:expected]))
    average = course_average(grades, expected)

    if entered == 0:
        return Classification(AcademicState.ENROLLED, average, entered, expected)
    if entered < expected:
        return Classification(AcademicState.IN_PROGRESS, average, entered, expected)
    if average is None or average < t.min_passing_grade:
        return Classification(AcademicState.FAILED, average, entered, expected, CAUSE_GRADE)
    if float(attendance_pct or 0) < t.min_attendance_pct:
        return Classification(AcademicState.FAILED, average, entered, expected, CAUSE_ATTENDANCE)
    return Classification(AcademicState.APPROVED, average, entered, expected)


def classify_program(
    schema: ModuleSchema,
    flat_grades: Sequence[Any],
    thresholds: GradingThresholds | None = None,
) -> Classification:
    # Modular programs have no FAILED outcome and ignore attendance.
    t = thresholds or GradingThresholds()
    expected = schema.total_evaluations
    entered = len(entered_grades(list(flat_grades or [])[:expected]))
    average = program_final_grade(schema, flat_grades)

    if entered == 0:
        return Classification(AcademicState.ENROLLED, average, entered, expected)
    if entered >= expected and average is not None and average >= t.min_passing_grade:
        return Classification(AcademicState.APPROVED, average, entered, expected)
    return Classification(AcademicState.IN_PROGRESS, average, entered, expected)


def classify(
    activity: ActivitySpec,
    grades: Sequence[Any],
    attendance_pct: float,
    thresholds: GradingThresholds | None = None,
) -> Classification:
    if activity.is_modular:
        return classify_program(activity.schema, grades, thresholds)
    return classify_course(grades, activity.expected_evaluations, attendance_pct, thresholds)
