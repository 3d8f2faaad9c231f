from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, List, Sequence

from .aggregator import decimal_mean
from .ledger import entered_grades, round_tenths
from .types import AcademicState, ActivitySpec, EnrollmentRecord, GradingThresholds


def _pct(part: float, whole: float) -> int:
    if whole <= 0:
        return 0
    return int((Decimal(str(part)) * 100 / Decimal(str(whole))).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class TrackingStats:
    total: int
    advancing: int
    global_average: float
    grade_entry_pct: int
    average_attendance: int
    approval_rate: int
    at_risk: List[Any] = field(default_factory=list)


def is_at_risk(record: EnrollmentRecord, thresholds: GradingThresholds) -> bool:
    has_grade = bool(record.final_grade) and float(record.final_grade) > 0
    has_attendance = int(record.attendance_percentage or 0) > 0
    if not has_grade and not has_attendance:
        return False
    failing_grade = has_grade and float(record.final_grade) < thresholds.min_passing_grade
    failing_attendance = has_attendance and record.attendance_percentage < thresholds.min_attendance_pct
    return failing_grade or failing_attendance


def tracking_stats(
    activity: ActivitySpec,
    records: Sequence[EnrollmentRecord],
    thresholds: GradingThresholds | None = None,
) -> TrackingStats:
    t = thresholds or GradingThresholds()
    rows = list(records or [])
    all_grades: List[float] = []
    advancing = 0
    entered_total = 0
    attendance_values: List[int] = []
    approved = 0

    expected = activity.expected_evaluations
    for rec in rows:
        entered = entered_grades(list(rec.grades or [])[:expected])
        all_grades.extend(entered)
        entered_total += len(entered)
        if entered or any(rec.attendance.values()):
            advancing += 1
        if int(rec.attendance_percentage or 0) > 0:
            attendance_values.append(int(rec.attendance_percentage))
        if rec.state == AcademicState.APPROVED:
            approved += 1

    expected_total = len(rows) * expected
    return TrackingStats(
        total=len(rows),
        advancing=advancing,
        global_average=round_tenths(decimal_mean(all_grades)) if all_grades else 0.0,
        grade_entry_pct=_pct(entered_total, expected_total),
        average_attendance=_pct(sum(attendance_values), len(attendance_values) * 100),
        approval_rate=_pct(approved, len(rows)),
        at_risk=[rec.enrollment_id for rec in rows if is_at_risk(rec, t)],
    )
