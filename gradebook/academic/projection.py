from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Sequence

from .aggregator import course_average, module_averages
from .attendance import AttendanceTracker
from .classifier import classify
from .ledger import GradeLedger
from .types import ActivitySpec, GradingThresholds


@dataclass(frozen=True)
class Progress:
    final_grade: Optional[float]
    attendance_percentage: int
    state: str
    failure_cause: Optional[str] = None
    module_averages: Dict[str, Optional[float]] = field(default_factory=dict)


def evaluate(
    activity: ActivitySpec,
    grades: Sequence[Any],
    attendance: Mapping[str, bool] | None,
    thresholds: GradingThresholds | None = None,
) -> Progress:
    """Derive the cached columns of an enrollment from its raw data."""
    pct = AttendanceTracker(activity).percentage(attendance)
    result = classify(activity, grades, pct, thresholds)
    averages: Dict[str, Optional[float]] = {}
    if activity.is_modular:
        averages = module_averages(activity.schema, GradeLedger.from_flat(activity.schema, grades))
        final = result.average
    else:
        final = course_average(grades, activity.expected_evaluations)
    return Progress(
        final_grade=final,
        attendance_percentage=pct,
        state=result.state,
        failure_cause=result.failure_cause,
        module_averages=averages,
    )
