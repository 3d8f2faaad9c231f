from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Mapping

from .types import ActivitySpec, Module

SESSION_KEY_PREFIX = "session_"


def course_session_keys(session_count: int) -> List[str]:
    return [f"{SESSION_KEY_PREFIX}{i}" for i in range(1, max(int(session_count or 0), 0) + 1)]


def tracked_sessions(activity: ActivitySpec) -> List[str]:
    if activity.is_modular:
        return activity.schema.class_dates()
    return course_session_keys(activity.session_count)


def attendance_percentage(attendance: Mapping[str, bool] | None, sessions: Iterable[str]) -> int:
    keys = list(dict.fromkeys(sessions))
    if not keys:
        return 0
    marks = attendance or {}
    present = sum(1 for key in keys if marks.get(key))
    ratio = Decimal(present * 100) / Decimal(len(keys))
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def module_attendance_percentage(attendance: Mapping[str, bool] | None, module: Module) -> int:
    return attendance_percentage(attendance, module.class_dates)


class AttendanceTracker:
    """Attendance percentage for one activity's tracked sessions."""

    def __init__(self, activity: ActivitySpec):
        self.activity = activity
        self.sessions = tracked_sessions(activity)

    def percentage(self, attendance: Mapping[str, bool] | None) -> int:
        return attendance_percentage(attendance, self.sessions)

    def toggle(self, attendance: Mapping[str, bool] | None, session_key: str) -> Dict[str, bool]:
        if session_key not in self.sessions:
            raise KeyError(session_key)
        out = dict(attendance or {})
        out[session_key] = not bool(out.get(session_key))
        return out

    def present_count(self, attendance: Mapping[str, bool] | None) -> int:
        marks = attendance or {}
        return sum(1 for key in self.sessions if marks.get(key))
