"""Unsaved grade/attendance edits for one editing surface.

The buffer holds a proposed grade vector and attendance map per enrollment,
copied from the persisted record on first edit. Everything the UI shows is
the *live* projection: persisted data overlaid with these pending edits.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence

from gradebook.academic.attendance import AttendanceTracker
from gradebook.academic.ledger import global_index, is_entered, module_slice, write_slot
from gradebook.academic.projection import Progress, evaluate
from gradebook.academic.types import ActivitySpec, EnrollmentRecord, GradingThresholds
from gradebook.services.shared.dto import EnrollmentUpdate
from gradebook.services.shared.errors import (
    ActivityClosedError,
    InactiveEnrollmentError,
    UnknownEnrollmentError,
)

logger = logging.getLogger(__name__)


def _padded(grades: Sequence[Any] | None, length: int) -> List[float]:
    out = [float(g) if is_entered(g) else 0.0 for g in grades or []]
    out.extend([0.0] * (length - len(out)))
    return out


def _same_grades(a: Sequence[Any] | None, b: Sequence[Any] | None) -> bool:
    n = max(len(a or []), len(b or []))
    return _padded(a, n) == _padded(b, n)


def _same_marks(a: Mapping[str, bool] | None, b: Mapping[str, bool] | None, keys: Iterable[str] | None = None) -> bool:
    a = a or {}
    b = b or {}
    scope = set(keys) if keys is not None else set(a) | set(b)
    return all(bool(a.get(k)) == bool(b.get(k)) for k in scope)


@dataclass(frozen=True)
class Dirtiness:
    """Snapshot of what a buffer would commit."""

    enrollments: FrozenSet[Any] = frozenset()
    modules: Mapping[Any, FrozenSet[str]] = field(default_factory=dict)

    @property
    def has_unsaved_changes(self) -> bool:
        return bool(self.enrollments)

    def is_dirty(self, enrollment_id: Any, module_id: str | None = None) -> bool:
        if module_id is None:
            return enrollment_id in self.enrollments
        return module_id in self.modules.get(enrollment_id, frozenset())


@dataclass
class _PendingEntry:
    grades: Optional[List[float]] = None
    attendance: Optional[Dict[str, bool]] = None


class PendingEditBuffer:
    def __init__(
        self,
        activity: ActivitySpec,
        records: Iterable[EnrollmentRecord],
        thresholds: GradingThresholds | None = None,
    ):
        self.activity = activity
        self.thresholds = thresholds or GradingThresholds()
        self.tracker = AttendanceTracker(activity)
        self._persisted: Dict[Any, EnrollmentRecord] = {r.enrollment_id: r for r in records}
        self._pending: Dict[Any, _PendingEntry] = {}

    # ------------------------------------------------------------------
    # lookup
    # ------------------------------------------------------------------
    def __len__(self) -> int:
        return len(self._pending)

    def __contains__(self, enrollment_id: Any) -> bool:
        return enrollment_id in self._pending

    @property
    def is_empty(self) -> bool:
        return not self._pending

    def enrollment_ids(self) -> List[Any]:
        return list(self._persisted.keys())

    def persisted(self, enrollment_id: Any) -> EnrollmentRecord:
        try:
            return self._persisted[enrollment_id]
        except KeyError:
            raise UnknownEnrollmentError(f"Enrollment {enrollment_id!r} is not loaded") from None

    def live_grades(self, enrollment_id: Any) -> List[float]:
        rec = self.persisted(enrollment_id)
        entry = self._pending.get(enrollment_id)
        source = entry.grades if entry and entry.grades is not None else rec.grades
        return _padded(source, max(self.activity.expected_evaluations, len(source or [])))

    def live_attendance(self, enrollment_id: Any) -> Dict[str, bool]:
        rec = self.persisted(enrollment_id)
        entry = self._pending.get(enrollment_id)
        if entry and entry.attendance is not None:
            return dict(entry.attendance)
        return dict(rec.attendance)

    def projection(self, enrollment_id: Any) -> Progress:
        return evaluate(
            self.activity,
            self.live_grades(enrollment_id),
            self.live_attendance(enrollment_id),
            self.thresholds,
        )

    # ------------------------------------------------------------------
    # edits
    # ------------------------------------------------------------------
    def _editable(self, enrollment_id: Any) -> _PendingEntry:
        rec = self.persisted(enrollment_id)
        if self.activity.is_closed:
            raise ActivityClosedError(f"Activity {self.activity.activity_id} is closed")
        if not rec.is_active:
            raise InactiveEnrollmentError(f"Enrollment {enrollment_id!r} is inactive")
        return self._pending.setdefault(enrollment_id, _PendingEntry())

    def set_grade(self, enrollment_id: Any, index: int, raw: Any) -> float:
        if index < 0 or index >= self.activity.expected_evaluations:
            raise IndexError(index)
        entry = self._editable(enrollment_id)
        if entry.grades is None:
            entry.grades = self.live_grades(enrollment_id)
        entry.grades = write_slot(entry.grades, index, raw, self.thresholds.grade_scale_max)
        self._drop_if_clean(enrollment_id)
        return entry.grades[index]

    def set_module_grade(self, enrollment_id: Any, module_id: str, eval_index: int, raw: Any) -> float:
        schema = self.activity.schema
        index = global_index(schema, schema.index_of(module_id), eval_index)
        return self.set_grade(enrollment_id, index, raw)

    def toggle_attendance(self, enrollment_id: Any, session_key: str) -> int:
        """Flip one session and return the live percentage, pending toggles included."""
        if session_key not in self.tracker.sessions:
            raise KeyError(session_key)
        entry = self._editable(enrollment_id)
        current = entry.attendance if entry.attendance is not None else self.live_attendance(enrollment_id)
        entry.attendance = self.tracker.toggle(current, session_key)
        pct = self.tracker.percentage(entry.attendance)
        self._drop_if_clean(enrollment_id)
        return pct

    def discard_all(self) -> None:
        if self._pending:
            logger.info(
                "grading_buffer_discard activity=%s enrollments=%s",
                self.activity.activity_id,
                len(self._pending),
            )
        self._pending.clear()

    # ------------------------------------------------------------------
    # dirtiness
    # ------------------------------------------------------------------
    def _module_dirty(self, enrollment_id: Any, module_id: str) -> bool:
        rec = self.persisted(enrollment_id)
        schema = self.activity.schema
        total = schema.total_evaluations
        sl = module_slice(schema, module_id)
        live = self.live_grades(enrollment_id)
        if _padded(live, total)[sl] != _padded(rec.grades, total)[sl]:
            return True
        module = schema.get(module_id)
        return not _same_marks(self.live_attendance(enrollment_id), rec.attendance, module.class_dates)

    def is_dirty(self, enrollment_id: Any, module_id: str | None = None) -> bool:
        if enrollment_id not in self._pending:
            return False
        if module_id is not None:
            return self._module_dirty(enrollment_id, module_id)
        rec = self.persisted(enrollment_id)
        return not (
            _same_grades(self.live_grades(enrollment_id), rec.grades)
            and _same_marks(self.live_attendance(enrollment_id), rec.attendance)
        )

    def dirty_enrollments(self, module_id: str | None = None) -> List[Any]:
        return [eid for eid in list(self._pending) if self.is_dirty(eid, module_id)]

    def dirtiness(self) -> Dirtiness:
        enrollments = frozenset(self.dirty_enrollments())
        modules: Dict[Any, FrozenSet[str]] = {}
        if self.activity.is_modular:
            for eid in enrollments:
                modules[eid] = frozenset(
                    m.module_id for m in self.activity.schema.modules if self._module_dirty(eid, m.module_id)
                )
        return Dirtiness(enrollments=enrollments, modules=modules)

    def _drop_if_clean(self, enrollment_id: Any) -> None:
        if enrollment_id in self._pending and not self.is_dirty(enrollment_id):
            del self._pending[enrollment_id]

    # ------------------------------------------------------------------
    # commit support
    # ------------------------------------------------------------------
    def build_update(self, enrollment_id: Any, module_id: str | None = None) -> EnrollmentUpdate:
        """Read the *current* pending value of a scope and derive its cached columns."""
        rec = self.persisted(enrollment_id)
        live_grades = self.live_grades(enrollment_id)
        live_marks = self.live_attendance(enrollment_id)

        if module_id is None:
            grades, marks = live_grades, live_marks
        else:
            schema = self.activity.schema
            sl = module_slice(schema, module_id)
            grades = _padded(rec.grades, schema.total_evaluations)
            grades[sl] = _padded(live_grades, schema.total_evaluations)[sl]
            marks = dict(rec.attendance)
            for key in schema.get(module_id).class_dates:
                marks[key] = bool(live_marks.get(key))

        progress = evaluate(self.activity, grades, marks, self.thresholds)
        return EnrollmentUpdate(
            enrollment_id=enrollment_id,
            grades=list(grades),
            attendance=dict(marks),
            final_grade=progress.final_grade,
            attendance_percentage=progress.attendance_percentage,
            state=progress.state,
        )

    def acknowledge(self, update: EnrollmentUpdate) -> None:
        """Record a successful commit; edits made meanwhile stay pending."""
        eid = update["enrollment_id"]
        rec = self.persisted(eid)
        self._persisted[eid] = rec.copy_with(
            grades=list(update["grades"]),
            attendance=dict(update["attendance"]),
            final_grade=update["final_grade"],
            attendance_percentage=update["attendance_percentage"],
            state=update["state"],
        )
        self._drop_if_clean(eid)
