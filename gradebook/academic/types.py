"""Domain types shared by the grading engine."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

MAX_EVALUATIONS_PER_MODULE = 6
DEFAULT_SESSION_COUNT = 6
DEFAULT_EVALUATION_COUNT = 3


class AcademicState:
    ENROLLED = "ENROLLED"
    IN_PROGRESS = "IN_PROGRESS"
    APPROVED = "APPROVED"
    FAILED = "FAILED"

    CHOICES = [
        (ENROLLED, "Enrolled"),
        (IN_PROGRESS, "In progress"),
        (APPROVED, "Approved"),
        (FAILED, "Failed"),
    ]


class Situation:
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"

    CHOICES = [
        (ACTIVE, "Active"),
        (INACTIVE, "Inactive"),
    ]


class ActivityKind:
    COURSE = "COURSE"
    PROGRAM = "PROGRAM"

    CHOICES = [
        (COURSE, "Course"),
        (PROGRAM, "Modular program"),
    ]


@dataclass(frozen=True)
class GradingThresholds:
    min_passing_grade: float = 4.0
    min_attendance_pct: float = 75.0
    grade_scale_max: float = 7.0


@dataclass(frozen=True)
class Module:
    module_id: str
    name: str = ""
    evaluation_count: int = 1
    evaluation_weights: Tuple[float, ...] = (100.0,)
    weight: float = 0.0
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    class_dates: Tuple[str, ...] = ()
    relator: Optional[str] = None

    def has_valid_weights(self) -> bool:
        return len(self.evaluation_weights) == self.evaluation_count and self.evaluation_count > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.module_id,
            "name": self.name,
            "evaluation_count": self.evaluation_count,
            "evaluation_weights": list(self.evaluation_weights),
            "weight": self.weight,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "class_dates": list(self.class_dates),
            "relator": self.relator,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Module":
        raw_weights = data.get("evaluation_weights")
        weights: Tuple[float, ...] = ()
        if isinstance(raw_weights, (list, tuple)):
            try:
                weights = tuple(float(w or 0) for w in raw_weights)
            except (TypeError, ValueError):
                weights = ()
        try:
            count = int(data.get("evaluation_count") or 0)
        except (TypeError, ValueError):
            count = 0
        try:
            weight = float(data.get("weight") or 0)
        except (TypeError, ValueError):
            weight = 0.0
        return cls(
            module_id=str(data.get("id") or data.get("module_id") or ""),
            name=str(data.get("name") or ""),
            evaluation_count=max(0, min(count, MAX_EVALUATIONS_PER_MODULE)),
            evaluation_weights=weights,
            weight=weight,
            start_date=data.get("start_date") or None,
            end_date=data.get("end_date") or None,
            class_dates=tuple(str(d) for d in (data.get("class_dates") or [])),
            relator=data.get("relator") or None,
        )


@dataclass(frozen=True)
class ModuleSchema:
    modules: Tuple[Module, ...] = ()

    def __iter__(self):
        return iter(self.modules)

    def __len__(self) -> int:
        return len(self.modules)

    @property
    def total_evaluations(self) -> int:
        return sum(m.evaluation_count for m in self.modules)

    @property
    def all_weights_unset(self) -> bool:
        return all(float(m.weight or 0) == 0 for m in self.modules)

    def module_ids(self) -> List[str]:
        return [m.module_id for m in self.modules]

    def index_of(self, module_id: str) -> int:
        for idx, module in enumerate(self.modules):
            if module.module_id == module_id:
                return idx
        raise KeyError(module_id)

    def get(self, module_id: str) -> Module:
        return self.modules[self.index_of(module_id)]

    def class_dates(self) -> List[str]:
        dates = set()
        for module in self.modules:
            dates.update(module.class_dates)
        return sorted(dates)

    def to_config(self) -> Dict[str, Any]:
        return {"modules": [m.to_dict() for m in self.modules]}

    @classmethod
    def from_config(cls, config: Dict[str, Any] | None) -> "ModuleSchema":
        raw = (config or {}).get("modules") or []
        return cls(modules=tuple(Module.from_dict(m) for m in raw if isinstance(m, dict)))


@dataclass(frozen=True)
class ActivitySpec:
    """Grading-relevant view of an activity."""

    activity_id: str
    kind: str = ActivityKind.COURSE
    evaluation_count: int = DEFAULT_EVALUATION_COUNT
    session_count: int = DEFAULT_SESSION_COUNT
    schema: ModuleSchema = field(default_factory=ModuleSchema)
    is_closed: bool = False

    @property
    def is_modular(self) -> bool:
        return self.kind == ActivityKind.PROGRAM

    @property
    def expected_evaluations(self) -> int:
        if self.is_modular:
            return self.schema.total_evaluations
        return int(self.evaluation_count or 0)


@dataclass(slots=True)
class EnrollmentRecord:
    enrollment_id: Any
    participant_id: str
    activity_id: str
    grades: List[float] = field(default_factory=list)
    attendance: Dict[str, bool] = field(default_factory=dict)
    situation: str = Situation.ACTIVE
    final_grade: Optional[float] = None
    attendance_percentage: int = 0
    state: str = AcademicState.ENROLLED

    @property
    def is_active(self) -> bool:
        return self.situation != Situation.INACTIVE

    def copy_with(self, **changes: Any) -> "EnrollmentRecord":
        changes.setdefault("grades", list(self.grades))
        changes.setdefault("attendance", dict(self.attendance))
        return replace(self, **changes)
