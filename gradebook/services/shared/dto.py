from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, TypedDict


class EnrollmentUpdate(TypedDict):
    enrollment_id: Any
    grades: List[float]
    attendance: Dict[str, bool]
    final_grade: Optional[float]
    attendance_percentage: int
    state: str


class StatsPayload(TypedDict):
    total: int
    advancing: int
    global_average: float
    grade_entry_pct: int
    average_attendance: int
    approval_rate: int
    at_risk: List[Any]


@dataclass(slots=True)
class CommitResult:
    committed: List[Any] = field(default_factory=list)
    failed: Dict[Any, Exception] = field(default_factory=dict)
    scope: Optional[str] = None

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def is_noop(self) -> bool:
        return not self.committed and not self.failed


@dataclass(slots=True)
class SchemaChangeResult:
    updated: List[Any] = field(default_factory=list)
    archived: Dict[Any, Dict[str, List[float]]] = field(default_factory=dict)
