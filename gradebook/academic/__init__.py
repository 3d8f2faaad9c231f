"""Academic domain modules for grade aggregation, attendance and state."""

from .aggregator import course_average, final_grade, format_grade, module_average, module_averages
from .attendance import AttendanceTracker, attendance_percentage, tracked_sessions
from .classifier import Classification, classify, classify_course, classify_program
from .ledger import GradeLedger, coerce_grade, global_index, round_tenths
from .migrator import MigrationResult, SchemaMigrator, remap_grades
from .projection import Progress, evaluate
from .types import (
    AcademicState,
    ActivityKind,
    ActivitySpec,
    EnrollmentRecord,
    GradingThresholds,
    Module,
    ModuleSchema,
    Situation,
)

__all__ = [
    "course_average",
    "final_grade",
    "format_grade",
    "module_average",
    "module_averages",
    "AttendanceTracker",
    "attendance_percentage",
    "tracked_sessions",
    "Classification",
    "classify",
    "classify_course",
    "classify_program",
    "GradeLedger",
    "coerce_grade",
    "global_index",
    "round_tenths",
    "MigrationResult",
    "SchemaMigrator",
    "remap_grades",
    "Progress",
    "evaluate",
    "AcademicState",
    "ActivityKind",
    "ActivitySpec",
    "EnrollmentRecord",
    "GradingThresholds",
    "Module",
    "ModuleSchema",
    "Situation",
]
