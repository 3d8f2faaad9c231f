from django.conf import settings
from django.db import models

from gradebook.academic.types import (
    AcademicState,
    ActivityKind,
    ActivitySpec,
    DEFAULT_EVALUATION_COUNT,
    DEFAULT_SESSION_COUNT,
    EnrollmentRecord,
    ModuleSchema,
    Situation,
)


def default_evaluation_count() -> int:
    return int(getattr(settings, "GRADEBOOK_DEFAULT_EVALUATION_COUNT", DEFAULT_EVALUATION_COUNT))


def default_session_count() -> int:
    return int(getattr(settings, "GRADEBOOK_DEFAULT_SESSION_COUNT", DEFAULT_SESSION_COUNT))


class Activity(models.Model):
    # CODE-YEAR-PERIOD-VERSION
    id = models.CharField(max_length=64, primary_key=True)
    name = models.CharField(max_length=255)
    kind = models.CharField(max_length=16, choices=ActivityKind.CHOICES, default=ActivityKind.COURSE)
    evaluation_count = models.PositiveSmallIntegerField(default=default_evaluation_count)
    session_count = models.PositiveSmallIntegerField(default=default_session_count)
    program_config = models.JSONField(default=dict, blank=True)
    closed_at = models.DateTimeField(null=True, blank=True)
    verification_code = models.CharField(max_length=32, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    @property
    def is_closed(self) -> bool:
        return self.closed_at is not None

    @property
    def schema(self) -> ModuleSchema:
        return ModuleSchema.from_config(self.program_config)

    def to_spec(self) -> ActivitySpec:
        return ActivitySpec(
            activity_id=self.id,
            kind=self.kind,
            evaluation_count=int(self.evaluation_count or 0),
            session_count=int(self.session_count or 0),
            schema=self.schema,
            is_closed=self.is_closed,
        )

    def __str__(self):
        return f"{self.id} - {self.name}"


class Enrollment(models.Model):
    participant_id = models.CharField(max_length=32)
    activity = models.ForeignKey(Activity, on_delete=models.CASCADE, related_name="enrollments")
    grades = models.JSONField(default=list, blank=True)
    attendance = models.JSONField(default=dict, blank=True)
    situation = models.CharField(max_length=16, choices=Situation.CHOICES, default=Situation.ACTIVE)
    final_grade = models.FloatField(null=True, blank=True)
    attendance_percentage = models.PositiveSmallIntegerField(default=0)
    state = models.CharField(max_length=16, choices=AcademicState.CHOICES, default=AcademicState.ENROLLED)
    # grades dropped by schema changes: [{"archived_at": iso, "grades": {module_id: [..]}}]
    archived_grades = models.JSONField(default=list, blank=True)
    observation = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["participant_id"]
        constraints = [
            models.UniqueConstraint(fields=["participant_id", "activity"], name="uniq_enrollment_participant_activity"),
        ]
        indexes = [
            models.Index(fields=["activity", "state"], name="gradebook_enr_act_state_idx"),
        ]

    def to_record(self) -> EnrollmentRecord:
        return EnrollmentRecord(
            enrollment_id=self.pk,
            participant_id=self.participant_id,
            activity_id=self.activity_id,
            grades=[float(g or 0) for g in (self.grades or [])],
            attendance={str(k): bool(v) for k, v in (self.attendance or {}).items()},
            situation=self.situation,
            final_grade=self.final_grade,
            attendance_percentage=int(self.attendance_percentage or 0),
            state=self.state,
        )

    def __str__(self):
        return f"{self.participant_id} @ {self.activity_id} ({self.state})"


class InstitutionSetting(models.Model):
    """
    Singleton grading thresholds; absent row means settings defaults.
    """

    min_passing_grade = models.FloatField(default=4.0)
    min_attendance_percentage = models.FloatField(default=75.0)
    grade_scale_max = models.FloatField(default=7.0)
    updated_at = models.DateTimeField(auto_now=True)

    def save(self, *args, **kwargs):
        self.pk = 1
        super().save(*args, **kwargs)

    def __str__(self):
        return (
            "InstitutionSetting("
            f"min_passing_grade={self.min_passing_grade}, "
            f"min_attendance_percentage={self.min_attendance_percentage}, "
            f"grade_scale_max={self.grade_scale_max}"
            ")"
        )
