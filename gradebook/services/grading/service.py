from __future__ import annotations

import logging
import secrets
import time
from dataclasses import asdict, dataclass
from typing import Any, List

from asgiref.sync import sync_to_async
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from gradebook.academic.migrator import SchemaMigrator
from gradebook.academic.projection import evaluate
from gradebook.academic.stats import tracking_stats
from gradebook.academic.types import ActivityKind, ActivitySpec, ModuleSchema
from gradebook.models import Activity, Enrollment
from gradebook.services.grading import repository
from gradebook.services.grading.buffer import PendingEditBuffer
from gradebook.services.grading.navigation import UnsavedChangesGuard
from gradebook.services.grading.sync import PersistFn, SyncCoordinator
from gradebook.services.shared.dto import SchemaChangeResult, StatsPayload
from gradebook.services.shared.errors import ActivityClosedError, LossyMigrationError, ValidationError
from gradebook.system_settings import get_grading_thresholds

logger = logging.getLogger(__name__)


@dataclass
class GradingSession:
    buffer: PendingEditBuffer
    coordinator: SyncCoordinator
    guard: UnsavedChangesGuard


def open_grading_session(activity_id: str, persist: PersistFn | None = None) -> GradingSession:
    activity = repository.get_activity(activity_id)
    buffer = PendingEditBuffer(
        activity.to_spec(),
        repository.load_records(activity_id),
        thresholds=get_grading_thresholds(),
    )
    coordinator = SyncCoordinator(buffer, persist or repository.persist_update)
    return GradingSession(buffer=buffer, coordinator=coordinator, guard=UnsavedChangesGuard(buffer, coordinator))


aopen_grading_session = sync_to_async(open_grading_session)


def _locked_activity(activity_id: str) -> Activity:
    try:
        return Activity.objects.select_for_update().get(pk=activity_id)
    except Activity.DoesNotExist:
        raise ValidationError(f"Activity {activity_id!r} not found") from None


def _refresh_cached_columns(enrollment: Enrollment, spec: ActivitySpec, thresholds) -> bool:
    progress = evaluate(spec, enrollment.grades or [], enrollment.attendance or {}, thresholds)
    changed = (
        enrollment.final_grade != progress.final_grade
        or enrollment.attendance_percentage != progress.attendance_percentage
        or enrollment.state != progress.state
    )
    enrollment.final_grade = progress.final_grade
    enrollment.attendance_percentage = progress.attendance_percentage
    enrollment.state = progress.state
    return changed


def apply_schema_change(
    activity_id: str,
    new_schema: ModuleSchema,
    *,
    allow_discard: bool = True,
) -> SchemaChangeResult:
    """Save a new module schema and re-slice every enrollment's grades by module id.

    Grades that no longer fit (removed module, shrunk evaluation count) are
    archived on the enrollment. With ``allow_discard=False`` such a change is
    refused before anything is written.
    """
    t0 = time.time()
    with transaction.atomic():
        activity = _locked_activity(activity_id)
        if activity.is_closed:
            raise ActivityClosedError(f"Activity {activity_id} is closed")
        if activity.kind != ActivityKind.PROGRAM:
            raise ValidationError("Module schemas only apply to modular programs")

        migrator = SchemaMigrator(activity.schema, new_schema)
        enrollments = {e.pk: e for e in Enrollment.objects.filter(activity=activity)}
        plan = migrator.plan((pk, e.grades or []) for pk, e in enrollments.items())

        lossy = {pk: r.discarded for pk, r in plan.items() if r.is_lossy}
        if lossy and not allow_discard:
            raise LossyMigrationError(
                f"Schema change would discard grades for {len(lossy)} enrollment(s)",
                discarded=lossy,
            )

        activity.program_config = {**(activity.program_config or {}), **new_schema.to_config()}
        activity.evaluation_count = new_schema.total_evaluations
        activity.save(update_fields=["program_config", "evaluation_count", "updated_at"])

        thresholds = get_grading_thresholds()
        spec = activity.to_spec()
        result = SchemaChangeResult()
        archived_at = timezone.now().isoformat()
        for pk, enrollment in enrollments.items():
            fields: List[str] = []
            migration = plan.get(pk)
            if migration is not None:
                enrollment.grades = migration.grades
                fields.append("grades")
                result.updated.append(pk)
                if migration.is_lossy:
                    enrollment.archived_grades = list(enrollment.archived_grades or []) + [
                        {"archived_at": archived_at, "grades": migration.discarded}
                    ]
                    fields.append("archived_grades")
                    result.archived[pk] = migration.discarded
                    logger.warning(
                        "schema_change_archived_grades activity=%s enrollment=%s modules=%s",
                        activity_id,
                        pk,
                        ",".join(sorted(migration.discarded)),
                    )
            if _refresh_cached_columns(enrollment, spec, thresholds):
                fields.extend(["final_grade", "attendance_percentage", "state"])
            if fields:
                enrollment.save(update_fields=fields + ["updated_at"])

    logger.info(
        "schema_change activity=%s modules=%s updated=%s archived=%s ms=%s",
        activity_id,
        len(new_schema),
        len(result.updated),
        len(result.archived),
        int((time.time() - t0) * 1000),
    )
    return result


def _new_verification_code() -> str:
    prefix = getattr(settings, "GRADEBOOK_VERIFICATION_PREFIX", "ACTA")
    return f"{prefix}-{secrets.token_hex(4).upper()}"


def close_activity(activity_id: str) -> str:
    """Freeze grading for an activity; returns its permanent verification code."""
    with transaction.atomic():
        activity = _locked_activity(activity_id)
        if activity.is_closed:
            return activity.verification_code
        thresholds = get_grading_thresholds()
        spec = activity.to_spec()
        for enrollment in Enrollment.objects.filter(activity=activity):
            if _refresh_cached_columns(enrollment, spec, thresholds):
                enrollment.save(update_fields=["final_grade", "attendance_percentage", "state", "updated_at"])
        activity.closed_at = timezone.now()
        activity.verification_code = _new_verification_code()
        activity.save(update_fields=["closed_at", "verification_code", "updated_at"])
    logger.info("activity_closed activity=%s code=%s", activity_id, activity.verification_code)
    return activity.verification_code


def recompute_activity(activity_id: str, *, dry_run: bool = False) -> List[Any]:
    """Rebuild cached final grade / attendance / state; return ids whose cache was stale."""
    activity = repository.get_activity(activity_id)
    if activity.is_closed:
        raise ActivityClosedError(f"Activity {activity_id} is closed")
    thresholds = get_grading_thresholds()
    spec = activity.to_spec()
    stale: List[Any] = []
    for enrollment in Enrollment.objects.filter(activity=activity):
        if not _refresh_cached_columns(enrollment, spec, thresholds):
            continue
        stale.append(enrollment.pk)
        if not dry_run:
            enrollment.save(update_fields=["final_grade", "attendance_percentage", "state", "updated_at"])
    return stale


def activity_stats(activity_id: str) -> StatsPayload:
    activity = repository.get_activity(activity_id)
    stats = tracking_stats(
        activity.to_spec(),
        repository.load_records(activity_id),
        get_grading_thresholds(),
    )
    return StatsPayload(**asdict(stats))
