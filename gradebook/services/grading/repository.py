"""Django ORM adapter for enrollment reads and commit writes."""

from __future__ import annotations

import logging
from typing import List

from gradebook.academic.types import EnrollmentRecord
from gradebook.models import Activity, Enrollment
from gradebook.services.shared.dto import EnrollmentUpdate
from gradebook.services.shared.errors import ExternalDependencyError, ValidationError

logger = logging.getLogger(__name__)


def get_activity(activity_id: str) -> Activity:
    try:
        return Activity.objects.get(pk=activity_id)
    except Activity.DoesNotExist:
        raise ValidationError(f"Activity {activity_id!r} not found") from None


def load_records(activity_id: str) -> List[EnrollmentRecord]:
    qs = Enrollment.objects.filter(activity_id=activity_id).order_by("participant_id")
    return [enr.to_record() for enr in qs]


async def persist_update(update: EnrollmentUpdate) -> None:
    """Write one commit. Closed activities and missing rows are refused."""
    try:
        rows = await Enrollment.objects.filter(
            pk=update["enrollment_id"],
            activity__closed_at__isnull=True,
        ).aupdate(
            grades=list(update["grades"]),
            attendance=dict(update["attendance"]),
            final_grade=update["final_grade"],
            attendance_percentage=int(update["attendance_percentage"]),
            state=update["state"],
        )
    except Exception as exc:
        raise ExternalDependencyError(f"Enrollment update failed: {exc}") from exc
    if rows != 1:
        raise ExternalDependencyError(
            f"Enrollment {update['enrollment_id']!r} not updated (missing or activity closed)"
        )
