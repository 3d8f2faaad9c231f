from __future__ import annotations

from django.conf import settings

from .academic.types import GradingThresholds
from .models import InstitutionSetting


def _get_cfg() -> InstitutionSetting | None:
    try:
        return InstitutionSetting.objects.first()
    except Exception:
        return None


def get_default_thresholds() -> GradingThresholds:
    return GradingThresholds(
        min_passing_grade=float(getattr(settings, "GRADEBOOK_MIN_PASSING_GRADE", 4.0)),
        min_attendance_pct=float(getattr(settings, "GRADEBOOK_MIN_ATTENDANCE_PCT", 75.0)),
        grade_scale_max=float(getattr(settings, "GRADEBOOK_GRADE_SCALE_MAX", 7.0)),
    )


def get_grading_thresholds() -> GradingThresholds:
    defaults = get_default_thresholds()
    cfg = _get_cfg()
    if cfg is None:
        return defaults

    return GradingThresholds(
        min_passing_grade=float(cfg.min_passing_grade or defaults.min_passing_grade),
        min_attendance_pct=float(
            cfg.min_attendance_percentage
            if cfg.min_attendance_percentage is not None
            else defaults.min_attendance_pct
        ),
        grade_scale_max=float(cfg.grade_scale_max or defaults.grade_scale_max),
    )
