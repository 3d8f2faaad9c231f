"""Module and final averages.

Every function here is pure. ``None`` means "nothing entered yet" and is
rendered as ``"-"`` by :func:`format_grade`. Sums and divisions run on
``Decimal`` so that x.x5 ties round up at the tenths place.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from .ledger import GradeLedger, entered_grades, is_entered, round_tenths, to_decimal
from .types import Module, ModuleSchema

UNDEFINED = "-"


def format_grade(value: Optional[float]) -> str:
    return UNDEFINED if value is None else f"{value:.1f}"


def decimal_mean(values: Sequence[Any]) -> Optional[Decimal]:
    if not values:
        return None
    return sum((to_decimal(v) for v in values), Decimal(0)) / len(values)


def _renormalized(pairs: List[tuple[Any, Any]]) -> Optional[Decimal]:
    """Weighted mean over ``(value, weight)`` pairs, ``None`` if weights sum to 0."""
    total_weight = sum((to_decimal(w) for _, w in pairs), Decimal(0))
    if total_weight <= 0:
        return None
    return sum((to_decimal(v) * to_decimal(w) for v, w in pairs), Decimal(0)) / total_weight


def course_average(grades: Sequence[Any], expected_count: int | None = None) -> Optional[float]:
    """Arithmetic mean of the entered grades of a simple course.

    With ``expected_count`` only the declared evaluation slots count; stale
    grades past a reduced count are ignored.
    """
    slots = list(grades or [])
    if expected_count is not None:
        slots = slots[: max(int(expected_count), 0)]
    avg = decimal_mean(entered_grades(slots))
    return None if avg is None else round_tenths(avg)


def module_average(module: Module, grades: Sequence[Any]) -> Optional[float]:
    slots = list(grades or [])[: module.evaluation_count]
    entered = [float(g) for g in slots if is_entered(g)]
    if not entered:
        return None

    if module.has_valid_weights():
        pairs = [
            (float(g), float(module.evaluation_weights[i] or 0))
            for i, g in enumerate(slots)
            if is_entered(g)
        ]
        weighted = _renormalized(pairs)
        if weighted is not None:
            return round_tenths(weighted)

    return round_tenths(decimal_mean(entered))


def module_averages(schema: ModuleSchema, ledger: GradeLedger) -> Dict[str, Optional[float]]:
    return {
        module.module_id: module_average(module, ledger.module_grades(module.module_id, module.evaluation_count))
        for module in schema.modules
    }


def final_grade(schema: ModuleSchema, ledger: GradeLedger) -> Optional[float]:
    averages = module_averages(schema, ledger)
    defined = [(m, averages[m.module_id]) for m in schema.modules if averages[m.module_id] is not None]
    if not defined:
        return None

    if schema.all_weights_unset:
        return round_tenths(decimal_mean([avg for _, avg in defined]))

    weighted = _renormalized([(avg, float(m.weight or 0)) for m, avg in defined])
    if weighted is None:
        # only zero-weight modules have grades so far
        return round_tenths(decimal_mean([avg for _, avg in defined]))
    return round_tenths(weighted)


def program_final_grade(schema: ModuleSchema, flat_grades: Sequence[Any]) -> Optional[float]:
    return final_grade(schema, GradeLedger.from_flat(schema, flat_grades))
