from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, List, Sequence

from .types import ModuleSchema

NOT_ENTERED = 0.0


def to_decimal(value: Any) -> Decimal:
    """Exact decimal for a stored grade or weight (``3.95`` stays ``3.95``)."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_tenths(value: Decimal | float) -> float:
    """Round half-up at the tenths place (4.65 -> 4.7, unlike ``round``).

    Pass a ``Decimal`` for computed averages; a float that already lost
    the tie (3.9499999...) cannot be recovered here.
    """
    return float(to_decimal(value).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def coerce_grade(raw: Any, scale_max: float = 7.0) -> float:
    """Turn any staff input into a storable grade.

    Empty or non-numeric input becomes ``0`` (not entered); numbers are
    clamped to ``[0, scale_max]`` and rounded to one decimal.
    """
    if raw is None or isinstance(raw, bool):
        return NOT_ENTERED
    text = str(raw).strip().replace(",", ".")
    if not text:
        return NOT_ENTERED
    try:
        value = Decimal(text)
    except InvalidOperation:
        return NOT_ENTERED
    if not value.is_finite():
        return NOT_ENTERED
    value = max(Decimal(0), min(value, Decimal(str(scale_max))))
    return float(value.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def is_entered(value: Any) -> bool:
    try:
        return value is not None and float(value) > 0
    except (TypeError, ValueError):
        return False


def entered_grades(grades: Sequence[Any]) -> List[float]:
    return [float(g) for g in grades or [] if is_entered(g)]


def read_slot(grades: Sequence[Any], index: int) -> float:
    if index < 0 or index >= len(grades or []):
        return NOT_ENTERED
    value = grades[index]
    return float(value) if is_entered(value) else NOT_ENTERED


def write_slot(grades: Sequence[Any], index: int, raw: Any, scale_max: float = 7.0) -> List[float]:
    """Return a copy of ``grades`` with ``index`` set, padding with zeros."""
    if index < 0:
        raise IndexError(index)
    out = [float(g) if is_entered(g) else NOT_ENTERED for g in grades or []]
    while len(out) <= index:
        out.append(NOT_ENTERED)
    out[index] = coerce_grade(raw, scale_max)
    return out


def global_index(schema: ModuleSchema, module_index: int, eval_index: int) -> int:
    if module_index < 0 or module_index >= len(schema.modules):
        raise IndexError(module_index)
    module = schema.modules[module_index]
    if eval_index < 0 or eval_index >= module.evaluation_count:
        raise IndexError(eval_index)
    return sum(m.evaluation_count for m in schema.modules[:module_index]) + eval_index


def module_slice(schema: ModuleSchema, module_id: str) -> slice:
    start = 0
    for module in schema.modules:
        if module.module_id == module_id:
            return slice(start, start + module.evaluation_count)
        start += module.evaluation_count
    raise KeyError(module_id)


class GradeLedger:
    """Per-enrollment grades keyed by module identity.

    The ``module_id -> grades`` map is the source of truth. The positional
    flat vector that the enrollment row stores is derived with
    :meth:`to_flat` and parsed back with :meth:`from_flat`; both need the
    schema the vector was (or will be) laid out with.
    """

    def __init__(self, by_module: Dict[str, List[float]] | None = None, scale_max: float = 7.0):
        self.scale_max = scale_max
        self._by_module: Dict[str, List[float]] = {
            str(k): [float(g) if is_entered(g) else NOT_ENTERED for g in v]
            for k, v in (by_module or {}).items()
        }

    @classmethod
    def from_flat(cls, schema: ModuleSchema, flat: Sequence[Any], scale_max: float = 7.0) -> "GradeLedger":
        by_module: Dict[str, List[float]] = {}
        cursor = 0
        for module in schema.modules:
            by_module[module.module_id] = [
                read_slot(flat, cursor + i) for i in range(module.evaluation_count)
            ]
            cursor += module.evaluation_count
        return cls(by_module, scale_max=scale_max)

    def to_flat(self, schema: ModuleSchema) -> List[float]:
        flat: List[float] = []
        for module in schema.modules:
            flat.extend(self.module_grades(module.module_id, module.evaluation_count))
        return flat

    def module_grades(self, module_id: str, evaluation_count: int | None = None) -> List[float]:
        grades = list(self._by_module.get(module_id, []))
        if evaluation_count is None:
            return grades
        grades = grades[:evaluation_count]
        grades.extend([NOT_ENTERED] * (evaluation_count - len(grades)))
        return grades

    def as_dict(self) -> Dict[str, List[float]]:
        return {k: list(v) for k, v in self._by_module.items()}

    def module_ids(self) -> List[str]:
        return list(self._by_module.keys())

    def get(self, module_id: str, eval_index: int) -> float:
        return read_slot(self._by_module.get(module_id, []), eval_index)

    def set(self, module_id: str, eval_index: int, raw: Any) -> float:
        updated = write_slot(self._by_module.get(module_id, []), eval_index, raw, self.scale_max)
        self._by_module[module_id] = updated
        return updated[eval_index]

    def entered_count(self) -> int:
        return sum(len(entered_grades(v)) for v in self._by_module.values())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GradeLedger):
            return NotImplemented
        return self._by_module == other._by_module

    def __repr__(self) -> str:
        return f"GradeLedger({self._by_module!r})"
