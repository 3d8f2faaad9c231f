"""Re-slice flat grade vectors when a module schema changes.

Grades follow their module by identity. A module whose evaluation count
shrinks loses its trailing slots; those entered grades are reported in
:attr:`MigrationResult.discarded` so the caller can archive or refuse.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Sequence, Tuple

from .ledger import GradeLedger, entered_grades, is_entered
from .types import ModuleSchema


def _trimmed(flat: Sequence[Any]) -> List[float]:
    out = [float(g) if is_entered(g) else 0.0 for g in flat or []]
    while out and out[-1] == 0.0:
        out.pop()
    return out


@dataclass(frozen=True)
class MigrationResult:
    grades: List[float]
    changed: bool
    discarded: Dict[str, List[float]] = field(default_factory=dict)

    @property
    def is_lossy(self) -> bool:
        return any(self.discarded.values())


def remap_grades(old_schema: ModuleSchema, new_schema: ModuleSchema, flat: Sequence[Any]) -> MigrationResult:
    ledger = GradeLedger.from_flat(old_schema, flat)
    remapped = ledger.to_flat(new_schema)

    discarded: Dict[str, List[float]] = {}
    new_counts = {m.module_id: m.evaluation_count for m in new_schema.modules}
    for module in old_schema.modules:
        old_grades = ledger.module_grades(module.module_id)
        keep = new_counts.get(module.module_id, 0)
        lost = entered_grades(old_grades[keep:])
        if lost:
            discarded[module.module_id] = lost

    return MigrationResult(grades=remapped, changed=_trimmed(remapped) != _trimmed(flat), discarded=discarded)


class SchemaMigrator:
    """Applies one old -> new schema transition to many enrollments."""

    def __init__(self, old_schema: ModuleSchema, new_schema: ModuleSchema):
        self.old_schema = old_schema
        self.new_schema = new_schema

    def migrate(self, flat: Sequence[Any]) -> MigrationResult:
        return remap_grades(self.old_schema, self.new_schema, flat)

    def plan(self, vectors: Iterable[Tuple[Any, Sequence[Any]]]) -> Dict[Any, MigrationResult]:
        """Return only the enrollments whose vector actually changes."""
        out: Dict[Any, MigrationResult] = {}
        for key, flat in vectors:
            result = self.migrate(flat)
            if result.changed:
                out[key] = result
        return out

    def would_discard(self, vectors: Iterable[Tuple[Any, Sequence[Any]]]) -> Dict[Any, Dict[str, List[float]]]:
        return {
            key: result.discarded
            for key, result in self.plan(vectors).items()
            if result.is_lossy
        }
