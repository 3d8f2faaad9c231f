"""Pure editing operations on a :class:`ModuleSchema`.

Each operation returns a new schema and keeps the invariant
``evaluation_count == len(evaluation_weights)`` for every module it
touches.
"""

from __future__ import annotations

import uuid
from dataclasses import replace
from typing import Any, List, Tuple

from .types import MAX_EVALUATIONS_PER_MODULE, Module, ModuleSchema

EDITABLE_FIELDS = {"name", "weight", "start_date", "end_date", "relator"}


def even_weights(count: int) -> Tuple[float, ...]:
    """Split 100% across ``count`` evaluations; the last one absorbs rounding."""
    if count <= 0:
        return ()
    base = round(100.0 / count, 1)
    weights = [base] * count
    weights[-1] = round(100.0 - base * (count - 1), 1)
    return tuple(weights)


def new_module_id() -> str:
    return f"MOD-{uuid.uuid4().hex[:12].upper()}"


def add_module(schema: ModuleSchema, name: str | None = None, module_id: str | None = None) -> ModuleSchema:
    module = Module(
        module_id=module_id or new_module_id(),
        name=name or f"Module {len(schema.modules) + 1}",
        evaluation_count=1,
        evaluation_weights=(100.0,),
        weight=0.0,
        class_dates=(),
    )
    return ModuleSchema(modules=schema.modules + (module,))


def _replace_module(schema: ModuleSchema, module_id: str, **changes: Any) -> ModuleSchema:
    idx = schema.index_of(module_id)
    modules = list(schema.modules)
    modules[idx] = replace(modules[idx], **changes)
    return ModuleSchema(modules=tuple(modules))


def update_module(schema: ModuleSchema, module_id: str, field_name: str, value: Any) -> ModuleSchema:
    if field_name == "evaluation_count":
        return set_evaluation_count(schema, module_id, value)
    if field_name == "evaluation_weights":
        return set_evaluation_weights(schema, module_id, value)
    if field_name not in EDITABLE_FIELDS:
        raise ValueError(f"Field {field_name!r} cannot be edited")
    if field_name == "weight":
        try:
            value = max(float(value or 0), 0.0)
        except (TypeError, ValueError):
            value = 0.0
    return _replace_module(schema, module_id, **{field_name: value})


def set_evaluation_count(schema: ModuleSchema, module_id: str, count: Any) -> ModuleSchema:
    try:
        n = int(count or 0)
    except (TypeError, ValueError):
        n = 0
    n = max(0, min(n, MAX_EVALUATIONS_PER_MODULE))
    return _replace_module(schema, module_id, evaluation_count=n, evaluation_weights=even_weights(n))


def set_evaluation_weights(schema: ModuleSchema, module_id: str, weights: Any) -> ModuleSchema:
    module = schema.get(module_id)
    values: List[float] = []
    for w in list(weights or [])[: module.evaluation_count]:
        try:
            values.append(max(float(w or 0), 0.0))
        except (TypeError, ValueError):
            values.append(0.0)
    values.extend([0.0] * (module.evaluation_count - len(values)))
    return _replace_module(schema, module_id, evaluation_weights=tuple(values))


def remove_module(schema: ModuleSchema, module_id: str) -> ModuleSchema:
    schema.index_of(module_id)
    return ModuleSchema(modules=tuple(m for m in schema.modules if m.module_id != module_id))


def move_module(schema: ModuleSchema, module_id: str, new_index: int) -> ModuleSchema:
    modules = list(schema.modules)
    module = modules.pop(schema.index_of(module_id))
    new_index = max(0, min(int(new_index), len(modules)))
    modules.insert(new_index, module)
    return ModuleSchema(modules=tuple(modules))


def add_class_date(schema: ModuleSchema, module_id: str, date: str) -> ModuleSchema:
    if not date:
        return schema
    module = schema.get(module_id)
    if date in module.class_dates:
        return schema
    return _replace_module(schema, module_id, class_dates=tuple(sorted(module.class_dates + (date,))))


def remove_class_date(schema: ModuleSchema, module_id: str, date: str) -> ModuleSchema:
    module = schema.get(module_id)
    return _replace_module(schema, module_id, class_dates=tuple(d for d in module.class_dates if d != date))


def weight_warnings(schema: ModuleSchema) -> List[str]:
    """Human-readable notes about weights that do not sum to 100."""
    out: List[str] = []
    for module in schema.modules:
        if module.evaluation_count and module.has_valid_weights():
            total = round(sum(module.evaluation_weights), 1)
            if total != 100.0:
                out.append(f"{module.name or module.module_id}: evaluation weights sum to {total}%")
    if not schema.all_weights_unset:
        total = round(sum(float(m.weight or 0) for m in schema.modules), 1)
        if total != 100.0:
            out.append(f"Module weights sum to {total}%")
    return out
