from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

import yaml


_DATA_DIR = Path(__file__).resolve().parents[1] / "data"


class ScenarioAssertionError(AssertionError):
    pass


def _load_yaml(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ScenarioAssertionError(f"Invalid YAML root object at {path}")
    return data


def load_course_scenarios() -> List[Dict[str, Any]]:
    data = _load_yaml(_DATA_DIR / "grading_scenarios.yaml")
    scenarios = data.get("course_scenarios") or []
    if not isinstance(scenarios, list) or not scenarios:
        raise ScenarioAssertionError("course_scenarios must be a non-empty list")
    for sc in scenarios:
        for key in ("name", "grades", "expected_count", "attendance_pct", "expected_state"):
            if key not in sc:
                raise ScenarioAssertionError(f"Scenario {sc.get('name', '?')} missing '{key}'")
    return scenarios
