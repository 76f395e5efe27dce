# webauto/timings.py
"""
@file timings.py
@brief Attempt budget presets and defaults for polling steps.
"""

from __future__ import annotations
from copy import deepcopy
from typing import Any, Dict


WAIT_FIELDS: Dict[str, Dict[str, Any]] = {
    "wait_for": {"max_attempts": 10, "interval": 1.0},
    "selector_exists": {"max_attempts": 10, "interval": 1.0},
    "selector_visible": {"max_attempts": 10, "interval": 1.0},
    "any_visible": {"max_attempts": 10, "interval": 1.0},
    "element_text": {"max_attempts": 10, "interval": 1.0},
    "visible_text": {"max_attempts": 10, "interval": 1.0},
}

PRESET_OVERRIDES: Dict[str, Dict[str, Any]] = {
    "fast": {
        "wait_for": {"max_attempts": 10, "interval": 0.5},
        "selector_exists": {"max_attempts": 10, "interval": 0.3},
        "selector_visible": {"max_attempts": 10, "interval": 0.3},
        "any_visible": {"max_attempts": 10, "interval": 0.3},
        "element_text": {"max_attempts": 10, "interval": 0.3},
        "visible_text": {"max_attempts": 10, "interval": 0.3},
    },
    "slow": {
        "wait_for": {"max_attempts": 20},
        "selector_exists": {"max_attempts": 20},
        "selector_visible": {"max_attempts": 20},
        "any_visible": {"max_attempts": 20},
        "element_text": {"max_attempts": 20},
        "visible_text": {"max_attempts": 20},
    },
    "ci": {
        "wait_for": {"max_attempts": 30},
        "selector_exists": {"max_attempts": 30},
        "selector_visible": {"max_attempts": 30},
        "any_visible": {"max_attempts": 30},
        "element_text": {"max_attempts": 30},
        "visible_text": {"max_attempts": 30, "interval": 2.0},
    },
}


def list_presets() -> Dict[str, Dict[str, Any]]:
    return {"default": {}, **PRESET_OVERRIDES}


def build_preset_values(preset: str) -> Dict[str, Dict[str, Any]]:
    preset_key = (preset or "default").lower()
    values: Dict[str, Dict[str, Any]] = deepcopy(WAIT_FIELDS)

    if preset_key == "default":
        return values

    overrides = PRESET_OVERRIDES.get(preset_key)
    if overrides is None:
        raise ValueError(f"Unknown timing preset: {preset}")

    for key, value in overrides.items():
        values[key].update(value)

    return values
