# File: utils/math_utils.py
"""Numeric helpers for Daily Reps.

Pure Python math functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

⚠️ UTILS PURITY: NO `homeassistant.*` imports allowed.

Functions:
    - clamp: Bound a value to a closed range
    - clamp_threshold: Completion threshold clamped to [0.5, 1.0]
    - coerce_int: Lenient int conversion with a floor and a fallback
    - calculate_percentage: Whole-number percentage for display
    - parse_quick_steps: Parse comma-separated or list quick-step input
"""

from __future__ import annotations

from collections.abc import Iterable
import logging
import math
from typing import Any

# Module-level logger (no HA dependency)
_LOGGER = logging.getLogger(__name__)

# ==============================================================================
# Constants (local copies to avoid circular imports)
# ==============================================================================

THRESHOLD_MIN = 0.5
THRESHOLD_MAX = 1.0
THRESHOLD_DEFAULT = 1.0
QUICK_STEP_MIN = 1
QUICK_STEP_MAX = 999


# ==============================================================================
# Clamping
# ==============================================================================


def clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp a value between minimum and maximum bounds.

    Examples:
        clamp(150, 0, 100) → 100
        clamp(-10, 0, 100) → 0
    """
    return max(min_val, min(value, max_val))


def clamp_threshold(value: Any) -> float:
    """Return a completion threshold clamped to [0.5, 1.0].

    Missing or non-numeric values fall back to 1.0. Clamping is silent;
    out-of-range input never raises.

    Examples:
        clamp_threshold(0.3) → 0.5
        clamp_threshold(None) → 1.0
        clamp_threshold("0.8") → 0.8
    """
    try:
        threshold = float(value)
    except (TypeError, ValueError):
        return THRESHOLD_DEFAULT
    if math.isnan(threshold):
        return THRESHOLD_DEFAULT
    return clamp(threshold, THRESHOLD_MIN, THRESHOLD_MAX)


def coerce_int(value: Any, default: int = 0, minimum: int | None = None) -> int:
    """Convert `value` to int, falling back to `default` when impossible.

    Floats are truncated toward zero. Booleans are not treated as numbers.
    When `minimum` is given the result is raised to at least that value.

    Examples:
        coerce_int("12") → 12
        coerce_int(None, default=1) → 1
        coerce_int(-4, minimum=0) → 0
    """
    result = default
    if isinstance(value, bool):
        result = default
    elif isinstance(value, int):
        result = value
    elif isinstance(value, float):
        result = int(value) if math.isfinite(value) else default
    elif isinstance(value, str):
        try:
            result = int(float(value.strip()))
        except (ValueError, OverflowError):
            result = default

    if minimum is not None and result < minimum:
        return minimum
    return result


# ==============================================================================
# Presentation
# ==============================================================================


def calculate_percentage(current: float, target: float) -> int:
    """Return `current / target` as a whole-number percentage.

    Rounds half up. Only used at the presentation boundary; stored values are
    never rounded.

    Examples:
        calculate_percentage(7, 10) → 70
        calculate_percentage(1, 3) → 33
        calculate_percentage(5, 0) → 0  # Division by zero protection
    """
    if target <= 0:
        return 0
    return math.floor((current / target) * 100 + 0.5)


# ==============================================================================
# Quick-step Parsing
# ==============================================================================


def parse_quick_steps(raw_input: str | Iterable[Any] | None) -> list[int]:
    """Parse quick-step input into valid step values.

    Accepts a comma-separated string ("5, 10, 20") or any iterable. Values
    outside 1..999 and non-numeric parts are skipped. Order and duplicates
    are preserved; see data_builders.derive_quick_steps for the final shape.

    Examples:
        parse_quick_steps("5,10,x,2000") → [5, 10]
        parse_quick_steps([3, "4", 0]) → [3, 4]
        parse_quick_steps(None) → []
    """
    if raw_input is None:
        return []

    parts: Iterable[Any]
    if isinstance(raw_input, str):
        parts = raw_input.split(",")
    else:
        parts = raw_input

    steps: list[int] = []
    for part in parts:
        if isinstance(part, str):
            part = part.strip()
            if not part:
                continue
        step = coerce_int(part, default=0)
        if QUICK_STEP_MIN <= step <= QUICK_STEP_MAX:
            steps.append(step)
        else:
            _LOGGER.debug("DEBUG: Skipping invalid quick step value '%s'", part)
    return steps
