# File: helpers/quick_action_helpers.py
"""Quick-action helper functions for Daily Reps.

A quick action is a one-shot request carried in a URL query, e.g. from a
phone shortcut or an NFC tag:

    ?dec=20&exercise=Push-ups   → log 20 repetitions
    ?add=2                       → add two daily targets to the first exercise

Parameters:
    - dec: decrement amount (whole number >= 1)
    - add: multiples of the daily target to add (whole number >= 1)
    - exercise: optional exercise name; falls back to the first exercise

When both `dec` and `add` are present, `dec` wins. After the action is
applied the caller rewrites the query without these parameters so a reload
does not replay it.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
import re
from typing import Any
from urllib.parse import parse_qsl, urlencode

from .. import const
from ..type_defs import ExerciseData, QuickAction
from ..utils.math_utils import coerce_int

_WHITESPACE_RE = re.compile(r"\s+")


# ==============================================================================
# Query parsing
# ==============================================================================


def _query_to_dict(query: Mapping[str, Any] | str | None) -> dict[str, Any]:
    """Return the query as a flat dict; the first value of a repeated key wins."""
    if query is None:
        return {}
    if isinstance(query, str):
        params: dict[str, Any] = {}
        for key, value in parse_qsl(query.lstrip("?"), keep_blank_values=True):
            params.setdefault(key, value)
        return params
    params = {}
    for key, value in query.items():
        if isinstance(value, (list, tuple)):
            value = value[0] if value else ""
        params[key] = value
    return params


def _positive_amount(raw: Any) -> int | None:
    """Return `raw` as a whole number >= 1, or None."""
    if raw is None or raw == "":
        return None
    amount = coerce_int(raw, default=0)
    return amount if amount >= 1 else None


def parse_quick_action(query: Mapping[str, Any] | str | None) -> QuickAction | None:
    """Extract a quick action from URL query parameters.

    Args:
        query: Raw query string (with or without the leading ``?``) or an
            already-parsed mapping.

    Returns:
        The parsed action, or None if neither ``dec`` nor ``add`` carries a
        whole number >= 1.

    Example:
        parse_quick_action("dec=20&add=1")
        → {"action": "decrement", "amount": 20, "exercise_name": None}
    """
    params = _query_to_dict(query)
    raw_name = params.get(const.QUICK_ACTION_PARAM_EXERCISE)
    exercise_name = (str(raw_name).strip() or None) if raw_name is not None else None

    amount = _positive_amount(params.get(const.QUICK_ACTION_PARAM_DEC))
    if amount is not None:
        return {
            "action": const.QUICK_ACTION_DECREMENT,
            "amount": amount,
            "exercise_name": exercise_name,
        }

    amount = _positive_amount(params.get(const.QUICK_ACTION_PARAM_ADD))
    if amount is not None:
        return {
            "action": const.QUICK_ACTION_ADD_TARGET,
            "amount": amount,
            "exercise_name": exercise_name,
        }
    return None


def strip_quick_action_params(
    query: Mapping[str, Any] | str | None,
) -> dict[str, Any] | str:
    """Return `query` without the quick-action parameters.

    A string query comes back as a string (without leading ``?``); a mapping
    comes back as a new dict. Other parameters are kept in order.
    """
    if isinstance(query, str):
        pairs = [
            (key, value)
            for key, value in parse_qsl(query.lstrip("?"), keep_blank_values=True)
            if key not in const.QUICK_ACTION_PARAMS
        ]
        return urlencode(pairs)
    return {
        key: value
        for key, value in (query or {}).items()
        if key not in const.QUICK_ACTION_PARAMS
    }


# ==============================================================================
# Exercise resolution
# ==============================================================================


def slugify_name(name: str) -> str:
    """Return the lowercase, dash-joined form of an exercise name.

    Example:
        slugify_name("  Push Ups ") → "push-ups"
    """
    return _WHITESPACE_RE.sub("-", str(name).strip().lower())


def resolve_exercise(
    exercises: Sequence[ExerciseData], name: str | None
) -> ExerciseData | None:
    """Pick the exercise a quick action targets.

    Resolution order: exact case-insensitive trimmed name match, then slug
    match, then the first exercise. Returns None only when there are no
    exercises.
    """
    if not exercises:
        return None
    if name:
        wanted = str(name).strip().casefold()
        for exercise in exercises:
            if str(exercise.get(const.DATA_EXERCISE_NAME, "")).strip().casefold() == wanted:
                return exercise

        wanted_slug = slugify_name(name)
        for exercise in exercises:
            if slugify_name(exercise.get(const.DATA_EXERCISE_NAME, "")) == wanted_slug:
                return exercise

        const.LOGGER.debug(
            "DEBUG: Quick action exercise '%s' not found, using first exercise",
            name,
        )
    return exercises[0]
