"""Exercise lifecycle helpers.

This module is the SINGLE SOURCE OF TRUTH for:
- Exercise field defaults
- Boundary validation of user input (name, daily target, decrement step)
- Complete exercise structure building (create and update)
- Normalization of persisted or imported records

### Build Functions
`build_exercise()` takes service/user input with DATA_* keys, generates the
id for new exercises, applies defaults and returns a complete ExerciseData
dict ready for storage. Creation seeds today's planned quota.

### Normalization Functions
`normalize_exercise()` repairs a single persisted/imported record, never
raising; `normalize_exercise_list()` enforces the array shape of an import
payload and raises ImportFormatError otherwise.
"""

from __future__ import annotations

from collections.abc import Iterable
import copy
import json
from typing import Any
import uuid

from . import const
from .type_defs import ExerciseData, LedgerEntry
from .utils import dt_utils
from .utils.math_utils import clamp_threshold, coerce_int, parse_quick_steps

# ==============================================================================
# EXCEPTIONS
# ==============================================================================


class EntityValidationError(Exception):
    """Validation error with field-specific information.

    Raised when user input fails boundary validation while building an
    exercise. The field attribute names the DATA_* key that failed so the
    caller can point at it.

    Example:
        raise EntityValidationError(
            field=const.DATA_EXERCISE_DAILY_TARGET,
            reason=const.ERROR_INVALID_DAILY_TARGET,
        )
    """

    def __init__(self, field: str, reason: str) -> None:
        """Initialize EntityValidationError.

        Args:
            field: The DATA_* key of the field that failed validation
            reason: Human-readable cause
        """
        self.field = field
        self.reason = reason
        super().__init__(reason)


class ImportFormatError(Exception):
    """An import payload could not be accepted as a whole."""


# ==============================================================================
# HELPER FUNCTIONS FOR FIELD NORMALIZATION
# ==============================================================================


def derive_quick_steps(raw: Any, decrement_step: int) -> list[int]:
    """Return the one-tap decrement amounts for an exercise.

    Valid values (1..999) are de-duplicated, sorted ascending and capped at
    four. When nothing valid is supplied the steps fall back to
    ``[1, decrement_step, 2 * decrement_step]``.

    Examples:
        derive_quick_steps("20,5,5", 10) → [5, 20]
        derive_quick_steps(None, 10) → [1, 10, 20]
        derive_quick_steps([], 1) → [1, 2]
    """
    steps = parse_quick_steps(raw) if isinstance(raw, (str, list, tuple)) else []
    if not steps:
        base = max(1, decrement_step)
        steps = [
            step
            for step in (1, base, base * 2)
            if const.QUICK_STEP_MIN <= step <= const.QUICK_STEP_MAX
        ]
    return sorted(set(steps))[: const.QUICK_STEPS_MAX_COUNT]


def resolve_weekly_goal(raw: Any, daily_target: int) -> int:
    """Return the weekly goal, ``daily_target * 7`` when unset or <= 0."""
    goal = coerce_int(raw, default=0)
    return goal if goal > 0 else daily_target * const.DAYS_PER_WEEK


def _normalize_history(value: Any) -> dict[str, LedgerEntry]:
    """Return a clean history mapping; malformed entries become zeros."""
    if not isinstance(value, dict):
        return {}
    history: dict[str, LedgerEntry] = {}
    for day, entry in value.items():
        if not isinstance(entry, dict):
            entry = {}
        history[str(day)] = {
            const.DATA_LEDGER_PLANNED: coerce_int(
                entry.get(const.DATA_LEDGER_PLANNED), default=0, minimum=0
            ),
            const.DATA_LEDGER_DONE: coerce_int(
                entry.get(const.DATA_LEDGER_DONE), default=0, minimum=0
            ),
        }
    return history


def _normalize_badges(value: Any) -> list[str]:
    """Return a duplicate-free badge list preserving discovery order."""
    if not isinstance(value, list):
        return []
    badges: list[str] = []
    for badge in value:
        if isinstance(badge, str) and badge and badge not in badges:
            badges.append(badge)
    return badges


def _apply_aliases(record: dict[str, Any]) -> dict[str, Any]:
    """Map legacy camelCase export keys onto storage keys.

    A snake_case key present in the record wins over its alias.
    """
    mapped = dict(record)
    for alias, key in const.IMPORT_KEY_ALIASES.items():
        if alias in mapped:
            value = mapped.pop(alias)
            mapped.setdefault(key, value)
    return mapped


def _validated_name(raw_name: Any) -> str:
    name = str(raw_name).strip() if raw_name is not None else ""
    if not name:
        raise EntityValidationError(
            field=const.DATA_EXERCISE_NAME, reason=const.ERROR_INVALID_NAME
        )
    return name


def _validated_positive_int(raw: Any, field: str, reason: str) -> int:
    value = coerce_int(raw, default=0)
    if value < 1:
        raise EntityValidationError(field=field, reason=reason)
    return value


# ==============================================================================
# EXERCISES
# ==============================================================================


def build_exercise(
    user_input: dict[str, Any],
    existing: ExerciseData | None = None,
    *,
    today: str | None = None,
) -> ExerciseData:
    """Build exercise data for create or update operations.

    One function handles both create (existing=None) and update.

    CREATE mode generates a UUID, sets ``remaining = daily_target``, seeds
    ``history[today].planned = daily_target`` and stamps
    ``last_applied_date = today``.

    UPDATE mode preserves every field not present in `user_input`, including
    ``remaining``, ``history`` and ``badges``. The existing record is not
    mutated; a new dict is returned.

    Args:
        user_input: Data with DATA_* keys (may have missing fields)
        existing: None for create, existing ExerciseData for update
        today: Day-string used for seeding. Defaults to the UTC day.

    Returns:
        Complete ExerciseData ready for storage

    Raises:
        EntityValidationError: Empty name, or daily target / decrement step
            that is not a whole number >= 1.
    """
    today = today or dt_utils.dt_today_iso()

    if existing is None:
        name = _validated_name(user_input.get(const.DATA_EXERCISE_NAME))
        daily_target = _validated_positive_int(
            user_input.get(const.DATA_EXERCISE_DAILY_TARGET),
            const.DATA_EXERCISE_DAILY_TARGET,
            const.ERROR_INVALID_DAILY_TARGET,
        )
        raw_step = user_input.get(const.DATA_EXERCISE_DECREMENT_STEP)
        decrement_step = (
            const.DEFAULT_DECREMENT_STEP
            if raw_step is None or raw_step == ""
            else _validated_positive_int(
                raw_step,
                const.DATA_EXERCISE_DECREMENT_STEP,
                const.ERROR_INVALID_DECREMENT_STEP,
            )
        )
        exercise: ExerciseData = {
            "id": str(uuid.uuid4()),
            "name": name,
            "daily_target": daily_target,
            "decrement_step": decrement_step,
            "remaining": daily_target,
            "last_applied_date": today,
            "history": {today: {"planned": daily_target, "done": 0}},
            "completion_threshold": clamp_threshold(
                user_input.get(
                    const.DATA_EXERCISE_COMPLETION_THRESHOLD,
                    const.DEFAULT_COMPLETION_THRESHOLD,
                )
            ),
            "weekly_goal": resolve_weekly_goal(
                user_input.get(const.DATA_EXERCISE_WEEKLY_GOAL), daily_target
            ),
            "quick_steps": derive_quick_steps(
                user_input.get(const.DATA_EXERCISE_QUICK_STEPS), decrement_step
            ),
            "badges": [],
            "created_at": dt_utils.dt_now_utc().isoformat(),
        }
        return exercise

    updated: ExerciseData = copy.deepcopy(existing)

    if const.DATA_EXERCISE_NAME in user_input:
        updated["name"] = _validated_name(user_input[const.DATA_EXERCISE_NAME])
    if const.DATA_EXERCISE_DAILY_TARGET in user_input:
        updated["daily_target"] = _validated_positive_int(
            user_input[const.DATA_EXERCISE_DAILY_TARGET],
            const.DATA_EXERCISE_DAILY_TARGET,
            const.ERROR_INVALID_DAILY_TARGET,
        )
    if const.DATA_EXERCISE_DECREMENT_STEP in user_input:
        updated["decrement_step"] = _validated_positive_int(
            user_input[const.DATA_EXERCISE_DECREMENT_STEP],
            const.DATA_EXERCISE_DECREMENT_STEP,
            const.ERROR_INVALID_DECREMENT_STEP,
        )
    if const.DATA_EXERCISE_COMPLETION_THRESHOLD in user_input:
        updated["completion_threshold"] = clamp_threshold(
            user_input[const.DATA_EXERCISE_COMPLETION_THRESHOLD]
        )
    if const.DATA_EXERCISE_WEEKLY_GOAL in user_input:
        updated["weekly_goal"] = resolve_weekly_goal(
            user_input[const.DATA_EXERCISE_WEEKLY_GOAL], updated["daily_target"]
        )
    elif existing.get("weekly_goal", 0) in (
        0,
        existing.get("daily_target", 0) * const.DAYS_PER_WEEK,
    ):
        # Default goal follows the daily target; custom goals are kept
        updated["weekly_goal"] = resolve_weekly_goal(None, updated["daily_target"])
    if const.DATA_EXERCISE_QUICK_STEPS in user_input:
        updated["quick_steps"] = derive_quick_steps(
            user_input[const.DATA_EXERCISE_QUICK_STEPS], updated["decrement_step"]
        )
    elif existing.get("quick_steps") == derive_quick_steps(
        None, existing.get("decrement_step", const.DEFAULT_DECREMENT_STEP)
    ):
        # Default steps follow the decrement step; custom steps are kept
        updated["quick_steps"] = derive_quick_steps(None, updated["decrement_step"])
    return updated


def normalize_exercise(record: Any, today: str | None = None) -> ExerciseData:
    """Repair a persisted or imported record, substituting safe defaults.

    Never raises. Guarantees ``daily_target >= 1``, ``remaining >= 0``,
    ``weekly_goal >= 1`` (``daily_target * 7`` when unset or <= 0),
    ``history`` a dict and ``last_applied_date`` a valid day-string no later
    than today.

    Args:
        record: Raw record (non-dict input yields an all-default exercise)
        today: Day-string used for missing dates. Defaults to the UTC day.
    """
    today = today or dt_utils.dt_today_iso()
    data = _apply_aliases(record) if isinstance(record, dict) else {}

    daily_target = coerce_int(
        data.get(const.DATA_EXERCISE_DAILY_TARGET),
        default=const.DEFAULT_DAILY_TARGET,
        minimum=1,
    )
    decrement_step = coerce_int(
        data.get(const.DATA_EXERCISE_DECREMENT_STEP),
        default=const.DEFAULT_DECREMENT_STEP,
        minimum=1,
    )

    raw_id = data.get(const.DATA_EXERCISE_ID)
    exercise_id = str(raw_id) if raw_id not in (None, "") else str(uuid.uuid4())

    raw_name = data.get(const.DATA_EXERCISE_NAME)
    name = str(raw_name).strip() if raw_name not in (None, "") else ""

    parsed_last = dt_utils.parse_day(data.get(const.DATA_EXERCISE_LAST_APPLIED_DATE))
    last_applied = dt_utils.format_day(parsed_last) if parsed_last else today
    if last_applied > today:
        last_applied = today

    exercise: ExerciseData = {
        "id": exercise_id,
        "name": name or const.DEFAULT_EXERCISE_NAME,
        "daily_target": daily_target,
        "decrement_step": decrement_step,
        "remaining": coerce_int(
            data.get(const.DATA_EXERCISE_REMAINING), default=0, minimum=0
        ),
        "last_applied_date": last_applied,
        "history": _normalize_history(data.get(const.DATA_EXERCISE_HISTORY)),
        "completion_threshold": clamp_threshold(
            data.get(
                const.DATA_EXERCISE_COMPLETION_THRESHOLD,
                const.DEFAULT_COMPLETION_THRESHOLD,
            )
        ),
        "weekly_goal": resolve_weekly_goal(
            data.get(const.DATA_EXERCISE_WEEKLY_GOAL), daily_target
        ),
        "quick_steps": derive_quick_steps(
            data.get(const.DATA_EXERCISE_QUICK_STEPS), decrement_step
        ),
        "badges": _normalize_badges(data.get(const.DATA_EXERCISE_BADGES)),
    }
    created_at = data.get(const.DATA_EXERCISE_CREATED_AT)
    if isinstance(created_at, str) and created_at:
        exercise["created_at"] = created_at
    return exercise


def normalize_exercise_list(
    payload: Any, today: str | None = None
) -> list[ExerciseData]:
    """Normalize an import payload into a list of exercises.

    The whole batch is normalized before anything is returned, so a caller
    can swap its collection in one step. A string payload is decoded as JSON
    first.

    Raises:
        ImportFormatError: If the payload is not valid JSON or not an array.
    """
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except ValueError as err:
            raise ImportFormatError(
                const.ERROR_IMPORT_INVALID_JSON_FMT.format(err)
            ) from err

    if not isinstance(payload, (list, tuple)):
        raise ImportFormatError(const.ERROR_IMPORT_NOT_ARRAY)

    exercises = [normalize_exercise(record, today) for record in payload]

    # Imported ids must stay unique; later duplicates get a fresh id
    seen: set[str] = set()
    for exercise in exercises:
        if exercise["id"] in seen:
            exercise["id"] = str(uuid.uuid4())
        seen.add(exercise["id"])
    return exercises


def export_exercises(exercises: Iterable[ExerciseData]) -> list[ExerciseData]:
    """Return a deep copy of the collection, safe to serialize or hand out."""
    return [copy.deepcopy(exercise) for exercise in exercises]
