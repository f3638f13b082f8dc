"""Tests for exercise builders and import normalization.

Tests cover:
- build_exercise create mode (seeding, defaults, validation errors)
- build_exercise update mode (preserved counters, derived defaults)
- derive_quick_steps sanitizing
- normalize_exercise defaults and legacy camelCase aliases
- normalize_exercise_list payload checks
"""

from __future__ import annotations

import json

import pytest

from custom_components.dailyreps import const
from custom_components.dailyreps.data_builders import (
    EntityValidationError,
    ImportFormatError,
    build_exercise,
    derive_quick_steps,
    normalize_exercise,
    normalize_exercise_list,
    resolve_weekly_goal,
)

TODAY = "2026-01-19"


class TestBuildExerciseCreate:
    """Tests for build_exercise in create mode."""

    def test_seeds_today(self) -> None:
        """A new exercise starts with today's quota planned and remaining."""
        exercise = build_exercise(
            {const.DATA_EXERCISE_NAME: "  Push-ups ", const.DATA_EXERCISE_DAILY_TARGET: 50},
            today=TODAY,
        )

        assert exercise["name"] == "Push-ups"
        assert exercise["remaining"] == 50
        assert exercise["last_applied_date"] == TODAY
        assert exercise["history"] == {TODAY: {"planned": 50, "done": 0}}
        assert exercise["badges"] == []
        assert exercise["id"]

    def test_defaults(self) -> None:
        """Optional settings get their defaults."""
        exercise = build_exercise(
            {const.DATA_EXERCISE_NAME: "Squats", const.DATA_EXERCISE_DAILY_TARGET: "20"},
            today=TODAY,
        )

        assert exercise["daily_target"] == 20
        assert exercise["decrement_step"] == const.DEFAULT_DECREMENT_STEP
        assert exercise["completion_threshold"] == 1.0
        assert exercise["weekly_goal"] == 140
        assert exercise["quick_steps"] == [1, 10, 20]

    def test_ids_are_unique(self) -> None:
        """Each created exercise gets its own id."""
        data = {const.DATA_EXERCISE_NAME: "A", const.DATA_EXERCISE_DAILY_TARGET: 1}

        assert build_exercise(data, today=TODAY)["id"] != build_exercise(
            data, today=TODAY
        )["id"]

    def test_empty_name_rejected(self) -> None:
        """A blank name raises with the name field."""
        with pytest.raises(EntityValidationError) as err:
            build_exercise(
                {const.DATA_EXERCISE_NAME: "   ", const.DATA_EXERCISE_DAILY_TARGET: 5},
                today=TODAY,
            )

        assert err.value.field == const.DATA_EXERCISE_NAME

    @pytest.mark.parametrize("target", [0, -3, "abc", None])
    def test_invalid_daily_target_rejected(self, target: object) -> None:
        """Targets that are not whole numbers >= 1 are rejected."""
        with pytest.raises(EntityValidationError) as err:
            build_exercise(
                {const.DATA_EXERCISE_NAME: "A", const.DATA_EXERCISE_DAILY_TARGET: target},
                today=TODAY,
            )

        assert err.value.field == const.DATA_EXERCISE_DAILY_TARGET

    def test_invalid_decrement_step_rejected(self) -> None:
        """An explicit decrement step of 0 is rejected."""
        with pytest.raises(EntityValidationError) as err:
            build_exercise(
                {
                    const.DATA_EXERCISE_NAME: "A",
                    const.DATA_EXERCISE_DAILY_TARGET: 5,
                    const.DATA_EXERCISE_DECREMENT_STEP: 0,
                },
                today=TODAY,
            )

        assert err.value.field == const.DATA_EXERCISE_DECREMENT_STEP


class TestBuildExerciseUpdate:
    """Tests for build_exercise in update mode."""

    @pytest.fixture
    def existing(self) -> dict:
        """Return an exercise with some progress."""
        exercise = build_exercise(
            {const.DATA_EXERCISE_NAME: "Push-ups", const.DATA_EXERCISE_DAILY_TARGET: 50},
            today=TODAY,
        )
        exercise["remaining"] = 12
        exercise["history"][TODAY]["done"] = 38
        exercise["badges"] = [const.BADGE_FIRST_REP]
        return exercise

    def test_preserves_counters(self, existing: dict) -> None:
        """Editing the target keeps remaining, history and badges."""
        updated = build_exercise({const.DATA_EXERCISE_DAILY_TARGET: 60}, existing)

        assert updated["daily_target"] == 60
        assert updated["remaining"] == 12
        assert updated["history"] == existing["history"]
        assert updated["badges"] == [const.BADGE_FIRST_REP]

    def test_does_not_mutate_existing(self, existing: dict) -> None:
        """The existing record is left untouched."""
        build_exercise({const.DATA_EXERCISE_NAME: "Pushups"}, existing)

        assert existing["name"] == "Push-ups"

    def test_default_goal_follows_target(self, existing: dict) -> None:
        """A default weekly goal tracks the new daily target."""
        updated = build_exercise({const.DATA_EXERCISE_DAILY_TARGET: 60}, existing)

        assert updated["weekly_goal"] == 420

    def test_custom_goal_is_kept(self, existing: dict) -> None:
        """A custom weekly goal survives a target change."""
        existing["weekly_goal"] = 300

        updated = build_exercise({const.DATA_EXERCISE_DAILY_TARGET: 60}, existing)

        assert updated["weekly_goal"] == 300

    def test_default_steps_follow_decrement_step(self, existing: dict) -> None:
        """Default quick steps are re-derived from a new decrement step."""
        updated = build_exercise({const.DATA_EXERCISE_DECREMENT_STEP: 5}, existing)

        assert updated["quick_steps"] == [1, 5, 10]

    def test_custom_steps_are_kept(self, existing: dict) -> None:
        """Custom quick steps survive a decrement step change."""
        existing["quick_steps"] = [3, 7]

        updated = build_exercise({const.DATA_EXERCISE_DECREMENT_STEP: 5}, existing)

        assert updated["quick_steps"] == [3, 7]

    def test_threshold_clamped(self, existing: dict) -> None:
        """Thresholds are clamped on update."""
        updated = build_exercise({const.DATA_EXERCISE_COMPLETION_THRESHOLD: 0.2}, existing)

        assert updated["completion_threshold"] == 0.5


class TestDeriveQuickSteps:
    """Tests for derive_quick_steps and resolve_weekly_goal."""

    @pytest.mark.parametrize(
        ("raw", "step", "expected"),
        [
            ("20,5,5", 10, [5, 20]),
            ([0, 1000, 3], 10, [3]),
            ([9, 8, 7, 6, 5], 10, [5, 6, 7, 8]),
            (None, 10, [1, 10, 20]),
            ([], 1, [1, 2]),
            ("", 600, [1, 600]),
            (42, 10, [1, 10, 20]),
        ],
    )
    def test_derive(self, raw: object, step: int, expected: list[int]) -> None:
        """Steps are sanitized, deduplicated, sorted and capped."""
        assert derive_quick_steps(raw, step) == expected

    def test_weekly_goal_default(self) -> None:
        """Unset or non-positive goals default to target * 7."""
        assert resolve_weekly_goal(None, 10) == 70
        assert resolve_weekly_goal(-5, 10) == 70
        assert resolve_weekly_goal(123, 10) == 123


class TestNormalizeExercise:
    """Tests for normalize_exercise."""

    def test_missing_fields_get_defaults(self) -> None:
        """A sparse record is filled with safe defaults."""
        exercise = normalize_exercise({"name": "Plank"}, TODAY)

        assert exercise["daily_target"] == 1
        assert exercise["remaining"] == 0
        assert exercise["history"] == {}
        assert exercise["weekly_goal"] == 7
        assert exercise["last_applied_date"] == TODAY
        assert exercise["completion_threshold"] == 1.0
        assert exercise["badges"] == []
        assert exercise["id"]

    def test_negative_values_repaired(self) -> None:
        """Invalid numbers never survive normalization."""
        exercise = normalize_exercise(
            {
                "name": "Dips",
                "daily_target": 0,
                "remaining": -20,
                "completion_threshold": 3,
                "history": {TODAY: {"planned": -1, "done": "4"}, "2026-01-18": "bad"},
            },
            TODAY,
        )

        assert exercise["daily_target"] == 1
        assert exercise["remaining"] == 0
        assert exercise["completion_threshold"] == 1.0
        assert exercise["history"] == {
            TODAY: {"planned": 0, "done": 4},
            "2026-01-18": {"planned": 0, "done": 0},
        }

    def test_camel_case_aliases(self) -> None:
        """Legacy browser exports are accepted."""
        exercise = normalize_exercise(
            {
                "id": "abc",
                "exerciseName": "Lunges",
                "dailyTarget": 25,
                "decrementStep": 5,
                "lastAppliedDate": "2026-01-17",
                "completionThreshold": 0.8,
                "weeklyGoal": 150,
                "quickSteps": [5, 15],
                "createdAt": "2025-12-01T08:00:00+00:00",
            },
            TODAY,
        )

        assert exercise["id"] == "abc"
        assert exercise["name"] == "Lunges"
        assert exercise["daily_target"] == 25
        assert exercise["decrement_step"] == 5
        assert exercise["last_applied_date"] == "2026-01-17"
        assert exercise["completion_threshold"] == 0.8
        assert exercise["weekly_goal"] == 150
        assert exercise["quick_steps"] == [5, 15]
        assert exercise["created_at"] == "2025-12-01T08:00:00+00:00"

    @pytest.mark.parametrize("value", ["garbage", "2026-02-30", "2027-01-01", None])
    def test_bad_or_future_date_becomes_today(self, value: object) -> None:
        """Unparseable and future dates are replaced by today."""
        exercise = normalize_exercise({"name": "A", "last_applied_date": value}, TODAY)

        assert exercise["last_applied_date"] == TODAY

    def test_badges_deduplicated(self) -> None:
        """Badges keep discovery order without duplicates or junk."""
        exercise = normalize_exercise(
            {"name": "A", "badges": ["first_rep", 3, "first_rep", "streak_3"]}, TODAY
        )

        assert exercise["badges"] == ["first_rep", "streak_3"]

    def test_non_dict_record(self) -> None:
        """A non-object record yields an all-default exercise."""
        exercise = normalize_exercise("nonsense", TODAY)

        assert exercise["name"] == const.DEFAULT_EXERCISE_NAME
        assert exercise["daily_target"] == 1


class TestNormalizeExerciseList:
    """Tests for normalize_exercise_list."""

    def test_rejects_non_array(self) -> None:
        """An object payload is a fatal import error."""
        with pytest.raises(ImportFormatError, match="expected array"):
            normalize_exercise_list({"name": "A"}, TODAY)

    def test_rejects_invalid_json(self) -> None:
        """An unparseable JSON string is a fatal import error."""
        with pytest.raises(ImportFormatError, match="Invalid JSON"):
            normalize_exercise_list("[{", TODAY)

    def test_accepts_json_string(self) -> None:
        """A JSON array string is decoded and normalized."""
        payload = json.dumps([{"name": "A", "dailyTarget": 3}])

        exercises = normalize_exercise_list(payload, TODAY)

        assert len(exercises) == 1
        assert exercises[0]["daily_target"] == 3

    def test_duplicate_ids_regenerated(self) -> None:
        """Later records with a duplicate id get a fresh one."""
        exercises = normalize_exercise_list(
            [{"id": "same", "name": "A"}, {"id": "same", "name": "B"}], TODAY
        )

        assert exercises[0]["id"] == "same"
        assert exercises[1]["id"] != "same"

    def test_empty_array(self) -> None:
        """An empty array is a valid import."""
        assert normalize_exercise_list([], TODAY) == []
