"""Achievement Engine - Pure rule evaluation for per-exercise badges.

This engine holds a stateless rule table mapping a badge identifier to a
predicate over a MetricsSnapshot. Badges are append-only: once earned they
are never revoked, even if the metric later drops (a broken streak keeps its
streak badge).

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All methods are class methods operating on passed-in data. The metrics are
computed by MetricsEngine and handed in as a snapshot.

Rules:
- first_rep: lifetime done >= 1
- week_century: trailing 7-day done >= 100
- streak_3 / streak_7: current streak >= 3 / 7
- lifetime_500: lifetime done >= 500
- perfect_days_3: at least 3 days that met their full quota
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from .. import const

if TYPE_CHECKING:
    from ..type_defs import MetricsSnapshot


# =============================================================================
# TYPE ALIASES
# =============================================================================

# Rule predicate signature: (snapshot) -> bool
AchievementRule = Callable[["MetricsSnapshot"], bool]

WEEK_CENTURY_THRESHOLD = 100
LIFETIME_500_THRESHOLD = 500
PERFECT_DAYS_THRESHOLD = 3


class AchievementEngine:
    """Pure logic engine for badge evaluation.

    PURITY CONTRACT:
    - All data comes via the snapshot parameter
    - No storage access; evaluate() only appends to the exercise's badge list
    """

    # Maps badge identifier to predicate, in discovery order
    _RULES: dict[str, AchievementRule] = {}

    @classmethod
    def _register_rules(cls) -> None:
        """Populate the rule table once."""
        if cls._RULES:
            return

        cls._RULES = {
            const.BADGE_FIRST_REP: lambda m: m[const.METRIC_LIFETIME_DONE] >= 1,
            const.BADGE_WEEK_CENTURY: (
                lambda m: m[const.METRIC_WEEKLY_DONE] >= WEEK_CENTURY_THRESHOLD
            ),
            const.BADGE_STREAK_3: lambda m: m[const.METRIC_CURRENT_STREAK] >= 3,
            const.BADGE_STREAK_7: lambda m: m[const.METRIC_CURRENT_STREAK] >= 7,
            const.BADGE_LIFETIME_500: (
                lambda m: m[const.METRIC_LIFETIME_DONE] >= LIFETIME_500_THRESHOLD
            ),
            const.BADGE_PERFECT_DAYS_3: (
                lambda m: m[const.METRIC_PERFECT_DAYS] >= PERFECT_DAYS_THRESHOLD
            ),
        }

    @classmethod
    def rule_ids(cls) -> list[str]:
        """Return every known badge identifier in evaluation order."""
        cls._register_rules()
        return list(cls._RULES)

    @classmethod
    def find_new_badges(
        cls, snapshot: MetricsSnapshot, earned: list[str] | None = None
    ) -> list[str]:
        """Return badge ids whose rule passes and that are not yet earned.

        Pure function - nothing is mutated.
        """
        cls._register_rules()
        already = set(earned or [])
        return [
            badge_id
            for badge_id, rule in cls._RULES.items()
            if badge_id not in already and rule(snapshot)
        ]

    @classmethod
    def evaluate(cls, exercise: dict[str, Any], snapshot: MetricsSnapshot) -> bool:
        """Append newly earned badges to the exercise.

        Args:
            exercise: Exercise dict; its ``badges`` list is extended in place.
            snapshot: Freshly computed metrics for the exercise.

        Returns:
            True if at least one new badge was awarded.
        """
        badges = exercise.get(const.DATA_EXERCISE_BADGES)
        if not isinstance(badges, list):
            badges = []
            exercise[const.DATA_EXERCISE_BADGES] = badges

        new_badges = cls.find_new_badges(snapshot, badges)
        if not new_badges:
            return False

        badges.extend(new_badges)
        const.LOGGER.info(
            "INFO: Exercise '%s' earned badge(s): %s",
            exercise.get(const.DATA_EXERCISE_NAME),
            ", ".join(new_badges),
        )
        return True
