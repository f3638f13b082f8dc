"""Test helpers for Daily Reps tests.

This module re-exports all helpers for convenient imports:

    from tests.helpers import create_mock_exercise_data, make_snapshot

See individual modules for full documentation:
- factories.py: Exercise records and metric snapshots for tests
"""

from tests.helpers.factories import create_mock_exercise_data, make_snapshot

__all__ = [
    "create_mock_exercise_data",
    "make_snapshot",
]
