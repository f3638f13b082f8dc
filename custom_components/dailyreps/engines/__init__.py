"""Engine modules for the Daily Reps integration.

Contains pure computation engines (no Home Assistant imports):
- ledger_engine: Sparse date-keyed history mutations and pruning
- rollover_engine: Missed-day quota materialization
- metrics_engine: Streaks, totals, weekly progress and their cache
- achievement_engine: Badge rule evaluation
"""

from .achievement_engine import AchievementEngine
from .ledger_engine import LedgerEngine
from .metrics_engine import MetricsCache, MetricsEngine
from .rollover_engine import RolloverEngine

__all__ = [
    "AchievementEngine",
    "LedgerEngine",
    "MetricsCache",
    "MetricsEngine",
    "RolloverEngine",
]
