# File: const.py
"""Constants for the Daily Reps integration.

This file centralizes storage keys, defaults, service names, field names and
error messages used across the integration, so that engines, the coordinator
and the service layer all agree on the same canonical values.
"""

import logging
from typing import Final

# ------------------------------------------------------------------------------------------------
# General / Integration Information
# ------------------------------------------------------------------------------------------------
# Integration Name
DAILYREPS_TITLE = "Daily Reps"

# Integration Domain
DOMAIN = "dailyreps"

# Logger
LOGGER = logging.getLogger(__package__)

# Coordinator
COORDINATOR = "coordinator"
COORDINATOR_SUFFIX = "_coordinator"

# Storage and Versioning
STORAGE_MANAGER = "storage_manager"
STORAGE_KEY = "dailyreps_data"
STORAGE_VERSION = 1
SCHEMA_VERSION = 1

# ------------------------------------------------------------------------------------------------
# Configuration Keys
# ------------------------------------------------------------------------------------------------
CONF_RETENTION_DAYS = "retention_days"

CONFIG_FLOW_STEP_USER = "user"
OPTIONS_FLOW_STEP_INIT = "init"

# ------------------------------------------------------------------------------------------------
# Defaults
# ------------------------------------------------------------------------------------------------
DEFAULT_RETENTION_DAYS: Final = 366
MIN_RETENTION_DAYS: Final = 30
MAX_RETENTION_DAYS: Final = 3650

DEFAULT_DAILY_TARGET: Final = 1
DEFAULT_DECREMENT_STEP: Final = 10
DEFAULT_COMPLETION_THRESHOLD: Final = 1.0
MIN_COMPLETION_THRESHOLD: Final = 0.5
MAX_COMPLETION_THRESHOLD: Final = 1.0
DEFAULT_EXERCISE_NAME: Final = "Exercise"

QUICK_STEP_MIN: Final = 1
QUICK_STEP_MAX: Final = 999
QUICK_STEPS_MAX_COUNT: Final = 4

DAYS_PER_WEEK: Final = 7
STREAK_LOOKBACK_DAYS: Final = 365
SUMMARY_SHORT_DAYS: Final = 7
SUMMARY_LONG_DAYS: Final = 30
HISTORY_ROWS_DAYS: Final = 14

# ------------------------------------------------------------------------------------------------
# Storage Data Keys
# ------------------------------------------------------------------------------------------------
DATA_META = "meta"
DATA_META_SCHEMA_VERSION = "schema_version"
DATA_EXERCISES = "exercises"

# Exercise record
DATA_EXERCISE_ID = "id"
DATA_EXERCISE_NAME = "name"
DATA_EXERCISE_DAILY_TARGET = "daily_target"
DATA_EXERCISE_DECREMENT_STEP = "decrement_step"
DATA_EXERCISE_REMAINING = "remaining"
DATA_EXERCISE_LAST_APPLIED_DATE = "last_applied_date"
DATA_EXERCISE_HISTORY = "history"
DATA_EXERCISE_COMPLETION_THRESHOLD = "completion_threshold"
DATA_EXERCISE_WEEKLY_GOAL = "weekly_goal"
DATA_EXERCISE_QUICK_STEPS = "quick_steps"
DATA_EXERCISE_BADGES = "badges"
DATA_EXERCISE_CREATED_AT = "created_at"

# Ledger entry
DATA_LEDGER_PLANNED = "planned"
DATA_LEDGER_DONE = "done"

# Legacy browser-export aliases accepted on import (camelCase -> storage key)
IMPORT_KEY_ALIASES: Final[dict[str, str]] = {
    "exerciseName": DATA_EXERCISE_NAME,
    "dailyTarget": DATA_EXERCISE_DAILY_TARGET,
    "decrementStep": DATA_EXERCISE_DECREMENT_STEP,
    "lastAppliedDate": DATA_EXERCISE_LAST_APPLIED_DATE,
    "completionThreshold": DATA_EXERCISE_COMPLETION_THRESHOLD,
    "weeklyGoal": DATA_EXERCISE_WEEKLY_GOAL,
    "quickSteps": DATA_EXERCISE_QUICK_STEPS,
    "createdAt": DATA_EXERCISE_CREATED_AT,
}

# ------------------------------------------------------------------------------------------------
# Achievements
# ------------------------------------------------------------------------------------------------
BADGE_FIRST_REP = "first_rep"
BADGE_WEEK_CENTURY = "week_century"
BADGE_STREAK_3 = "streak_3"
BADGE_STREAK_7 = "streak_7"
BADGE_LIFETIME_500 = "lifetime_500"
BADGE_PERFECT_DAYS_3 = "perfect_days_3"

# ------------------------------------------------------------------------------------------------
# Metrics snapshot keys
# ------------------------------------------------------------------------------------------------
METRIC_CURRENT_STREAK = "current_streak"
METRIC_LONGEST_STREAK = "longest_streak"
METRIC_LIFETIME_DONE = "lifetime_done"
METRIC_PERSONAL_BEST_DAY = "personal_best_day"
METRIC_PERSONAL_BEST_VALUE = "personal_best_value"
METRIC_WEEKLY_DONE = "weekly_done"
METRIC_WEEKLY_GOAL = "weekly_goal"
METRIC_WEEKLY_FRACTION = "weekly_fraction"
METRIC_PERFECT_DAYS = "perfect_days"
METRIC_TODAY_COMPLETED = "today_completed"

# ------------------------------------------------------------------------------------------------
# Quick Actions
# ------------------------------------------------------------------------------------------------
QUICK_ACTION_PARAM_DEC = "dec"
QUICK_ACTION_PARAM_ADD = "add"
QUICK_ACTION_PARAM_EXERCISE = "exercise"
QUICK_ACTION_PARAMS: Final = (
    QUICK_ACTION_PARAM_DEC,
    QUICK_ACTION_PARAM_ADD,
    QUICK_ACTION_PARAM_EXERCISE,
)
QUICK_ACTION_DECREMENT = "decrement"
QUICK_ACTION_ADD_TARGET = "add_target"

# ------------------------------------------------------------------------------------------------
# Services
# ------------------------------------------------------------------------------------------------
SERVICE_CREATE_EXERCISE = "create_exercise"
SERVICE_UPDATE_EXERCISE = "update_exercise"
SERVICE_DELETE_EXERCISE = "delete_exercise"
SERVICE_LOG_DONE = "log_done"
SERVICE_ADD_TARGET = "add_target"
SERVICE_IMPORT_EXERCISES = "import_exercises"
SERVICE_EXPORT_EXERCISES = "export_exercises"
SERVICE_GET_METRICS = "get_metrics"
SERVICE_QUICK_ACTION = "quick_action"

# Service fields
FIELD_EXERCISE_NAME = "exercise_name"
FIELD_NEW_NAME = "new_name"
FIELD_DAILY_TARGET = "daily_target"
FIELD_DECREMENT_STEP = "decrement_step"
FIELD_COMPLETION_THRESHOLD = "completion_threshold"
FIELD_WEEKLY_GOAL = "weekly_goal"
FIELD_QUICK_STEPS = "quick_steps"
FIELD_AMOUNT = "amount"
FIELD_TIMES = "times"
FIELD_PAYLOAD = "payload"
FIELD_QUERY = "query"

# ------------------------------------------------------------------------------------------------
# Errors and messages
# ------------------------------------------------------------------------------------------------
ERROR_EXERCISE_NOT_FOUND_FMT = "Exercise '{}' not found"
ERROR_IMPORT_NOT_ARRAY = "Invalid format: expected array"
ERROR_IMPORT_INVALID_JSON_FMT = "Invalid JSON: {}"
ERROR_INVALID_NAME = "Exercise name must not be empty"
ERROR_INVALID_DAILY_TARGET = "Daily target must be a whole number of at least 1"
ERROR_INVALID_DECREMENT_STEP = "Decrement step must be a whole number of at least 1"
ERROR_NO_EXERCISES = "No exercises configured"
MSG_NO_ENTRY_FOUND = "No Daily Reps entry found"

TRANS_KEY_ERROR_SINGLE_INSTANCE = "single_instance_allowed"
