# File: utils/__init__.py
"""Pure Python utilities for Daily Reps.

This module contains pure Python functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

⚠️ UTILS PURITY: NO `homeassistant.*` imports allowed in this module.

Submodules:
    - dt_utils: Day-string formatting, day differences, recent-day windows
    - math_utils: Clamping, percentage and quick-step parsing helpers

Usage:
    from . import dt_utils
    from .math_utils import clamp_threshold
"""

from . import dt_utils, math_utils

__all__ = ["dt_utils", "math_utils"]
