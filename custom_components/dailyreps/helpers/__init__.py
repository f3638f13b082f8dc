# File: helpers/__init__.py
"""Helper functions for Daily Reps that sit between services and engines.

Submodules:
    - quick_action_helpers: URL query quick actions (parse, resolve, strip)

Usage:
    from .helpers import quick_action_helpers as qah
"""

from . import quick_action_helpers

__all__ = [
    "quick_action_helpers",
]
