"""
Core package for the leverage planner.

Submodules are imported lazily by callers to avoid circular dependencies
between config and logging.
"""

__all__ = [
    "settings",
    "log",
]
