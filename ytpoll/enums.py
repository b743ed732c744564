"""Defines Enum classes used in the package."""

__all__ = ["FirstCyclePolicy"]

from enum import Enum


class FirstCyclePolicy(Enum):
    """Enum for how the first successful fetch of a poller is treated."""

    SUPPRESS = "suppress"
    """Treat the videos of the first fetch as already seen"""

    NOTIFY = "notify"
    """Notify every video of the first fetch like any other cycle"""
