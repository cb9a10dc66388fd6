"""Activity Tracking - module init."""

from session_sentinel.activity.tracker import ActivityTracker

__all__ = ["ActivityTracker"]
