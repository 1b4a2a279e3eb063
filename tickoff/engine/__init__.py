"""Task collection engine and view computation for tickoff."""

from tickoff.engine.collection import TaskCollection, EngineState, Notification
from tickoff.engine.views import ViewParams, present, sort_tasks, collect_tags
from tickoff.engine.stats import compute_stats, build_suggestions

__all__ = [
    "TaskCollection",
    "EngineState",
    "Notification",
    "ViewParams",
    "present",
    "sort_tasks",
    "collect_tags",
    "compute_stats",
    "build_suggestions",
]
