"""Aggregate statistics and heuristic suggestions for a task collection."""

from datetime import date, datetime, timedelta
from typing import List, Sequence

from tickoff.models.task import Task, TaskStats, Priority
from tickoff.models.constants import (
    COMPLETED_TODAY_CELEBRATION_THRESHOLD,
    HIGH_PRIORITY_ACTIVE_LIMIT,
    OVERDUE_SUGGESTION,
    CELEBRATION_SUGGESTION,
    HIGH_PRIORITY_SUGGESTION,
)


def week_start(day: date) -> date:
    """Sunday that starts the week containing day."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def is_overdue(task: Task, today: date) -> bool:
    """An active task whose due date is a day before today."""
    return not task.completed and task.due_date is not None and task.due_date < today


def compute_stats(tasks: Sequence[Task], now: datetime) -> TaskStats:
    """Count total, completed, active, overdue and recently completed tasks.

    "Completed today" and "completed this week" look at created_at, since
    tasks carry no completion timestamp.
    """
    today = now.date()
    this_week = week_start(today)
    completed = [task for task in tasks if task.completed]

    return TaskStats(
        total=len(tasks),
        completed=len(completed),
        active=len(tasks) - len(completed),
        overdue=sum(1 for task in tasks if is_overdue(task, today)),
        completed_today=sum(1 for task in completed if task.created_at.date() == today),
        completed_this_week=sum(
            1 for task in completed if week_start(task.created_at.date()) == this_week
        ),
    )


def build_suggestions(tasks: Sequence[Task], stats: TaskStats) -> List[str]:
    """Short hints: overdue warning, congratulation, then prioritization warning."""
    suggestions: List[str] = []

    if stats.overdue > 0:
        suggestions.append(OVERDUE_SUGGESTION.format(count=stats.overdue))

    if stats.completed_today >= COMPLETED_TODAY_CELEBRATION_THRESHOLD:
        suggestions.append(CELEBRATION_SUGGESTION)

    high_priority_active = [
        task for task in tasks if not task.completed and task.priority == Priority.HIGH
    ]
    if len(high_priority_active) > HIGH_PRIORITY_ACTIVE_LIMIT:
        suggestions.append(HIGH_PRIORITY_SUGGESTION)

    return suggestions
