"""Data models for tickoff."""

from tickoff.models.task import (
    Task,
    TaskDraft,
    TaskStats,
    Priority,
    RecurringPattern,
    FilterType,
    SortType,
    UPDATABLE_FIELDS,
)
from tickoff.models.category import Category, DEFAULT_CATEGORIES, get_category
from tickoff.models.user import User

__all__ = [
    "Task",
    "TaskDraft",
    "TaskStats",
    "Priority",
    "RecurringPattern",
    "FilterType",
    "SortType",
    "UPDATABLE_FIELDS",
    "Category",
    "DEFAULT_CATEGORIES",
    "get_category",
    "User",
]
