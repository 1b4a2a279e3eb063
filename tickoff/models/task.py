"""Task data model for tickoff."""

from datetime import date, datetime
from typing import List, Optional
from enum import Enum
from pydantic import BaseModel, Field, field_validator


class Priority(str, Enum):
    """Task priority enumeration."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RecurringPattern(str, Enum):
    """Recurrence pattern enumeration (stored only, never materialized)."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class FilterType(str, Enum):
    """Completion status filter for the presented sequence."""
    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"


class SortType(str, Enum):
    """Sort key for the presented sequence."""
    DATE = "date"
    DUE_DATE = "dueDate"
    PRIORITY = "priority"
    NAME = "name"


# Fields a caller may change after creation. id, user_id, created_at and
# updated_at are never accepted.
UPDATABLE_FIELDS = frozenset({
    "title",
    "description",
    "completed",
    "due_date",
    "priority",
    "tags",
    "category_id",
    "reminder",
    "is_recurring",
    "recurring_pattern",
    "order",
})


def unique_tags(tags: Optional[List[str]]) -> List[str]:
    """Deduplicate tags while preserving first-seen order."""
    seen = set()
    unique: List[str] = []
    for tag in tags or []:
        if tag not in seen:
            seen.add(tag)
            unique.append(tag)
    return unique


class Task(BaseModel):
    """Canonical Task model."""

    id: str = Field(..., description="Unique task identifier (UUID v4)")
    user_id: str = Field(..., description="User ID who owns this task")
    title: str = Field(..., description="Task title")
    description: Optional[str] = Field(None, description="Free-text description")
    completed: bool = Field(False, description="Whether the task is done")
    created_at: datetime = Field(..., description="Task creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Task last update timestamp")
    due_date: Optional[date] = Field(None, description="Due date (date-only)")
    priority: Priority = Field(Priority.MEDIUM, description="Task priority")
    tags: List[str] = Field(default_factory=list, description="Free-text labels, no duplicates")
    category_id: Optional[str] = Field(None, description="Built-in category id (not enforced)")
    reminder: Optional[datetime] = Field(None, description="Reminder timestamp (stored only)")
    is_recurring: bool = Field(False, description="Whether the task is flagged as recurring")
    recurring_pattern: Optional[RecurringPattern] = Field(None, description="Recurrence pattern (stored only)")
    order: int = Field(0, description="Manual display rank")

    @field_validator("tags")
    @classmethod
    def _dedupe_tags(cls, value: List[str]) -> List[str]:
        return unique_tags(value)

    class Config:
        """Pydantic configuration."""
        use_enum_values = True


class TaskDraft(BaseModel):
    """Fields supplied when creating a task; the store assigns id and timestamps."""

    title: str
    description: Optional[str] = None
    due_date: Optional[date] = None
    priority: Priority = Priority.MEDIUM
    tags: List[str] = Field(default_factory=list)
    category_id: Optional[str] = None
    reminder: Optional[datetime] = None
    is_recurring: bool = False
    recurring_pattern: Optional[RecurringPattern] = None
    order: int = 0

    class Config:
        """Pydantic configuration."""
        use_enum_values = True


class TaskStats(BaseModel):
    """Aggregate counts over a task collection."""

    total: int = 0
    completed: int = 0
    active: int = 0
    overdue: int = 0
    completed_today: int = 0
    completed_this_week: int = 0
