"""Task creation factory for tickoff.

This module centralizes task creation logic so every store assigns ids,
timestamps and defaults the same way.
"""

import uuid
from datetime import datetime
from typing import Optional, Dict, Any

from tickoff.models.task import Task, TaskDraft
from tickoff.models.constants import DEFAULT_PRIORITY
from tickoff.storage.errors import TaskValidationError


def create_task_defaults() -> Dict[str, Any]:
    """Get default task values as a dictionary.

    Returns:
        Dictionary with default task field values using constants
    """
    return {
        "description": None,
        "completed": False,
        "due_date": None,
        "priority": DEFAULT_PRIORITY,
        "tags": [],
        "category_id": None,
        "reminder": None,
        "is_recurring": False,
        "recurring_pattern": None,
    }


def validate_title(title: Optional[str]) -> str:
    """Return the title unchanged, or raise TaskValidationError if it is blank."""
    if title is None or not title.strip():
        raise TaskValidationError("Task title must not be empty")
    return title


def create_task_base(user_id: str, draft: TaskDraft, now: Optional[datetime] = None) -> Task:
    """Create a task from a draft, assigning id and timestamps.

    Args:
        user_id: User ID who owns this task (required)
        draft: Caller-supplied fields, including the initial order
        now: Creation timestamp (defaults to current UTC time)

    Returns:
        Task object with defaults applied

    Raises:
        TaskValidationError: If the draft title is blank
    """
    validate_title(draft.title)
    now = now or datetime.utcnow()
    fields = {**create_task_defaults(), **draft.model_dump(exclude_none=True)}

    return Task(
        id=str(uuid.uuid4()),
        user_id=user_id,
        created_at=now,
        updated_at=now,
        **fields,
    )
