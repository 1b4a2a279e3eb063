"""Repository layer for database operations."""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import desc

from tickoff.models.task import Task, UPDATABLE_FIELDS, unique_tags
from tickoff.database.models import TodoDB, enum_to_value

logger = logging.getLogger(__name__)

_ENUM_COLUMNS = {"priority", "recurring_pattern"}


class TaskRepository:
    """Repository for Task database operations."""

    def __init__(self, db: Session):
        self.db = db

    def _owned(self, user_id: str, task_id: str) -> Optional[TodoDB]:
        return self.db.query(TodoDB).filter(
            TodoDB.id == task_id,
            TodoDB.user_id == user_id,
        ).first()

    def create(self, task: Task) -> Task:
        """Create a new task."""
        try:
            task_db = TodoDB.from_pydantic(task)
            self.db.add(task_db)
            self.db.commit()
            self.db.refresh(task_db)
            logger.debug(f"Created task {task.id}: {task.title[:50]}")
            return task_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create task {task.id}: {type(e).__name__}: {str(e)}")
            raise

    def get(self, user_id: str, task_id: str) -> Optional[Task]:
        """Get task by ID for a specific user."""
        task_db = self._owned(user_id, task_id)
        return task_db.to_pydantic() if task_db else None

    def get_all(self, user_id: str) -> List[Task]:
        """Get all tasks for a user in their saved arrangement.

        Tasks without a position (inserted since the last saved arrangement)
        come first, newest first; the rest follow by position.
        """
        tasks_db = self.db.query(TodoDB).filter(
            TodoDB.user_id == user_id,
        ).order_by(
            TodoDB.position.isnot(None),
            TodoDB.position,
            desc(TodoDB.created_at),
        ).all()
        return [task_db.to_pydantic() for task_db in tasks_db]

    def update_fields(self, user_id: str, task_id: str, fields: Dict[str, Any]) -> Task:
        """Write a partial set of fields onto a task owned by user_id."""
        task_db = self._owned(user_id, task_id)
        if not task_db:
            raise ValueError(f"Task {task_id} not found")

        for name, value in fields.items():
            if name not in UPDATABLE_FIELDS:
                continue
            if name in _ENUM_COLUMNS:
                value = enum_to_value(value)
            elif name == "tags":
                value = unique_tags(value)
            setattr(task_db, name, value)
        task_db.updated_at = datetime.utcnow()

        try:
            self.db.commit()
            self.db.refresh(task_db)
            logger.debug(f"Updated task {task_id}: {sorted(fields)}")
            return task_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update task {task_id}: {type(e).__name__}: {str(e)}")
            raise

    def delete(self, user_id: str, task_id: str) -> bool:
        """Permanently delete a task by ID for a specific user."""
        task_db = self._owned(user_id, task_id)
        if not task_db:
            return False

        try:
            self.db.delete(task_db)
            self.db.commit()
            logger.debug(f"Deleted task {task_id}")
            return True
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete task {task_id}: {type(e).__name__}: {str(e)}")
            raise

    def set_positions(self, user_id: str, task_ids: List[str]) -> None:
        """Store the arrangement of a user's tasks, first task at position 0."""
        rows = {
            task_db.id: task_db
            for task_db in self.db.query(TodoDB).filter(TodoDB.user_id == user_id).all()
        }
        for task_id in task_ids:
            if task_id not in rows:
                raise ValueError(f"Task {task_id} not found")

        for position, task_id in enumerate(task_ids):
            rows[task_id].position = position

        try:
            self.db.commit()
            logger.debug(f"Saved arrangement of {len(task_ids)} tasks for user {user_id}")
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to save arrangement for user {user_id}: {type(e).__name__}: {str(e)}")
            raise
