"""Task store backed by the relational `todos` table."""

import logging
from typing import Any, Dict, List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tickoff.database.repository import TaskRepository
from tickoff.models.task import Task, TaskDraft
from tickoff.models.task_factory import create_task_base
from tickoff.storage.base import TaskStore, require_identity
from tickoff.storage.errors import StorageError

logger = logging.getLogger(__name__)


class DatabaseTaskStore(TaskStore):
    """Row-per-task store; every query is scoped by user_id."""

    def __init__(self, db: Session):
        self.repository = TaskRepository(db)

    def load(self, identity: Optional[str]) -> List[Task]:
        user_id = require_identity(identity, "load")
        try:
            return self.repository.get_all(user_id)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to load tasks: {e}") from e

    def insert(self, identity: Optional[str], draft: TaskDraft) -> Task:
        user_id = require_identity(identity, "create")
        task = create_task_base(user_id, draft)
        try:
            return self.repository.create(task)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to create task: {e}") from e

    def update(self, task_id: str, identity: Optional[str], fields: Dict[str, Any]) -> None:
        user_id = require_identity(identity, "update")
        try:
            self.repository.update_fields(user_id, task_id, fields)
        except ValueError as e:
            raise StorageError(f"Task {task_id} not found") from e
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to update task {task_id}: {e}") from e

    def delete(self, task_id: str, identity: Optional[str]) -> None:
        user_id = require_identity(identity, "delete")
        try:
            deleted = self.repository.delete(user_id, task_id)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to delete task {task_id}: {e}") from e
        if not deleted:
            raise StorageError(f"Task {task_id} not found")

    def save_arrangement(self, identity: Optional[str], task_ids: List[str]) -> None:
        user_id = require_identity(identity, "reorder")
        try:
            self.repository.set_positions(user_id, task_ids)
        except ValueError as e:
            raise StorageError(str(e)) from e
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to save task arrangement: {e}") from e
