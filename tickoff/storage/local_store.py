"""Task store that keeps every task in one JSON blob on local disk.

The blob holds the whole task array (all users, each record carrying its
user_id) with timestamps in ISO 8601. Record order is the arrangement:
inserts go to the front and `save_arrangement` permutes a user's records.
A missing or corrupt blob reads as an empty collection.
"""

import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from dotenv import load_dotenv
from pydantic import TypeAdapter, ValidationError

from tickoff.models.task import Task, TaskDraft, UPDATABLE_FIELDS
from tickoff.models.task_factory import create_task_base
from tickoff.storage.base import TaskStore, require_identity
from tickoff.storage.errors import StorageError, TaskValidationError

load_dotenv()

logger = logging.getLogger(__name__)

LOCAL_STORE_PATH = os.getenv("TICKOFF_LOCAL_STORE_PATH", "./tickoff-tasks.json")

_tasks_adapter = TypeAdapter(List[Task])


class LocalTaskStore(TaskStore):
    """Single-file task store."""

    def __init__(self, path: Union[str, Path, None] = None):
        self.path = Path(path or LOCAL_STORE_PATH)

    def _read_all(self) -> List[Task]:
        if not self.path.exists():
            return []
        try:
            raw = self.path.read_text(encoding="utf-8")
            if not raw.strip():
                return []
            return _tasks_adapter.validate_python(json.loads(raw))
        except (OSError, ValueError, ValidationError) as e:
            logger.error(f"Failed to load tasks from {self.path}: {type(e).__name__}: {str(e)}")
            return []

    def _write_all(self, tasks: List[Task]) -> None:
        payload = _tasks_adapter.dump_json(tasks, indent=2)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
            with os.fdopen(fd, "wb") as fh:
                fh.write(payload)
            os.replace(tmp_name, self.path)
        except OSError as e:
            logger.error(f"Failed to save tasks to {self.path}: {type(e).__name__}: {str(e)}")
            raise StorageError(f"Failed to save tasks: {e}") from e

    def _index_of(self, tasks: List[Task], task_id: str, user_id: str) -> int:
        for i, task in enumerate(tasks):
            if task.id == task_id and task.user_id == user_id:
                return i
        raise StorageError(f"Task {task_id} not found")

    def load(self, identity: Optional[str]) -> List[Task]:
        user_id = require_identity(identity, "load")
        return [task for task in self._read_all() if task.user_id == user_id]

    def insert(self, identity: Optional[str], draft: TaskDraft) -> Task:
        user_id = require_identity(identity, "create")
        task = create_task_base(user_id, draft)
        tasks = self._read_all()
        tasks.insert(0, task)
        self._write_all(tasks)
        logger.debug(f"Created task {task.id}: {task.title[:50]}")
        return task

    def update(self, task_id: str, identity: Optional[str], fields: Dict[str, Any]) -> None:
        user_id = require_identity(identity, "update")
        tasks = self._read_all()
        i = self._index_of(tasks, task_id, user_id)
        changes = {k: v for k, v in fields.items() if k in UPDATABLE_FIELDS}
        try:
            tasks[i] = Task.model_validate(
                {**tasks[i].model_dump(), **changes, "updated_at": datetime.utcnow()}
            )
        except ValidationError as e:
            raise TaskValidationError(f"Invalid fields for task {task_id}: {e}") from e
        self._write_all(tasks)
        logger.debug(f"Updated task {task_id}: {sorted(changes)}")

    def delete(self, task_id: str, identity: Optional[str]) -> None:
        user_id = require_identity(identity, "delete")
        tasks = self._read_all()
        i = self._index_of(tasks, task_id, user_id)
        del tasks[i]
        self._write_all(tasks)
        logger.debug(f"Deleted task {task_id}")

    def save_arrangement(self, identity: Optional[str], task_ids: List[str]) -> None:
        """Rewrite identity's records in the blob in the given order.

        Other users' records keep their slots; identity's tasks missing from
        task_ids stay in front, as if inserted after the arrangement.
        """
        user_id = require_identity(identity, "reorder")
        tasks = self._read_all()
        slots = [i for i, task in enumerate(tasks) if task.user_id == user_id]
        owned = {tasks[i].id: tasks[i] for i in slots}

        unknown = [task_id for task_id in task_ids if task_id not in owned]
        if unknown:
            raise StorageError(f"Task {unknown[0]} not found")

        listed = set(task_ids)
        arranged = [owned[i] for i in owned if i not in listed] + [owned[i] for i in task_ids]
        for slot, task in zip(slots, arranged):
            tasks[slot] = task
        self._write_all(tasks)
        logger.debug(f"Saved arrangement of {len(task_ids)} tasks")
