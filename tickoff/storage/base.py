"""Persistence contract shared by every task store."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from tickoff.models.task import Task, TaskDraft
from tickoff.storage.errors import StorageError


class TaskStore(ABC):
    """Reads and writes one identity's task records.

    Every method requires a present identity; rows belonging to other
    identities are invisible and unwritable. `load` returns the collection
    in its arrangement: the last saved arrangement, preceded by any tasks
    inserted after it.
    """

    @abstractmethod
    def load(self, identity: Optional[str]) -> List[Task]:
        """Return all tasks owned by identity."""

    @abstractmethod
    def insert(self, identity: Optional[str], draft: TaskDraft) -> Task:
        """Persist a new task built from draft and return it."""

    @abstractmethod
    def update(self, task_id: str, identity: Optional[str], fields: Dict[str, Any]) -> None:
        """Write the given fields onto an owned task."""

    @abstractmethod
    def delete(self, task_id: str, identity: Optional[str]) -> None:
        """Remove an owned task."""

    @abstractmethod
    def save_arrangement(self, identity: Optional[str], task_ids: List[str]) -> None:
        """Remember the arrangement of identity's collection, first task first.

        `load` returns tasks in the saved arrangement; tasks inserted since
        come before them, newest first.
        """


def require_identity(identity: Optional[str], action: str) -> str:
    """Reject writes and reads attempted without an identity."""
    if not identity:
        raise StorageError(f"Cannot {action} tasks without a signed-in user")
    return identity
