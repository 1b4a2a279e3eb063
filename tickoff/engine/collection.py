"""Task Collection Engine.

Owns the canonical, ordered collection of the signed-in user's tasks. Every
mutation is written through a TaskStore first; the in-memory collection only
changes once the write succeeds (reorder is the exception, see `reorder`).
The presented sequence, statistics and suggestions are re-derived
synchronously after every change to the collection or to the view parameters.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError

from tickoff.auth.identity import IdentityProvider
from tickoff.engine.stats import compute_stats, build_suggestions
from tickoff.engine.views import ViewParams, present, collect_tags
from tickoff.models.category import Category, DEFAULT_CATEGORIES
from tickoff.models.constants import DEFAULT_PRIORITY
from tickoff.models.task import (
    Task,
    TaskDraft,
    TaskStats,
    Priority,
    RecurringPattern,
    FilterType,
    SortType,
    UPDATABLE_FIELDS,
    unique_tags,
)
from tickoff.storage.base import TaskStore
from tickoff.storage.errors import StorageError, TaskValidationError

logger = logging.getLogger(__name__)


class EngineState(str, Enum):
    """Lifecycle of the canonical collection."""
    NO_IDENTITY = "no_identity"
    LOADING = "loading"
    READY = "ready"


@dataclass(frozen=True)
class Notification:
    """User-visible outcome of a failed operation."""
    level: str
    message: str


Notifier = Callable[[Notification], None]


def _log_notification(notification: Notification) -> None:
    logger.warning(f"[{notification.level}] {notification.message}")


class TaskCollection:
    """Canonical task collection for one identity at a time.

    Args:
        store: Persistence adapter used for every read and write
        identity_provider: Optional identity signal; the collection reloads
            whenever it changes
        notify: Receives one Notification per failed operation
        clock: Returns "now" for statistics (defaults to UTC now)
        identity: Initial identity when no provider is given
    """

    def __init__(
        self,
        store: TaskStore,
        identity_provider: Optional[IdentityProvider] = None,
        notify: Optional[Notifier] = None,
        clock: Optional[Callable[[], datetime]] = None,
        identity: Optional[str] = None,
    ):
        self.store = store
        self._notify = notify or _log_notification
        self._clock = clock or datetime.utcnow
        self._tasks: List[Task] = []
        self._view = ViewParams()
        self._identity: Optional[str] = None
        self._state = EngineState.NO_IDENTITY
        self._presented: List[Task] = []
        self._stats = TaskStats()
        self._suggestions: List[str] = []
        self._all_tags: List[str] = []
        self._unsubscribe: Optional[Callable[[], None]] = None

        if identity_provider is not None:
            self._unsubscribe = identity_provider.subscribe(self.set_identity)
            identity = identity_provider.current
        self.set_identity(identity)

    # Read access

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def identity(self) -> Optional[str]:
        return self._identity

    @property
    def tasks(self) -> List[Task]:
        """The presented sequence: filtered, searched and sorted."""
        return list(self._presented)

    @property
    def all_tasks(self) -> List[Task]:
        """The canonical collection, independent of any view parameter."""
        return list(self._tasks)

    @property
    def view(self) -> ViewParams:
        return self._view

    @property
    def stats(self) -> TaskStats:
        return self._stats

    @property
    def suggestions(self) -> List[str]:
        return list(self._suggestions)

    @property
    def all_tags(self) -> List[str]:
        return list(self._all_tags)

    @property
    def categories(self) -> List[Category]:
        return list(DEFAULT_CATEGORIES)

    def get(self, task_id: str) -> Optional[Task]:
        return self._find(task_id)

    # Identity and loading

    def set_identity(self, identity: Optional[str]) -> None:
        """Switch to another identity's tasks (or none) and reload."""
        self._identity = identity or None
        self._tasks = []
        if self._identity is None:
            self._state = EngineState.NO_IDENTITY
            self._refresh()
            return
        self.reload()

    def reload(self) -> None:
        """Replace the collection with the store's current state."""
        if self._identity is None:
            return
        self._state = EngineState.LOADING
        self._refresh()
        try:
            self._tasks = list(self.store.load(self._identity))
        except StorageError as e:
            logger.error(f"Failed to load tasks: {type(e).__name__}: {str(e)}")
            self._tasks = []
            self._report("Failed to load tasks.")
        self._state = EngineState.READY
        self._refresh()

    def close(self) -> None:
        """Stop following the identity provider."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    # Mutations

    def add(
        self,
        title: str,
        description: Optional[str] = None,
        due_date: Optional[date] = None,
        priority: Optional[Priority] = None,
        tags: Optional[List[str]] = None,
        category_id: Optional[str] = None,
        reminder: Optional[datetime] = None,
        is_recurring: Optional[bool] = None,
        recurring_pattern: Optional[RecurringPattern] = None,
    ) -> Optional[Task]:
        """Create a task at order = current count and put it first in the collection.

        Callers trim the title; a blank title is rejected by the store and
        reported like any other failed write.
        """
        if not self._is_ready("add"):
            return None
        try:
            draft = TaskDraft(
                title=title,
                description=description,
                due_date=due_date,
                priority=priority or DEFAULT_PRIORITY,
                tags=unique_tags(tags),
                category_id=category_id,
                reminder=reminder,
                is_recurring=bool(is_recurring),
                recurring_pattern=recurring_pattern,
                order=len(self._tasks),
            )
            task = self.store.insert(self._identity, draft)
        except (StorageError, TaskValidationError, ValidationError) as e:
            logger.error(f"Failed to add task: {type(e).__name__}: {str(e)}")
            self._report("Failed to add task.")
            return None

        self._tasks.insert(0, task)
        self._refresh()
        return task

    def update(self, task_id: str, fields: Dict[str, Any]) -> Optional[Task]:
        """Merge the supplied fields into a task after persisting them.

        Fields outside the updatable set (id, created_at, ...) are ignored.
        Returns the updated task, or None if the id is unknown or the write failed.
        """
        if not self._is_ready("update"):
            return None
        current = self._find(task_id)
        if current is None:
            return None

        ignored = sorted(set(fields) - UPDATABLE_FIELDS)
        if ignored:
            logger.warning(f"Ignoring non-updatable fields for task {task_id}: {ignored}")
        changes = {name: value for name, value in fields.items() if name in UPDATABLE_FIELDS}
        if not changes:
            return current

        try:
            merged = Task.model_validate({**current.model_dump(), **changes})
            self.store.update(
                task_id,
                self._identity,
                {name: getattr(merged, name) for name in changes},
            )
        except (StorageError, TaskValidationError, ValidationError) as e:
            logger.error(f"Failed to update task {task_id}: {type(e).__name__}: {str(e)}")
            self._report("Failed to update task.")
            return None

        self._replace(merged)
        self._refresh()
        return merged

    def delete(self, task_id: str) -> bool:
        """Remove a task from the store, then from the collection.

        Remaining tasks keep their order values, so a gap is left until the
        next reorder.
        """
        if not self._is_ready("delete"):
            return False
        if self._find(task_id) is None:
            return False
        try:
            self.store.delete(task_id, self._identity)
        except StorageError as e:
            logger.error(f"Failed to delete task {task_id}: {type(e).__name__}: {str(e)}")
            self._report("Failed to delete task.")
            return False

        self._tasks = [task for task in self._tasks if task.id != task_id]
        self._refresh()
        return True

    def toggle_complete(self, task_id: str) -> Optional[Task]:
        current = self._find(task_id)
        if current is None:
            return None
        return self.update(task_id, {"completed": not current.completed})

    def reorder(self, from_index: int, to_index: int) -> bool:
        """Move a task within the collection and renumber every task.

        The indices come from the presented sequence but are applied to the
        collection's own arrangement: the task at from_index is removed and
        reinserted at to_index, then every task's order becomes its position.
        Under a filter or a sort that differs from the arrangement, the moved
        task is not necessarily the one shown at from_index.

        Changed order values are written one task at a time, then the
        arrangement itself is saved. The renumbered collection is kept even
        if persisting fails partway; returns False in that case.
        """
        if not self._is_ready("reorder"):
            return False
        size = len(self._presented)
        if not (0 <= from_index < size and 0 <= to_index < size):
            logger.warning(f"Ignoring reorder {from_index} -> {to_index} outside 0..{size - 1}")
            return False

        arranged = list(self._tasks)
        arranged.insert(to_index, arranged.pop(from_index))

        renumbered = []
        affected = []
        for position, task in enumerate(arranged):
            if task.order != position:
                task = task.model_copy(update={"order": position})
                affected.append(task)
            renumbered.append(task)

        self._tasks = renumbered
        self._refresh()

        try:
            for task in affected:
                self.store.update(task.id, self._identity, {"order": task.order})
            self.store.save_arrangement(self._identity, [task.id for task in renumbered])
        except StorageError as e:
            logger.error(f"Failed to save task order: {type(e).__name__}: {str(e)}")
            self._report("Failed to save the new task order.")
            return False
        return True

    # View parameters

    def set_filter(self, value: FilterType) -> None:
        self._set_view(filter=value)

    def set_sort(self, value: SortType) -> None:
        self._set_view(sort=value)

    def set_search_query(self, value: str) -> None:
        self._set_view(search_query=value or "")

    def set_selected_category(self, value: Optional[str]) -> None:
        self._set_view(selected_category=value or None)

    def set_selected_tags(self, value: Optional[List[str]]) -> None:
        self._set_view(selected_tags=list(value or []))

    def set_view(self, **params: Any) -> None:
        """Change several view parameters with a single re-derivation."""
        self._set_view(**params)

    # Internals

    def _set_view(self, **params: Any) -> None:
        self._view = ViewParams.model_validate({**self._view.model_dump(), **params})
        self._refresh()

    def _refresh(self) -> None:
        self._presented = present(self._tasks, self._view)
        self._stats = compute_stats(self._tasks, self._clock())
        self._suggestions = build_suggestions(self._tasks, self._stats)
        self._all_tags = collect_tags(self._tasks)

    def _is_ready(self, action: str) -> bool:
        if self._state != EngineState.READY or self._identity is None:
            logger.debug(f"Ignoring {action}: collection is {self._state.value}")
            return False
        return True

    def _find(self, task_id: str) -> Optional[Task]:
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    def _replace(self, updated: Task) -> None:
        self._tasks = [updated if task.id == updated.id else task for task in self._tasks]

    def _report(self, message: str) -> None:
        self._notify(Notification(level="error", message=message))
